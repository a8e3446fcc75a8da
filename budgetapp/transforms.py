from functools import reduce
from typing import Iterable, Iterator, List, Tuple

import pandas as pd

from budgetapp.domain import BudgetCategory, Expense, Income, Transaction

TRANSACTION_COLUMNS = [
    "id", "date_time", "kind", "amount", "fee", "effective_amount",
    "category", "source", "payment_method",
]
CATEGORY_COLUMNS = ["name", "limit", "spent", "remaining", "usage", "over_limit"]


def total_income(trans: Iterable[Transaction]) -> float:
    return reduce(
        lambda acc, t: acc + t.effective_amount if isinstance(t, Income) else acc, trans, 0.0
    )


def total_expenses(trans: Iterable[Transaction]) -> float:
    """Fee-inclusive spend, as a positive number."""
    return reduce(
        lambda acc, t: acc - t.effective_amount if isinstance(t, Expense) else acc, trans, 0.0
    )


def net_balance(trans: Iterable[Transaction]) -> float:
    return sum(t.effective_amount for t in trans)


def category_usage(category: BudgetCategory) -> float:
    if category.limit <= 0:
        return 0.0
    return category.spent_so_far / category.limit


def top_categories(cats: Iterable[BudgetCategory], k: int) -> Iterator[Tuple[str, float]]:
    ordered: List[BudgetCategory] = sorted(cats, key=lambda c: c.spent_so_far, reverse=True)
    for c in ordered[: max(0, k)]:
        if c.spent_so_far > 0:
            yield c.name, c.spent_so_far


def transaction_row(t: Transaction) -> dict:
    is_expense = isinstance(t, Expense)
    return {
        "id": t.id,
        "date_time": t.date_time,
        "kind": "expense" if is_expense else "income",
        "amount": t.amount,
        "fee": t.fee if is_expense else 0.0,
        "effective_amount": t.effective_amount,
        "category": t.category if is_expense else None,
        "source": None if is_expense else t.source,
        "payment_method": t.payment_method.value if is_expense else None,
    }


def transactions_frame(trans: Iterable[Transaction]) -> pd.DataFrame:
    df = pd.DataFrame([transaction_row(t) for t in trans], columns=TRANSACTION_COLUMNS)
    df["date_time"] = pd.to_datetime(df["date_time"])
    return df


def categories_frame(cats: Iterable[BudgetCategory]) -> pd.DataFrame:
    rows = [
        {
            "name": c.name,
            "limit": c.limit,
            "spent": c.spent_so_far,
            "remaining": c.remaining,
            "usage": category_usage(c),
            "over_limit": c.is_over_limit,
        }
        for c in sorted(cats, key=lambda c: c.name.casefold())
    ]
    return pd.DataFrame(rows, columns=CATEGORY_COLUMNS)


def monthly_totals(trans: Iterable[Transaction]) -> pd.DataFrame:
    """Income and fee-inclusive expenses per calendar month ('YYYY-MM')."""
    df = transactions_frame(trans)
    if df.empty:
        return pd.DataFrame(columns=["income", "expenses"])
    df["month"] = df["date_time"].dt.strftime("%Y-%m")
    df["income"] = df["effective_amount"].where(df["kind"] == "income", 0.0)
    df["expenses"] = (-df["effective_amount"]).where(df["kind"] == "expense", 0.0)
    return df.groupby("month")[["income", "expenses"]].sum().sort_index()
