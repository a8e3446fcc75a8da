from datetime import date, datetime

import pytest

from budgetapp.domain import BudgetCategory, Expense, Income, PaymentMethod
from budgetapp.filters import above_amount, as_date, by_category, by_date_range
from budgetapp.transforms import (
    CATEGORY_COLUMNS,
    TRANSACTION_COLUMNS,
    categories_frame,
    category_usage,
    monthly_totals,
    net_balance,
    top_categories,
    total_expenses,
    total_income,
    transactions_frame,
)


def make_sample():
    trans = (
        Income(3000, datetime(2025, 1, 1, 9, 0), "Salary"),
        Expense(100, datetime(2025, 1, 5, 12, 0), "Food", PaymentMethod.CARD),
        Expense(900, datetime(2025, 1, 10, 8, 0), "Rent", PaymentMethod.CASH),
        Income(200, datetime(2025, 2, 3, 18, 0), "Gift"),
        Expense(50, datetime(2025, 2, 4, 19, 0), "Food", PaymentMethod.CASH),
    )
    return trans


def test_totals():
    trans = make_sample()
    assert total_income(trans) == 3200
    assert total_expenses(trans) == pytest.approx(1051)
    assert net_balance(trans) == pytest.approx(2149)


def test_totals_of_nothing_are_zero():
    assert total_income(()) == 0
    assert total_expenses(()) == 0
    assert net_balance(()) == 0


def test_filters():
    trans = make_sample()
    expenses = [t for t in trans if isinstance(t, Expense)]
    assert len(list(filter(by_category("food"), expenses))) == 2
    assert len(list(filter(by_category(" FOOD "), expenses))) == 2
    assert [e.amount for e in filter(above_amount(100), expenses)] == [100, 900]
    in_jan = list(filter(by_date_range(date(2025, 1, 1), date(2025, 1, 31)), trans))
    assert len(in_jan) == 3
    assert as_date(datetime(2025, 1, 1, 10, 0)) == date(2025, 1, 1)
    assert as_date(date(2025, 1, 1)) == date(2025, 1, 1)


def test_category_usage_and_top_categories():
    food, rent, idle = BudgetCategory("Food", 500), BudgetCategory("Rent", 1000), BudgetCategory("Idle", 0)
    food.add_expense(250)
    rent.add_expense(900)
    assert category_usage(food) == 0.5
    assert category_usage(idle) == 0.0
    assert list(top_categories([food, rent, idle], k=5)) == [("Rent", 900), ("Food", 250)]
    assert list(top_categories([food, rent], k=1)) == [("Rent", 900)]
    assert list(top_categories([food, rent], k=0)) == []


def test_transactions_frame():
    df = transactions_frame(make_sample())
    assert list(df.columns) == TRANSACTION_COLUMNS
    assert len(df) == 5
    assert list(df["kind"]) == ["income", "expense", "expense", "income", "expense"]
    assert df.loc[1, "fee"] == pytest.approx(1.0)
    assert df.loc[1, "payment_method"] == "CARD"
    assert df.loc[0, "source"] == "Salary"


def test_transactions_frame_empty():
    df = transactions_frame([])
    assert df.empty
    assert list(df.columns) == TRANSACTION_COLUMNS


def test_categories_frame_sorted_by_name():
    rent, food = BudgetCategory("Rent", 1000), BudgetCategory("food", 500)
    food.add_expense(600)
    df = categories_frame([rent, food])
    assert list(df.columns) == CATEGORY_COLUMNS
    assert list(df["name"]) == ["food", "Rent"]
    assert bool(df.loc[0, "over_limit"]) is True
    assert df.loc[0, "remaining"] == -100


def test_monthly_totals():
    monthly = monthly_totals(make_sample())
    assert list(monthly.index) == ["2025-01", "2025-02"]
    assert monthly.loc["2025-01", "income"] == 3000
    assert monthly.loc["2025-01", "expenses"] == pytest.approx(1001)
    assert monthly.loc["2025-02", "expenses"] == 50


def test_monthly_totals_empty():
    assert monthly_totals([]).empty
