import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Set, Union

from budgetapp.domain import BudgetCategory, Expense, Income, Transaction, sort_by_date_time
from budgetapp.errors import LimitExceededError, ValidationError
from budgetapp.events import (
    CATEGORY_ADDED,
    CATEGORY_DELETED,
    EXPENDITURE_RESET,
    EXPENSE_ADDED,
    EXPENSE_REJECTED,
    INCOME_ADDED,
    EventBus,
)
from budgetapp.filters import above_amount, by_date_range

logger = logging.getLogger(__name__)


class BudgetManager:
    """In-memory ledger of budget categories, their expenses and incomes.

    Expenses are stored per category. ``add_expense`` is the only place a
    category's running spend grows, and it either records the expense and the
    spend together or changes nothing at all.

    bus: optional EventBus; every state change is published to it.
    """

    def __init__(self, bus: Optional[EventBus] = None):
        self._expenses: Dict[BudgetCategory, List[Expense]] = {}
        self._incomes: List[Income] = []
        self.bus = bus if bus is not None else EventBus()

    def _publish(self, name: str, payload: dict) -> List[dict]:
        return self.bus.publish(name, payload)

    def add_category(self, category: BudgetCategory) -> None:
        if category is None:
            raise ValidationError("Category cannot be None")
        if category in self._expenses:
            return
        self._expenses[category] = []
        logger.info("Added category %s with limit %.2f", category.name, category.limit)
        self._publish(CATEGORY_ADDED, {"category": category.name, "limit": category.limit})

    def delete_category(self, category: BudgetCategory) -> None:
        removed = self._expenses.pop(category, None)
        if removed is None:
            return
        logger.info("Deleted category %s and %d expense(s)", category.name, len(removed))
        self._publish(CATEGORY_DELETED, {"category": category.name, "expenses": len(removed)})

    def add_income(self, income: Income) -> None:
        if income is None:
            raise ValidationError("Income cannot be None")
        self._incomes.append(income)
        logger.info("Added income %s of %.2f from %s", income.id, income.amount, income.source)
        self._publish(INCOME_ADDED, {"id": income.id, "amount": income.amount, "source": income.source})

    def add_expense(self, expense: Expense, category: BudgetCategory) -> List[dict]:
        """Record ``expense`` under ``category`` if it fits the category's limit.

        The fee-inclusive amount counts against the limit. Returns the results
        of the EXPENSE_ADDED handlers (e.g. limit warnings).

        Raises:
            ValidationError: expense or category is None.
            LimitExceededError: the new spend would exceed the limit; nothing
                is recorded.
        """
        if expense is None:
            raise ValidationError("Expense cannot be None")
        if category is None:
            raise ValidationError("Category cannot be None")

        cost = abs(expense.effective_amount)
        new_spent = category.spent_so_far + cost
        if new_spent > category.limit:
            logger.warning(
                "Rejected expense of %.2f for %s: %.2f would exceed limit %.2f",
                cost, category.name, new_spent, category.limit,
            )
            self._publish(EXPENSE_REJECTED, {
                "category": category.name,
                "amount": cost,
                "spent": category.spent_so_far,
                "limit": category.limit,
            })
            raise LimitExceededError(category.name, new_spent, category.limit)

        category.add_expense(cost)
        self._expenses.setdefault(category, []).append(expense)
        logger.info("Added expense %s of %.2f to %s", expense.id, cost, category.name)
        return self._publish(EXPENSE_ADDED, {
            "id": expense.id,
            "category": category.name,
            "amount": cost,
            "spent": category.spent_so_far,
            "limit": category.limit,
        })

    def reset_expenditure(self, category: BudgetCategory) -> None:
        """Start a new month for ``category``; recorded expenses are kept."""
        if category is None:
            raise ValidationError("Category cannot be None")
        previous = category.spent_so_far
        category.reset_expenditure()
        logger.info("Reset expenditure of %s (was %.2f)", category.name, previous)
        self._publish(EXPENDITURE_RESET, {"category": category.name, "previous": previous})

    def get_categories(self) -> Set[BudgetCategory]:
        return set(self._expenses)

    def find_category(self, name: str) -> Optional[BudgetCategory]:
        wanted = name.strip().casefold()
        for category in self._expenses:
            if category.name.strip().casefold() == wanted:
                return category
        return None

    def get_expenses_by_category(self, category: BudgetCategory) -> List[Expense]:
        return sort_by_date_time(self._expenses.get(category, ()))

    def get_expenses_above_amount(self, threshold: float) -> List[Expense]:
        return sort_by_date_time(filter(above_amount(threshold), self._all_expenses()))

    def get_transactions_by_date_range(
        self, start: Union[date, datetime], end: Union[date, datetime]
    ) -> List[Transaction]:
        in_range = by_date_range(start, end)
        matching: List[Transaction] = [i for i in self._incomes if in_range(i)]
        matching.extend(e for e in self._all_expenses() if in_range(e))
        return sort_by_date_time(matching)

    def get_incomes(self) -> List[Income]:
        return sort_by_date_time(self._incomes)

    def get_all_expenses(self) -> List[Expense]:
        return sort_by_date_time(self._all_expenses())

    def get_all_transactions(self) -> List[Transaction]:
        return sort_by_date_time([*self._incomes, *self._all_expenses()])

    def _all_expenses(self):
        for expenses in self._expenses.values():
            yield from expenses
