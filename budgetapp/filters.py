from datetime import date, datetime
from typing import Callable, Union

from budgetapp.domain import Expense, Transaction


def as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def by_category(name: str) -> Callable[[Expense], bool]:
    wanted = name.strip().casefold()

    def _filter(e: Expense) -> bool:
        return e.category.strip().casefold() == wanted

    return _filter


def above_amount(threshold: float) -> Callable[[Expense], bool]:
    def _filter(e: Expense) -> bool:
        return abs(e.effective_amount) > threshold

    return _filter


def by_date_range(start: Union[date, datetime], end: Union[date, datetime]) -> Callable[[Transaction], bool]:
    """Inclusive on both ends; only the calendar date of each transaction counts."""
    start, end = as_date(start), as_date(end)

    def _filter(t: Transaction) -> bool:
        return start <= t.date_time.date() <= end

    return _filter
