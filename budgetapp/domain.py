import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from operator import attrgetter
from types import MappingProxyType
from typing import Iterable, List, Mapping, NamedTuple, TypeVar, Union
from uuid import uuid4

from budgetapp.config import DATETIME_FORMAT, format_money
from budgetapp.errors import ValidationError


class PaymentMethod(Enum):
    CASH = "CASH"
    CARD = "CARD"
    ALIPAY = "ALIPAY"
    WECHAT = "WECHAT"

    @property
    def fee_rate(self) -> float:
        return FEE_RATES[self]


FEE_RATES: Mapping[PaymentMethod, float] = MappingProxyType({
    PaymentMethod.CASH: 0.0,
    PaymentMethod.CARD: 0.01,
    PaymentMethod.ALIPAY: 0.005,
    PaymentMethod.WECHAT: 0.005,
})


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _require_text(value, what: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{what} cannot be empty")


def _validate_common(amount, date_time) -> None:
    if not _is_number(amount):
        raise ValidationError(f"Amount must be a number, got {amount!r}")
    if amount <= 0:
        raise ValidationError("Amount must be positive")
    if date_time is None:
        raise ValidationError("Date and time are required")
    if not isinstance(date_time, datetime):
        raise ValidationError(f"Date and time must be a datetime, got {type(date_time).__name__}")


class _OrderedByDateTime:
    """Orders transactions by ``date_time`` only; equality stays field-wise."""

    __slots__ = ()

    def _key(self, other):
        if not isinstance(other, (Income, Expense)):
            return NotImplemented
        return other.date_time

    def __lt__(self, other):
        key = self._key(other)
        return key if key is NotImplemented else self.date_time < key

    def __le__(self, other):
        key = self._key(other)
        return key if key is NotImplemented else self.date_time <= key

    def __gt__(self, other):
        key = self._key(other)
        return key if key is NotImplemented else self.date_time > key

    def __ge__(self, other):
        key = self._key(other)
        return key if key is NotImplemented else self.date_time >= key


@dataclass(frozen=True)
class Income(_OrderedByDateTime):
    """Money received, e.g. salary or a gift. No fees apply."""

    amount: float
    date_time: datetime
    source: str
    id: str = field(init=False, default_factory=lambda: str(uuid4()))

    def __post_init__(self):
        _validate_common(self.amount, self.date_time)
        _require_text(self.source, "Source")

    @property
    def effective_amount(self) -> float:
        return self.amount

    def __str__(self) -> str:
        return (
            f"Income from {self.source} of {format_money(self.amount)} "
            f"on {self.date_time.strftime(DATETIME_FORMAT)}"
        )


@dataclass(frozen=True)
class Expense(_OrderedByDateTime):
    """Money spent against a budget category; the payment method's fee is added on top."""

    amount: float
    date_time: datetime
    category: str
    payment_method: PaymentMethod
    id: str = field(init=False, default_factory=lambda: str(uuid4()))

    def __post_init__(self):
        _validate_common(self.amount, self.date_time)
        _require_text(self.category, "Category")
        if self.payment_method is None:
            raise ValidationError("Payment method is required")
        if not isinstance(self.payment_method, PaymentMethod):
            raise ValidationError(f"Unknown payment method {self.payment_method!r}")

    @property
    def fee(self) -> float:
        return self.amount * self.payment_method.fee_rate

    @property
    def effective_amount(self) -> float:
        return -(self.amount + self.fee)

    def __str__(self) -> str:
        return (
            f"Expense on {self.category} of {format_money(self.amount)} "
            f"({self.payment_method.value}) on {self.date_time.strftime(DATETIME_FORMAT)}"
        )


Transaction = Union[Income, Expense]

T = TypeVar("T")

by_date_time = attrgetter("date_time")


def sort_by_date_time(trans: Iterable[T]) -> List[T]:
    """Oldest first. Equal timestamps keep their input order."""
    return sorted(trans, key=by_date_time)


@dataclass(eq=False)
class BudgetCategory:
    """A named spending bucket with a monthly limit.

    Categories compare by identity, so two categories that share a name are
    still distinct keys in the manager.
    """

    name: str
    limit: float
    spent_so_far: float = field(init=False, default=0.0)

    def __post_init__(self):
        _require_text(self.name, "Category name")
        if not _is_number(self.limit):
            raise ValidationError(f"Limit must be a number, got {self.limit!r}")
        if self.limit < 0:
            raise ValidationError("Limit cannot be negative")

    def add_expense(self, amount: float) -> None:
        if not _is_number(amount):
            raise ValidationError(f"Expense amount must be a number, got {amount!r}")
        if amount < 0:
            raise ValidationError("Expense amount cannot be negative")
        self.spent_so_far += amount

    def reset_expenditure(self) -> None:
        self.spent_so_far = 0.0

    @property
    def remaining(self) -> float:
        return self.limit - self.spent_so_far

    @property
    def is_over_limit(self) -> bool:
        return self.spent_so_far > self.limit

    def __str__(self) -> str:
        return (
            f"Category: {self.name}, Limit: {format_money(self.limit)}, "
            f"Spent: {format_money(self.spent_so_far)}"
        )


class CategoryTemplate(NamedTuple):
    name: str
    limit: float

    def build(self) -> BudgetCategory:
        return BudgetCategory(self.name, self.limit)


TEMPLATE_CATEGORIES = (
    CategoryTemplate("Food", 500.0),
    CategoryTemplate("Rent", 1000.0),
    CategoryTemplate("Transport", 200.0),
    CategoryTemplate("Utilities", 300.0),
    CategoryTemplate("Entertainment", 150.0),
)
