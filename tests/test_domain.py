from datetime import date, datetime

import pytest

from budgetapp.domain import (
    FEE_RATES,
    TEMPLATE_CATEGORIES,
    BudgetCategory,
    Expense,
    Income,
    PaymentMethod,
    sort_by_date_time,
)
from budgetapp.errors import ValidationError


def make_expense(amount=50.0, ts=datetime(2025, 3, 3, 12, 12), cat="Food", method=PaymentMethod.CASH):
    return Expense(amount, ts, cat, method)


@pytest.mark.parametrize("amount", [0.01, 1, 250.5, 1_000_000])
def test_positive_amounts_are_accepted(amount):
    assert Income(amount, datetime(2025, 1, 1), "Salary").amount == amount
    assert make_expense(amount=amount).amount == amount


@pytest.mark.parametrize("amount", [0, -1, -0.01, float("nan"), float("inf"), True, "100"])
def test_bad_amounts_are_rejected(amount):
    with pytest.raises(ValidationError):
        Income(amount, datetime(2025, 1, 1), "Salary")
    with pytest.raises(ValidationError):
        make_expense(amount=amount)


def test_date_time_is_required():
    with pytest.raises(ValidationError):
        Income(10, None, "Salary")
    with pytest.raises(ValidationError):
        make_expense(ts=date(2025, 1, 1))


@pytest.mark.parametrize("source", ["", "   ", None])
def test_income_source_must_not_be_blank(source):
    with pytest.raises(ValidationError):
        Income(10, datetime(2025, 1, 1), source)


def test_expense_requires_category_and_payment_method():
    with pytest.raises(ValidationError):
        make_expense(cat=" ")
    with pytest.raises(ValidationError):
        make_expense(method=None)
    with pytest.raises(ValidationError):
        make_expense(method="CARD")


def test_income_effective_amount_equals_amount():
    income = Income(1234.56, datetime(2025, 1, 1), "Salary")
    assert income.effective_amount == 1234.56


def test_expense_effective_amount_includes_fee():
    assert make_expense(amount=100, method=PaymentMethod.CARD).effective_amount == pytest.approx(-101.00)
    assert make_expense(amount=200, method=PaymentMethod.ALIPAY).effective_amount == pytest.approx(-201.00)
    assert make_expense(amount=200, method=PaymentMethod.WECHAT).effective_amount == pytest.approx(-201.00)
    assert make_expense(amount=100, method=PaymentMethod.CASH).effective_amount == -100


def test_fee_table_covers_every_method():
    assert set(FEE_RATES) == set(PaymentMethod)
    assert PaymentMethod.CARD.fee_rate == 0.01
    with pytest.raises(TypeError):
        FEE_RATES[PaymentMethod.CASH] = 0.5


def test_transactions_get_unique_immutable_ids():
    a = make_expense()
    b = make_expense()
    assert a.id != b.id
    with pytest.raises(AttributeError):
        a.amount = 10


def test_sort_by_date_time_is_stable():
    first = make_expense(ts=datetime(2025, 1, 2))
    tie_a = Income(5, datetime(2025, 1, 1), "Gift")
    tie_b = make_expense(ts=datetime(2025, 1, 1))
    assert sort_by_date_time([first, tie_a, tie_b]) == [tie_a, tie_b, first]


def test_mixed_transactions_sort_by_date_time():
    late = make_expense(ts=datetime(2025, 1, 3))
    early = Income(5, datetime(2025, 1, 1), "Gift")
    middle = make_expense(ts=datetime(2025, 1, 2))
    assert sorted([late, early, middle]) == [early, middle, late]
    assert early < middle <= late
    assert late > early


def test_ordering_ignores_other_fields_and_keeps_equality():
    ts = datetime(2025, 1, 1)
    a = make_expense(amount=10, ts=ts)
    b = make_expense(amount=99, ts=ts)
    assert not a < b and not b < a
    assert a <= b and a >= b
    assert a != b
    with pytest.raises(TypeError):
        a < ts


def test_str_formats():
    assert str(Income(1000, datetime(2025, 3, 3, 12, 12), "Salary")) == \
        "Income from Salary of $1,000.00 on 2025-03-03 12:12"
    assert str(make_expense(method=PaymentMethod.CARD)) == \
        "Expense on Food of $50.00 (CARD) on 2025-03-03 12:12"


def test_category_validation():
    with pytest.raises(ValidationError):
        BudgetCategory("  ", 100)
    with pytest.raises(ValidationError):
        BudgetCategory(None, 100)
    with pytest.raises(ValidationError):
        BudgetCategory("Food", -1)
    assert BudgetCategory("Free", 0).limit == 0


def test_category_add_expense_and_derived_values():
    c = BudgetCategory("Food", 500)
    assert c.spent_so_far == 0
    c.add_expense(480)
    assert c.remaining == 20
    assert not c.is_over_limit
    c.add_expense(30)
    assert c.spent_so_far == 510
    assert c.is_over_limit
    with pytest.raises(ValidationError):
        c.add_expense(-1)
    assert c.spent_so_far == 510


@pytest.mark.parametrize("spent", [0, 12.5, 999])
def test_reset_expenditure_always_zeroes(spent):
    c = BudgetCategory("Rent", 1000)
    c.add_expense(spent)
    c.reset_expenditure()
    assert c.spent_so_far == 0


def test_categories_with_same_name_are_distinct():
    a, b = BudgetCategory("Food", 10), BudgetCategory("Food", 10)
    assert a != b
    assert len({a, b}) == 2


def test_templates_build_fresh_categories():
    assert [(t.name, t.limit) for t in TEMPLATE_CATEGORIES] == [
        ("Food", 500.0), ("Rent", 1000.0), ("Transport", 200.0),
        ("Utilities", 300.0), ("Entertainment", 150.0),
    ]
    first, second = TEMPLATE_CATEGORIES[0].build(), TEMPLATE_CATEGORIES[0].build()
    first.add_expense(100)
    assert second.spent_so_far == 0
