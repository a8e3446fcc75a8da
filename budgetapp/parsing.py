"""Parsing of raw console input into core values.

Every parser raises ``ValidationError`` with a message fit to show the user.
"""

import math
import re
from datetime import date, datetime

from budgetapp.config import DATE_FORMAT, DATETIME_FORMAT
from budgetapp.domain import PaymentMethod
from budgetapp.errors import ValidationError

_GROUPED_AMOUNT = re.compile(r"^[+-]?\d{1,3}(,\d{3})+(\.\d+)?$")


def parse_choice(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        raise ValidationError("Invalid number format. Try again.") from None


def parse_amount(text: str) -> float:
    """Decimal amount; commas are accepted only as thousands separators (1,000.50)."""
    text = text.strip()
    if "," in text:
        if not _GROUPED_AMOUNT.match(text):
            raise ValidationError("Invalid number format. Try again.")
        text = text.replace(",", "")
    try:
        value = float(text)
    except ValueError:
        raise ValidationError("Invalid number format. Try again.") from None
    if not math.isfinite(value):
        raise ValidationError("Invalid number format. Try again.")
    return value


def parse_datetime(text: str) -> datetime:
    try:
        return datetime.strptime(text.strip(), DATETIME_FORMAT)
    except ValueError:
        raise ValidationError(
            "Invalid date/time format. Use yyyy-MM-dd HH:mm (e.g., 2025-03-03 12:12)."
        ) from None


def parse_date(text: str) -> date:
    try:
        return datetime.strptime(text.strip(), DATE_FORMAT).date()
    except ValueError:
        raise ValidationError("Invalid date format. Use yyyy-MM-dd (e.g., 2025-03-03).") from None


def parse_payment_method(text: str) -> PaymentMethod:
    token = text.strip().upper()
    try:
        return PaymentMethod[token]
    except KeyError:
        choices = ", ".join(m.value for m in PaymentMethod)
        raise ValidationError(f"Unknown payment method {text.strip()!r}. Choose one of {choices}.") from None
