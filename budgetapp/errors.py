"""Exceptions raised by the budget ledger."""


class ValidationError(ValueError):
    """Raised when provided data does not meet validation requirements."""


class LimitExceededError(Exception):
    """Raised when an expense would push a category over its monthly limit."""

    def __init__(self, category: str, attempted: float, limit: float):
        self.category = category
        self.attempted = attempted
        self.limit = limit
        super().__init__(f"Expense exceeds monthly limit for {category}")
