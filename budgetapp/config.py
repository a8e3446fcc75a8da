"""Configuration for the budget manager.

Settings come from environment variables with sane defaults so the shell and
the dashboard behave the same way without a config file.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)

LOG_LEVEL = os.getenv("BUDGETAPP_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

CURRENCY_SYMBOL = os.getenv("BUDGETAPP_CURRENCY", "$")


def env_float(name: str, default: float) -> float:
    """Read a float setting, keeping the default when the variable is malformed."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number, using %s", name, raw, default)
        return default


# Fraction of a category limit at which a warning is published.
LIMIT_ALERT_THRESHOLD = env_float("BUDGETAPP_LIMIT_ALERT_THRESHOLD", 0.8)

DATETIME_FORMAT = "%Y-%m-%d %H:%M"
DATE_FORMAT = "%Y-%m-%d"


def configure_logging(level: Optional[str] = None) -> None:
    """Set up root logging once for the shell or dashboard process."""
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)


def format_money(value: float, symbol: Optional[str] = None) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol if symbol is not None else CURRENCY_SYMBOL}{abs(value):,.2f}"
