import logging
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

from budgetapp.config import LIMIT_ALERT_THRESHOLD, format_money

__all__ = [
    'Event', 'EventBus', 'register_default_handlers', 'limit_warning_handler',
    'CATEGORY_ADDED', 'CATEGORY_DELETED', 'INCOME_ADDED', 'EXPENSE_ADDED',
    'EXPENSE_REJECTED', 'EXPENDITURE_RESET',
]

logger = logging.getLogger(__name__)

class Event(NamedTuple):
    name: str
    ts: str
    payload: dict

Handler = Callable[[Event, dict], dict]

class EventBus:
    """Synchronous publish/subscribe. Handlers run inline, in subscription order.

    A handler that raises is logged and reported as ``{"handler_error": ...}``
    in the results; it never undoes or blocks the operation that published.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        if name not in self._subscribers:
            self._subscribers[name] = []
        self._subscribers[name].append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        if name not in self._subscribers:
            return []

        event = Event(
            name=name,
            ts=datetime.now().isoformat(),
            payload=payload
        )

        results = []
        for handler in self._subscribers[name]:
            try:
                result = handler(event, payload)
            except Exception as e:
                handler_name = getattr(handler, "__name__", repr(handler))
                logger.exception("Handler %s failed for %s", handler_name, name)
                result = {"handler_error": f"{handler_name}: {e}"}
            results.append(result)
        return results

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if name in self._subscribers:
            if handler in self._subscribers[name]:
                self._subscribers[name].remove(handler)

CATEGORY_ADDED = "CATEGORY_ADDED"
CATEGORY_DELETED = "CATEGORY_DELETED"
INCOME_ADDED = "INCOME_ADDED"
EXPENSE_ADDED = "EXPENSE_ADDED"
EXPENSE_REJECTED = "EXPENSE_REJECTED"
EXPENDITURE_RESET = "EXPENDITURE_RESET"

def limit_warning_handler(event: Event, payload: dict, threshold: float = LIMIT_ALERT_THRESHOLD) -> dict:
    category = payload.get("category", "")
    limit = payload.get("limit", 0)
    spent = payload.get("spent", 0)

    if limit > 0 and spent >= limit * threshold:
        return {
            "alert": f"Category {category} has used {spent / limit:.0%} of its limit: "
                     f"{format_money(spent)} / {format_money(limit)}",
            "category": category,
            "spent": spent,
            "limit": limit,
        }
    return {}

def register_default_handlers(bus: EventBus) -> EventBus:
    bus.subscribe(EXPENSE_ADDED, limit_warning_handler)
    return bus
