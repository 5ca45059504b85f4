import logging
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

__all__ = [
    'Event', 'EventBus',
    'TRANSACTION_ADDED', 'TRANSACTION_UPDATED', 'TRANSACTION_DELETED',
    'TRANSACTIONS_CLEARED', 'CATEGORY_CHANGED', 'AUTH_CHANGED',
]

logger = logging.getLogger(__name__)

TRANSACTION_ADDED = "TRANSACTION_ADDED"
TRANSACTION_UPDATED = "TRANSACTION_UPDATED"
TRANSACTION_DELETED = "TRANSACTION_DELETED"
TRANSACTIONS_CLEARED = "TRANSACTIONS_CLEARED"
CATEGORY_CHANGED = "CATEGORY_CHANGED"
AUTH_CHANGED = "AUTH_CHANGED"


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event], None]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        handlers = self._subscribers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, name: str, payload: dict | None = None) -> int:
        """Deliver to every handler of ``name``; returns how many ran."""
        handlers = list(self._subscribers.get(name, []))
        if not handlers:
            return 0

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload or {})
        logger.debug("Publishing %s to %d handler(s)", name, len(handlers))
        for handler in handlers:
            handler(event)
        return len(handlers)
