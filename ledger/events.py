from typing import Callable, Dict, List, NamedTuple
from datetime import datetime

__all__ = ['CATEGORIES_CHANGED', 'EXPENSES_CHANGED', 'Event', 'EventBus']

CATEGORIES_CHANGED = "CATEGORIES_CHANGED"
EXPENSES_CHANGED = "EXPENSES_CHANGED"


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


class EventBus:
    """Synchronous publish/subscribe; handlers run to completion in subscription order."""

    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Event, dict], dict]]] = {}

    def subscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        handlers = self._subscribers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = list(self._subscribers.get(name, []))
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in handlers]
