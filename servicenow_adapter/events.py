"""Synchronous publish/subscribe for adapter status events."""

import logging
from enum import Enum
from typing import Any, Callable

from ._logging import get_logger

EventHandler = Callable[[dict[str, Any]], Any]


def _event_name(event: str | Enum) -> str:
    return event.value if isinstance(event, Enum) else str(event)


class EventPublisher:
    def __init__(self, logger: logging.Logger | None = None):
        self._subscribers: dict[str, list[EventHandler]] = {}
        self.logger = logger or get_logger("events")

    def subscribe(self, event: str | Enum, handler: EventHandler) -> None:
        name = _event_name(event)
        self._subscribers.setdefault(name, []).append(handler)
        self.logger.debug("Subscribed %s to %s", getattr(handler, "__name__", repr(handler)), name)

    def unsubscribe(self, event: str | Enum, handler: EventHandler) -> None:
        name = _event_name(event)
        if name in self._subscribers:
            self._subscribers[name] = [h for h in self._subscribers[name] if h != handler]

    def emit(self, event: str | Enum, payload: dict[str, Any]) -> int:
        """Call every handler of ``event`` in subscription order and return how many ran."""
        name = _event_name(event)
        handlers = list(self._subscribers.get(name, []))
        if not handlers:
            self.logger.debug("No handlers for %s", name)
            return 0

        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                self.logger.exception("Handler %s failed for %s", getattr(handler, "__name__", repr(handler)), name)
        return len(handlers)
