from __future__ import annotations

import logging
from collections import deque
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)

EventHandler = Callable[[dict[str, Any]], None]

WILDCARD = "*"


class EventBus(Protocol):
    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        ...

    def publish(self, event_type: str, envelope: dict[str, Any]) -> None:
        ...


class InMemoryEventBus:
    """Synchronous lifecycle event fan-out.

    Handlers run on the publishing thread, exact subscribers before
    ``"*"`` subscribers. A handler error propagates to the publisher. The
    most recent envelopes are kept in ``history``.
    """

    def __init__(self, history_size: int = 1000) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self.history: deque[dict[str, Any]] = deque(maxlen=history_size)

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event_type: str, envelope: dict[str, Any]) -> None:
        self.history.append(envelope)
        logger.debug("event %s document=%s", event_type, envelope.get("document_id"))
        targets = [*self._handlers.get(event_type, ()), *self._handlers.get(WILDCARD, ())]
        for handler in targets:
            handler(envelope)

    def events_for(self, document_id: str) -> list[dict[str, Any]]:
        return [e for e in self.history if e.get("document_id") == document_id]
