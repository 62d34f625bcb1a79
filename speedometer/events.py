"""Minimal synchronous publish/subscribe for monitor and stream events."""

import logging
from collections import defaultdict
from collections.abc import Callable

logger = logging.getLogger(__name__)


class EventEmitter:
    """
    Named events with registration-order delivery.

    A subscriber that raises is logged and skipped; the emitter and the
    remaining subscribers carry on.
    """

    def __init__(self):
        self._handlers: dict[str, list[Callable]] = defaultdict(list)

    def on(self, event: str, handler: Callable) -> Callable:
        self._handlers[event].append(handler)
        return handler

    def off(self, event: str, handler: Callable):
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, []))

    def emit(self, event: str, *args) -> bool:
        """Call every handler for event. Returns False if nobody was listening."""
        handlers = list(self._handlers.get(event, []))
        for handler in handlers:
            try:
                handler(*args)
            except Exception:
                logger.exception("Subscriber %r failed on %s", handler, event)
        return bool(handlers)
