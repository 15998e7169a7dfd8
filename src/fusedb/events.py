"""Lifecycle event bus.

Each engine publishes ``connected``, ``disconnected`` and ``error``
notifications on the bus it was constructed with. Buses are ordinary
objects: share one between engines to observe them together, or let each
engine create its own.
"""

import inspect
import logging
from enum import Enum
from typing import Any, Callable, Union

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class LifecycleEvent(Enum):
    """Notifications emitted by the engine."""
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"


EventName = Union[LifecycleEvent, str]


def _event_key(event: EventName) -> str:
    if isinstance(event, LifecycleEvent):
        return event.value
    return LifecycleEvent(event).value


class EventBus:
    """Subscription registry with persistent and one-shot handlers.

    Handlers run in subscription order and may be plain callables or
    coroutine functions. A failing handler is logged and skipped; it never
    prevents the remaining handlers from running.

    Usage:
        bus = EventBus()
        bus.once("connected", lambda info: print(info.driver))
        bus.on(LifecycleEvent.ERROR, report_error)
        engine = Engine(events=bus)
    """

    def __init__(self):
        # (handler, once) pairs per event
        self._handlers: dict[str, list[tuple[Handler, bool]]] = {}

    def on(self, event: EventName, handler: Handler) -> Handler:
        """Subscribe ``handler`` until it is removed with :meth:`off`."""
        self._handlers.setdefault(_event_key(event), []).append((handler, False))
        return handler

    def once(self, event: EventName, handler: Handler) -> Handler:
        """Subscribe ``handler`` for the next emission only."""
        self._handlers.setdefault(_event_key(event), []).append((handler, True))
        return handler

    def off(self, event: EventName, handler: Handler) -> bool:
        """Remove the first subscription of ``handler``.

        Returns:
            True if a subscription was removed
        """
        handlers = self._handlers.get(_event_key(event), [])
        for i, (registered, _) in enumerate(handlers):
            if registered is handler:
                del handlers[i]
                return True
        return False

    def listener_count(self, event: EventName) -> int:
        return len(self._handlers.get(_event_key(event), []))

    async def emit(self, event: EventName, *args: Any) -> int:
        """Deliver an event to every subscriber.

        One-shot handlers are removed before any handler runs, so a handler
        that re-emits the same event does not see them twice.

        Returns:
            Number of handlers invoked
        """
        key = _event_key(event)
        handlers = list(self._handlers.get(key, []))
        if not handlers:
            return 0
        self._handlers[key] = [h for h in handlers if not h[1]]

        for handler, _ in handlers:
            try:
                result = handler(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(f"Handler {handler!r} for '{key}' failed")
        return len(handlers)
