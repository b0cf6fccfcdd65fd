"""In-process event bus for approval outcome events.

Handlers subscribe by event name ("RequestApproved", "RequestRejected") and
receive the event payload dict. Used as the IEventPublisher of
ApprovalRequestService; events reach it only after the deciding transaction
has committed.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

EventHandler = Callable[[dict[str, Any]], Awaitable[None]]


class EventBus:
    """Fire-and-forget publisher with per-handler error isolation."""

    def __init__(self) -> None:
        self._handlers: defaultdict[str, list[EventHandler]] = defaultdict(list)

    def on(self, event_name: str, handler: EventHandler) -> None:
        """Register handler for event_name. Handlers run in registration order."""
        self._handlers[event_name].append(handler)

    def off(self, event_name: str, handler: EventHandler) -> None:
        """Remove a previously registered handler (no-op if absent)."""
        handlers = self._handlers.get(event_name)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def listener_count(self, event_name: str) -> int:
        return len(self._handlers.get(event_name, ()))

    def clear_listeners(self, event_name: str | None = None) -> None:
        """Remove handlers for event_name, or all handlers when None."""
        if event_name is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event_name, None)

    async def publish(self, event_name: str, payload: dict[str, Any]) -> None:
        """Deliver payload to every handler of event_name.

        A failing handler is logged and does not stop the remaining handlers;
        publish never raises because of a handler.
        """
        handlers = list(self._handlers.get(event_name, ()))
        if not handlers:
            logger.debug("No handlers for %s", event_name)
            return
        for handler in handlers:
            try:
                await handler(payload)
            except Exception:
                logger.exception(
                    "Event handler %s failed for %s",
                    getattr(handler, "__name__", repr(handler)),
                    event_name,
                )


_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Return the process-wide event bus."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def set_event_bus(bus: EventBus | None) -> None:
    """Replace the process-wide event bus (tests)."""
    global _event_bus
    _event_bus = bus
