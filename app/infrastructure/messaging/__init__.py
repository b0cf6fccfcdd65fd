"""Messaging: in-process event bus for approval outcome events."""

from app.infrastructure.messaging.event_bus import (
    EventBus,
    EventHandler,
    get_event_bus,
    set_event_bus,
)

__all__ = [
    "EventBus",
    "EventHandler",
    "get_event_bus",
    "set_event_bus",
]
