"""
Internal event bus for decoupled communication.

Provides publish/subscribe messaging between the connection layer,
the session and alert sinks without tight coupling. Delivery is
synchronous and in publish order, which is what keeps stream messages
applied in the order the transport delivered them.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Generic, TypeVar

from arbfeed.utils.time import get_timestamp_us


logger = logging.getLogger(__name__)


class EventType(Enum):
    """System event types."""

    # Connection events
    STATE_CHANGED = auto()
    MESSAGE_RECEIVED = auto()

    # Board events
    OPPORTUNITIES_CHANGED = auto()
    ALERT = auto()


T = TypeVar("T")


@dataclass
class Event(Generic[T]):
    """Generic event with typed payload."""

    type: EventType
    payload: T
    timestamp_us: int = 0
    source: str = ""


# Type alias for event handlers
EventHandler = Callable[[Event[Any]], None]


class EventBus:
    """
    Synchronous event bus for internal messaging.

    Features:
    - Priority-based handler ordering
    - Error isolation per handler
    """

    def __init__(self) -> None:
        """Initialize event bus."""
        self._handlers: dict[EventType, list[tuple[int, EventHandler]]] = defaultdict(list)

    def subscribe(
        self,
        event_type: EventType,
        handler: EventHandler,
        priority: int = 0,
    ) -> None:
        """
        Subscribe a handler to an event type.

        Args:
            event_type: Event type to handle.
            handler: Handler function.
            priority: Handler priority (higher = earlier execution).
        """
        self._handlers[event_type].append((priority, handler))
        # Stable sort keeps subscription order among equal priorities
        self._handlers[event_type].sort(key=lambda x: x[0], reverse=True)

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> bool:
        """
        Unsubscribe a handler.

        Args:
            event_type: Event type.
            handler: Handler to remove.

        Returns:
            True if handler was found and removed.
        """
        for i, (_, h) in enumerate(self._handlers[event_type]):
            if h is handler:
                self._handlers[event_type].pop(i)
                return True

        return False

    def publish(self, event: Event[Any]) -> None:
        """
        Publish an event to all subscribers.

        Args:
            event: Event to publish.
        """
        if not event.timestamp_us:
            event.timestamp_us = get_timestamp_us()

        # Copy so handlers may unsubscribe while being called
        for _, handler in list(self._handlers[event.type]):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Handler error for {event.type}: {e}")

    def emit(self, event_type: EventType, payload: Any, source: str = "") -> None:
        """Build and publish an event in one call."""
        self.publish(Event(type=event_type, payload=payload, source=source))

    def clear(self, event_type: EventType | None = None) -> None:
        """
        Clear handlers.

        Args:
            event_type: Specific type to clear, or None for all.
        """
        if event_type:
            self._handlers[event_type].clear()
        else:
            self._handlers.clear()

    def handler_count(self, event_type: EventType) -> int:
        """Get number of handlers for an event type."""
        return len(self._handlers[event_type])
