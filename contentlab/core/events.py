"""
In-process event bus.

Typed publish/subscribe channel between components that hold no direct
reference to each other (e.g. the content library and the listing cache).
Handlers run synchronously in publish order. A failing handler is logged and
does not prevent delivery to the remaining handlers.

Usage:
    bus = get_event_bus()

    def on_update(event: ContentUpdated) -> None:
        cache.clear()

    with bus.subscribe(ContentUpdated, on_update):
        bus.publish(ContentUpdated(content_ids=["..."]))
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Generic, Optional, TypeVar

import structlog

logger = structlog.get_logger(__name__)


# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True)
class Event:
    """Base class for bus events."""


@dataclass(frozen=True)
class ContentUpdated(Event):
    """Library content was created, changed or removed."""

    content_ids: tuple[str, ...] = ()
    topic_area: Optional[str] = None


E = TypeVar("E", bound=Event)
Handler = Callable[[E], None]


# =============================================================================
# Bus
# =============================================================================


@dataclass
class Subscription(Generic[E]):
    """Handle returned by EventBus.subscribe; usable as a context manager."""

    bus: "EventBus"
    event_type: type[E]
    handler: Handler
    active: bool = field(default=True, init=False)

    def unsubscribe(self) -> None:
        if self.active:
            self.bus._remove(self.event_type, self.handler)
            self.active = False

    def __enter__(self) -> "Subscription[E]":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.unsubscribe()


class EventBus:
    """Synchronous typed publish/subscribe bus."""

    def __init__(self) -> None:
        self._handlers: dict[type[Event], list[Handler]] = defaultdict(list)

    def subscribe(self, event_type: type[E], handler: Callable[[E], None]) -> Subscription[E]:
        """
        Register a handler for an event type.

        Handlers registered for a base class also receive subclass events.

        Returns:
            Subscription that removes the handler on unsubscribe() or context exit.
        """
        self._handlers[event_type].append(handler)
        logger.debug(
            "event_handler_subscribed",
            event_type=event_type.__name__,
            handler=getattr(handler, "__name__", repr(handler)),
        )
        return Subscription(self, event_type, handler)

    def _remove(self, event_type: type[Event], handler: Handler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: Event) -> int:
        """
        Deliver an event to every matching handler.

        Returns:
            Number of handlers that completed without raising.
        """
        delivered = 0
        for event_type, handlers in list(self._handlers.items()):
            if not isinstance(event, event_type):
                continue
            for handler in list(handlers):
                try:
                    handler(event)
                    delivered += 1
                except Exception as e:
                    logger.error(
                        "event_handler_error",
                        event_type=type(event).__name__,
                        handler=getattr(handler, "__name__", repr(handler)),
                        error=str(e),
                    )
        return delivered

    def handler_count(self, event_type: type[Event]) -> int:
        """Number of handlers registered directly for an event type."""
        return len(self._handlers.get(event_type, []))

    def clear(self) -> None:
        """Remove every handler."""
        self._handlers.clear()


# =============================================================================
# Singleton
# =============================================================================

_event_bus: Optional[EventBus] = None


def get_event_bus() -> EventBus:
    """Get or create the process-wide event bus."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    """Reset the singleton (for testing)."""
    global _event_bus
    _event_bus = None
