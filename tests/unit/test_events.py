"""Unit tests for the in-process event bus."""

from dataclasses import dataclass

from contentlab.core.events import (
    ContentUpdated,
    Event,
    EventBus,
    get_event_bus,
    reset_event_bus,
)


@dataclass(frozen=True)
class Ping(Event):
    pass


class TestEventBus:
    """Test publish/subscribe delivery."""

    def test_delivers_to_subscribers(self):
        """Handlers receive events of their type."""
        bus = EventBus()
        received = []
        bus.subscribe(ContentUpdated, received.append)

        delivered = bus.publish(ContentUpdated(content_ids=("a",)))

        assert delivered == 1
        assert received == [ContentUpdated(content_ids=("a",))]

    def test_ignores_other_event_types(self):
        """Handlers do not see unrelated events."""
        bus = EventBus()
        received = []
        bus.subscribe(ContentUpdated, received.append)

        bus.publish(Ping())

        assert received == []

    def test_base_class_subscription(self):
        """Subscribing to Event receives every event."""
        bus = EventBus()
        received = []
        bus.subscribe(Event, received.append)

        bus.publish(Ping())
        bus.publish(ContentUpdated())

        assert len(received) == 2

    def test_failing_handler_isolated(self):
        """A raising handler does not block later handlers."""
        bus = EventBus()
        received = []

        def broken(event):
            raise RuntimeError("handler failed")

        bus.subscribe(ContentUpdated, broken)
        bus.subscribe(ContentUpdated, received.append)

        delivered = bus.publish(ContentUpdated())

        assert delivered == 1
        assert len(received) == 1

    def test_subscription_context_manager(self):
        """Leaving the context unsubscribes the handler."""
        bus = EventBus()
        received = []

        with bus.subscribe(ContentUpdated, received.append):
            assert bus.handler_count(ContentUpdated) == 1

        bus.publish(ContentUpdated())

        assert received == []
        assert bus.handler_count(ContentUpdated) == 0

    def test_unsubscribe_idempotent(self):
        """Unsubscribing twice is harmless."""
        bus = EventBus()
        subscription = bus.subscribe(ContentUpdated, lambda event: None)

        subscription.unsubscribe()
        subscription.unsubscribe()

        assert subscription.active is False

    def test_clear(self):
        """clear() removes every handler."""
        bus = EventBus()
        bus.subscribe(ContentUpdated, lambda event: None)

        bus.clear()

        assert bus.publish(ContentUpdated()) == 0


class TestEventBusSingleton:
    """Test the process-wide bus."""

    def test_reuses_instance(self, event_bus):
        """get_event_bus returns the same bus until reset."""
        assert get_event_bus() is event_bus

    def test_reset_creates_new_instance(self, event_bus):
        """reset_event_bus drops the current bus."""
        reset_event_bus()

        assert get_event_bus() is not event_bus
