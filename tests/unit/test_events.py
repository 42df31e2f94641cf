"""
Unit tests for the event bus.

Tests cover:
- Event validation
- Delivery order
- Queue-backed listeners
- Subscriber failures
"""

import uuid

import pytest

from coedit.core.events import EventBus, generate_event


class TestGenerateEvent:
    """Tests for generate_event."""

    def test_valid_event(self):
        """A fully populated event is built."""
        event = generate_event("notify-update", "add", {"type": "user", "_id": "abc"})

        assert event is not None
        assert event.to_message() == {
            "event": "notify-update",
            "type": "add",
            "subject": {"type": "user", "_id": "abc"},
            "data": {},
        }

    def test_uuid_subject_is_stringified(self):
        """Subject ids are sent in canonical string form."""
        object_id = uuid.uuid4()
        event = generate_event("notify-update", "remove", {"type": "document", "_id": object_id})

        assert event.subject.id == str(object_id)

    @pytest.mark.parametrize(
        "name,type,subject",
        [
            ("", "add", {"type": "user", "_id": "abc"}),
            ("notify-update", "", {"type": "user", "_id": "abc"}),
            ("notify-update", "rename", {"type": "user", "_id": "abc"}),
            ("notify-update", "add", None),
            ("notify-update", "add", {"_id": "abc"}),
            ("notify-update", "add", {"type": "user"}),
            ("notify-update", "add", {"type": "user", "_id": ""}),
        ],
    )
    def test_invalid_event(self, name, type, subject):
        """Events missing a name, type or full subject are rejected."""
        assert generate_event(name, type, subject) is None


class TestEventBus:
    """Tests for EventBus."""

    def test_delivers_in_registration_order(self):
        """Subscribers are called synchronously in order."""
        bus = EventBus()
        calls = []
        bus.subscribe(lambda event: calls.append(("first", event.type)))
        bus.subscribe(lambda event: calls.append(("second", event.type)))

        bus.publish("notify-update", "change", {"type": "user", "_id": "abc"}, {"email": "a@b.c"})

        assert calls == [("first", "change"), ("second", "change")]

    def test_invalid_event_never_delivered(self):
        """Dropped events do not reach subscribers and do not raise."""
        bus = EventBus()
        received = []
        bus.subscribe(received.append)

        result = bus.publish("notify-update", "add", {"type": "user"})

        assert result is None
        assert received == []

    def test_failing_subscriber_does_not_break_publish(self):
        """A raising subscriber is logged; the rest still receive the event."""
        bus = EventBus()
        received = []

        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe(broken)
        bus.subscribe(received.append)

        event = bus.publish("notify-update", "add", {"type": "user", "_id": "abc"})

        assert event is not None
        assert received == [event]

    def test_unsubscribe(self):
        """Unsubscribed callbacks stop receiving events."""
        bus = EventBus()
        received = []
        bus.subscribe(received.append)
        bus.unsubscribe(received.append)

        bus.publish("notify-update", "add", {"type": "user", "_id": "abc"})

        assert received == []
        assert bus.subscriber_count == 0

    @pytest.mark.asyncio
    async def test_listen_queue(self):
        """Queue listeners receive events without the publisher waiting."""
        bus = EventBus()
        queue = bus.listen()

        bus.publish("notify-update", "remove", {"type": "document", "_id": "abc"})

        event = queue.get_nowait()
        assert event.type == "remove"

        bus.unlisten(queue)
        assert bus.subscriber_count == 0

    def test_close_drops_subscribers(self):
        """close() detaches everyone."""
        bus = EventBus()
        bus.subscribe(lambda event: None)
        bus.close()

        assert bus.subscriber_count == 0
