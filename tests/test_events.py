"""Tests for the event bus and notification normalization."""

import gc
import logging

import pytest

from reloadrouter.events import (
    INJECTION_NOTIFICATION,
    EventBus,
    Notification,
    ReloadEvent,
    ReloadEventAdapter,
    normalize,
)


class Foo:
    pass


class Bar:
    pass


class Listener:
    def __init__(self) -> None:
        self.received: list = []

    def on_event(self, event) -> None:
        self.received.append(event)


class SlottedListener:
    __slots__ = ("received",)

    def __init__(self) -> None:
        self.received: list = []

    def on_event(self, event) -> None:
        self.received.append(event)


class TestEventBus:
    """Tests for EventBus."""

    def test_subscribe_and_receive(self, bus: EventBus):
        """Subscribers receive notifications posted under their name."""
        received: list[Notification] = []
        bus.subscribe("reload", received.append)

        bus.post("reload", obj="payload")

        assert len(received) == 1
        assert received[0].name == "reload"
        assert received[0].object == "payload"

    def test_other_names_not_delivered(self, bus: EventBus):
        received: list[Notification] = []
        bus.subscribe("reload", received.append)

        bus.post("something.else")

        assert received == []

    def test_resubscribe_same_pair_is_noop(self, bus: EventBus):
        """Subscribing the same (name, handler) pair twice delivers once."""
        received: list[Notification] = []

        def handler(notification: Notification) -> None:
            received.append(notification)

        bus.subscribe("reload", handler)
        bus.subscribe("reload", handler)

        assert bus.subscriber_count("reload") == 1
        assert bus.publish(Notification(name="reload")) == 1
        assert len(received) == 1

    def test_same_handler_under_two_names(self, bus: EventBus):
        received: list[str] = []

        def handler(notification: Notification) -> None:
            received.append(notification.name)

        bus.subscribe("a", handler)
        bus.subscribe("b", handler)

        bus.post("a")
        bus.post("b")

        assert received == ["a", "b"]
        assert bus.subscriber_count() == 2

    def test_unsubscribe(self, bus: EventBus):
        """Unsubscribed handlers don't receive notifications."""
        received: list[Notification] = []
        bus.subscribe("reload", received.append)
        bus.unsubscribe("reload", received.append)

        bus.post("reload")

        assert received == []
        assert bus.subscriber_count("reload") == 0

    def test_unsubscribe_unknown_is_noop(self, bus: EventBus):
        bus.unsubscribe("reload", print)
        assert bus.subscriber_count() == 0

    def test_failing_handler_does_not_stop_delivery(self, bus: EventBus):
        received: list[Notification] = []

        def broken(notification: Notification) -> None:
            raise RuntimeError("boom")

        bus.subscribe("reload", broken)
        bus.subscribe("reload", received.append)

        delivered = bus.publish(Notification(name="reload"))

        assert delivered == 1
        assert len(received) == 1

    def test_bound_method_held_weakly(self, bus: EventBus):
        """The bus does not keep a bound-method observer alive."""
        listener = Listener()
        bus.subscribe("reload", listener.on_event)
        bus.post("reload")
        assert len(listener.received) == 1

        del listener
        gc.collect()

        assert bus.publish(Notification(name="reload")) == 0
        assert bus.subscriber_count("reload") == 0

    def test_failing_handler_logged_with_traceback(self, bus: EventBus, caplog):
        def broken(notification: Notification) -> None:
            raise RuntimeError("boom")

        bus.subscribe("reload", broken)

        with caplog.at_level(logging.ERROR, logger="reloadrouter.events.bus"):
            bus.post("reload")

        assert len(caplog.records) == 1
        assert caplog.records[0].exc_info is not None
        assert "Handler error for reload" in caplog.records[0].getMessage()

    def test_slotted_bound_method_held_strongly(self, bus: EventBus):
        """Owners without weakref support can still subscribe."""
        listener = SlottedListener()
        bus.subscribe("reload", listener.on_event)
        bus.subscribe("reload", listener.on_event)

        bus.post("reload")

        assert len(listener.received) == 1

    def test_bound_method_resubscribe_is_noop(self, bus: EventBus):
        listener = Listener()
        bus.subscribe("reload", listener.on_event)
        bus.subscribe("reload", listener.on_event)

        bus.post("reload")

        assert len(listener.received) == 1


class TestNormalize:
    """Tests for payload normalization."""

    def test_single_instance(self):
        foo = Foo()
        event = normalize(Notification(name=INJECTION_NOTIFICATION, object=foo))

        assert event.subject is foo
        assert event.subject_class_identity == f"{__name__}.Foo"
        assert event.raw_payload is foo

    def test_sequence_uses_first_element(self):
        foo, bar = Foo(), Bar()
        event = normalize(Notification(name=INJECTION_NOTIFICATION, object=[foo, bar]))

        assert event.subject is foo
        assert event.subject_class_identity == f"{__name__}.Foo"

    def test_class_payload_is_class_only(self):
        event = normalize(Notification(name=INJECTION_NOTIFICATION, object=[Bar]))

        assert event.subject is None
        assert event.subject_class_identity == f"{__name__}.Bar"

    def test_string_payload_is_class_identity(self):
        event = normalize(Notification(name=INJECTION_NOTIFICATION, object="app.views.Header"))

        assert event.subject is None
        assert event.subject_class_identity == "app.views.Header"

    def test_user_info_fallback(self):
        event = normalize(
            Notification(
                name=INJECTION_NOTIFICATION,
                user_info={"class_identity": "app.views.Header"},
            )
        )

        assert event.subject_class_identity == "app.views.Header"

    @pytest.mark.parametrize("payload", [None, [], (), "", [None], [[Foo()]], {"a": 1}])
    def test_malformed_payload_is_empty(self, payload):
        """Unusable payloads normalize to an empty event, never an error."""
        event = normalize(Notification(name=INJECTION_NOTIFICATION, object=payload))

        assert event.is_empty
        assert event.subject is None
        assert event.subject_class_identity is None

    def test_event_to_json(self):
        event = normalize(Notification(name=INJECTION_NOTIFICATION, object=Foo()))

        json_dict = event.to_json()

        assert json_dict["name"] == INJECTION_NOTIFICATION
        assert json_dict["subject_class_identity"] == f"{__name__}.Foo"
        assert json_dict["has_subject"] is True
        assert "timestamp" in json_dict
        assert "id" in json_dict

    def test_event_is_immutable(self):
        event = ReloadEvent(subject_class_identity="x.Y")
        with pytest.raises(Exception):
            event.subject_class_identity = "x.Z"


class TestReloadEventAdapter:
    """Tests for ReloadEventAdapter."""

    def test_handler_receives_normalized_event(self, bus: EventBus):
        adapter = ReloadEventAdapter(bus)
        received: list[ReloadEvent] = []
        adapter.subscribe(received.append)

        foo = Foo()
        bus.post(INJECTION_NOTIFICATION, obj=[foo])

        assert len(received) == 1
        assert isinstance(received[0], ReloadEvent)
        assert received[0].subject is foo

    def test_subscribe_twice_is_noop(self, bus: EventBus):
        adapter = ReloadEventAdapter(bus)
        received: list[ReloadEvent] = []
        adapter.subscribe(received.append)
        adapter.subscribe(received.append)

        bus.post(INJECTION_NOTIFICATION, obj=Foo)

        assert adapter.handler_count == 1
        assert len(received) == 1

    def test_custom_event_name(self, bus: EventBus):
        adapter = ReloadEventAdapter(bus, "custom.reload")
        received: list[ReloadEvent] = []
        adapter.subscribe(received.append)

        bus.post(INJECTION_NOTIFICATION, obj=Foo)
        bus.post("custom.reload", obj=Foo)

        assert len(received) == 1
        assert received[0].name == "custom.reload"

    def test_unsubscribe_and_close(self, bus: EventBus):
        adapter = ReloadEventAdapter(bus)
        first: list[ReloadEvent] = []
        second: list[ReloadEvent] = []
        adapter.subscribe(first.append)
        adapter.subscribe(second.append)

        adapter.unsubscribe(first.append)
        bus.post(INJECTION_NOTIFICATION, obj=Foo)
        assert first == []
        assert len(second) == 1

        adapter.close()
        bus.post(INJECTION_NOTIFICATION, obj=Foo)
        assert len(second) == 1
        assert bus.subscriber_count() == 0

    def test_collected_handler_removes_bus_subscription(self, bus: EventBus):
        """A collected bound-method handler drops its bus entry on the next post."""
        adapter = ReloadEventAdapter(bus)
        listener = Listener()
        adapter.subscribe(listener.on_event)
        assert bus.subscriber_count(INJECTION_NOTIFICATION) == 1

        del listener
        gc.collect()
        bus.post(INJECTION_NOTIFICATION, obj=Foo)

        assert bus.subscriber_count(INJECTION_NOTIFICATION) == 0
        assert adapter.handler_count == 0
