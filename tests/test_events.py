from core.events import TRANSACTION_ADDED, EventBus


def test_publish_reaches_all_handlers_in_order():
    bus = EventBus()
    calls = []
    bus.subscribe(TRANSACTION_ADDED, lambda e: calls.append(("first", e.payload["id"])))
    bus.subscribe(TRANSACTION_ADDED, lambda e: calls.append(("second", e.payload["id"])))

    assert bus.publish(TRANSACTION_ADDED, {"id": "t1"}) == 2
    assert calls == [("first", "t1"), ("second", "t1")]


def test_publish_without_subscribers():
    assert EventBus().publish("NOBODY_LISTENS") == 0


def test_unsubscribe():
    bus = EventBus()
    calls = []

    def handler(event):
        calls.append(event.name)

    bus.subscribe(TRANSACTION_ADDED, handler)
    bus.unsubscribe(TRANSACTION_ADDED, handler)
    bus.unsubscribe(TRANSACTION_ADDED, handler)
    bus.publish(TRANSACTION_ADDED, {})
    assert calls == []


def test_event_carries_timestamp_and_empty_payload():
    bus = EventBus()
    seen = []
    bus.subscribe("PING", seen.append)
    bus.publish("PING")
    assert seen[0].payload == {}
    assert seen[0].ts
