from focus_tracker.services.notifier import Notifier


def test_publish_to_offline_user_is_dropped():
    notifier = Notifier()
    assert notifier.is_online("u1") is False
    assert notifier.publish("u1", "timer:updated", {"id": "t"}) == 0


def test_publish_reaches_every_connection_of_user_only():
    notifier = Notifier()
    first = notifier.subscribe("u1")
    second = notifier.subscribe("u1")
    other = notifier.subscribe("u2")

    assert notifier.publish("u1", "timer:updated", {"id": "t"}) == 2
    assert first.get_nowait() == {"event": "timer:updated", "data": {"id": "t"}}
    assert second.get_nowait()["event"] == "timer:updated"
    assert other.empty()


def test_full_inbox_drops_without_blocking():
    notifier = Notifier(max_queue_size=1)
    inbox = notifier.subscribe("u1")
    assert notifier.publish("u1", "a", 1) == 1
    assert notifier.publish("u1", "b", 2) == 0
    assert inbox.get_nowait()["event"] == "a"


def test_unsubscribe_takes_user_offline():
    notifier = Notifier()
    inbox = notifier.subscribe("u1")
    notifier.unsubscribe("u1", inbox)
    assert notifier.is_online("u1") is False
    assert notifier.publish("u1", "timer:updated", None) == 0
