from datetime import datetime, timezone

from agent_parallel.notify_queue import TaskNotifyQueue, TaskQueueEvent

STAMP = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def test_tick_on_empty_queue_returns_none():
    queue = TaskNotifyQueue()
    received = []
    queue.subscribe("a", received.append)
    assert queue.tick() is None
    assert received == []


def test_broadcasts_in_fifo_order_one_per_tick():
    queue = TaskNotifyQueue()
    first, second = [], []
    queue.subscribe("a", first.append)
    queue.subscribe("b", second.append)
    queue.enqueue("one", STAMP)
    queue.enqueue("two", STAMP)
    assert len(queue) == 2
    assert queue.tick() == TaskQueueEvent("one", STAMP)
    assert len(queue) == 1
    queue.tick()
    assert [e.content for e in first] == ["one", "two"]
    assert first == second


def test_message_dropped_without_subscribers():
    queue = TaskNotifyQueue()
    queue.enqueue("lost", STAMP)
    assert queue.tick() == TaskQueueEvent("lost", STAMP)
    received = []
    queue.subscribe("a", received.append)
    assert queue.tick() is None
    assert received == []


def test_unsubscribe_stops_delivery():
    queue = TaskNotifyQueue()
    kept, removed = [], []
    queue.subscribe("keep", kept.append)
    queue.subscribe("gone", removed.append)
    queue.unsubscribe("gone")
    queue.unsubscribe("never-there")
    queue.enqueue("msg", STAMP)
    queue.tick()
    assert [e.content for e in kept] == ["msg"]
    assert removed == []


def test_resubscribe_replaces_recipient():
    queue = TaskNotifyQueue()
    old, new = [], []
    queue.subscribe("s", old.append)
    queue.subscribe("s", new.append)
    queue.enqueue("msg", STAMP)
    queue.tick()
    assert old == []
    assert len(new) == 1


def test_failing_subscriber_does_not_block_others():
    queue = TaskNotifyQueue()
    received = []

    def broken(event):
        raise RuntimeError("closed")

    queue.subscribe("broken", broken)
    queue.subscribe("ok", received.append)
    queue.enqueue("msg", STAMP)
    queue.tick()
    assert [e.content for e in received] == ["msg"]


def test_default_timestamp_is_utc_now():
    queue = TaskNotifyQueue()
    before = datetime.now(timezone.utc)
    queue.enqueue("msg")
    event = queue.tick()
    after = datetime.now(timezone.utc)
    assert event.created_at.tzinfo is not None
    assert before <= event.created_at <= after