"""
Event bus tests: publishing, subscription order, filtering, middleware,
async handlers and the topic/payload check.
"""

import pytest

from stillpoint.lifecycle.task_registry import TaskRegistry, TaskCategory
from stillpoint.models.events import (
    EventType,
    SessionStartEvent,
    SessionMuteEvent,
    SessionStopEvent,
    TimerTickEvent,
)
from stillpoint.services.event_bus import EventBus

from conftest import settle


def test_basic_pub_sub():
    bus = EventBus()
    received = []

    bus.subscribe(EventType.SESSION_START, received.append)
    bus.publish(SessionStartEvent(duration_ms=60_000, scene="rain"))

    assert len(received) == 1
    assert received[0].duration_ms == 60_000
    assert received[0].topic == "session:start"


def test_publish_is_synchronous_and_ordered():
    bus = EventBus()
    order = []

    bus.subscribe(EventType.SESSION_STOP, lambda e: order.append("first"))
    bus.subscribe(EventType.SESSION_STOP, lambda e: order.append("second"))
    bus.subscribe(EventType.SESSION_STOP, lambda e: order.append("third"))

    bus.publish(SessionStopEvent())

    assert order == ["first", "second", "third"]


def test_priority_runs_first():
    bus = EventBus()
    order = []

    bus.subscribe(EventType.SESSION_STOP, lambda e: order.append("low"), priority=0)
    bus.subscribe(EventType.SESSION_STOP, lambda e: order.append("high"), priority=10)

    bus.publish(SessionStopEvent())

    assert order == ["high", "low"]


def test_unsubscribe():
    bus = EventBus()
    received = []

    unsubscribe = bus.subscribe(EventType.SESSION_STOP, received.append)
    bus.publish(SessionStopEvent())
    unsubscribe()
    unsubscribe()
    bus.publish(SessionStopEvent())

    assert len(received) == 1
    assert bus.subscriber_count(EventType.SESSION_STOP) == 0


def test_unsubscribe_during_dispatch():
    bus = EventBus()
    received = []
    handles = {}

    def once(event):
        received.append("once")
        handles["once"]()

    handles["once"] = bus.subscribe(EventType.SESSION_STOP, once)
    bus.subscribe(EventType.SESSION_STOP, lambda e: received.append("always"))

    bus.publish(SessionStopEvent())
    bus.publish(SessionStopEvent())

    assert received == ["once", "always", "always"]


def test_filtering():
    bus = EventBus()
    muted = []

    bus.subscribe(EventType.SESSION_MUTE, muted.append, filter_fn=lambda e: e.muted)

    bus.publish(SessionMuteEvent(muted=True))
    bus.publish(SessionMuteEvent(muted=False))

    assert [e.muted for e in muted] == [True]


def test_middleware_blocking():
    bus = EventBus()
    received = []

    def block_ticks(event):
        if event.type is EventType.TIMER_TICK:
            return None
        return event

    bus.add_middleware(block_ticks)
    bus.subscribe(EventType.TIMER_TICK, received.append)
    bus.subscribe(EventType.SESSION_STOP, received.append)

    bus.publish(TimerTickEvent(remaining_ms=900, elapsed_ms=100, progress=0.1))
    bus.publish(SessionStopEvent())

    assert [e.topic for e in received] == ["session:stop"]


def test_handler_exception_does_not_stop_others():
    bus = EventBus()
    received = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(EventType.SESSION_STOP, broken)
    bus.subscribe(EventType.SESSION_STOP, received.append)

    bus.publish(SessionStopEvent())

    assert len(received) == 1


def test_mismatched_payload_raises_type_error():
    bus = EventBus()
    event = SessionStopEvent()
    event.type = EventType.SESSION_START

    with pytest.raises(TypeError):
        bus.publish(event)


def test_event_history_is_bounded():
    bus = EventBus(history_limit=3)

    for remaining in (4000, 3000, 2000, 1000):
        bus.publish(TimerTickEvent(remaining_ms=remaining, elapsed_ms=0, progress=0.0))

    history = bus.get_event_history(limit=10)
    assert [e.remaining_ms for e in history] == [3000, 2000, 1000]

    bus.clear_history()
    assert bus.get_event_history() == []


@pytest.mark.asyncio
async def test_async_handler_scheduled_as_tracked_task():
    bus = EventBus()
    received = []

    async def handler(event):
        received.append(event)

    bus.subscribe(EventType.SESSION_STOP, handler)
    bus.publish(SessionStopEvent())

    assert received == []
    await settle()
    assert len(received) == 1

    records = TaskRegistry.instance().list_all()
    assert any(r.info.category is TaskCategory.EVENTBUS for r in records)


@pytest.mark.asyncio
async def test_async_handler_failure_is_contained():
    bus = EventBus()

    async def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(EventType.SESSION_STOP, broken)
    bus.publish(SessionStopEvent())
    await settle()

    assert TaskRegistry.instance().failed() == []
