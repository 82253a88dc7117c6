"""
ShutdownCoordinator: shutdown requests, critical task monitoring and the
priority-ordered handler sequence.
"""

import asyncio

import pytest

from stillpoint.lifecycle.handlers import (
    ClockShutdownHandler,
    SessionShutdownHandler,
    TaskCancellationHandler,
)
from stillpoint.lifecycle.shutdown_coordinator import ShutdownCoordinator
from stillpoint.lifecycle.task_registry import TaskCategory, create_tracked_task
from stillpoint.models.enums import SessionState


class RecordingHandler:
    def __init__(self, name, priority, order, fail=False, hang=False):
        self.name = name
        self.shutdown_priority = priority
        self.order = order
        self.fail = fail
        self.hang = hang

    async def shutdown(self):
        self.order.append(self.name)
        if self.fail:
            raise RuntimeError(f"{self.name} failed")
        if self.hang:
            await asyncio.sleep(10)


async def sleeper():
    await asyncio.sleep(10)


@pytest.mark.asyncio
async def test_request_shutdown_releases_waiter():
    coordinator = ShutdownCoordinator()

    waiter = asyncio.create_task(coordinator.wait_for_shutdown(poll_interval=0.05))
    await asyncio.sleep(0.1)
    assert not waiter.done()

    coordinator.request_shutdown("SIGINT")
    coordinator.request_shutdown("SIGTERM")
    await asyncio.wait_for(waiter, timeout=1.0)

    assert coordinator.shutdown_requested
    assert coordinator.reason == "SIGINT"


@pytest.mark.asyncio
async def test_critical_task_failure_triggers_shutdown():
    coordinator = ShutdownCoordinator()

    async def failing():
        await asyncio.sleep(0.05)
        raise RuntimeError("port in use")

    task = create_tracked_task(failing(), category=TaskCategory.API, description="API server")

    await asyncio.wait_for(coordinator.wait_for_shutdown(poll_interval=0.05), timeout=2.0)

    assert coordinator.reason == "Task failure: API server"
    assert task.done()


@pytest.mark.asyncio
async def test_clean_exit_of_critical_task_is_not_a_failure():
    coordinator = ShutdownCoordinator()

    async def finishes():
        await asyncio.sleep(0.01)

    create_tracked_task(finishes(), category=TaskCategory.INPUT, description="Keyboard")

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(coordinator.wait_for_shutdown(poll_interval=0.05), timeout=0.3)
    assert not coordinator.shutdown_requested


@pytest.mark.asyncio
async def test_non_critical_failure_is_ignored():
    coordinator = ShutdownCoordinator()

    async def failing():
        raise RuntimeError("handler crashed")

    create_tracked_task(failing(), category=TaskCategory.EVENTBUS, description="handler")

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(coordinator.wait_for_shutdown(poll_interval=0.05), timeout=0.3)


@pytest.mark.asyncio
async def test_handlers_run_in_priority_order_and_failures_continue():
    order = []
    coordinator = ShutdownCoordinator(timeout_per_handler=0.1)
    coordinator.register(RecordingHandler("tasks", 40, order))
    coordinator.register(RecordingHandler("session", 100, order, fail=True))
    coordinator.register(RecordingHandler("clock", 10, order))
    coordinator.register(RecordingHandler("api", 90, order, hang=True))

    await coordinator.shutdown_all()

    assert order == ["session", "api", "tasks", "clock"]


def test_register_rejects_incomplete_handler():
    coordinator = ShutdownCoordinator()

    with pytest.raises(ValueError):
        coordinator.register(object())


def test_get_handler():
    coordinator = ShutdownCoordinator()
    handler = TaskCancellationHandler()
    coordinator.register(handler)

    assert coordinator.get_handler(TaskCancellationHandler) is handler
    assert coordinator.get_handler(ClockShutdownHandler) is None


@pytest.mark.asyncio
async def test_task_cancellation_handler_cancels_tracked_tasks():
    keep = create_tracked_task(sleeper(), category=TaskCategory.INPUT, description="kept")
    doomed = create_tracked_task(sleeper(), category=TaskCategory.AUDIO, description="cue")

    await TaskCancellationHandler(exclude_tasks=[keep]).shutdown()

    assert doomed.cancelled()
    assert not keep.done()
    keep.cancel()


@pytest.mark.asyncio
async def test_clock_handler_closes_clock():
    class Clock:
        closed = False

        def close(self):
            self.closed = True

    clock = Clock()
    await ClockShutdownHandler(clock).shutdown()

    assert clock.closed


@pytest.mark.asyncio
async def test_session_handler_stops_live_session(controller, wake_lock, calls):
    await controller.start(60_000, "rain")

    await SessionShutdownHandler(controller).shutdown()

    assert controller.state is SessionState.IDLE
    assert not wake_lock.held
    assert "clock.stop" in calls
