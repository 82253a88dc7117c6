import asyncio
from typing import List, Optional

import pytest

from stillpoint.collaborators.audio import AudioUnavailableError
from stillpoint.controllers.session_controller import SessionController
from stillpoint.lifecycle.task_registry import TaskRegistry
from stillpoint.models.clock import ClockTick
from stillpoint.models.events import EventType
from stillpoint.services.event_bus import EventBus


class FakeClock:
    """
    Countdown clock stand-in: records commands in the shared call log and
    lets tests hand ticks to the controller directly.
    """

    def __init__(self, calls: List[str]):
        self.calls = calls
        self.duration_ms = 0
        self.tick_interval_ms = 250
        self._on_tick = None

    def set_tick_handler(self, on_tick) -> None:
        self._on_tick = on_tick

    def start(self, duration_ms: int) -> None:
        self.duration_ms = duration_ms
        self.calls.append("clock.start")

    def pause(self) -> None:
        self.calls.append("clock.pause")

    def resume(self) -> None:
        self.calls.append("clock.resume")

    def stop(self) -> None:
        self.calls.append("clock.stop")

    def close(self) -> None:
        self.calls.append("clock.close")

    def tick(self, remaining_ms: int) -> None:
        elapsed = self.duration_ms - remaining_ms
        self._on_tick(ClockTick(
            remaining_ms=remaining_ms,
            elapsed_ms=elapsed,
            progress=elapsed / self.duration_ms,
        ))

    def complete(self) -> None:
        self._on_tick(ClockTick(
            remaining_ms=0,
            elapsed_ms=self.duration_ms,
            progress=1.0,
            complete=True,
        ))


class RecordingAudio:
    """Audio engine that logs calls; the cue plays until finish_cue()."""

    def __init__(self, calls: List[str], available: bool = True):
        self.calls = calls
        self.available = available
        self.init_gate: Optional[asyncio.Event] = None
        self.resume_gate: Optional[asyncio.Event] = None
        self.cue_plays = 0
        self._cue_done: Optional[asyncio.Event] = None

    async def initialize(self) -> None:
        self.calls.append("audio.initialize")
        if self.init_gate is not None:
            await self.init_gate.wait()
        if not self.available:
            raise AudioUnavailableError("no output device")

    async def suspend(self) -> None:
        self.calls.append("audio.suspend")

    async def resume(self) -> None:
        self.calls.append("audio.resume")
        if self.resume_gate is not None:
            await self.resume_gate.wait()

    async def start_ambient(self, scene) -> None:
        self.calls.append(f"audio.start_ambient:{scene}")

    def stop_ambient(self, fade_s: float) -> None:
        self.calls.append(f"audio.stop_ambient:{fade_s}")

    def set_ambient_muted(self, muted: bool) -> None:
        self.calls.append(f"audio.set_ambient_muted:{muted}")

    async def play_completion_cue(self) -> None:
        self.calls.append("audio.play_completion_cue")
        self.cue_plays += 1
        self._cue_done = asyncio.Event()
        await self._cue_done.wait()

    def stop_completion_cue(self, fade_s: float) -> None:
        self.calls.append(f"audio.stop_completion_cue:{fade_s}")
        self.finish_cue()

    def finish_cue(self) -> None:
        if self._cue_done is not None:
            self._cue_done.set()


class RecordingWakeLock:
    def __init__(self, calls: List[str], fail: bool = False):
        self.calls = calls
        self.fail = fail
        self.held = False

    async def acquire(self) -> None:
        self.calls.append("wake.acquire")
        if self.fail:
            raise RuntimeError("wake-lock refused")
        self.held = True

    async def release(self) -> None:
        self.calls.append("wake.release")
        self.held = False


async def settle(rounds: int = 10) -> None:
    """Let scheduled tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture(autouse=True)
def fresh_task_registry():
    TaskRegistry._instance = None
    yield
    TaskRegistry._instance = None


@pytest.fixture
def calls() -> List[str]:
    return []


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def published(event_bus):
    """Every event published on the bus, in order."""
    events = []
    for event_type in EventType:
        event_bus.subscribe(event_type, events.append)
    return events


@pytest.fixture
def fake_clock(calls) -> FakeClock:
    return FakeClock(calls)


@pytest.fixture
def audio(calls) -> RecordingAudio:
    return RecordingAudio(calls)


@pytest.fixture
def wake_lock(calls) -> RecordingWakeLock:
    return RecordingWakeLock(calls)


@pytest.fixture
def controller(event_bus, fake_clock, audio, wake_lock) -> SessionController:
    return SessionController(
        event_bus=event_bus,
        clock=fake_clock,
        audio=audio,
        wake_lock=wake_lock,
        cue_lead_ms=1000,
        fast_fade_s=1.5,
        completion_fade_s=8.0,
        cue_fade_s=2.0,
    )


def topics(events) -> List[str]:
    return [e.topic for e in events if e.type is not EventType.TIMER_TICK]
