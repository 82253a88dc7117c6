from dataclasses import dataclass

from stillpoint.models.clock import ClockTick
from stillpoint.models.events.base import Event
from stillpoint.models.events.types import EventType
from stillpoint.models.events.sources import EventSource


@dataclass(init=False)
class TimerTickEvent(Event):
    """Countdown progress, republished verbatim from the clock"""
    remaining_ms: int
    elapsed_ms: int
    progress: float
    complete: bool

    def __init__(self, remaining_ms: int, elapsed_ms: int, progress: float, complete: bool = False):
        super().__init__(type=EventType.TIMER_TICK, source=EventSource.CLOCK)
        self.remaining_ms = remaining_ms
        self.elapsed_ms = elapsed_ms
        self.progress = progress
        self.complete = complete

    @classmethod
    def from_tick(cls, tick: ClockTick) -> "TimerTickEvent":
        return cls(
            remaining_ms=tick.remaining_ms,
            elapsed_ms=tick.elapsed_ms,
            progress=tick.progress,
            complete=tick.complete,
        )
