"""
Countdown clock message models

Commands travel from the event loop to the clock worker thread; ticks travel
back. Both carry the run generation so stale ticks can be recognised.
"""

from dataclasses import dataclass
from typing import Optional

from stillpoint.models.enums import ClockCommand


@dataclass(frozen=True)
class ClockCommandMessage:
    """Command posted to the clock worker"""
    command: ClockCommand
    generation: int
    duration_ms: Optional[int] = None


@dataclass(frozen=True)
class ClockTick:
    """
    Periodic progress report from the countdown clock.

    Attributes:
        remaining_ms: max(0, deadline - now)
        elapsed_ms: total - remaining
        progress: elapsed / total, clamped to [0, 1]
        complete: True only on the single terminal tick of a run
        generation: run generation that produced the tick
    """
    remaining_ms: int
    elapsed_ms: int
    progress: float
    complete: bool = False
    generation: int = 0
