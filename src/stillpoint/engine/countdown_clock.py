"""
Countdown Clock

Measures wall-clock time on a dedicated worker thread so that nothing running
on the asyncio loop (rendering, slow collaborators) can stall the countdown.

Commands go to the worker through a FIFO queue; ticks come back onto the
owning loop via call_soon_threadsafe, so both directions keep their order.

Remaining/elapsed are always derived from the absolute deadline and the
current time, never from a tick counter, so late wake-ups do not accumulate
drift.
"""

from __future__ import annotations

import asyncio
import queue
import threading
import time
from typing import Callable, Optional

from stillpoint.models.clock import ClockTick, ClockCommandMessage
from stillpoint.models.enums import ClockCommand, LogCategory
from stillpoint.models.errors import ClockUnavailableError
from stillpoint.utils.logger import get_logger

log = get_logger().for_category(LogCategory.CLOCK)

DEFAULT_TICK_INTERVAL_MS = 250


class _ClockWorker:
    """
    Run state and tick loop, owned exclusively by the worker thread.

    A run exists between START/RESUME and STOP/PAUSE/completion. While paused
    only the remaining time is kept; the deadline is recomputed on resume.
    """

    def __init__(
        self,
        deliver: Callable[[ClockTick], None],
        interval_s: float,
        time_source: Callable[[], float]
    ):
        self.commands: "queue.Queue[ClockCommandMessage]" = queue.Queue()
        self._deliver = deliver
        self._interval = interval_s
        self._now = time_source

        self._generation = 0
        self._total_ms = 0
        self._deadline: Optional[float] = None
        self._remaining_at_pause: Optional[float] = None
        self._next_tick_at = 0.0

    @property
    def running(self) -> bool:
        return self._deadline is not None

    def run(self) -> None:
        while True:
            timeout = None
            if self.running:
                timeout = max(0.0, self._next_tick_at - self._now())

            try:
                msg = self.commands.get(timeout=timeout)
            except queue.Empty:
                msg = None

            if msg is not None:
                if msg.command is ClockCommand.CLOSE:
                    return
                self._apply(msg)
                continue

            if self.running and self._now() >= self._next_tick_at:
                self._tick()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _apply(self, msg: ClockCommandMessage) -> None:
        if msg.command is ClockCommand.START:
            self._start(msg.generation, msg.duration_ms or 0)
        elif msg.command is ClockCommand.PAUSE:
            self._pause()
        elif msg.command is ClockCommand.RESUME:
            self._resume()
        elif msg.command is ClockCommand.STOP:
            self._generation = msg.generation
            self._clear()

    def _start(self, generation: int, duration_ms: int) -> None:
        self._clear()
        self._generation = generation
        self._total_ms = duration_ms

        if duration_ms <= 0:
            self._finish()
            return

        now = self._now()
        self._deadline = now + duration_ms / 1000
        self._schedule_next(now)

    def _pause(self) -> None:
        if not self.running:
            return
        remaining = self._deadline - self._now()
        if remaining <= 0:
            # Deadline passed before the pause landed: the run is over
            self._finish()
            return
        self._remaining_at_pause = remaining
        self._deadline = None

    def _resume(self) -> None:
        if self.running or not self._remaining_at_pause:
            return
        now = self._now()
        self._deadline = now + self._remaining_at_pause
        self._remaining_at_pause = None
        self._schedule_next(now)

    def _clear(self) -> None:
        self._deadline = None
        self._remaining_at_pause = None
        self._total_ms = 0

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------

    def _schedule_next(self, now: float) -> None:
        # Land one wake-up exactly on the deadline so completion is not late
        self._next_tick_at = min(now + self._interval, self._deadline)

    def _tick(self) -> None:
        now = self._now()
        remaining_ms = max(0, round((self._deadline - now) * 1000))
        if remaining_ms <= 0:
            self._finish()
            return

        elapsed_ms = self._total_ms - remaining_ms
        progress = min(1.0, max(0.0, elapsed_ms / self._total_ms))
        self._deliver(ClockTick(
            remaining_ms=remaining_ms,
            elapsed_ms=elapsed_ms,
            progress=progress,
            complete=False,
            generation=self._generation,
        ))

        next_at = self._next_tick_at + self._interval
        if next_at <= now:
            next_at = now + self._interval
        self._next_tick_at = min(next_at, self._deadline)

    def _finish(self) -> None:
        """Emit the single terminal tick and end the run."""
        total = max(0, self._total_ms)
        self._deliver(ClockTick(
            remaining_ms=0,
            elapsed_ms=total,
            progress=1.0,
            complete=True,
            generation=self._generation,
        ))
        self._clear()


class CountdownClock:
    """
    Loop-side facade of the countdown clock.

    Commands: start(duration_ms), pause(), resume(), stop(), close().
    Ticks are delivered on the owning event loop to the handler set with
    set_tick_handler(). Ticks produced by a run that was stopped or replaced
    are dropped here, even if they were already queued on the loop.

    Example:
        clock = CountdownClock()
        clock.set_tick_handler(controller.handle_tick)
        clock.start(10 * 60 * 1000)

    Raises:
        ClockUnavailableError: the worker thread could not be started
    """

    def __init__(
        self,
        on_tick: Optional[Callable[[ClockTick], None]] = None,
        *,
        tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS,
        time_source: Callable[[], float] = time.monotonic,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        thread_factory: Callable[..., threading.Thread] = threading.Thread
    ):
        self._loop = loop or asyncio.get_running_loop()
        self._on_tick = on_tick
        self._generation = 0
        self._closed = False
        self.tick_interval_ms = tick_interval_ms

        self._worker = _ClockWorker(
            deliver=self._post_tick,
            interval_s=tick_interval_ms / 1000,
            time_source=time_source,
        )

        try:
            self._thread = thread_factory(
                target=self._worker.run,
                name="CountdownClock",
                daemon=True
            )
            self._thread.start()
        except (RuntimeError, OSError) as e:
            log.error("Countdown clock worker could not start", error=str(e))
            raise ClockUnavailableError(f"Clock worker thread unavailable: {e}") from e

        log.debug("CountdownClock ready", tick_interval_ms=tick_interval_ms)

    def set_tick_handler(self, on_tick: Callable[[ClockTick], None]) -> None:
        self._on_tick = on_tick

    @property
    def generation(self) -> int:
        """Generation of the latest start/stop command"""
        return self._generation

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self, duration_ms: int) -> None:
        self._generation += 1
        self._send(ClockCommand.START, duration_ms)

    def pause(self) -> None:
        self._send(ClockCommand.PAUSE)

    def resume(self) -> None:
        self._send(ClockCommand.RESUME)

    def stop(self) -> None:
        self._generation += 1
        self._send(ClockCommand.STOP)

    def close(self, timeout: float = 1.0) -> None:
        """Terminate the worker thread. Further commands are ignored."""
        if self._closed:
            return
        self._generation += 1
        self._worker.commands.put(ClockCommandMessage(ClockCommand.CLOSE, self._generation))
        self._closed = True
        self._thread.join(timeout)
        log.debug("CountdownClock closed")

    def _send(self, command: ClockCommand, duration_ms: Optional[int] = None) -> None:
        if self._closed:
            log.debug(f"Clock closed, ignoring {command.name}")
            return
        self._worker.commands.put(
            ClockCommandMessage(command, self._generation, duration_ms)
        )

    # ------------------------------------------------------------------
    # Tick delivery
    # ------------------------------------------------------------------

    def _post_tick(self, tick: ClockTick) -> None:
        """Worker thread: hand the tick to the event loop."""
        try:
            self._loop.call_soon_threadsafe(self._deliver, tick)
        except RuntimeError:
            log.debug("Event loop closed, tick discarded", remaining_ms=tick.remaining_ms)

    def _deliver(self, tick: ClockTick) -> None:
        """Loop thread: forward current-generation ticks to the handler."""
        if tick.generation != self._generation:
            log.debug(
                "Stale tick dropped",
                tick_generation=tick.generation,
                current_generation=self._generation
            )
            return
        if self._on_tick is not None:
            self._on_tick(tick)
