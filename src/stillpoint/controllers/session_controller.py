"""SessionController - session lifecycle state machine"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable, Optional, TYPE_CHECKING

from stillpoint.collaborators.protocols import IAudioEngine, IWakeLock
from stillpoint.lifecycle.task_registry import create_tracked_task, TaskCategory
from stillpoint.models.clock import ClockTick
from stillpoint.models.enums import SessionState, LogCategory
from stillpoint.models.errors import InvalidDurationError, TimerUnavailableError
from stillpoint.models.events import (
    SessionStartEvent,
    SessionPauseEvent,
    SessionResumeEvent,
    SessionStopEvent,
    SessionCompleteEvent,
    SessionMuteEvent,
    SessionDismissPromptEvent,
    TimerTickEvent,
)
from stillpoint.models.session import Session, SessionStatus, SessionToken
from stillpoint.services.event_bus import EventBus
from stillpoint.utils.logger import get_logger

if TYPE_CHECKING:
    from stillpoint.engine.countdown_clock import CountdownClock

log = get_logger().for_category(LogCategory.SESSION)


class SessionController:
    """
    Session lifecycle state machine

    IDLE -> ACTIVE -> (PAUSED <-> ACTIVE) -> COMPLETING -> IDLE, with stop and
    restart available while the session is live (ACTIVE or PAUSED).

    Responsibilities:
    - Own the single live Session
    - Issue commands to the CountdownClock and react to its ticks
    - Publish session topics on the EventBus and republish ticks
    - Sequence audio and wake-lock side effects, absorbing their failures
    - Schedule the pre-completion cue from tick inspection
    - Run the completion ritual (cue, dismissal prompt, dismissal)

    User commands return True when they caused a transition and False when
    they were not valid in the current state.

    Every asynchronous step captures the session token first; once the
    session is stopped or superseded the step's continuation does nothing.
    """

    def __init__(
        self,
        event_bus: EventBus,
        clock: Optional["CountdownClock"],
        audio: Optional[IAudioEngine] = None,
        wake_lock: Optional[IWakeLock] = None,
        *,
        cue_lead_ms: int = 1000,
        fast_fade_s: float = 1.5,
        completion_fade_s: float = 8.0,
        cue_fade_s: float = 2.0,
    ):
        """
        Args:
            event_bus: Event Channel for session topics and ticks
            clock: CountdownClock, or None when no clock could be created
                (timer-less mode: start() raises TimerUnavailableError)
            audio: Audio engine (None = sessions run silently)
            wake_lock: Screen wake-lock (None = not supported)
            cue_lead_ms: Remaining time at which the pre-completion cue starts
            fast_fade_s: Ambient fade on stop/restart
            completion_fade_s: Ambient fade when the countdown completes
            cue_fade_s: Cue fade after dismissal
        """
        self.event_bus = event_bus
        self.clock = clock
        self.audio = audio
        self.wake_lock = wake_lock

        self.cue_lead_ms = cue_lead_ms
        self.fast_fade_s = fast_fade_s
        self.completion_fade_s = completion_fade_s
        self.cue_fade_s = cue_fade_s

        self.session = Session()
        self._audio_ready = False
        self._starting = False
        self._restarting = False
        self._dismissal: Optional[asyncio.Future] = None
        self._ritual_task: Optional[asyncio.Task] = None

        if clock is not None:
            clock.set_tick_handler(self.handle_tick)
        else:
            log.warn("Running without countdown clock (timer-less mode)")

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def timer_available(self) -> bool:
        return self.clock is not None

    @property
    def _in_transition(self) -> bool:
        """start() or restart() is waiting on audio before (re)starting the clock"""
        return self._starting or self._restarting

    def status(self) -> SessionStatus:
        s = self.session
        return SessionStatus(
            state=s.state,
            total_duration_ms=s.total_duration_ms,
            scene=s.scene,
            remaining_ms=s.remaining_ms,
            progress=s.progress,
            cue_scheduled=s.cue_scheduled,
            muted=s.muted,
            awaiting_dismissal=s.awaiting_dismissal,
            timer_available=self.timer_available,
        )

    # ------------------------------------------------------------------
    # User commands
    # ------------------------------------------------------------------

    async def start(self, duration_ms: int, scene: Any) -> bool:
        """
        IDLE -> ACTIVE

        Raises:
            InvalidDurationError: duration is not a positive number
            TimerUnavailableError: running in timer-less mode
        """
        if isinstance(duration_ms, bool) or not isinstance(duration_ms, (int, float)) or duration_ms <= 0:
            raise InvalidDurationError(duration_ms)
        if not self.timer_available:
            raise TimerUnavailableError()

        s = self.session
        if s.state is not SessionState.IDLE:
            log.debug("start ignored", state=s.state.name)
            return False

        duration_ms = int(duration_ms)
        token = s.begin(duration_ms, scene)
        s.state = SessionState.ACTIVE
        self._starting = True
        log.info("Session starting", duration_ms=duration_ms, scene=scene)

        try:
            await self._initialize_audio()
            if not s.owns(token):
                log.debug("Session superseded during audio init", token=token)
                return True

            self.clock.start(duration_ms)
        finally:
            if s.token is token:
                self._starting = False

        self.event_bus.publish(SessionStartEvent(duration_ms=duration_ms, scene=scene))

        if self._audio_ready:
            await self._invoke("start ambient", self.audio.start_ambient, scene)
            if not s.owns(token):
                return True

        await self._acquire_wake_lock()
        return True

    async def pause(self) -> bool:
        """ACTIVE -> PAUSED"""
        s = self.session
        if s.state is not SessionState.ACTIVE or self._in_transition:
            log.debug("pause ignored", state=s.state.name, in_transition=self._in_transition)
            return False

        s.state = SessionState.PAUSED
        self.clock.pause()
        self.event_bus.publish(SessionPauseEvent())
        log.info("Session paused", remaining_ms=s.remaining_ms)

        # Wake-lock is kept while paused
        if self._audio_ready:
            await self._invoke("suspend audio", self.audio.suspend)
        return True

    async def resume(self) -> bool:
        """PAUSED -> ACTIVE"""
        s = self.session
        if s.state is not SessionState.PAUSED or self._in_transition:
            log.debug("resume ignored", state=s.state.name, in_transition=self._in_transition)
            return False

        token = s.token
        s.state = SessionState.ACTIVE
        self.clock.resume()
        self.event_bus.publish(SessionResumeEvent())
        log.info("Session resumed", remaining_ms=s.remaining_ms)

        if self._audio_ready:
            await self._invoke("resume audio", self.audio.resume)
            if not s.owns(token) or s.state is not SessionState.ACTIVE:
                return True

        # The platform may have dropped the lock while paused
        await self._acquire_wake_lock()
        return True

    async def stop(self) -> bool:
        """ACTIVE/PAUSED -> IDLE"""
        s = self.session
        if not s.is_live:
            log.debug("stop ignored", state=s.state.name)
            return False

        if self._starting:
            # Nothing was started yet: no clock run, no session:start, no wake-lock
            self._starting = False
            s.reset()
            log.info("Session start aborted")
            return True

        cue_was_scheduled = s.cue_scheduled
        self._restarting = False
        self.clock.stop()
        s.reset()
        self.event_bus.publish(SessionStopEvent())
        log.info("Session stopped")

        if self._audio_ready:
            self._invoke_sync("stop ambient", self.audio.stop_ambient, self.fast_fade_s)
            if cue_was_scheduled:
                self._invoke_sync("stop cue", self.audio.stop_completion_cue, self.fast_fade_s)

        await self._release_wake_lock()
        return True

    async def restart(self) -> bool:
        """ACTIVE/PAUSED -> ACTIVE with the original duration and scene"""
        s = self.session
        if not s.is_live or self._in_transition:
            log.debug("restart ignored", state=s.state.name, in_transition=self._in_transition)
            return False

        was_paused = s.state is SessionState.PAUSED
        was_muted = s.muted
        cue_was_scheduled = s.cue_scheduled
        duration_ms, scene = s.total_duration_ms, s.scene
        self.clock.stop()
        token = s.begin(duration_ms, scene)

        # Audio can only be driven while its context runs
        if was_paused and self._audio_ready:
            self._restarting = True
            try:
                await self._invoke("resume audio", self.audio.resume)
            finally:
                if s.token is token:
                    self._restarting = False
            if not s.owns(token):
                log.debug("Restart superseded while resuming audio", token=token)
                # begin() cleared cue_scheduled, so stop() left the old cue playing
                if cue_was_scheduled:
                    self._invoke_sync("stop cue", self.audio.stop_completion_cue, self.fast_fade_s)
                return True

        self.clock.start(duration_ms)
        s.state = SessionState.ACTIVE
        self.event_bus.publish(SessionStartEvent(duration_ms=duration_ms, scene=scene))
        if was_muted:
            self.event_bus.publish(SessionMuteEvent(muted=False))
        log.info("Session restarted", duration_ms=duration_ms, was_paused=was_paused)

        if self._audio_ready:
            if cue_was_scheduled:
                self._invoke_sync("stop cue", self.audio.stop_completion_cue, self.fast_fade_s)
            if was_muted:
                self._invoke_sync("unmute ambient", self.audio.set_ambient_muted, False)
            self._invoke_sync("stop ambient", self.audio.stop_ambient, self.fast_fade_s)
            await self._invoke("start ambient", self.audio.start_ambient, scene)
            if not s.owns(token):
                return True

        await self._acquire_wake_lock()
        return True

    async def dismiss(self) -> bool:
        """COMPLETING -> IDLE, once the dismissal prompt is showing"""
        s = self.session
        if (
            s.state is not SessionState.COMPLETING
            or not s.awaiting_dismissal
            or self._dismissal is None
            or self._dismissal.done()
        ):
            log.debug("dismiss ignored", state=s.state.name, awaiting=s.awaiting_dismissal)
            return False

        self._dismissal.set_result(None)
        if self._ritual_task is not None:
            await asyncio.wait({self._ritual_task})
        return True

    def set_muted(self, muted: bool) -> bool:
        """Mute or unmute the ambient bed; the completion cue is never muted."""
        s = self.session
        if not s.is_live:
            log.debug("mute ignored", state=s.state.name)
            return False
        if s.muted == muted:
            return True

        s.muted = muted
        if self._audio_ready:
            self._invoke_sync("mute ambient", self.audio.set_ambient_muted, muted)
        self.event_bus.publish(SessionMuteEvent(muted=muted))
        return True

    async def shutdown(self) -> None:
        """Stop whatever is running and release platform resources."""
        if self.session.is_live:
            await self.stop()
        elif self.session.state is SessionState.COMPLETING:
            if self._ritual_task is not None and not self._ritual_task.done():
                self._ritual_task.cancel()
                await asyncio.wait({self._ritual_task})
            self.session.reset()
            self.event_bus.publish(SessionStopEvent())
        await self._release_wake_lock()

    # ------------------------------------------------------------------
    # Clock events
    # ------------------------------------------------------------------

    def handle_tick(self, tick: ClockTick) -> None:
        """
        React to a clock tick (runs on the event loop).

        Ticks are only processed while the session is live: a tick that was
        in flight when stop() ran, or a second completion, is dropped here.
        """
        s = self.session
        if not s.is_live or self._in_transition:
            log.debug(
                "Tick ignored",
                state=s.state.name,
                in_transition=self._in_transition,
                remaining_ms=tick.remaining_ms,
                complete=tick.complete
            )
            return

        s.remaining_ms = tick.remaining_ms
        s.progress = tick.progress
        self.event_bus.publish(TimerTickEvent.from_tick(tick))

        if tick.complete:
            self._begin_completion()
            return

        if (
            s.state is SessionState.ACTIVE
            and not s.cue_scheduled
            and tick.remaining_ms <= self.cue_lead_ms
        ):
            s.cue_scheduled = True
            log.info("Pre-completion cue triggered", remaining_ms=tick.remaining_ms)
            if self._audio_ready:
                s.cue_task = create_tracked_task(
                    self._play_cue(s.token),
                    category=TaskCategory.AUDIO,
                    description="Pre-completion cue"
                )

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def _begin_completion(self) -> None:
        s = self.session
        was_paused = s.state is SessionState.PAUSED
        s.state = SessionState.COMPLETING
        s.cue_scheduled = False
        s.remaining_ms = 0
        s.progress = 1.0
        log.info("Session complete", duration_ms=s.total_duration_ms, was_paused=was_paused)

        self._dismissal = asyncio.get_running_loop().create_future()
        self._ritual_task = create_tracked_task(
            self._run_completion(s.token, s.cue_task, was_paused),
            category=TaskCategory.SESSION,
            description="Completion ritual"
        )

    async def _run_completion(
        self,
        token: SessionToken,
        cue_task: Optional[asyncio.Task],
        was_paused: bool = False
    ) -> None:
        s = self.session

        await self._release_wake_lock()
        # pause() suspended the context; the fade and cue need it running
        if was_paused and self._audio_ready:
            await self._invoke("resume audio", self.audio.resume)
            if not s.owns(token):
                return
        if self._audio_ready:
            self._invoke_sync("fade ambient", self.audio.stop_ambient, self.completion_fade_s)
        self.event_bus.publish(SessionCompleteEvent())

        # The screen changes only after the cue has finished
        if self._audio_ready:
            if cue_task is None:
                await self._invoke("completion cue", self.audio.play_completion_cue)
            else:
                await asyncio.wait({cue_task})
        if not s.owns(token):
            return

        s.awaiting_dismissal = True
        self.event_bus.publish(SessionDismissPromptEvent())
        log.info("Waiting for dismissal")

        await self._dismissal
        if not s.owns(token):
            return

        if self._audio_ready:
            self._invoke_sync("stop cue", self.audio.stop_completion_cue, self.cue_fade_s)
        s.reset()
        self.event_bus.publish(SessionStopEvent())
        log.info("Session dismissed")

    async def _play_cue(self, token: SessionToken) -> None:
        await self._invoke("completion cue", self.audio.play_completion_cue)
        if not self.session.owns(token):
            log.debug("Cue from a finished session ended", token=token)

    # ------------------------------------------------------------------
    # Collaborator boundary
    # ------------------------------------------------------------------

    async def _initialize_audio(self) -> None:
        if self.audio is None:
            self._audio_ready = False
            return
        self._audio_ready = await self._invoke("initialize audio", self.audio.initialize)
        if not self._audio_ready:
            log.warn("Audio unavailable, session continues without sound")

    async def _acquire_wake_lock(self) -> None:
        if self.wake_lock is not None:
            await self._invoke("acquire wake-lock", self.wake_lock.acquire)

    async def _release_wake_lock(self) -> None:
        if self.wake_lock is not None:
            await self._invoke("release wake-lock", self.wake_lock.release)

    async def _invoke(self, action: str, fn: Callable, *args) -> bool:
        """Call a collaborator; failures are logged and absorbed."""
        try:
            result = fn(*args)
            if inspect.isawaitable(result):
                await result
            return True
        except Exception as e:
            log.warn(f"Collaborator failed: {action}", error=str(e), error_type=type(e).__name__)
            return False

    def _invoke_sync(self, action: str, fn: Callable, *args) -> bool:
        try:
            fn(*args)
            return True
        except Exception as e:
            log.warn(f"Collaborator failed: {action}", error=str(e), error_type=type(e).__name__)
            return False
