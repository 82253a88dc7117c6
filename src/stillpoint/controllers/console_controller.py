"""ConsoleController - terminal surface for the session timer"""

from __future__ import annotations

import sys
from typing import List, Optional, Sequence, TextIO

from stillpoint.controllers.session_controller import SessionController
from stillpoint.models.enums import SessionState, LogCategory
from stillpoint.models.errors import StillpointError
from stillpoint.models.events import (
    EventType,
    KeyboardKeyPressEvent,
    SessionMuteEvent,
    TimerTickEvent,
)
from stillpoint.services.event_bus import EventBus
from stillpoint.utils.format import format_time
from stillpoint.utils.logger import get_logger

log = get_logger().for_category(LogCategory.DISPLAY)


class ConsoleController:
    """
    Keyboard commands and countdown display for the terminal.

    Keys:
        ENTER       start (idle) / dismiss (completion prompt)
        SPACE, P    pause / resume
        S           stop
        R           restart
        M           mute / unmute ambient
        1-4         duration presets (idle only)
        TAB         next scene (idle only)

    The countdown is written as mm:ss, once per displayed second.
    """

    def __init__(
        self,
        event_bus: EventBus,
        session_controller: SessionController,
        preset_minutes: Sequence[int],
        scenes: Sequence[str],
        default_minutes: int,
        default_scene: str,
        stream: Optional[TextIO] = None
    ):
        self.event_bus = event_bus
        self.session_controller = session_controller
        self.preset_minutes: List[int] = list(preset_minutes)
        self.scenes: List[str] = list(scenes) or [default_scene]
        self.stream = stream

        self.selected_minutes = default_minutes
        self.selected_scene = default_scene if default_scene in self.scenes else self.scenes[0]
        self._last_display: Optional[str] = None

        event_bus.subscribe(EventType.KEYBOARD_KEYPRESS, self._handle_keyboard_keypress)
        event_bus.subscribe(EventType.TIMER_TICK, self._on_tick)
        event_bus.subscribe(EventType.SESSION_START, self._on_start)
        event_bus.subscribe(EventType.SESSION_PAUSE, lambda e: self._show("Paused"))
        event_bus.subscribe(EventType.SESSION_RESUME, lambda e: self._show("Resumed"))
        event_bus.subscribe(EventType.SESSION_MUTE, self._on_mute)
        event_bus.subscribe(EventType.SESSION_DISMISS_PROMPT, self._on_dismiss_prompt)
        event_bus.subscribe(EventType.SESSION_STOP, self._on_stop)

    # ============================================================
    # Keyboard
    # ============================================================

    def _handle_keyboard_keypress(self, event: KeyboardKeyPressEvent):
        """Map a key to a session command; returns the command coroutine, if any."""
        key = event.key.upper()
        state = self.session_controller.state

        if key == "ENTER":
            if state is SessionState.IDLE:
                return self._start()
            if state is SessionState.COMPLETING:
                return self.session_controller.dismiss()

        elif key in ("SPACE", "P"):
            if state is SessionState.ACTIVE:
                return self.session_controller.pause()
            if state is SessionState.PAUSED:
                return self.session_controller.resume()

        elif key == "S":
            return self.session_controller.stop()

        elif key == "R":
            return self.session_controller.restart()

        elif key == "M":
            self.session_controller.set_muted(not self.session_controller.session.muted)

        elif key == "TAB":
            if state is SessionState.IDLE:
                index = self.scenes.index(self.selected_scene)
                self.selected_scene = self.scenes[(index + 1) % len(self.scenes)]
                self._show(f"Scene: {self.selected_scene}")

        elif key.isdigit():
            index = int(key) - 1
            if state is SessionState.IDLE and 0 <= index < len(self.preset_minutes):
                self.selected_minutes = self.preset_minutes[index]
                self._show(f"Duration: {self.selected_minutes} min")

        return None

    async def _start(self) -> None:
        try:
            await self.session_controller.start(
                self.selected_minutes * 60 * 1000,
                self.selected_scene
            )
        except StillpointError as e:
            log.warn("Session not started", reason=str(e))

    # ============================================================
    # Display
    # ============================================================

    def _on_start(self, event) -> None:
        self._last_display = None
        self._show(f"Session started: {format_time(event.duration_ms)} ({event.scene})")

    def _on_tick(self, event: TimerTickEvent) -> None:
        text = format_time(event.remaining_ms)
        if text == self._last_display:
            return
        self._last_display = text
        self._write(f"\r{text}")

    def _on_mute(self, event: SessionMuteEvent) -> None:
        self._show("Muted" if event.muted else "Unmuted")

    def _on_dismiss_prompt(self, event) -> None:
        self._show("Session complete. Press ENTER to return.")

    def _on_stop(self, event) -> None:
        self._last_display = None
        self._show(f"Ready: {self.selected_minutes} min, {self.selected_scene}")

    def _show(self, message: str) -> None:
        self._write(f"\r{message}\n")

    def _write(self, text: str) -> None:
        out = self.stream or sys.stdout
        out.write(text)
        out.flush()
