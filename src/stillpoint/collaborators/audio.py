"""
Simulated audio engine

Stands in for a real synthesis/playback backend. Tracks the audio context
and ambient state the way a real engine would, logs every action, and
reproduces the cue's timing: play_completion_cue() resolves after the cue
duration, or earlier when stop_completion_cue() fades it out.
"""

from __future__ import annotations

import asyncio
import sys
from enum import Enum, auto
from typing import Any, Optional, TextIO

from stillpoint.models.enums import LogCategory
from stillpoint.utils.logger import get_logger

log = get_logger().for_category(LogCategory.AUDIO)


class AudioUnavailableError(RuntimeError):
    """No audio output could be opened"""


class AudioContextState(Enum):
    CLOSED = auto()
    RUNNING = auto()
    SUSPENDED = auto()


class SimulatedAudioEngine:
    """
    Audio engine without sound output.

    Args:
        cue_duration_s: How long the completion cue "plays"
        bell: Ring the terminal bell when the cue starts
        available: False makes initialize() fail (audio unavailable)
        stream: Where the bell is written (defaults to sys.stdout)
    """

    def __init__(
        self,
        cue_duration_s: float = 6.0,
        bell: bool = False,
        available: bool = True,
        stream: Optional[TextIO] = None
    ):
        self.cue_duration_s = cue_duration_s
        self.bell = bell
        self.available = available
        self.stream = stream

        self.context_state = AudioContextState.CLOSED
        self.ambient_scene: Any = None
        self.ambient_muted = False
        self._cue_done: Optional[asyncio.Event] = None

    @property
    def ambient_playing(self) -> bool:
        return self.ambient_scene is not None

    @property
    def cue_playing(self) -> bool:
        return self._cue_done is not None and not self._cue_done.is_set()

    async def initialize(self) -> None:
        """Create the audio context, or wake it up if a session left it suspended."""
        if self.context_state is AudioContextState.SUSPENDED:
            await self.resume()
            return
        if self.context_state is AudioContextState.RUNNING:
            return
        if not self.available:
            raise AudioUnavailableError("No audio output device")
        self.context_state = AudioContextState.RUNNING
        log.info("Audio context created")

    async def suspend(self) -> None:
        if self.context_state is AudioContextState.RUNNING:
            self.context_state = AudioContextState.SUSPENDED
            log.debug("Audio context suspended")

    async def resume(self) -> None:
        if self.context_state is AudioContextState.SUSPENDED:
            self.context_state = AudioContextState.RUNNING
            log.debug("Audio context resumed")

    async def start_ambient(self, scene: Any) -> None:
        self._require_running("start ambient")
        if self.ambient_playing:
            self.stop_ambient(0.0)
        self.ambient_scene = scene
        self.ambient_muted = False
        log.info("Ambient started", scene=getattr(scene, "value", scene))

    def stop_ambient(self, fade_s: float) -> None:
        if not self.ambient_playing:
            return
        log.info("Ambient fading out", scene=getattr(self.ambient_scene, "value", self.ambient_scene), fade_s=fade_s)
        self.ambient_scene = None

    def set_ambient_muted(self, muted: bool) -> None:
        self.ambient_muted = muted
        log.info("Ambient muted" if muted else "Ambient unmuted")

    async def play_completion_cue(self) -> None:
        self._require_running("play cue")
        done = asyncio.Event()
        self._cue_done = done
        log.info("Completion cue playing", duration_s=self.cue_duration_s)
        if self.bell:
            out = self.stream or sys.stdout
            out.write("\a")
            out.flush()

        try:
            await asyncio.wait_for(done.wait(), timeout=self.cue_duration_s)
        except asyncio.TimeoutError:
            log.debug("Completion cue ended")
        finally:
            done.set()

    def stop_completion_cue(self, fade_s: float) -> None:
        if not self.cue_playing:
            return
        log.info("Completion cue fading out", fade_s=fade_s)
        self._cue_done.set()

    def _require_running(self, action: str) -> None:
        if self.context_state is not AudioContextState.RUNNING:
            raise AudioUnavailableError(
                f"Cannot {action}: audio context is {self.context_state.name}"
            )
