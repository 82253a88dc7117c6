"""
Collaborator protocols

Narrow capability contracts the SessionController and SceneController
consume. Concrete backends live next to this module; tests substitute mocks.
"""

from typing import Any, Protocol


class IAudioEngine(Protocol):
    """
    Ambient loops and completion cue.

    initialize() may raise when no audio output is available; the controller
    then runs the session without sound.
    """

    async def initialize(self) -> None:
        """Create the audio context (resume it if suspended). Idempotent."""
        ...

    async def suspend(self) -> None:
        """Suspend the audio context (pause)."""
        ...

    async def resume(self) -> None:
        """Resume a suspended audio context."""
        ...

    async def start_ambient(self, scene: Any) -> None:
        """Start the looping ambient bed for a scene, replacing any current one."""
        ...

    def stop_ambient(self, fade_s: float) -> None:
        """Fade out and stop the ambient bed. No-op when nothing plays."""
        ...

    def set_ambient_muted(self, muted: bool) -> None:
        """Mute the ambient bed only; cues stay audible."""
        ...

    async def play_completion_cue(self) -> None:
        """Play the cue; resolves when it ends naturally or is stopped."""
        ...

    def stop_completion_cue(self, fade_s: float) -> None:
        """Fade out a cue that is still playing. No-op otherwise."""
        ...


class ISceneRenderer(Protocol):
    """Visual scene paired with the ambient audio"""

    def start(self, scene: Any) -> None:
        ...

    def update_progress(self, progress: float) -> None:
        ...

    def freeze(self) -> None:
        """Stop animating but keep the last frame on screen."""
        ...

    def stop(self) -> None:
        ...

    def show_idle(self) -> None:
        """Restore the idle (setup) visuals."""
        ...


class IWakeLock(Protocol):
    """Screen wake-lock. Acquire and release are both idempotent."""

    @property
    def held(self) -> bool:
        ...

    async def acquire(self) -> None:
        ...

    async def release(self) -> None:
        ...
