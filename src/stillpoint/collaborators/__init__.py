"""Collaborators consumed by the session core (audio, scene, wake-lock)"""

from .protocols import IAudioEngine, ISceneRenderer, IWakeLock
from .audio import SimulatedAudioEngine, AudioUnavailableError, AudioContextState
from .scene import LogSceneRenderer, resolve_scene
from .wake_lock import (
    NullWakeLock,
    SystemdInhibitWakeLock,
    WakeLockUnavailableError,
    create_wake_lock,
)

__all__ = [
    "IAudioEngine",
    "ISceneRenderer",
    "IWakeLock",
    "SimulatedAudioEngine",
    "AudioUnavailableError",
    "AudioContextState",
    "LogSceneRenderer",
    "resolve_scene",
    "NullWakeLock",
    "SystemdInhibitWakeLock",
    "WakeLockUnavailableError",
    "create_wake_lock",
]
