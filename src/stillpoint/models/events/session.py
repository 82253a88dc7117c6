from dataclasses import dataclass
from typing import Any

from stillpoint.models.events.base import Event
from stillpoint.models.events.types import EventType
from stillpoint.models.events.sources import EventSource


@dataclass(init=False)
class SessionStartEvent(Event):
    """Session started (or restarted)"""
    duration_ms: int
    scene: Any

    def __init__(self, duration_ms: int, scene: Any):
        super().__init__(type=EventType.SESSION_START, source=EventSource.SESSION_CONTROLLER)
        self.duration_ms = duration_ms
        self.scene = scene


@dataclass(init=False)
class SessionPauseEvent(Event):
    def __init__(self):
        super().__init__(type=EventType.SESSION_PAUSE, source=EventSource.SESSION_CONTROLLER)


@dataclass(init=False)
class SessionResumeEvent(Event):
    def __init__(self):
        super().__init__(type=EventType.SESSION_RESUME, source=EventSource.SESSION_CONTROLLER)


@dataclass(init=False)
class SessionStopEvent(Event):
    """Session ended: user stop, or dismissal after completion"""

    def __init__(self):
        super().__init__(type=EventType.SESSION_STOP, source=EventSource.SESSION_CONTROLLER)


@dataclass(init=False)
class SessionCompleteEvent(Event):
    """Countdown reached zero; completion ritual begins"""

    def __init__(self):
        super().__init__(type=EventType.SESSION_COMPLETE, source=EventSource.SESSION_CONTROLLER)


@dataclass(init=False)
class SessionMuteEvent(Event):
    """Ambient audio muted or unmuted"""
    muted: bool

    def __init__(self, muted: bool):
        super().__init__(type=EventType.SESSION_MUTE, source=EventSource.SESSION_CONTROLLER)
        self.muted = muted


@dataclass(init=False)
class SessionDismissPromptEvent(Event):
    """Dismissal prompt is on screen, waiting for the user"""

    def __init__(self):
        super().__init__(type=EventType.SESSION_DISMISS_PROMPT, source=EventSource.SESSION_CONTROLLER)
