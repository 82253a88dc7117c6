"""
Event system for the session timer

Typed topics: each EventType has exactly one payload class, listed in
TOPIC_PAYLOADS. EventBus.publish() rejects events whose class does not
match their topic.
"""

from stillpoint.models.events.types import EventType
from stillpoint.models.events.base import Event
from stillpoint.models.events.sources import EventSource

from stillpoint.models.events.session import (
    SessionStartEvent,
    SessionPauseEvent,
    SessionResumeEvent,
    SessionStopEvent,
    SessionCompleteEvent,
    SessionMuteEvent,
    SessionDismissPromptEvent,
)
from stillpoint.models.events.timer import TimerTickEvent
from stillpoint.models.events.input import KeyboardKeyPressEvent


TOPIC_PAYLOADS = {
    EventType.SESSION_START: SessionStartEvent,
    EventType.SESSION_PAUSE: SessionPauseEvent,
    EventType.SESSION_RESUME: SessionResumeEvent,
    EventType.SESSION_STOP: SessionStopEvent,
    EventType.SESSION_COMPLETE: SessionCompleteEvent,
    EventType.SESSION_MUTE: SessionMuteEvent,
    EventType.SESSION_DISMISS_PROMPT: SessionDismissPromptEvent,
    EventType.TIMER_TICK: TimerTickEvent,
    EventType.KEYBOARD_KEYPRESS: KeyboardKeyPressEvent,
}

__all__ = [
    "EventType",
    "Event",
    "EventSource",
    "TOPIC_PAYLOADS",

    "SessionStartEvent",
    "SessionPauseEvent",
    "SessionResumeEvent",
    "SessionStopEvent",
    "SessionCompleteEvent",
    "SessionMuteEvent",
    "SessionDismissPromptEvent",
    "TimerTickEvent",
    "KeyboardKeyPressEvent",
]
