from enum import Enum


class EventType(Enum):
    """Event Channel topics. The value is the wire topic name."""

    # Session lifecycle (published by SessionController)
    SESSION_START = "session:start"
    SESSION_PAUSE = "session:pause"
    SESSION_RESUME = "session:resume"
    SESSION_STOP = "session:stop"
    SESSION_COMPLETE = "session:complete"
    SESSION_MUTE = "session:mute"
    SESSION_DISMISS_PROMPT = "session:dismiss_prompt"

    # Countdown clock progress (republished verbatim by SessionController)
    TIMER_TICK = "timer:tick"

    # User input
    KEYBOARD_KEYPRESS = "keyboard:keypress"

    @property
    def topic(self) -> str:
        return self.value
