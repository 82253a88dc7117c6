"""
Domain exceptions

Raised by the session core; the API layer maps them onto HTTP responses.
"""

from typing import Optional


class StillpointError(Exception):
    """Base class for all session timer errors"""


class InvalidDurationError(StillpointError, ValueError):
    """Session duration rejected before the session starts"""

    def __init__(self, duration_ms, reason: Optional[str] = None):
        self.duration_ms = duration_ms
        self.reason = reason or "duration must be positive"
        super().__init__(f"Invalid session duration {duration_ms!r}: {self.reason}")


class InvalidTransitionError(StillpointError):
    """Command is not valid in the current session state"""

    def __init__(self, command: str, state):
        self.command = command
        self.state = state
        super().__init__(f"Cannot {command} while session is {state.name}")


class ClockUnavailableError(StillpointError, RuntimeError):
    """The clock's isolated scheduling context could not be created"""


class TimerUnavailableError(StillpointError):
    """A session was requested while running in timer-less (degraded) mode"""

    def __init__(self):
        super().__init__("Countdown clock unavailable; sessions cannot be timed")
