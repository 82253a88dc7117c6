"""
Models package - data models for the session timer
"""

from .enums import SessionState, SceneID, ClockCommand, LogLevel, LogCategory
from .clock import ClockTick, ClockCommandMessage
from .session import Session, SessionToken, SessionStatus
from .errors import (
    StillpointError,
    InvalidDurationError,
    InvalidTransitionError,
    ClockUnavailableError,
    TimerUnavailableError,
)

__all__ = [
    'SessionState',
    'SceneID',
    'ClockCommand',
    'LogLevel',
    'LogCategory',
    'ClockTick',
    'ClockCommandMessage',
    'Session',
    'SessionToken',
    'SessionStatus',
    'StillpointError',
    'InvalidDurationError',
    'InvalidTransitionError',
    'ClockUnavailableError',
    'TimerUnavailableError',
]
