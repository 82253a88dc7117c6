"""
Enums for the session timer state machine
"""

from enum import Enum, auto


class SessionState(Enum):
    """
    Session lifecycle phases

    IDLE: No session running (setup screen)
    ACTIVE: Countdown running
    PAUSED: Countdown halted, session still live
    COMPLETING: Countdown reached zero, completion ritual in progress
    """
    IDLE = auto()
    ACTIVE = auto()
    PAUSED = auto()
    COMPLETING = auto()


class SceneID(Enum):
    """Nature scenes shipped with the timer (ambient audio + visuals)"""
    RAIN = "rain"
    FOREST = "forest"
    OCEAN = "ocean"


class ClockCommand(Enum):
    """Commands accepted by the countdown clock worker"""
    START = auto()
    PAUSE = auto()
    RESUME = auto()
    STOP = auto()
    CLOSE = auto()


class WakeLockBackend(Enum):
    """Screen wake-lock implementations"""
    NULL = "null"
    SYSTEMD = "systemd"


class KeyboardSource(Enum):
    STDIN = auto()
    DUMMY = auto()


class LogLevel(Enum):
    """Log severity levels"""
    DEBUG = auto()
    INFO = auto()
    WARN = auto()
    ERROR = auto()


class LogCategory(Enum):
    """Log categories for grouping related events"""
    CONFIG = auto()      # Configuration loading, validation
    CLOCK = auto()       # Countdown clock worker
    SESSION = auto()     # Session lifecycle transitions
    AUDIO = auto()       # Ambient audio and cues
    SCENE = auto()       # Visual scene renderer
    WAKELOCK = auto()    # Screen wake-lock
    EVENT = auto()       # Event bus events and handling
    INPUT = auto()       # Keyboard input
    DISPLAY = auto()     # Console display

    API = auto()
    WEBSOCKET = auto()

    SYSTEM = auto()      # Startup, shutdown, errors
    SHUTDOWN = auto()
    LIFECYCLE = auto()
    TASK = auto()

    GENERAL = auto()    # Default general category
