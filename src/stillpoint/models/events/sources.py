from enum import Enum, auto


class EventSource(Enum):
    """Event source identifiers"""
    CLOCK = auto()               # Countdown clock ticks
    SESSION_CONTROLLER = auto()  # Session lifecycle transitions
    KEYBOARD = auto()            # Keyboard adapters
    API = auto()                 # REST / WebSocket commands
