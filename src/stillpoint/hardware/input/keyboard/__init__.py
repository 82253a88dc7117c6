from .adapters.base import IKeyboardAdapter
from .adapters.stdin import StdinKeyboardAdapter
from .adapters.dummy import DummyKeyboardAdapter
from .factory import start_keyboard

__all__ = [
    "IKeyboardAdapter",
    "StdinKeyboardAdapter",
    "DummyKeyboardAdapter",
    "start_keyboard",
]
