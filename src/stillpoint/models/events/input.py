from dataclasses import dataclass
from typing import List, Optional

from stillpoint.models.enums import KeyboardSource
from stillpoint.models.events.base import Event
from stillpoint.models.events.types import EventType
from stillpoint.models.events.sources import EventSource


@dataclass(init=False)
class KeyboardKeyPressEvent(Event):
    """Keyboard key press event"""
    key: str
    modifiers: List[str]
    keyboard: KeyboardSource

    def __init__(
        self,
        key: str,
        modifiers: Optional[List[str]] = None,
        keyboard: KeyboardSource = KeyboardSource.STDIN
    ):
        """
        Args:
            key: Normalized key name ('P', 'ENTER', 'SPACE', '1', ...)
            modifiers: e.g. ['CTRL'], ['SHIFT']
        """
        super().__init__(type=EventType.KEYBOARD_KEYPRESS, source=EventSource.KEYBOARD)
        self.key = key
        self.modifiers = modifiers or []
        self.keyboard = keyboard
