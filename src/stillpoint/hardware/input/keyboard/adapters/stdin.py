import asyncio
import sys
import select
import termios
import tty
from typing import Optional, List, TextIO

from stillpoint.models.enums import KeyboardSource, LogCategory
from stillpoint.models.events import KeyboardKeyPressEvent
from stillpoint.services.event_bus import EventBus
from stillpoint.utils.logger import get_logger
from .base import IKeyboardAdapter

log = get_logger().for_category(LogCategory.INPUT)

ESCAPE_SEQUENCES = {
    '\x1b[A': 'UP',
    '\x1b[B': 'DOWN',
    '\x1b[C': 'RIGHT',
    '\x1b[D': 'LEFT',
}


class StdinKeyboardAdapter(IKeyboardAdapter):
    """
    Terminal keyboard adapter

    Reads single keys from a TTY in cbreak mode and publishes
    KeyboardKeyPressEvent to the EventBus. Terminal settings are restored
    when the adapter stops, including on cancellation.
    """

    def __init__(self, event_bus: EventBus, stdin: Optional[TextIO] = None):
        self.event_bus = event_bus
        self.stdin = stdin or sys.stdin
        self._old_settings = None
        self._buffer = ""

    async def run(self) -> None:
        """
        Read keys until cancelled.

        Raises:
            RuntimeError: stdin is not a TTY or cannot be read
        """
        if not self.stdin.isatty():
            log.info("STDIN is not a TTY, cannot use stdin keyboard adapter")
            raise RuntimeError("STDIN is not a TTY")

        self._old_settings = termios.tcgetattr(self.stdin)
        tty.setcbreak(self.stdin.fileno())
        log.info("STDIN keyboard adapter active (cbreak mode enabled)")

        try:
            while True:
                ready, _, _ = select.select([self.stdin], [], [], 0)
                if not ready:
                    await asyncio.sleep(0.02)
                    continue

                try:
                    char = self.stdin.read(1)
                except OSError as e:
                    raise RuntimeError("STDIN read failed") from e

                if not char:
                    continue
                self._buffer += char
                self.process_buffer()

        except asyncio.CancelledError:
            log.info("STDIN keyboard adapter cancelled")
            raise

        finally:
            if self._old_settings:
                termios.tcsetattr(self.stdin, termios.TCSADRAIN, self._old_settings)
                log.debug("Terminal settings restored")

    def feed(self, text: str) -> None:
        """Append raw input and publish every complete key in it."""
        self._buffer += text
        self.process_buffer()

    def process_buffer(self) -> None:
        """Consume buffered input; incomplete escape sequences stay buffered."""
        while self._buffer:
            if self._buffer.startswith('\x1b['):
                if len(self._buffer) < 3:
                    return

                seq = self._buffer[:3]
                self._buffer = self._buffer[3:]
                key = ESCAPE_SEQUENCES.get(seq)
                if key:
                    self._publish_key(key)
                else:
                    log.debug("Unknown escape sequence", sequence=repr(seq))
                continue

            if self._buffer == '\x1b':
                return

            if self._buffer.startswith('\x1b'):
                self._buffer = self._buffer[1:]
                self._publish_key("ESCAPE")
                continue

            char = self._buffer[0]
            self._buffer = self._buffer[1:]

            if char in ('\r', '\n'):
                self._publish_key("ENTER")
            elif char == '\t':
                self._publish_key("TAB")
            elif char == '\x7f':
                self._publish_key("BACKSPACE")
            elif char == ' ':
                self._publish_key("SPACE")
            elif '\x01' <= char <= '\x1a':
                self._publish_key(chr(ord(char) + 96).upper(), modifiers=["CTRL"])
            elif char.isprintable():
                if char.isupper():
                    self._publish_key(char, modifiers=["SHIFT"])
                else:
                    self._publish_key(char.upper())

    def _publish_key(self, key: str, modifiers: Optional[List[str]] = None) -> None:
        log.debug(f"Key pressed: {key}", modifiers=modifiers if modifiers else None)
        self.event_bus.publish(KeyboardKeyPressEvent(key, modifiers, KeyboardSource.STDIN))
