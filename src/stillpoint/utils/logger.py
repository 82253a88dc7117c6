"""
Structured category logger

    [07:02:11] SESSION   ✓ Session started
               ├─ duration_ms: 600000
               └─ scene: rain

The console countdown owns the current terminal line (it rewrites it with
"\\r"), so every record starts by clearing that line; the countdown is
redrawn on the next displayed second.
"""

import sys
import traceback
from datetime import datetime
from typing import List, NamedTuple, Optional, TextIO

from stillpoint.models.enums import LogLevel, LogCategory

RESET = '\033[0m'
DIM = '\033[2m'
CLEAR_LINE = '\r\033[K'


class LevelStyle(NamedTuple):
    symbol: str
    color: str
    priority: int


LEVEL_STYLES = {
    LogLevel.DEBUG: LevelStyle('·', DIM, 0),
    LogLevel.INFO: LevelStyle('✓', '\033[32m', 1),
    LogLevel.WARN: LevelStyle('⚠', '\033[33m', 2),
    LogLevel.ERROR: LevelStyle('✗', '\033[31m', 3),
}

CATEGORY_COLORS = {
    LogCategory.CONFIG: '\033[36m',
    LogCategory.CLOCK: '\033[94m',
    LogCategory.SESSION: '\033[96m',
    LogCategory.AUDIO: '\033[95m',
    LogCategory.SCENE: '\033[92m',
    LogCategory.WAKELOCK: '\033[93m',
    LogCategory.EVENT: '\033[35m',
    LogCategory.API: '\033[34m',
    LogCategory.WEBSOCKET: '\033[34m',
    LogCategory.SYSTEM: '\033[97m',
}
DEFAULT_COLOR = '\033[37m'

CATEGORY_WIDTH = max(len(c.name) for c in LogCategory)
DETAIL_INDENT = " " * 11


class Logger:
    """
    Writes one header line per record plus its details as a tree.

    Args:
        min_level: Records below this level are dropped
        use_colors: ANSI colors and line clearing (disable for files/pipes)
        stream: Output stream (sys.stdout, looked up at write time)
    """

    def __init__(
        self,
        min_level: LogLevel = LogLevel.INFO,
        use_colors: bool = True,
        stream: Optional[TextIO] = None
    ):
        self.min_level = min_level
        self.use_colors = use_colors
        self.stream = stream

    def _paint(self, text: str, color: str) -> str:
        return f"{color}{text}{RESET}" if self.use_colors else text

    def enabled_for(self, level: LogLevel) -> bool:
        return LEVEL_STYLES[level].priority >= LEVEL_STYLES[self.min_level].priority

    def log(
        self,
        category: LogCategory,
        message: str,
        level: LogLevel = LogLevel.INFO,
        details: Optional[List[str]] = None,
        exc_info: bool = False,
        **kwargs
    ) -> None:
        """
        Args:
            category: Log category (SESSION, CLOCK, ...)
            message: Header text
            level: DEBUG, INFO, WARN or ERROR
            details: Extra detail lines
            exc_info: Append the traceback of the exception being handled
            **kwargs: Shown as "key: value" details; None values are skipped
        """
        if not self.enabled_for(level):
            return

        style = LEVEL_STYLES[level]
        header = " ".join((
            datetime.now().strftime('[%H:%M:%S]'),
            self._paint(category.name.ljust(CATEGORY_WIDTH), CATEGORY_COLORS.get(category, DEFAULT_COLOR)),
            self._paint(style.symbol, style.color),
            self._paint(message, style.color),
        ))

        lines = list(details or [])
        lines.extend(f"{k}: {v}" for k, v in kwargs.items() if v is not None)
        if exc_info:
            lines.extend(self._traceback_lines())

        out = [header]
        for i, line in enumerate(lines):
            branch = "└─" if i == len(lines) - 1 else "├─"
            out.append(f"{DETAIL_INDENT}{self._paint(branch, DIM)} {line}")

        stream = self.stream or sys.stdout
        prefix = CLEAR_LINE if self.use_colors else ""
        stream.write(prefix + "\n".join(out) + "\n")
        stream.flush()

    @staticmethod
    def _traceback_lines() -> List[str]:
        exc_type, exc, tb = sys.exc_info()
        if exc is None:
            return []
        return [
            line.rstrip()
            for chunk in traceback.format_exception(exc_type, exc, tb)
            for line in chunk.splitlines()
        ]

    def debug(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.DEBUG, **kw)
    def info(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.INFO, **kw)
    def warn(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.WARN, **kw)
    def error(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.ERROR, **kw)

    def for_category(self, category: LogCategory) -> 'BoundLogger':
        return BoundLogger(self, category)


class BoundLogger:
    """Logger with a fixed category"""

    def __init__(self, base: Logger, category: LogCategory):
        self._base = base
        self.category = category

    def log(self, message: str, level: LogLevel = LogLevel.INFO, **kw) -> None:
        self._base.log(self.category, message, level, **kw)

    def debug(self, message: str, **kw): self.log(message, LogLevel.DEBUG, **kw)
    def info(self, message: str, **kw): self.log(message, LogLevel.INFO, **kw)
    def warn(self, message: str, **kw): self.log(message, LogLevel.WARN, **kw)
    def error(self, message: str, **kw): self.log(message, LogLevel.ERROR, **kw)


_logger = Logger()


def get_logger() -> Logger:
    return _logger


def get_category_logger(category: LogCategory) -> BoundLogger:
    return _logger.for_category(category)


def configure_logger(
    min_level: LogLevel = LogLevel.INFO,
    use_colors: bool = True,
    stream: Optional[TextIO] = None
) -> None:
    """
    Reconfigure the shared logger in place.

    Module-level bound loggers point at the same instance and pick up the
    new settings immediately.
    """
    _logger.min_level = min_level
    _logger.use_colors = use_colors
    _logger.stream = stream
