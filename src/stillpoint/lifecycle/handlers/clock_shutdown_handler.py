from __future__ import annotations
from typing import TYPE_CHECKING

from stillpoint.lifecycle.shutdown_protocol import IShutdownHandler
from stillpoint.models.enums import LogCategory
from stillpoint.utils.logger import get_logger

if TYPE_CHECKING:
    from stillpoint.engine.countdown_clock import CountdownClock

log = get_logger().for_category(LogCategory.SHUTDOWN)


class ClockShutdownHandler(IShutdownHandler):
    """
    Terminates the countdown clock worker thread.

    Priority: 10 (last)
    """

    def __init__(self, clock: "CountdownClock"):
        self.clock = clock

    @property
    def shutdown_priority(self) -> int:
        return 10

    async def shutdown(self) -> None:
        self.clock.close()
        log.debug("Clock worker closed")
