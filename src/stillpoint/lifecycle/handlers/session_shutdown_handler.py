from __future__ import annotations
from typing import TYPE_CHECKING

from stillpoint.lifecycle.shutdown_protocol import IShutdownHandler
from stillpoint.models.enums import LogCategory
from stillpoint.utils.logger import get_logger

if TYPE_CHECKING:
    from stillpoint.controllers.session_controller import SessionController

log = get_logger().for_category(LogCategory.SHUTDOWN)


class SessionShutdownHandler(IShutdownHandler):
    """
    Stops the running session: clock run, ambient audio, wake-lock.

    Priority: 100 (first, while the API and the clock are still up)
    """

    def __init__(self, session_controller: "SessionController"):
        self.session_controller = session_controller

    @property
    def shutdown_priority(self) -> int:
        return 100

    async def shutdown(self) -> None:
        log.info("Stopping session", state=self.session_controller.state.name)
        await self.session_controller.shutdown()
