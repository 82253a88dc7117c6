from __future__ import annotations
from typing import TYPE_CHECKING

from stillpoint.lifecycle.shutdown_protocol import IShutdownHandler
from stillpoint.models.enums import LogCategory
from stillpoint.utils.logger import get_logger

if TYPE_CHECKING:
    from stillpoint.lifecycle.api_server_wrapper import APIServerWrapper

log = get_logger().for_category(LogCategory.SHUTDOWN)


class APIServerShutdownHandler(IShutdownHandler):
    """
    Stops the HTTP/WebSocket API server and releases its port.

    Priority: 90 (after the session, before background tasks)
    """

    def __init__(self, api_wrapper: "APIServerWrapper"):
        self.api_wrapper = api_wrapper

    @property
    def shutdown_priority(self) -> int:
        return 90

    async def shutdown(self) -> None:
        if not self.api_wrapper.is_running:
            log.debug("API server not running")
            return
        await self.api_wrapper.stop()
