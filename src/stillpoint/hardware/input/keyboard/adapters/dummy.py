"""
Dummy keyboard adapter for sessions driven only through the HTTP API
(no terminal attached, e.g. running as a service).
"""

import asyncio
from typing import TYPE_CHECKING
from .base import IKeyboardAdapter

if TYPE_CHECKING:
    from stillpoint.services.event_bus import EventBus


class DummyKeyboardAdapter(IKeyboardAdapter):
    """Keyboard adapter that never produces keys; waits until cancelled."""

    def __init__(self, event_bus: "EventBus"):
        self.event_bus = event_bus

    async def run(self) -> None:
        while True:
            await asyncio.sleep(3600)
