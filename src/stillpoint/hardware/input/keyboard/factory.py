import asyncio

from stillpoint.models.enums import LogCategory
from stillpoint.services.event_bus import EventBus
from stillpoint.utils.logger import get_logger
from .adapters.base import IKeyboardAdapter
from .adapters.stdin import StdinKeyboardAdapter
from .adapters.dummy import DummyKeyboardAdapter

log = get_logger().for_category(LogCategory.INPUT)


async def start_keyboard(event_bus: EventBus) -> None:
    """
    Run the first working keyboard adapter.

    Priority:
    1. STDIN (local terminal / SSH)
    2. Dummy (no terminal; API only)
    """
    adapters: list[IKeyboardAdapter] = [
        StdinKeyboardAdapter(event_bus),
        DummyKeyboardAdapter(event_bus),
    ]

    for adapter in adapters:
        try:
            log.info("Starting keyboard adapter", adapter=adapter.__class__.__name__)
            await adapter.run()
            return

        except asyncio.CancelledError:
            raise

        except Exception as e:
            log.warn(
                "Keyboard adapter failed, falling back",
                adapter=adapter.__class__.__name__,
                reason=str(e)
            )

    log.error("No keyboard adapter could be started")
    raise RuntimeError("Keyboard input unavailable")
