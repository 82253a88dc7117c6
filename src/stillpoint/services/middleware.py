"""
Middleware for EventBus

Middleware = pipeline functions that process events before handlers.
Can modify events, block events, or log/validate events.
"""

from stillpoint.models.events import Event, EventType
from stillpoint.models.enums import LogCategory
from stillpoint.utils.logger import get_logger

log = get_logger().for_category(LogCategory.EVENT)


def log_middleware(event: Event) -> Event:
    """
    Log published events for debugging

    Ticks are logged at DEBUG, everything else at INFO.

    Usage:
        event_bus.add_middleware(log_middleware)
    """
    source_str = event.source.name if event.source else "-"
    data = event.to_data()

    if event.type is EventType.TIMER_TICK:
        log.debug(f"Event: {event.topic} from {source_str}", **data)
    else:
        data_str = ", ".join(f"{k}={v}" for k, v in data.items()) or "{}"
        log.info(f"Event: {event.topic} from {source_str} | {data_str}")
    return event
