"""Services layer"""

from .event_bus import EventBus
from .middleware import log_middleware
from .service_container import ServiceContainer

__all__ = [
    "EventBus",
    "log_middleware",
    "ServiceContainer",
]
