"""Service Container - dependency injection container for the core services"""

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from stillpoint.managers.config_manager import ConfigManager
from stillpoint.services.event_bus import EventBus

if TYPE_CHECKING:
    from stillpoint.controllers.session_controller import SessionController
    from stillpoint.engine.countdown_clock import CountdownClock


@dataclass
class ServiceContainer:
    """
    Everything the outer surfaces (API, console) need, built once at startup.

    Usage:
        services = ServiceContainer(
            event_bus=event_bus,
            session_controller=session_controller,
            config_manager=config_manager,
            clock=clock,
        )
        set_service_container(services)
    """

    event_bus: EventBus
    session_controller: "SessionController"
    config_manager: ConfigManager
    clock: Optional["CountdownClock"] = None
