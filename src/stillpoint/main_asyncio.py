"""
main_asyncio.py - application entry point for Stillpoint
--------------------------------------------------------

Responsible for:
- loading configuration and configuring the logger
- wiring the clock, event bus, collaborators and controllers
- starting the keyboard adapter and the API server
- graceful shutdown on Ctrl+C, SIGTERM or a critical task failure
"""

import sys

# Logger symbols need UTF-8 output
if hasattr(sys.stdout, 'reconfigure') and sys.stdout.encoding and sys.stdout.encoding.upper() != 'UTF-8':
    sys.stdout.reconfigure(encoding='utf-8')  # type: ignore

import asyncio
from pathlib import Path
from typing import Optional

from stillpoint.api.dependencies import set_service_container
from stillpoint.api.main import create_app
from stillpoint.collaborators import LogSceneRenderer, SimulatedAudioEngine, create_wake_lock
from stillpoint.controllers import ConsoleController, SceneController, SessionController
from stillpoint.engine.countdown_clock import CountdownClock
from stillpoint.hardware.input.keyboard import start_keyboard
from stillpoint.lifecycle import ShutdownCoordinator, TaskCategory, create_tracked_task
from stillpoint.lifecycle.api_server_wrapper import APIServerWrapper
from stillpoint.lifecycle.handlers import (
    APIServerShutdownHandler,
    ClockShutdownHandler,
    SessionShutdownHandler,
    TaskCancellationHandler,
)
from stillpoint.managers import ConfigManager
from stillpoint.models.enums import LogCategory
from stillpoint.models.errors import ClockUnavailableError
from stillpoint.services import EventBus, ServiceContainer, log_middleware
from stillpoint.utils.logger import get_logger, configure_logger

log = get_logger().for_category(LogCategory.SYSTEM)


async def main(config_path: Optional[Path] = None) -> None:
    """Main async entry point (dependency wiring and event loop startup)."""

    # ========================================================================
    # 1. CONFIGURATION
    # ========================================================================

    config_manager = ConfigManager(config_path)
    config = config_manager.load()
    configure_logger(min_level=config.logging.level, use_colors=config.logging.colors)

    log.info("Starting Stillpoint...")

    event_bus = EventBus()
    event_bus.add_middleware(log_middleware)

    # ========================================================================
    # 2. CLOCK
    # ========================================================================

    clock: Optional[CountdownClock]
    try:
        clock = CountdownClock(tick_interval_ms=config.timer.tick_interval_ms)
    except ClockUnavailableError as e:
        log.error("Countdown clock unavailable, sessions disabled", error=str(e))
        clock = None

    # ========================================================================
    # 3. COLLABORATORS AND CONTROLLERS
    # ========================================================================

    audio = None
    if config.audio.enabled:
        audio = SimulatedAudioEngine(cue_duration_s=config.audio.cue_duration_s, bell=True)

    session_controller = SessionController(
        event_bus=event_bus,
        clock=clock,
        audio=audio,
        wake_lock=create_wake_lock(config.wake_lock.backend),
        cue_lead_ms=config.timer.cue_lead_ms,
        fast_fade_s=config.audio.fast_fade_s,
        completion_fade_s=config.audio.completion_fade_s,
        cue_fade_s=config.audio.cue_fade_s,
    )

    SceneController(event_bus, LogSceneRenderer())

    ConsoleController(
        event_bus=event_bus,
        session_controller=session_controller,
        preset_minutes=config.session.preset_minutes,
        scenes=config.session.scenes,
        default_minutes=config.session.default_duration_minutes,
        default_scene=config.session.default_scene,
    )

    services = ServiceContainer(
        event_bus=event_bus,
        session_controller=session_controller,
        config_manager=config_manager,
        clock=clock,
    )
    set_service_container(services)

    # ========================================================================
    # 4. KEYBOARD
    # ========================================================================

    create_tracked_task(
        start_keyboard(event_bus),
        category=TaskCategory.INPUT,
        description="Keyboard input"
    )

    # ========================================================================
    # 5. API SERVER
    # ========================================================================

    api_wrapper: Optional[APIServerWrapper] = None
    if config.api.enabled:
        api_wrapper = APIServerWrapper(create_app(), host=config.api.host, port=config.api.port)
        create_tracked_task(
            api_wrapper.start(),
            category=TaskCategory.API,
            description="FastAPI/Uvicorn server"
        )

    # ========================================================================
    # 6. SHUTDOWN
    # ========================================================================

    coordinator = ShutdownCoordinator()
    coordinator.register(SessionShutdownHandler(session_controller))
    if api_wrapper is not None:
        coordinator.register(APIServerShutdownHandler(api_wrapper))
    coordinator.register(TaskCancellationHandler())
    if clock is not None:
        coordinator.register(ClockShutdownHandler(clock))

    coordinator.setup_signal_handlers(asyncio.get_running_loop())

    log.info("Ready. ENTER starts a session, Ctrl+C quits.")

    await coordinator.wait_for_shutdown()
    await coordinator.shutdown_all()
    set_service_container(None)
    log.info("Stillpoint shut down cleanly.")


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        log.info("Keyboard interrupt received")


if __name__ == "__main__":
    run()
