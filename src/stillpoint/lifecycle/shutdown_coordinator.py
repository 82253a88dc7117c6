"""
Shutdown coordinator that orchestrates graceful shutdown of all components.

Manages signal handlers, critical task monitoring and priority-ordered
shutdown handlers.
"""

import asyncio
import signal
from typing import List, Optional, Set

from stillpoint.lifecycle.task_registry import TaskRegistry
from stillpoint.models.enums import LogCategory
from stillpoint.utils.logger import get_logger

log = get_logger().for_category(LogCategory.SHUTDOWN)

# Task categories whose failure brings the application down
CRITICAL_CATEGORIES = frozenset({"API", "INPUT"})


class ShutdownCoordinator:
    """
    Coordinates graceful shutdown of multiple components.

    Example:
        coordinator = ShutdownCoordinator()
        coordinator.register(SessionShutdownHandler(session_controller))
        coordinator.register(APIServerShutdownHandler(api_wrapper))
        coordinator.register(TaskCancellationHandler())
        coordinator.register(ClockShutdownHandler(clock))

        coordinator.setup_signal_handlers(loop)
        await coordinator.wait_for_shutdown()
        await coordinator.shutdown_all()
    """

    def __init__(self, timeout_per_handler: float = 5.0, total_timeout: float = 15.0):
        """
        Args:
            timeout_per_handler: Timeout for each individual handler (seconds)
            total_timeout: Total timeout for the entire shutdown sequence (seconds)
        """
        self._handlers: List = []
        self._shutdown_event = asyncio.Event()
        self._timeout_per_handler = timeout_per_handler
        self._total_timeout = total_timeout
        self.reason: Optional[str] = None

    def register(self, handler) -> None:
        """
        Register a shutdown handler.

        Raises:
            ValueError: handler lacks shutdown_priority or shutdown()
        """
        if not hasattr(handler, "shutdown_priority"):
            raise ValueError(f"Handler {handler} missing shutdown_priority property")
        if not hasattr(handler, "shutdown"):
            raise ValueError(f"Handler {handler} missing shutdown() method")

        self._handlers.append(handler)
        log.debug(f"Registered shutdown handler: {handler.__class__.__name__}")

    def setup_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        """Install SIGINT (Ctrl+C) and SIGTERM handlers."""
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: self.request_shutdown(s.name))
        log.info("Signal handlers installed (SIGINT, SIGTERM)")

    def request_shutdown(self, reason: str) -> None:
        if self._shutdown_event.is_set():
            return
        self.reason = reason
        log.info(f"Shutdown requested: {reason}")
        self._shutdown_event.set()

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown_event.is_set()

    # ------------------------------------------------------------------
    # Monitoring
    # ------------------------------------------------------------------

    def _failed_critical_task(self, critical: Set[str]) -> Optional[str]:
        for record in TaskRegistry.instance().failed():
            if record.info.category.name in critical:
                return record.info.description
        return None

    def _active_critical_tasks(self, critical: Set[str]) -> List[asyncio.Task]:
        return [
            r.task for r in TaskRegistry.instance().active()
            if r.info.category.name in critical
        ]

    async def wait_for_shutdown(self, poll_interval: float = 0.2) -> None:
        """
        Wait for a shutdown request or a critical task failure.

        A critical task that finishes cleanly does not trigger shutdown.
        """
        critical = set(CRITICAL_CATEGORIES)

        while not self._shutdown_event.is_set():
            failed = self._failed_critical_task(critical)
            if failed:
                log.error(f"Critical task failed: {failed}")
                self.request_shutdown(f"Task failure: {failed}")
                return

            waiter = asyncio.ensure_future(self._shutdown_event.wait())
            try:
                await asyncio.wait(
                    {waiter, *self._active_critical_tasks(critical)},
                    timeout=poll_interval,
                    return_when=asyncio.FIRST_COMPLETED
                )
            finally:
                if not waiter.done():
                    waiter.cancel()

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def shutdown_all(self) -> None:
        """
        Run every handler in descending priority order.

        Each handler gets timeout_per_handler; the sequence stops once
        total_timeout is exceeded. A failing handler does not stop the rest.
        """
        log.info("Initiating graceful shutdown sequence", reason=self.reason or "UNKNOWN")

        loop = asyncio.get_running_loop()
        start_time = loop.time()

        for handler in sorted(self._handlers, key=lambda h: h.shutdown_priority, reverse=True):
            handler_name = handler.__class__.__name__

            elapsed = loop.time() - start_time
            if elapsed > self._total_timeout:
                log.error(f"Total shutdown timeout exceeded ({elapsed:.1f}s > {self._total_timeout}s)")
                break

            try:
                log.debug(f"Shutting down {handler_name} (priority={handler.shutdown_priority})")
                await asyncio.wait_for(handler.shutdown(), timeout=self._timeout_per_handler)
            except asyncio.TimeoutError:
                log.error(f"{handler_name} shutdown timeout ({self._timeout_per_handler}s)")
            except Exception as e:
                log.error(f"Error shutting down {handler_name}: {e}", exc_info=True)

        log.info("Shutdown sequence complete", tasks=TaskRegistry.instance().summary())

    def get_handler(self, handler_type: type):
        for handler in self._handlers:
            if isinstance(handler, handler_type):
                return handler
        return None
