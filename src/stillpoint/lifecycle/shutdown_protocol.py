"""
Shutdown handler protocol for component-based graceful shutdown.
"""

from typing import Protocol


class IShutdownHandler(Protocol):
    """
    Protocol for components that need graceful shutdown.

    The ShutdownCoordinator calls shutdown() on each handler in descending
    shutdown_priority order.

    Example:
        class ClockShutdownHandler:
            @property
            def shutdown_priority(self) -> int:
                return 10

            async def shutdown(self) -> None:
                self.clock.close()
    """

    @property
    def shutdown_priority(self) -> int:
        """Higher priority shuts down earlier."""
        ...

    async def shutdown(self) -> None:
        """Called during coordinated shutdown."""
        ...
