import asyncio
from typing import List, Optional

from stillpoint.lifecycle.shutdown_protocol import IShutdownHandler
from stillpoint.lifecycle.task_registry import TaskRegistry
from stillpoint.models.enums import LogCategory
from stillpoint.utils.logger import get_logger

log = get_logger().for_category(LogCategory.SHUTDOWN)


class TaskCancellationHandler(IShutdownHandler):
    """
    Cancels every tracked task except the one running the shutdown sequence
    and any explicitly excluded tasks, then waits for them to finish.

    Priority: 40
    """

    def __init__(self, exclude_tasks: Optional[List[asyncio.Task]] = None):
        self.exclude_tasks = exclude_tasks or []

    @property
    def shutdown_priority(self) -> int:
        return 40

    async def shutdown(self) -> None:
        exclude = list(self.exclude_tasks)
        current = asyncio.current_task()
        if current:
            exclude.append(current)

        tasks = TaskRegistry.instance().get_tasks_for_shutdown(exclude=exclude)
        if not tasks:
            log.debug("No background tasks to cancel")
            return

        log.info(f"Cancelling {len(tasks)} background tasks")
        for task in tasks:
            task.cancel(msg="shutdown")

        await asyncio.gather(*tasks, return_exceptions=True)
        log.debug("Background tasks cancelled")
