"""
Task Registry
-------------

Every background coroutine (cue playback, the completion ritual, async event
handlers, the API server, the keyboard adapter) is started through
create_tracked_task(), so that:

- failures are logged when they happen instead of when the task is collected
- the ShutdownCoordinator can see which critical tasks died
- shutdown can cancel whatever is still running
"""

from __future__ import annotations

import asyncio
import sys
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum, auto
from itertools import count
from typing import Any, Dict, List, Optional

from stillpoint.models.enums import LogCategory
from stillpoint.utils.logger import get_logger

log = get_logger().for_category(LogCategory.TASK)

# Finished records kept for introspection; failed ones are never pruned
FINISHED_HISTORY_LIMIT = 200


class TaskCategory(Enum):
    API = auto()
    INPUT = auto()
    SESSION = auto()
    AUDIO = auto()
    EVENTBUS = auto()
    SYSTEM = auto()
    BACKGROUND = auto()


@dataclass(frozen=True)
class TaskInfo:
    """Metadata captured when the task is created"""
    id: int
    category: TaskCategory
    description: str
    created_at: datetime
    origin: str  # "module:line" of the create_tracked_task() caller


@dataclass
class TaskRecord:
    task: asyncio.Task
    info: TaskInfo
    cancelled: bool = False
    finished_with_error: Optional[BaseException] = None
    finished_return: Any = None
    finished_at: Optional[datetime] = None

    @property
    def running(self) -> bool:
        return not self.task.done()


class TaskRegistry:
    """Process-wide registry of tracked asyncio tasks (singleton)."""

    _instance: Optional["TaskRegistry"] = None

    def __init__(self) -> None:
        self._records: Dict[asyncio.Task, TaskRecord] = {}
        self._ids = count(1)

    @classmethod
    def instance(cls) -> "TaskRegistry":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def register(
        self,
        task: asyncio.Task,
        category: TaskCategory,
        description: str,
        origin: str = "?"
    ) -> int:
        info = TaskInfo(
            id=next(self._ids),
            category=category,
            description=description,
            created_at=datetime.now(timezone.utc),
            origin=origin,
        )
        self._records[task] = TaskRecord(task=task, info=info)
        log.debug(f"[Task {info.id}] {category.name}: {description}", origin=origin)

        task.add_done_callback(self._on_task_done)
        return info.id

    def _on_task_done(self, task: asyncio.Task) -> None:
        record = self._records.get(task)
        if record is None:
            return
        record.finished_at = datetime.now(timezone.utc)
        task_id = record.info.id

        if task.cancelled():
            record.cancelled = True
            log.debug(f"[Task {task_id}] Cancelled")
        elif task.exception() is not None:
            exc = task.exception()
            record.finished_with_error = exc
            log.error(
                f"[Task {task_id}] FAILED: {record.info.description}",
                error=str(exc),
                error_type=type(exc).__name__,
                origin=record.info.origin
            )
        else:
            record.finished_return = task.result()
            log.debug(f"[Task {task_id}] Done")

        self._prune()

    def _prune(self) -> None:
        finished = [
            t for t, r in self._records.items()
            if not r.running and r.finished_with_error is None
        ]
        for task in finished[:max(0, len(finished) - FINISHED_HISTORY_LIMIT)]:
            del self._records[task]

    # -----------------------------
    # Introspection
    # -----------------------------

    def list_all(self) -> List[TaskRecord]:
        return list(self._records.values())

    def active(self) -> List[TaskRecord]:
        return [r for r in self._records.values() if r.running]

    def failed(self) -> List[TaskRecord]:
        return [r for r in self._records.values() if r.finished_with_error is not None]

    def cancelled(self) -> List[TaskRecord]:
        return [r for r in self._records.values() if r.cancelled]

    def summary(self) -> str:
        running = Counter(r.info.category.name for r in self.active())
        by_category = ", ".join(f"{name}={n}" for name, n in sorted(running.items())) or "none"
        return (
            f"Tasks: total={len(self._records)}, running={sum(running.values())} ({by_category}), "
            f"failed={len(self.failed())}, cancelled={len(self.cancelled())}"
        )

    def get_tasks_for_shutdown(
        self,
        exclude: Optional[List[asyncio.Task]] = None
    ) -> List[asyncio.Task]:
        """Running tasks that shutdown should cancel."""
        skip = set(exclude or ())
        return [r.task for r in self.active() if r.task not in skip]


def create_tracked_task(
    coro,
    *,
    category: TaskCategory,
    description: str,
    loop: Optional[asyncio.AbstractEventLoop] = None
) -> asyncio.Task:
    """Create a task on the running loop (or `loop`) and register it."""
    loop = loop or asyncio.get_running_loop()
    task = loop.create_task(coro, name=description)

    caller = sys._getframe(1)
    origin = f"{caller.f_globals.get('__name__', '?')}:{caller.f_lineno}"
    TaskRegistry.instance().register(task, category=category, description=description, origin=origin)
    return task
