"""
Lifecycle subsystem
-------------------

Graceful shutdown and task tracking:
    from stillpoint.lifecycle import ShutdownCoordinator, TaskRegistry
    from stillpoint.lifecycle.handlers import SessionShutdownHandler
"""

from .shutdown_coordinator import ShutdownCoordinator
from .task_registry import TaskRegistry, TaskCategory, TaskInfo, create_tracked_task
from .shutdown_protocol import IShutdownHandler
from . import handlers

__all__ = [
    "ShutdownCoordinator",
    "TaskRegistry",
    "TaskCategory",
    "TaskInfo",
    "create_tracked_task",
    "IShutdownHandler",
    "handlers",
]
