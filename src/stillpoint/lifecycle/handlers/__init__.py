from .session_shutdown_handler import SessionShutdownHandler
from .api_server_shutdown_handler import APIServerShutdownHandler
from .task_cancellation_handler import TaskCancellationHandler
from .clock_shutdown_handler import ClockShutdownHandler

__all__ = [
    "SessionShutdownHandler",
    "APIServerShutdownHandler",
    "TaskCancellationHandler",
    "ClockShutdownHandler",
]
