from .session_controller import SessionController
from .scene_controller import SceneController
from .console_controller import ConsoleController

__all__ = [
    "SessionController",
    "SceneController",
    "ConsoleController",
]
