"""
Scene renderer

LogSceneRenderer reports the scene lifecycle and progress milestones through
the SCENE log category instead of drawing. Unknown scenes fall back to rain.
"""

from typing import Any, Optional

from stillpoint.models.enums import SceneID, LogCategory
from stillpoint.utils.logger import get_logger

log = get_logger().for_category(LogCategory.SCENE)


def resolve_scene(scene: Any) -> SceneID:
    """Map a scene selector onto a known scene (fallback: RAIN)."""
    if isinstance(scene, SceneID):
        return scene
    try:
        return SceneID(str(scene).lower())
    except ValueError:
        log.warn("Unknown scene, falling back to rain", scene=scene)
        return SceneID.RAIN


class LogSceneRenderer:
    """
    Renderer that logs instead of drawing.

    Args:
        milestone_step: Progress interval (0-1) between progress log lines
    """

    def __init__(self, milestone_step: float = 0.1):
        self.milestone_step = milestone_step
        self.scene: Optional[SceneID] = None
        self.progress = 0.0
        self.animating = False
        self.idle_visible = True
        self._last_milestone = -1

    def start(self, scene: Any) -> None:
        if self.scene is not None:
            self.stop()
        self.scene = resolve_scene(scene)
        self.progress = 0.0
        self.animating = True
        self.idle_visible = False
        self._last_milestone = -1
        log.info("Scene started", scene=self.scene.value)

    def update_progress(self, progress: float) -> None:
        if not self.animating:
            return
        self.progress = progress
        milestone = int(progress / self.milestone_step)
        if milestone > self._last_milestone:
            self._last_milestone = milestone
            log.debug(f"Scene progress {progress:.0%}", scene=self.scene.value)

    def freeze(self) -> None:
        if self.animating:
            self.animating = False
            log.debug("Scene frozen on last frame")

    def stop(self) -> None:
        if self.scene is None:
            return
        log.info("Scene hidden", scene=self.scene.value)
        self.scene = None
        self.animating = False

    def show_idle(self) -> None:
        self.idle_visible = True
        log.debug("Idle visuals restored")
