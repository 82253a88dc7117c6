"""SceneController - drives the visual scene from session topics"""

from __future__ import annotations

from typing import Callable, List

from stillpoint.collaborators.protocols import ISceneRenderer
from stillpoint.models.enums import LogCategory
from stillpoint.models.events import (
    EventType,
    SessionStartEvent,
    TimerTickEvent,
)
from stillpoint.services.event_bus import EventBus
from stillpoint.utils.logger import get_logger

log = get_logger().for_category(LogCategory.SCENE)


class SceneController:
    """
    Bridge between the event bus and the scene renderer

    session:start    -> renderer.start(scene)
    timer:tick       -> renderer.update_progress(progress)
    session:complete -> renderer.freeze()
    session:stop     -> renderer.stop(), renderer.show_idle()

    Renderer failures are logged and never reach the publisher.
    """

    def __init__(self, event_bus: EventBus, renderer: ISceneRenderer):
        self.event_bus = event_bus
        self.renderer = renderer
        self._unsubscribers: List[Callable[[], None]] = [
            event_bus.subscribe(EventType.SESSION_START, self._on_start),
            event_bus.subscribe(EventType.TIMER_TICK, self._on_tick),
            event_bus.subscribe(EventType.SESSION_COMPLETE, self._on_complete),
            event_bus.subscribe(EventType.SESSION_STOP, self._on_stop),
        ]
        log.debug("SceneController initialized")

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def _on_start(self, event: SessionStartEvent) -> None:
        self._call("start", self.renderer.start, event.scene)

    def _on_tick(self, event: TimerTickEvent) -> None:
        self._call("update_progress", self.renderer.update_progress, event.progress)

    def _on_complete(self, event) -> None:
        self._call("freeze", self.renderer.freeze)

    def _on_stop(self, event) -> None:
        self._call("stop", self.renderer.stop)
        self._call("show_idle", self.renderer.show_idle)

    def _call(self, action: str, fn, *args) -> None:
        try:
            fn(*args)
        except Exception as e:
            log.warn(f"Scene renderer failed: {action}", error=str(e), error_type=type(e).__name__)
