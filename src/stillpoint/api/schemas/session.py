"""
Session schemas - request and response models for the session endpoints
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from stillpoint.models.session import SessionStatus
from stillpoint.utils.format import format_time


def scene_name(scene: Any) -> Optional[str]:
    if scene is None:
        return None
    if isinstance(scene, Enum):
        return str(scene.value)
    return str(scene)


class SessionStartRequest(BaseModel):
    """Start a session; omitted fields use the configured defaults"""
    minutes: Optional[int] = Field(None, description="Session length in whole minutes")
    scene: Optional[str] = Field(None, description="Scene name (rain, forest, ocean)")

    model_config = {
        "json_schema_extra": {"example": {"minutes": 10, "scene": "rain"}}
    }


class SessionMuteRequest(BaseModel):
    muted: bool = Field(description="True mutes the ambient bed")


class SessionStatusResponse(BaseModel):
    """Snapshot of the live session"""
    state: str = Field(description="IDLE, ACTIVE, PAUSED or COMPLETING")
    total_duration_ms: int
    scene: Optional[str]
    remaining_ms: Optional[int]
    remaining_display: Optional[str] = Field(None, description="Remaining time as mm:ss")
    progress: float = Field(ge=0.0, le=1.0)
    cue_scheduled: bool
    muted: bool
    awaiting_dismissal: bool
    timer_available: bool

    @classmethod
    def from_status(cls, status: SessionStatus) -> "SessionStatusResponse":
        return cls(
            state=status.state.name,
            total_duration_ms=status.total_duration_ms,
            scene=scene_name(status.scene),
            remaining_ms=status.remaining_ms,
            remaining_display=(
                format_time(status.remaining_ms) if status.remaining_ms is not None else None
            ),
            progress=status.progress,
            cue_scheduled=status.cue_scheduled,
            muted=status.muted,
            awaiting_dismissal=status.awaiting_dismissal,
            timer_available=status.timer_available,
        )


class SessionPresetsResponse(BaseModel):
    """Setup screen options"""
    preset_minutes: List[int]
    default_minutes: int
    min_minutes: int
    max_minutes: int
    scenes: List[str]
    default_scene: str
