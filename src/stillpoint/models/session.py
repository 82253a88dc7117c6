"""
Session context

The single live Session is an explicit object owned by SessionController.
SessionToken is captured by every asynchronous side effect a session starts,
so results arriving after a stop or restart can be detected and discarded.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Optional
import asyncio

from stillpoint.models.enums import SessionState

_token_ids = itertools.count(1)


class SessionToken:
    """Per-session cancellation token"""

    def __init__(self) -> None:
        self.id = next(_token_ids)
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "live"
        return f"SessionToken(#{self.id}, {state})"


@dataclass
class Session:
    """
    Single live session (created IDLE at startup, reset between sessions).

    Invariant: cue_scheduled is True only while state is ACTIVE or PAUSED.
    """
    state: SessionState = SessionState.IDLE
    total_duration_ms: int = 0
    scene: Any = None
    cue_scheduled: bool = False
    muted: bool = False
    awaiting_dismissal: bool = False
    remaining_ms: Optional[int] = None
    progress: float = 0.0
    token: SessionToken = field(default_factory=SessionToken)
    cue_task: Optional[asyncio.Task] = None

    @property
    def is_live(self) -> bool:
        """Session still counting down (ACTIVE or PAUSED)"""
        return self.state in (SessionState.ACTIVE, SessionState.PAUSED)

    def owns(self, token: SessionToken) -> bool:
        """True if token belongs to this session and was not cancelled"""
        return token is self.token and not token.cancelled

    def begin(self, duration_ms: int, scene: Any) -> SessionToken:
        """Reset per-session fields and issue a fresh token"""
        self.token.cancel()
        self.token = SessionToken()
        self.total_duration_ms = duration_ms
        self.scene = scene
        self.cue_scheduled = False
        self.muted = False
        self.awaiting_dismissal = False
        self.remaining_ms = duration_ms
        self.progress = 0.0
        self.cue_task = None
        return self.token

    def reset(self) -> None:
        """Back to IDLE; outstanding async work of the old session becomes inert"""
        self.token.cancel()
        self.state = SessionState.IDLE
        self.cue_scheduled = False
        self.muted = False
        self.awaiting_dismissal = False
        self.remaining_ms = None
        self.progress = 0.0
        self.cue_task = None


@dataclass(frozen=True)
class SessionStatus:
    """Read-only snapshot of the session for presentation surfaces"""
    state: SessionState
    total_duration_ms: int
    scene: Any
    remaining_ms: Optional[int]
    progress: float
    cue_scheduled: bool
    muted: bool
    awaiting_dismissal: bool
    timer_available: bool
