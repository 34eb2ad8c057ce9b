from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from secretkiss.core.session import SessionSnapshot
from secretkiss.fsm import AttentionPhase, SessionMode


class InputKind(StrEnum):
    press = "press"
    release = "release"
    restart = "restart"


class InputMessage(BaseModel):
    """Client -> server over the session WebSocket."""

    type: InputKind


class HeartModel(BaseModel):
    heart_id: int
    x: float
    y: float
    opacity: float = Field(..., ge=0.0, le=1.0)


class SessionView(BaseModel):
    mode: SessionMode
    score: int = Field(..., ge=0)
    best_score: int = Field(..., ge=0)
    phase: AttentionPhase
    action_active: bool
    game_over_message: str
    show_hint: bool
    hearts: list[HeartModel] = Field(default_factory=list)

    @classmethod
    def from_snapshot(cls, snap: SessionSnapshot) -> "SessionView":
        return cls(
            mode=snap.mode,
            score=snap.score,
            best_score=snap.best_score,
            phase=snap.phase,
            action_active=snap.action_active,
            game_over_message=snap.game_over_message,
            show_hint=snap.show_hint,
            hearts=[HeartModel(heart_id=h.heart_id, x=h.x, y=h.y, opacity=h.opacity) for h in snap.hearts],
        )


class FrameMessage(BaseModel):
    """Server -> client, once per frame tick."""

    type: str = "frame"
    session: SessionView
    events: list[dict[str, Any]] = Field(default_factory=list)
