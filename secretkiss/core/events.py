from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

EventType = Literal[
    "SESSION_STARTED",
    "PHASE_CHANGED",
    "ACTION_STARTED",
    "ACTION_ENDED",
    "CAUGHT",
    "GAME_OVER",
    "NEW_BEST_SCORE",
    "AUDIO_CUE",
]


@dataclass(frozen=True, slots=True)
class GameEvent:
    type: EventType
    payload: dict[str, Any]
    ts: datetime

    @staticmethod
    def now(*, type: EventType, payload: dict[str, Any] | None = None) -> "GameEvent":
        return GameEvent(type=type, payload=payload or {}, ts=datetime.now(timezone.utc))

    def to_message(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload, "ts": self.ts.isoformat()}


@dataclass(slots=True)
class EventOutbox:
    """Events recorded by the engine, drained by whoever renders them."""

    max_pending: int = 256
    _pending: list[GameEvent] = field(default_factory=list)

    def record(self, *, type: EventType, payload: dict[str, Any] | None = None) -> GameEvent:
        event = GameEvent.now(type=type, payload=payload)
        self._pending.append(event)
        # Nobody is draining (headless run); keep the newest ones.
        if len(self._pending) > self.max_pending:
            del self._pending[: len(self._pending) - self.max_pending]
        return event

    def drain(self) -> list[GameEvent]:
        out, self._pending = self._pending, []
        return out

    def peek(self) -> list[GameEvent]:
        return list(self._pending)
