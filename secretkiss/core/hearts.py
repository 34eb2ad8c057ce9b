from __future__ import annotations

import itertools
import random
from dataclasses import dataclass

from secretkiss.config import DEFAULT_TUNING, GameTuning


@dataclass(slots=True)
class Heart:
    heart_id: int
    x: float
    y: float
    vx: float
    vy: float
    created_at_ms: float

    def age_ms(self, now_ms: float) -> float:
        return now_ms - self.created_at_ms


def heart_opacity(heart: Heart, *, fade_distance: float = DEFAULT_TUNING.heart_fade_distance) -> float:
    """Fades with vertical distance from the couple only."""

    return max(0.0, 1.0 - abs(heart.y) / fade_distance)


class HeartEmitter:
    """Cosmetic particles spawned while kissing.

    Spawning is delta-time based with the remainder carried over, so the rate
    holds under uneven frames. Motion is per frame: gravity is not scaled by
    the frame delta.
    """

    def __init__(self, *, rng: random.Random, tuning: GameTuning = DEFAULT_TUNING) -> None:
        self._rng = rng
        self._tuning = tuning
        self._ids = itertools.count(1)
        self._accumulated_ms = 0.0
        self._last_frame_ms: float | None = None
        self.hearts: list[Heart] = []
        self.spawned_total = 0

    def clear(self) -> None:
        self.hearts.clear()
        self._accumulated_ms = 0.0
        self.spawned_total = 0

    def step(self, now_ms: float, *, playing: bool, active: bool) -> None:
        dt = 0.0 if self._last_frame_ms is None else max(0.0, now_ms - self._last_frame_ms)
        self._last_frame_ms = now_ms

        # Expiry runs even while frozen so nothing outlives its TTL on screen.
        ttl = self._tuning.heart_ttl_ms
        self.hearts = [h for h in self.hearts if h.age_ms(now_ms) < ttl]
        if not playing:
            return

        gravity = self._tuning.heart_gravity
        for heart in self.hearts:
            heart.x += heart.vx
            heart.y += heart.vy
            heart.vy += gravity

        if not active:
            self._accumulated_ms = 0.0
            return

        self._accumulated_ms += dt
        interval = self._tuning.heart_spawn_interval_ms
        while self._accumulated_ms >= interval:
            self._accumulated_ms -= interval
            self._spawn(now_ms)

    def _spawn(self, now_ms: float) -> Heart:
        vx_lo, vx_hi = self._tuning.heart_vx_range
        vy_lo, vy_hi = self._tuning.heart_vy_range
        heart = Heart(
            heart_id=next(self._ids),
            x=0.0,
            y=0.0,
            vx=self._rng.uniform(vx_lo, vx_hi),
            vy=self._rng.uniform(vy_lo, vy_hi),
            created_at_ms=now_ms,
        )
        self.hearts.append(heart)
        self.spawned_total += 1
        return heart
