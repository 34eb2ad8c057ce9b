from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GameTuning:
    """Every timing and physics constant the engine uses (milliseconds)."""

    # Principal attention cycle.
    safe_min_ms: float = 3000.0
    safe_max_ms: float = 7000.0
    warning_ms: float = 1000.0
    danger_min_ms: float = 1500.0
    danger_max_ms: float = 2500.0

    # 20 points per second while kissing.
    score_interval_ms: float = 50.0

    # Hearts.
    heart_spawn_interval_ms: float = 200.0
    heart_ttl_ms: float = 2000.0
    heart_gravity: float = 0.1
    heart_vx_range: tuple[float, float] = (-2.0, 2.0)
    heart_vy_range: tuple[float, float] = (-4.0, -2.0)
    heart_fade_distance: float = 100.0


DEFAULT_TUNING = GameTuning()

DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_BEST_SCORE_KEY = "secretkiss:best_score"


@dataclass(frozen=True, slots=True)
class HostSettings:
    redis_url: str
    best_score_key: str
    frame_hz: float
    store: str
    log_level: str


def _float_from_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("ignoring non-numeric %s=%r", name, raw)
        return default
    return value if value > 0 else default


def settings_from_env() -> HostSettings:
    store = os.environ.get("SECRETKISS_STORE", "redis").strip().lower()
    if store not in {"redis", "memory"}:
        logger.warning("unknown SECRETKISS_STORE=%r, using redis", store)
        store = "redis"

    return HostSettings(
        redis_url=os.environ.get("SECRETKISS_REDIS_URL") or os.environ.get("REDIS_URL", DEFAULT_REDIS_URL),
        best_score_key=os.environ.get("SECRETKISS_BEST_SCORE_KEY", DEFAULT_BEST_SCORE_KEY),
        frame_hz=_float_from_env("SECRETKISS_FRAME_HZ", 60.0),
        store=store,
        log_level=os.environ.get("SECRETKISS_LOG_LEVEL", "INFO").upper(),
    )
