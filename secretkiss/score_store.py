from __future__ import annotations

import logging
from typing import Protocol

import redis

from secretkiss.config import DEFAULT_BEST_SCORE_KEY

logger = logging.getLogger(__name__)


class BestScoreStore(Protocol):
    def get(self) -> int:  # pragma: no cover
        ...

    def set(self, value: int) -> None:  # pragma: no cover
        ...


def parse_best_score(raw: object) -> int:
    """Missing, negative or unparseable values all mean "no record yet"."""

    if raw is None:
        return 0
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    try:
        value = int(str(raw).strip())
    except ValueError:
        logger.warning("ignoring unparseable best score %r", raw)
        return 0
    return max(0, value)


class RedisBestScoreStore:
    def __init__(self, *, r: redis.Redis, key: str = DEFAULT_BEST_SCORE_KEY) -> None:
        self._r = r
        self.key = key

    def get(self) -> int:
        try:
            raw = self._r.get(self.key)
        except redis.RedisError:
            logger.warning("best score read failed; starting from 0", exc_info=True)
            return 0
        return parse_best_score(raw)

    def set(self, value: int) -> None:
        # Write-through, no retry: a lost write must never block play.
        try:
            self._r.set(self.key, str(int(value)))
        except redis.RedisError:
            logger.warning("best score write failed (value=%s)", value, exc_info=True)


class InMemoryBestScoreStore:
    def __init__(self, initial: int = 0) -> None:
        self.value = max(0, initial)
        self.writes: list[int] = []

    def get(self) -> int:
        return self.value

    def set(self, value: int) -> None:
        self.value = int(value)
        self.writes.append(self.value)
