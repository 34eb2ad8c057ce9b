from __future__ import annotations

import logging

import redis
from fastapi import Request

from secretkiss.config import HostSettings
from secretkiss.infra.redis_client import create_redis
from secretkiss.runtime import GameRuntime
from secretkiss.score_store import BestScoreStore, InMemoryBestScoreStore, RedisBestScoreStore

logger = logging.getLogger(__name__)


def build_best_score_store(settings: HostSettings) -> tuple[BestScoreStore, redis.Redis | None]:
    """Returns the store plus the client to close on shutdown (if any)."""

    if settings.store == "memory":
        return InMemoryBestScoreStore(), None
    client = create_redis()
    return RedisBestScoreStore(r=client, key=settings.best_score_key), client


def close_redis(client: redis.Redis | None) -> None:
    if client is None:
        return
    try:
        client.close()
    except redis.RedisError:
        logger.debug("closing redis client failed", exc_info=True)


def get_runtime(request: Request) -> GameRuntime:
    return request.app.state.runtime
