from __future__ import annotations

import os
import random
from collections.abc import Callable, Generator
from pathlib import Path

import fakeredis
import pytest
from fastapi.testclient import TestClient

from secretkiss.audio import AudioCue
from secretkiss.config import GameTuning
from secretkiss.core.clock import ManualScheduler
from secretkiss.core.session import GameSession
from secretkiss.score_store import InMemoryBestScoreStore


@pytest.fixture(scope="session", autouse=True)
def _load_dotenv_for_tests() -> None:
    """Load repo .env for local runs.

    In CI, we *don't* auto-load `.env` by default so a developer's local redis
    settings never leak into the hermetic suite.
    Opt-in locally with: SECRETKISS_LOAD_DOTENV_FOR_TESTS=1
    """

    if os.environ.get("CI") and os.environ.get("SECRETKISS_LOAD_DOTENV_FOR_TESTS") != "1":
        return

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


class FixedRandom(random.Random):
    """`random()` always returns `value`, so every uniform draw is predictable.

    value=0.0 puts every delay at the bottom of its range: warning at 3000 ms,
    danger at 4000 ms, back to safe at 5500 ms.
    """

    def __init__(self, value: float = 0.0) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


class RecordingAudio:
    def __init__(self) -> None:
        self.calls: list[tuple[str, AudioCue]] = []

    def play(self, cue: AudioCue, *, loop: bool = False) -> None:
        self.calls.append(("play", cue))

    def stop(self, cue: AudioCue) -> None:
        self.calls.append(("stop", cue))


# Principal never turns within any test window.
CALM_TUNING = GameTuning(safe_min_ms=600_000.0, safe_max_ms=600_001.0)


@pytest.fixture()
def fixed_random() -> type[FixedRandom]:
    return FixedRandom


@pytest.fixture()
def calm_tuning() -> GameTuning:
    return CALM_TUNING


@pytest.fixture()
def scheduler() -> ManualScheduler:
    # Integer frame step keeps all frame times exact.
    return ManualScheduler(frame_ms=10.0)


@pytest.fixture()
def store() -> InMemoryBestScoreStore:
    return InMemoryBestScoreStore()


@pytest.fixture()
def audio() -> RecordingAudio:
    return RecordingAudio()


@pytest.fixture()
def make_session(
    scheduler: ManualScheduler, store: InMemoryBestScoreStore, audio: RecordingAudio
) -> Generator[Callable[..., GameSession], None, None]:
    made: list[GameSession] = []

    def _make(**kwargs: object) -> GameSession:
        kwargs.setdefault("scheduler", scheduler)
        kwargs.setdefault("store", store)
        kwargs.setdefault("audio", audio)
        kwargs.setdefault("rng", FixedRandom(0.0))
        session = GameSession(**kwargs)  # type: ignore[arg-type]
        made.append(session)
        return session

    yield _make
    for s in made:
        s.close()


@pytest.fixture()
def fake_redis() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def client_and_redis(
    monkeypatch: pytest.MonkeyPatch, fake_redis: fakeredis.FakeRedis
) -> Generator[tuple[TestClient, fakeredis.FakeRedis], None, None]:
    """FastAPI TestClient wired to fakeredis for the best-score store."""

    import secretkiss.api.deps as deps
    from secretkiss.main import app

    r = fake_redis
    monkeypatch.setenv("SECRETKISS_STORE", "redis")
    monkeypatch.setattr(deps, "create_redis", lambda: r)

    with TestClient(app) as c:
        yield c, r
