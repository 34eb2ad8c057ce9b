from __future__ import annotations

import asyncio

import pytest

from secretkiss.api.models import InputKind
from secretkiss.config import GameTuning
from secretkiss.fsm import SessionMode
from secretkiss.runtime import GameRuntime
from secretkiss.score_store import InMemoryBestScoreStore
from secretkiss.websocket_hub import FrameHub


class _FakeSocket:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[dict] = []

    async def accept(self) -> None:
        return None

    async def send_json(self, payload: dict) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(payload)


@pytest.mark.asyncio
async def test_runtime_scores_on_the_event_loop() -> None:
    store = InMemoryBestScoreStore()
    runtime = GameRuntime(hub=FrameHub(), tuning=GameTuning(safe_min_ms=60_000, safe_max_ms=60_001))
    await runtime.start(store=store)
    try:
        snap = runtime.handle_input(InputKind.press)
        assert snap.action_active

        await asyncio.sleep(0.2)
        snap = runtime.handle_input(InputKind.release)

        assert snap.score >= 1
        assert store.value == snap.score
    finally:
        await runtime.stop()

    assert not runtime.started


@pytest.mark.asyncio
async def test_runtime_score_keeps_pace_with_wall_clock() -> None:
    runtime = GameRuntime(hub=FrameHub(), tuning=GameTuning(safe_min_ms=60_000, safe_max_ms=60_001))
    await runtime.start(store=InMemoryBestScoreStore())
    loop = asyncio.get_running_loop()
    try:
        runtime.handle_input(InputKind.press)
        pressed_at = loop.time()

        await asyncio.sleep(1.2)
        snap = runtime.handle_input(InputKind.release)
        held_ms = (loop.time() - pressed_at) * 1000

        # One point per 50 ms of hold, give or take the tick that is due right now.
        assert abs(snap.score - held_ms / 50) <= 1
    finally:
        await runtime.stop()


@pytest.mark.asyncio
async def test_runtime_restart_after_game_over() -> None:
    runtime = GameRuntime(hub=FrameHub())
    await runtime.start(store=InMemoryBestScoreStore())
    try:
        runtime.session.game_over("test")
        assert runtime.session.mode == SessionMode.game_over

        snap = runtime.handle_input(InputKind.restart)

        assert snap.mode == SessionMode.playing
        assert snap.score == 0
    finally:
        await runtime.stop()


@pytest.mark.asyncio
async def test_runtime_broadcasts_frames_and_drops_dead_sockets() -> None:
    hub = FrameHub()
    good, bad = _FakeSocket(), _FakeSocket(fail=True)
    await hub.connect(good)  # type: ignore[arg-type]
    await hub.connect(bad)  # type: ignore[arg-type]

    runtime = GameRuntime(hub=hub, frame_hz=100)
    await runtime.start(store=InMemoryBestScoreStore())
    try:
        await asyncio.sleep(0.1)
    finally:
        await runtime.stop()

    assert good.sent
    assert good.sent[0]["type"] == "frame"
    assert hub.connection_count == 1
    started = [e for msg in good.sent for e in msg["events"] if e["type"] == "SESSION_STARTED"]
    assert len(started) == 1


def test_runtime_requires_start() -> None:
    runtime = GameRuntime(hub=FrameHub())

    with pytest.raises(RuntimeError):
        _ = runtime.session
