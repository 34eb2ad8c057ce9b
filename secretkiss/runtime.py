from __future__ import annotations

import asyncio
import logging
import random

from secretkiss.api.models import FrameMessage, InputKind, SessionView
from secretkiss.audio import EventAudioSink
from secretkiss.config import DEFAULT_TUNING, GameTuning
from secretkiss.core.clock import AsyncioScheduler, TimerHandle
from secretkiss.core.events import EventOutbox
from secretkiss.core.session import GameSession, SessionSnapshot
from secretkiss.score_store import BestScoreStore
from secretkiss.websocket_hub import FrameHub

logger = logging.getLogger(__name__)


class GameRuntime:
    """Hosts the single local session on the running event loop.

    The session's own frame callback runs first (hearts move), then this one
    pushes the snapshot plus any drained events to connected renderers. At
    most one broadcast is in flight; a slow renderer makes us skip frames, not
    queue them.
    """

    def __init__(
        self,
        *,
        hub: FrameHub,
        frame_hz: float = 60.0,
        tuning: GameTuning = DEFAULT_TUNING,
        rng: random.Random | None = None,
    ) -> None:
        self.hub = hub
        self._frame_hz = frame_hz
        self._tuning = tuning
        self._rng = rng
        self._session: GameSession | None = None
        self._frame_handle: TimerHandle | None = None
        self._broadcast_task: asyncio.Task[None] | None = None

    @property
    def started(self) -> bool:
        return self._session is not None

    @property
    def session(self) -> GameSession:
        if self._session is None:
            raise RuntimeError("Runtime not started. Call start() at startup.")
        return self._session

    async def start(self, *, store: BestScoreStore) -> None:
        if self._session is not None:
            return
        scheduler = AsyncioScheduler(frame_hz=self._frame_hz)
        outbox = EventOutbox()
        self._session = GameSession(
            scheduler=scheduler,
            store=store,
            audio=EventAudioSink(outbox),
            rng=self._rng,
            tuning=self._tuning,
            outbox=outbox,
        )
        self._frame_handle = scheduler.on_frame(self._on_frame)
        logger.info("runtime started at %.0f Hz", self._frame_hz)

    async def stop(self) -> None:
        if self._frame_handle is not None:
            self._frame_handle.cancel()
            self._frame_handle = None
        if self._broadcast_task is not None:
            self._broadcast_task.cancel()
            self._broadcast_task = None
        if self._session is not None:
            self._session.close()
            self._session = None
        logger.info("runtime stopped")

    def handle_input(self, kind: InputKind) -> SessionSnapshot:
        session = self.session
        if kind == InputKind.press:
            session.press()
        elif kind == InputKind.release:
            session.release()
        elif kind == InputKind.restart:
            session.reset()
        return session.snapshot()

    def frame_message(self) -> dict[str, object]:
        session = self.session
        events = [e.to_message() for e in session.outbox.drain()]
        msg = FrameMessage(session=SessionView.from_snapshot(session.snapshot()), events=events)
        return msg.model_dump(mode="json")

    def _on_frame(self, now_ms: float) -> None:
        if self._session is None:
            return
        if self.hub.connection_count == 0:
            # Nobody to play the cues for.
            self._session.outbox.drain()
            return
        if self._broadcast_task is not None and not self._broadcast_task.done():
            return
        payload = self.frame_message()
        self._broadcast_task = asyncio.get_running_loop().create_task(self.hub.broadcast(payload))
