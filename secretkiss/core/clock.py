from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]


class TimerHandle(Protocol):
    def cancel(self) -> None:  # pragma: no cover
        ...


class Scheduler(Protocol):
    """Single logical timeline: one-shot delayed callbacks plus a per-frame tick.

    All times are milliseconds. Callbacks run on the scheduler's own thread of
    control, one at a time, so the engine never needs locks.
    """

    def now_ms(self) -> float:  # pragma: no cover
        ...

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:  # pragma: no cover
        ...

    def on_frame(self, callback: FrameCallback) -> TimerHandle:  # pragma: no cover
        ...


@dataclass(slots=True, eq=False)
class _ManualTimer:
    due_ms: float
    seq: int
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass(slots=True, eq=False)
class _FrameSubscription:
    callback: FrameCallback
    owner: "ManualScheduler | AsyncioScheduler"
    cancelled: bool = False

    def cancel(self) -> None:
        if not self.cancelled:
            self.cancelled = True
            self.owner._drop_frame(self)


@dataclass(slots=True)
class ManualScheduler:
    """Virtual clock for tests and headless simulation.

    `advance(ms)` walks the timeline in order: every timer due at or before a
    frame boundary fires before that frame tick, timers sharing an instant fire
    in the order they were armed.
    """

    frame_ms: float = 1000 / 60
    _now: float = 0.0
    _next_frame: float = 0.0
    _timers: list[tuple[float, int, _ManualTimer]] = field(default_factory=list)
    _frames: list[_FrameSubscription] = field(default_factory=list)
    _seq: itertools.count = field(default_factory=itertools.count)

    def now_ms(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        timer = _ManualTimer(due_ms=self._now + max(0.0, delay_ms), seq=next(self._seq), callback=callback)
        heapq.heappush(self._timers, (timer.due_ms, timer.seq, timer))
        return timer

    def on_frame(self, callback: FrameCallback) -> TimerHandle:
        sub = _FrameSubscription(callback=callback, owner=self)
        if not self._frames:
            self._next_frame = self._now
        self._frames.append(sub)
        return sub

    def _drop_frame(self, sub: _FrameSubscription) -> None:
        if sub in self._frames:
            self._frames.remove(sub)

    @property
    def pending_timers(self) -> int:
        return sum(1 for _, _, t in self._timers if not t.cancelled)

    def _next_timer(self) -> _ManualTimer | None:
        while self._timers and self._timers[0][2].cancelled:
            heapq.heappop(self._timers)
        return self._timers[0][2] if self._timers else None

    def advance(self, ms: float) -> None:
        end = self._now + ms
        while True:
            timer = self._next_timer()
            frame_due = self._next_frame if self._frames else None

            if timer is not None and timer.due_ms <= end and (frame_due is None or timer.due_ms <= frame_due):
                heapq.heappop(self._timers)
                self._now = timer.due_ms
                timer.callback()
                continue

            if frame_due is not None and frame_due <= end:
                self._now = frame_due
                self._next_frame = frame_due + self.frame_ms
                for sub in list(self._frames):
                    if not sub.cancelled:
                        sub.callback(self._now)
                continue

            break

        self._now = end


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop."""

    def __init__(self, *, frame_hz: float = 60.0, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()
        self._frame_interval_s = 1.0 / frame_hz
        self._frames: list[_FrameSubscription] = []
        self._frame_task: asyncio.Task[None] | None = None

    def now_ms(self) -> float:
        return self._loop.time() * 1000.0

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        return self._loop.call_later(max(0.0, delay_ms) / 1000.0, callback)

    def on_frame(self, callback: FrameCallback) -> TimerHandle:
        sub = _FrameSubscription(callback=callback, owner=self)
        self._frames.append(sub)
        if self._frame_task is None or self._frame_task.done():
            self._frame_task = self._loop.create_task(self._run_frames())
        return sub

    def _drop_frame(self, sub: _FrameSubscription) -> None:
        if sub in self._frames:
            self._frames.remove(sub)
        if not self._frames and self._frame_task is not None:
            self._frame_task.cancel()
            self._frame_task = None

    async def _run_frames(self) -> None:
        while self._frames:
            now = self.now_ms()
            for sub in list(self._frames):
                if sub.cancelled:
                    continue
                try:
                    sub.callback(now)
                except Exception:
                    logger.exception("frame callback failed")
            await asyncio.sleep(self._frame_interval_s)
