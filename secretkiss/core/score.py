from __future__ import annotations

import logging
from collections.abc import Callable

from secretkiss.config import DEFAULT_TUNING, GameTuning
from secretkiss.core.clock import Scheduler, TimerHandle
from secretkiss.score_store import BestScoreStore

logger = logging.getLogger(__name__)


class ScoreAccumulator:
    """+1 every `score_interval_ms` while running; best score is write-through."""

    def __init__(
        self,
        *,
        scheduler: Scheduler,
        store: BestScoreStore,
        should_count: Callable[[], bool],
        on_new_best: Callable[[int], None] | None = None,
        tuning: GameTuning = DEFAULT_TUNING,
    ) -> None:
        self._scheduler = scheduler
        self._store = store
        self._should_count = should_count
        self._on_new_best = on_new_best
        self._interval_ms = tuning.score_interval_ms
        self._handle: TimerHandle | None = None
        self._next_due_ms = 0.0
        self.score = 0
        self.best_score = store.get()

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        if self._handle is None:
            self._next_due_ms = self._scheduler.now_ms() + self._interval_ms
            self._handle = self._scheduler.call_later(self._interval_ms, self._tick)

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def reset(self) -> None:
        self.stop()
        self.score = 0

    def _tick(self) -> None:
        self._handle = None
        if not self._should_count():
            return
        self.score += 1
        if self.score > self.best_score:
            self.best_score = self.score
            self._store.set(self.best_score)
            if self._on_new_best is not None:
                self._on_new_best(self.best_score)
        # Next tick is one interval after the previous planned tick, not after this firing.
        self._next_due_ms += self._interval_ms
        delay = self._next_due_ms - self._scheduler.now_ms()
        self._handle = self._scheduler.call_later(max(0.0, delay), self._tick)
