from __future__ import annotations

from collections.abc import Callable

from secretkiss.core.action import ActionController
from secretkiss.core.clock import ManualScheduler, TimerHandle
from secretkiss.core.score import ScoreAccumulator
from secretkiss.fsm import AttentionPhase
from secretkiss.score_store import InMemoryBestScoreStore


class _World:
    def __init__(self) -> None:
        self.playing = True
        self.phase = AttentionPhase.safe
        self.caught: list[str] = []
        self.changes: list[bool] = []
        self.action = ActionController(
            is_playing=lambda: self.playing,
            current_phase=lambda: self.phase,
            on_caught=self.caught.append,
            on_change=self.changes.append,
        )


def test_press_and_release_toggle_action() -> None:
    w = _World()

    w.action.press()
    assert w.action.active
    w.action.press()
    w.action.release()
    w.action.release()

    assert not w.action.active
    assert w.changes == [True, False]


def test_press_ignored_when_not_playing() -> None:
    w = _World()
    w.playing = False

    w.action.press()

    assert not w.action.active
    assert w.caught == []


def test_press_in_danger_is_a_catch_not_an_activation() -> None:
    w = _World()
    w.phase = AttentionPhase.danger

    w.action.press()

    assert not w.action.active
    assert w.caught == ["press_in_danger"]
    assert w.changes == []


def test_release_never_catches() -> None:
    w = _World()
    w.action.press()
    w.phase = AttentionPhase.danger

    w.action.release()

    assert w.caught == []
    assert not w.action.active


def test_press_in_warning_activates() -> None:
    w = _World()
    w.phase = AttentionPhase.warning

    w.action.press()

    assert w.action.active
    assert w.caught == []


def _scorer(scheduler: ManualScheduler, store: InMemoryBestScoreStore, counting: list[bool]) -> ScoreAccumulator:
    return ScoreAccumulator(scheduler=scheduler, store=store, should_count=lambda: counting[0])


def test_score_ticks_twenty_per_second(scheduler: ManualScheduler, store: InMemoryBestScoreStore) -> None:
    counting = [True]
    scorer = _scorer(scheduler, store, counting)

    scorer.start()
    scheduler.advance(1000)

    assert scorer.score == 20


def test_score_start_is_idempotent(scheduler: ManualScheduler, store: InMemoryBestScoreStore) -> None:
    scorer = _scorer(scheduler, store, [True])

    scorer.start()
    scorer.start()
    scheduler.advance(500)

    assert scorer.score == 10
    assert scheduler.pending_timers == 1


def test_score_stops_immediately(scheduler: ManualScheduler, store: InMemoryBestScoreStore) -> None:
    scorer = _scorer(scheduler, store, [True])

    scorer.start()
    scheduler.advance(275)
    scorer.stop()
    scheduler.advance(1000)

    assert scorer.score == 5
    assert not scorer.running
    assert scheduler.pending_timers == 0


def test_score_does_not_count_when_gate_closed(scheduler: ManualScheduler, store: InMemoryBestScoreStore) -> None:
    counting = [True]
    scorer = _scorer(scheduler, store, counting)

    scorer.start()
    scheduler.advance(100)
    counting[0] = False
    scheduler.advance(1000)

    assert scorer.score == 2
    assert not scorer.running


def test_best_score_is_write_through(scheduler: ManualScheduler) -> None:
    store = InMemoryBestScoreStore(initial=3)
    scorer = _scorer(scheduler, store, [True])
    assert scorer.best_score == 3

    scorer.start()
    scheduler.advance(300)

    assert scorer.score == 6
    assert scorer.best_score == 6
    assert store.writes == [4, 5, 6]


def test_reset_keeps_best_score(scheduler: ManualScheduler, store: InMemoryBestScoreStore) -> None:
    scorer = _scorer(scheduler, store, [True])
    scorer.start()
    scheduler.advance(500)

    scorer.reset()
    scorer.start()
    scheduler.advance(100)

    assert scorer.score == 2
    assert scorer.best_score == 10
    assert store.writes == list(range(1, 11))


class _LateScheduler(ManualScheduler):
    """Every timer fires `lag_ms` after it was asked to, like a busy event loop."""

    def __init__(self, lag_ms: float) -> None:
        super().__init__(frame_ms=10.0)
        self.lag_ms = lag_ms

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        return super().call_later(delay_ms + self.lag_ms, callback)


def test_score_rate_holds_when_timers_fire_late(store: InMemoryBestScoreStore) -> None:
    scheduler = _LateScheduler(lag_ms=7.0)
    scorer = ScoreAccumulator(scheduler=scheduler, store=store, should_count=lambda: True)

    scorer.start()
    scheduler.advance(1007)

    # Lateness does not compound: ticks land at 57, 107, ..., 1007.
    assert scorer.score == 20
