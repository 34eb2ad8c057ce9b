from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from secretkiss.audio import AudioCue, AudioSink, LoggingAudioSink, safe_cue
from secretkiss.config import DEFAULT_TUNING, GameTuning
from secretkiss.core.action import ActionController
from secretkiss.core.attention import AttentionMachine
from secretkiss.core.clock import Scheduler, TimerHandle
from secretkiss.core.events import EventOutbox
from secretkiss.core.hearts import HeartEmitter, heart_opacity
from secretkiss.core.score import ScoreAccumulator
from secretkiss.fsm import AttentionPhase, SessionFSM, SessionMode
from secretkiss.messages import pick_game_over_message
from secretkiss.score_store import BestScoreStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HeartView:
    heart_id: int
    x: float
    y: float
    opacity: float


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Everything a renderer needs for one frame. Read-only by construction."""

    mode: SessionMode
    score: int
    best_score: int
    phase: AttentionPhase
    action_active: bool
    game_over_message: str
    hearts: tuple[HeartView, ...]

    @property
    def show_hint(self) -> bool:
        return self.mode == SessionMode.playing and not self.action_active


class GameSession:
    """Owns one playthrough and is the only way into game over.

    Every catch path (press during danger, danger entry, danger expiry) ends
    up in `game_over`, which is idempotent, so two catches landing on the same
    instant produce a single game over.
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler,
        store: BestScoreStore,
        audio: AudioSink | None = None,
        rng: random.Random | None = None,
        tuning: GameTuning = DEFAULT_TUNING,
        outbox: EventOutbox | None = None,
        autostart: bool = True,
    ) -> None:
        self._scheduler = scheduler
        self._audio = audio or LoggingAudioSink()
        self._tuning = tuning
        self.rng = rng or random.Random()
        self.outbox = outbox or EventOutbox()
        self._fsm = SessionFSM()
        self._frame_handle: TimerHandle | None = None
        self._closed = False
        self._record_broken = False
        self.game_over_message = ""

        self.action = ActionController(
            is_playing=self.is_playing,
            current_phase=lambda: self.attention.phase,
            on_caught=self._caught,
            on_change=self._on_action_change,
        )
        self.attention = AttentionMachine(
            scheduler=scheduler,
            rng=self.rng,
            is_action_active=lambda: self.action.active,
            on_caught=self._caught,
            on_phase_change=self._on_phase_change,
            tuning=tuning,
        )
        # Best score is read from the store exactly once, here.
        self.scorer = ScoreAccumulator(
            scheduler=scheduler,
            store=store,
            should_count=lambda: self.is_playing() and self.action.active,
            on_new_best=self._on_new_best,
            tuning=tuning,
        )
        self.hearts = HeartEmitter(rng=self.rng, tuning=tuning)

        if autostart:
            self.start()

    # -- read side -------------------------------------------------------

    @property
    def mode(self) -> SessionMode:
        return self._fsm.mode

    def is_playing(self) -> bool:
        return self._fsm.mode == SessionMode.playing

    @property
    def score(self) -> int:
        return self.scorer.score

    @property
    def best_score(self) -> int:
        return self.scorer.best_score

    @property
    def phase(self) -> AttentionPhase:
        return self.attention.phase

    def snapshot(self) -> SessionSnapshot:
        fade = self._tuning.heart_fade_distance
        return SessionSnapshot(
            mode=self.mode,
            score=self.score,
            best_score=self.best_score,
            phase=self.phase,
            action_active=self.action.active,
            game_over_message=self.game_over_message,
            hearts=tuple(
                HeartView(heart_id=h.heart_id, x=h.x, y=h.y, opacity=heart_opacity(h, fade_distance=fade))
                for h in self.hearts.hearts
            ),
        )

    # -- input -----------------------------------------------------------

    def press(self) -> None:
        self.action.press()

    def release(self) -> None:
        self.action.release()

    # -- lifecycle -------------------------------------------------------

    def start(self) -> None:
        """Fresh playthrough: score 0, not kissing, principal safe, no hearts."""

        if self._closed:
            raise RuntimeError("Session is closed")

        self.scorer.reset()
        self.action.force_release()
        self._fsm.restart()
        self.game_over_message = ""
        self._record_broken = False
        self.hearts.clear()
        self.attention.restart()
        if self._frame_handle is None:
            self._frame_handle = self._scheduler.on_frame(self._on_frame)

        for cue in AudioCue:
            safe_cue(self._audio, cue, stop=True)
        safe_cue(self._audio, AudioCue.bgm, loop=True)

        self.outbox.record(type="SESSION_STARTED", payload={"best_score": self.best_score})
        logger.info("session started (best=%s)", self.best_score)

    reset = start

    def game_over(self, reason: str = "caught") -> bool:
        """Returns False when the session was already over."""

        if self.mode == SessionMode.game_over:
            return False

        self._fsm.catch()
        self.game_over_message = pick_game_over_message(self.rng)
        self.scorer.stop()
        self.attention.halt()
        self.action.force_release()
        safe_cue(self._audio, AudioCue.bgm, stop=True)
        safe_cue(self._audio, AudioCue.lose)

        self.outbox.record(
            type="GAME_OVER",
            payload={
                "reason": reason,
                "message": self.game_over_message,
                "score": self.score,
                "best_score": self.best_score,
            },
        )
        logger.info("game over (%s): score=%s best=%s", reason, self.score, self.best_score)
        return True

    def close(self) -> None:
        """Tear down: no timer or frame callback may outlive the session."""

        if self._closed:
            return
        self._closed = True
        self.scorer.stop()
        self.attention.halt()
        if self._frame_handle is not None:
            self._frame_handle.cancel()
            self._frame_handle = None
        for cue in AudioCue:
            safe_cue(self._audio, cue, stop=True)

    # -- callbacks ------------------------------------------------------

    def _caught(self, reason: str) -> None:
        self.outbox.record(type="CAUGHT", payload={"reason": reason, "phase": self.phase.value})
        self.game_over(reason)

    def _on_action_change(self, active: bool) -> None:
        if active:
            self.scorer.start()
            safe_cue(self._audio, AudioCue.kiss, loop=True)
            self.outbox.record(type="ACTION_STARTED")
        else:
            self.scorer.stop()
            safe_cue(self._audio, AudioCue.kiss, stop=True)
            self.outbox.record(type="ACTION_ENDED", payload={"score": self.score})

    def _on_phase_change(self, phase: AttentionPhase) -> None:
        self.outbox.record(type="PHASE_CHANGED", payload={"phase": phase.value})
        if phase == AttentionPhase.warning:
            safe_cue(self._audio, AudioCue.warning)
        elif phase == AttentionPhase.danger:
            safe_cue(self._audio, AudioCue.alert)

    def _on_new_best(self, best: int) -> None:
        # One event per playthrough; the score keeps climbing after that.
        if not self._record_broken:
            self._record_broken = True
            self.outbox.record(type="NEW_BEST_SCORE", payload={"best_score": best})

    def _on_frame(self, now_ms: float) -> None:
        self.hearts.step(now_ms, playing=self.is_playing(), active=self.action.active)
