from __future__ import annotations

import logging
import random
from collections.abc import Callable

from secretkiss.config import DEFAULT_TUNING, GameTuning
from secretkiss.core.catch import is_caught
from secretkiss.core.clock import Scheduler, TimerHandle
from secretkiss.fsm import AttentionPhase, PrincipalFSM

logger = logging.getLogger(__name__)


class AttentionMachine:
    """The principal: safe -> warning -> danger -> safe on randomized timers.

    At most one timer is pending at any time. The catch rule is checked when
    danger begins and again when it would end; a catch halts the machine in
    place (phase stays danger, nothing is re-armed) and reports through
    `on_caught`.
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler,
        rng: random.Random,
        is_action_active: Callable[[], bool],
        on_caught: Callable[[str], None],
        on_phase_change: Callable[[AttentionPhase], None] | None = None,
        tuning: GameTuning = DEFAULT_TUNING,
    ) -> None:
        self._scheduler = scheduler
        self._rng = rng
        self._is_action_active = is_action_active
        self._on_caught = on_caught
        self._on_phase_change = on_phase_change
        self._tuning = tuning
        self._fsm = PrincipalFSM()
        self._handle: TimerHandle | None = None
        self.halted = True

    @property
    def phase(self) -> AttentionPhase:
        return self._fsm.phase

    @property
    def has_pending_timer(self) -> bool:
        return self._handle is not None

    def restart(self) -> None:
        """Cancel everything, go back to safe and arm the first turn."""

        self._cancel()
        self._fsm = PrincipalFSM()
        self.halted = False
        self._arm(self._uniform(self._tuning.safe_min_ms, self._tuning.safe_max_ms), self._enter_warning)

    def halt(self) -> None:
        self._cancel()
        self.halted = True

    def _uniform(self, low: float, high: float) -> float:
        # [low, high): random() never returns 1.0.
        return low + self._rng.random() * (high - low)

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _arm(self, delay_ms: float, callback: Callable[[], None]) -> None:
        self._cancel()
        self._handle = self._scheduler.call_later(delay_ms, callback)

    def _changed(self) -> None:
        logger.debug("principal phase -> %s", self.phase.value)
        if self._on_phase_change is not None:
            self._on_phase_change(self.phase)

    def _caught(self, reason: str) -> bool:
        if not is_caught(self.phase, self._is_action_active()):
            return False
        self.halt()
        self._on_caught(reason)
        return True

    def _enter_warning(self) -> None:
        self._handle = None
        if self.halted:
            return
        self._fsm.glance()
        self._changed()
        self._arm(self._tuning.warning_ms, self._enter_danger)

    def _enter_danger(self) -> None:
        self._handle = None
        if self.halted:
            return
        self._fsm.look()
        self._changed()
        if self._caught("danger_entry"):
            return
        self._arm(self._uniform(self._tuning.danger_min_ms, self._tuning.danger_max_ms), self._leave_danger)

    def _leave_danger(self) -> None:
        self._handle = None
        if self.halted:
            return
        if self._caught("danger_expiry"):
            return
        self._fsm.look_away()
        self._changed()
        self._arm(self._uniform(self._tuning.safe_min_ms, self._tuning.safe_max_ms), self._enter_warning)
