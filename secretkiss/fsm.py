from __future__ import annotations

from enum import StrEnum

from statemachine import State, StateMachine


class AttentionPhase(StrEnum):
    safe = "safe"
    warning = "warning"
    danger = "danger"


class SessionMode(StrEnum):
    playing = "playing"
    game_over = "game_over"


class PrincipalFSM(StateMachine):
    """Guards the principal's attention cycle.

    safe -> warning -> danger -> safe, nothing else. Timers live in
    `AttentionMachine`; this class only refuses out-of-order transitions.
    """

    safe = State(AttentionPhase.safe.value, value=AttentionPhase.safe.value, initial=True)
    warning = State(AttentionPhase.warning.value, value=AttentionPhase.warning.value)
    danger = State(AttentionPhase.danger.value, value=AttentionPhase.danger.value)

    glance = safe.to(warning)
    look = warning.to(danger)
    look_away = danger.to(safe)

    @property
    def phase(self) -> AttentionPhase:
        return AttentionPhase(str(self.current_state.value))


class SessionFSM(StateMachine):
    """playing <-> game_over. `catch` is only allowed from playing."""

    playing = State(SessionMode.playing.value, value=SessionMode.playing.value, initial=True)
    game_over = State(SessionMode.game_over.value, value=SessionMode.game_over.value)

    catch = playing.to(game_over)
    restart = game_over.to(playing) | playing.to(playing)

    @property
    def mode(self) -> SessionMode:
        return SessionMode(str(self.current_state.value))
