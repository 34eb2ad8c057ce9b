from __future__ import annotations

from secretkiss.fsm import AttentionPhase


def is_caught(phase: AttentionPhase, action_active: bool) -> bool:
    """The principal is looking and the couple is kissing."""

    return phase == AttentionPhase.danger and action_active
