from __future__ import annotations

from collections.abc import Callable

from secretkiss.core.catch import is_caught
from secretkiss.fsm import AttentionPhase


class ActionController:
    """Whether the couple is kissing right now.

    Only `press`, `release` and `force_release` (game over) write `active`.
    """

    def __init__(
        self,
        *,
        is_playing: Callable[[], bool],
        current_phase: Callable[[], AttentionPhase],
        on_caught: Callable[[str], None],
        on_change: Callable[[bool], None] | None = None,
    ) -> None:
        self._is_playing = is_playing
        self._current_phase = current_phase
        self._on_caught = on_caught
        self._on_change = on_change
        self.active = False

    def press(self) -> None:
        if not self._is_playing():
            return
        # Pressing while the principal is already looking is its own catch path,
        # checked before activation.
        if is_caught(self._current_phase(), True):
            self._on_caught("press_in_danger")
            return
        self._set(True)

    def release(self) -> None:
        self._set(False)

    def force_release(self) -> None:
        self._set(False)

    def _set(self, active: bool) -> None:
        if self.active == active:
            return
        self.active = active
        if self._on_change is not None:
            self._on_change(active)
