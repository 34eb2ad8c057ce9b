from __future__ import annotations

import logging
from enum import StrEnum
from typing import Protocol

from secretkiss.core.events import EventOutbox

logger = logging.getLogger(__name__)


class AudioCue(StrEnum):
    bgm = "bgm"
    kiss = "kiss"
    warning = "warning"
    alert = "alert"
    lose = "lose"


class AudioSink(Protocol):
    """Fire-and-forget audio. `stop` also rewinds the cue to its start."""

    def play(self, cue: AudioCue, *, loop: bool = False) -> None:  # pragma: no cover
        ...

    def stop(self, cue: AudioCue) -> None:  # pragma: no cover
        ...


class LoggingAudioSink:
    def play(self, cue: AudioCue, *, loop: bool = False) -> None:
        logger.debug("audio play %s loop=%s", cue.value, loop)

    def stop(self, cue: AudioCue) -> None:
        logger.debug("audio stop %s", cue.value)


class EventAudioSink:
    """Turns cues into AUDIO_CUE events so a connected client can play them."""

    def __init__(self, outbox: EventOutbox) -> None:
        self._outbox = outbox

    def play(self, cue: AudioCue, *, loop: bool = False) -> None:
        self._outbox.record(type="AUDIO_CUE", payload={"cue": cue.value, "action": "play", "loop": loop})

    def stop(self, cue: AudioCue) -> None:
        self._outbox.record(type="AUDIO_CUE", payload={"cue": cue.value, "action": "stop"})


def safe_cue(sink: AudioSink, cue: AudioCue, *, stop: bool = False, loop: bool = False) -> None:
    """Call into the sink; playback failures never reach game logic."""

    try:
        if stop:
            sink.stop(cue)
        else:
            sink.play(cue, loop=loop)
    except Exception:
        logger.warning("audio cue %s failed", cue.value, exc_info=True)
