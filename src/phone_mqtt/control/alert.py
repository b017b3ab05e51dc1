"""The one locally played alert sound."""

from __future__ import annotations

import logging

from phone_mqtt.phone.engine import AudioPlayer, Playback

logger = logging.getLogger(__name__)


class AlertSound:
    """Holds at most one playing cue; a new cue always stops the old one."""

    def __init__(self, player: AudioPlayer) -> None:
        self._player = player
        self._playback: Playback | None = None
        self._cue: str | None = None

    @property
    def cue(self) -> str | None:
        return self._cue

    def play(self, cue: str, repeat: int) -> None:
        self.stop()
        try:
            self._playback = self._player.play(cue, repeat)
        except Exception:
            logger.exception("Could not play %s", cue)
            return
        self._cue = cue

    def notify(self, cue: str) -> None:
        """Play ``cue`` once without replacing the current alert."""
        try:
            self._player.play(cue, 1)
        except Exception:
            logger.exception("Could not play %s", cue)

    def stop(self) -> None:
        playback, self._playback = self._playback, None
        self._cue = None
        if playback is not None:
            playback.stop()
