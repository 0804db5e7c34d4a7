"""Keystroke click played through Qt Multimedia."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class SilentSound:
    """Audio cue that does nothing (muted, or no audio available)."""

    enabled = False

    def play(self) -> None:
        pass


class KeystrokeSound:
    """Fire-and-forget keystroke cue backed by ``QSoundEffect``.

    The effect loads asynchronously, so pending Qt events are processed on
    each ``play`` instead of running a Qt event loop. If the sound file or
    Qt Multimedia is unavailable the cue stays silent.
    """

    def __init__(self, sound_path: Path, volume: float = 0.5) -> None:
        self._effect = None
        self._app = None
        if not sound_path.exists():
            logger.warning("Sound file not found: %s", sound_path)
            return
        try:
            from PySide6.QtCore import QCoreApplication, QUrl
            from PySide6.QtMultimedia import QSoundEffect
        except ImportError as e:
            logger.warning("Qt Multimedia unavailable, keystroke sound disabled: %s", e)
            return

        self._app = QCoreApplication.instance() or QCoreApplication([])
        effect = QSoundEffect()
        effect.setSource(QUrl.fromLocalFile(str(sound_path)))
        effect.setLoopCount(1)
        effect.setVolume(volume)
        self._effect = effect
        logger.info("Loaded keystroke sound: %s", sound_path)

    @property
    def enabled(self) -> bool:
        return self._effect is not None

    def play(self) -> None:
        if self._effect is None:
            return
        self._app.processEvents()
        if self._effect.isPlaying():
            self._effect.stop()
        self._effect.play()


def make_sound(enabled: bool, sound_path: Path):
    """Return the audio cue for the given settings."""
    if not enabled:
        return SilentSound()
    sound = KeystrokeSound(sound_path)
    return sound if sound.enabled else SilentSound()
