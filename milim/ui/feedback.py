"""Sound cues for game events."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

from PySide6.QtCore import QUrl
from PySide6.QtMultimedia import QSoundEffect

from milim.core.feedback import GameFeedback
from milim.core.settings import SettingsStore

logger = logging.getLogger(__name__)

SOUNDS_DIR = Path(__file__).resolve().parent.parent / "assets" / "sounds"

SOUND_NAMES = (
    "correct_answer",
    "wrong_answer",
    "hint_used",
    "level_up",
    "bonus_round",
    "game_over",
    "game_complete",
    "button_tap",
    "letter_select",
)


class SoundFeedback(GameFeedback):
    """Plays ``assets/sounds/<name>.wav`` for each cue, honouring the mute/volume settings.

    Missing sound files are logged once at startup and then silently skipped.
    """

    def __init__(self, settings: SettingsStore, sounds_dir: Optional[Path] = None) -> None:
        self._settings = settings
        self._effects: Dict[str, QSoundEffect] = {}
        base = sounds_dir or SOUNDS_DIR
        missing = []
        for name in SOUND_NAMES:
            path = base / f"{name}.wav"
            if not path.exists():
                missing.append(name)
                continue
            effect = QSoundEffect()
            effect.setSource(QUrl.fromLocalFile(str(path)))
            self._effects[name] = effect
        if missing:
            logger.info("No sound files for: %s (looked in %s)", ", ".join(missing), base)

    def play(self, name: str) -> None:
        settings = self._settings.settings
        if settings.audio_muted:
            return
        effect = self._effects.get(name)
        if effect is None:
            return
        effect.setVolume(settings.audio_volume)
        effect.play()

    def on_correct_answer(self) -> None:
        self.play("correct_answer")

    def on_wrong_answer(self) -> None:
        self.play("wrong_answer")

    def on_hint_used(self) -> None:
        self.play("hint_used")

    def on_level_up(self) -> None:
        self.play("level_up")

    def on_bonus_round_start(self) -> None:
        self.play("bonus_round")

    def on_game_over(self) -> None:
        self.play("game_over")

    def on_game_complete(self) -> None:
        self.play("game_complete")

    def on_letter_selected(self) -> None:
        self.play("letter_select")

    def on_button_tap(self) -> None:
        self.play("button_tap")
