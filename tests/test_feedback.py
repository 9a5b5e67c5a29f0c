"""Tests for milim.ui.feedback – sound cues."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

pytest.importorskip("PySide6.QtMultimedia")

from milim.core.settings import SettingsStore  # noqa: E402
from milim.ui.feedback import SOUND_NAMES, SoundFeedback  # noqa: E402


@pytest.fixture()
def settings(tmp_path: Path) -> SettingsStore:
    return SettingsStore(tmp_path / "settings.json")


class TestSoundFeedback:
    def test_empty_sounds_folder_is_not_a_warning(self, settings: SettingsStore, tmp_path: Path, caplog):
        caplog.set_level(logging.INFO, logger="milim.ui.feedback")
        SoundFeedback(settings, sounds_dir=tmp_path / "sounds")
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
        assert "No sound files for" in caplog.text
        assert all(name in caplog.text for name in SOUND_NAMES)

    def test_cues_without_files_are_silent(self, settings: SettingsStore, tmp_path: Path):
        sounds = SoundFeedback(settings, sounds_dir=tmp_path)
        sounds.on_correct_answer()
        sounds.on_bonus_round_start()
        sounds.play("no_such_sound")

    def test_muted_skips_playback(self, settings: SettingsStore, tmp_path: Path):
        settings.update(audio_muted=True)
        SoundFeedback(settings, sounds_dir=tmp_path).on_level_up()
