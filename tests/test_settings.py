"""Tests for milim.core.settings and milim.core.config."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from milim.core.config import DEFAULT_RULES, GameRules, data_dir
from milim.core.settings import Settings, SettingsStore


@pytest.fixture()
def settings_file(tmp_path: Path) -> Path:
    return tmp_path / "settings.json"


class TestSettingsStore:
    def test_defaults(self, settings_file: Path):
        store = SettingsStore(settings_file)
        assert store.settings == Settings()
        assert store.settings.continue_enabled
        assert not store.settings.logging_enabled

    def test_update_persists(self, settings_file: Path):
        SettingsStore(settings_file).update(audio_muted=True, audio_volume=0.3)
        reloaded = SettingsStore(settings_file).settings
        assert reloaded.audio_muted
        assert reloaded.audio_volume == 0.3

    def test_unknown_setting(self, settings_file: Path):
        with pytest.raises(KeyError):
            SettingsStore(settings_file).update(turbo=True)

    def test_volume_clamped(self, settings_file: Path):
        store = SettingsStore(settings_file)
        store.update(audio_volume=4)
        assert store.settings.audio_volume == 1.0

    def test_non_bool_ignored(self, settings_file: Path):
        store = SettingsStore(settings_file)
        store.update(haptics_enabled="yes")
        assert store.settings.haptics_enabled is True

    def test_reset(self, settings_file: Path):
        store = SettingsStore(settings_file)
        store.update(log_to_file=True)
        store.reset()
        assert SettingsStore(settings_file).settings == Settings()

    def test_corrupt_file_falls_back(self, settings_file: Path, caplog):
        settings_file.write_text("{oops", encoding="utf-8")
        assert SettingsStore(settings_file).settings == Settings()
        assert "Could not load settings" in caplog.text

    def test_partial_file(self, settings_file: Path):
        settings_file.write_text(json.dumps({"audio_muted": True, "extra": 1}), encoding="utf-8")
        settings = SettingsStore(settings_file).settings
        assert settings.audio_muted
        assert settings.haptics_enabled


class TestConfig:
    def test_rules_defaults(self):
        assert DEFAULT_RULES.max_lives == 10
        assert DEFAULT_RULES.starting_hints == 15
        assert DEFAULT_RULES.snapshot_max_age_s == 30 * 24 * 60 * 60

    def test_rules_are_frozen(self):
        with pytest.raises(AttributeError):
            GameRules().max_lives = 3

    def test_data_dir_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("MILIM_HOME", str(tmp_path))
        assert data_dir() == tmp_path

    def test_data_dir_default(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("MILIM_HOME", raising=False)
        assert data_dir() == Path.home() / ".milim"
