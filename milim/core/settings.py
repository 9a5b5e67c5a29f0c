from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Optional

from milim.core.config import data_dir

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    audio_muted: bool = False
    audio_volume: float = 0.8
    haptics_enabled: bool = True
    continue_enabled: bool = True
    logging_enabled: bool = False
    log_to_file: bool = False


class SettingsStore:
    """User toggles, persisted to ``~/.milim/settings.json``.

    The game rules never read these; only the host (audio, logging, the
    Continue button) does.
    """

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path or data_dir() / "settings.json"
        self._settings = self._load()

    @property
    def settings(self) -> Settings:
        return self._settings

    def update(self, **changes: Any) -> Settings:
        """Change one or more settings by name and persist them. Unknown names raise KeyError."""
        known = {f.name for f in fields(Settings)}
        for name, value in changes.items():
            if name not in known:
                raise KeyError(name)
            setattr(self._settings, name, _coerce(name, value, getattr(self._settings, name)))
        self._save()
        return self._settings

    def reset(self) -> None:
        self._settings = Settings()
        self._save()

    def _load(self) -> Settings:
        settings = Settings()
        if not self._file_path.exists():
            return settings
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load settings from %s: %s", self._file_path, e)
            return settings
        if not isinstance(payload, dict):
            return settings
        for f in fields(Settings):
            if f.name in payload:
                setattr(settings, f.name, _coerce(f.name, payload[f.name], getattr(settings, f.name)))
        return settings

    def _save(self) -> None:
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(asdict(self._settings), indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save settings to %s: %s", self._file_path, e)


def _coerce(name: str, value: Any, fallback: Any) -> Any:
    if isinstance(fallback, bool):
        if isinstance(value, bool):
            return value
        logger.warning("Ignoring non-boolean value %r for %s", value, name)
        return fallback
    try:
        return max(0.0, min(1.0, float(value)))
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid value %r for %s", value, name)
        return fallback
