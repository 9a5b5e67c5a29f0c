"""Game rules and timing constants."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class GameRules:
    max_lives: int = 10
    starting_hints: int = 15
    hint_penalty: int = 5
    points_per_letter: int = 10
    streak_threshold: int = 3
    streak_multiplier: float = 1.5
    max_level: int = 6
    min_word_length: int = 2
    max_word_length: int = 6
    bonus_duration_s: int = 10
    bonus_reward_hints: int = 3
    bonus_reward_score: int = 30
    leaderboard_size: int = 10
    snapshot_max_age_days: int = 30

    @property
    def snapshot_max_age_s(self) -> float:
        return self.snapshot_max_age_days * 24 * 60 * 60


@dataclass(frozen=True)
class GameTiming:
    """Delays (in seconds) the host waits before follow-up transitions."""

    correct_answer_window_s: float = 2.5
    hint_validation_delay_s: float = 0.5
    bonus_success_delay_s: float = 1.5
    bonus_failure_delay_s: float = 2.0
    bonus_tick_s: float = 1.0


DEFAULT_RULES = GameRules()
DEFAULT_TIMING = GameTiming()


def data_dir() -> Path:
    """Directory holding progress, settings and log files (``MILIM_HOME`` or ~/.milim)."""
    override = os.environ.get("MILIM_HOME")
    if override:
        return Path(override)
    return Path.home() / ".milim"
