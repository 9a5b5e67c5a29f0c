from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from milim.core.config import DEFAULT_RULES, GameRules
from milim.core.words import BonusChallenge, Word


@dataclass
class GameSession:
    """Mutable state of one playthrough. Only the game controller writes to it."""

    level: int = 1
    current_word: Optional[Word] = None
    shuffled_letters: List[str] = field(default_factory=list)
    selected_indices: List[int] = field(default_factory=list)
    score: int = 0
    streak: int = 0
    lives: int = DEFAULT_RULES.max_lives
    max_lives: int = DEFAULT_RULES.max_lives
    hints_remaining: int = DEFAULT_RULES.starting_hints
    words_completed: int = 0
    completed_words: Dict[int, Set[str]] = field(default_factory=dict)
    level_progress_percent: float = 0.0
    in_bonus_round: bool = False
    bonus_time_remaining: int = 0
    current_bonus_challenge: Optional[BonusChallenge] = None
    animating_correct: bool = False
    all_words_done: bool = False
    streak_threshold: int = DEFAULT_RULES.streak_threshold

    @classmethod
    def fresh(cls, rules: GameRules = DEFAULT_RULES) -> "GameSession":
        return cls(
            lives=rules.max_lives,
            max_lives=rules.max_lives,
            hints_remaining=rules.starting_hints,
            streak_threshold=rules.streak_threshold,
        )

    @property
    def bonus_active(self) -> bool:
        return self.streak >= self.streak_threshold

    @property
    def is_game_over(self) -> bool:
        return self.lives == 0

    @property
    def is_completed(self) -> bool:
        return self.is_game_over or self.all_words_done

    def completed_for(self, word_length: int) -> Set[str]:
        return self.completed_words.setdefault(word_length, set())

    def total_completed(self) -> int:
        return sum(len(scripts) for scripts in self.completed_words.values())

    def selected_text(self) -> str:
        return "".join(self.shuffled_letters[i] for i in self.selected_indices)


@dataclass
class SessionSnapshot:
    """The part of a session that survives an app restart ("Continue")."""

    level: int
    score: int
    lives: int
    hints_remaining: int
    streak: int
    completed_words: Dict[int, List[str]]
    saved_at: float

    @classmethod
    def from_session(cls, session: GameSession, saved_at: Optional[float] = None) -> "SessionSnapshot":
        return cls(
            level=session.level,
            score=session.score,
            lives=session.lives,
            hints_remaining=session.hints_remaining,
            streak=session.streak,
            completed_words={k: sorted(v) for k, v in session.completed_words.items() if v},
            saved_at=time.time() if saved_at is None else saved_at,
        )

    def is_stale(self, now: Optional[float] = None, rules: GameRules = DEFAULT_RULES) -> bool:
        now = time.time() if now is None else now
        return now - self.saved_at > rules.snapshot_max_age_s

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "score": self.score,
            "lives": self.lives,
            "hints_remaining": self.hints_remaining,
            "streak": self.streak,
            # JSON object keys are strings
            "completed_words": {str(k): list(v) for k, v in self.completed_words.items()},
            "saved_at": self.saved_at,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "SessionSnapshot":
        """Build a snapshot from stored JSON; raises ValueError/TypeError/KeyError if malformed."""
        completed = payload.get("completed_words") or {}
        if not isinstance(completed, dict):
            raise ValueError("completed_words must be an object")
        return cls(
            level=int(payload["level"]),
            score=int(payload["score"]),
            lives=int(payload["lives"]),
            hints_remaining=int(payload["hints_remaining"]),
            streak=int(payload["streak"]),
            completed_words={int(k): [str(s) for s in v] for k, v in completed.items()},
            saved_at=float(payload["saved_at"]),
        )
