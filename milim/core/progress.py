from __future__ import annotations

import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from milim.core.config import DEFAULT_RULES, GameRules, data_dir
from milim.core.levels import word_length_for_level
from milim.core.session import SessionSnapshot
from milim.core.words import Word

logger = logging.getLogger(__name__)


@dataclass
class HighScore:
    score: int
    level: int
    words_completed: int
    date: float
    player_name: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass
class GameStatistics:
    games_played: int = 0
    total_score: int = 0
    average_score: int = 0
    highest_score: int = 0
    highest_level: int = 0
    total_words_learned: int = 0
    total_words_completed: int = 0
    hints_used: int = 0
    bonus_rounds_played: int = 0
    bonus_rounds_completed: int = 0
    total_play_time: float = 0.0
    average_game_time: float = 0.0

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "GameStatistics":
        stats = cls()
        for f in fields(cls):
            if f.name in payload:
                caster = float if isinstance(getattr(stats, f.name), float) else int
                setattr(stats, f.name, caster(payload[f.name]))
        return stats


class GameDataStore:
    """Persists the leaderboard, learned words, statistics and the saved game.

    Everything lives in one JSON file (``~/.milim/progress.json`` unless a path
    is given). Unreadable data is logged and replaced with defaults; the game
    never stops because of it.
    """

    def __init__(
        self,
        file_path: Optional[Path] = None,
        rules: GameRules = DEFAULT_RULES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._file_path = file_path or data_dir() / "progress.json"
        self._rules = rules
        self._clock = clock
        self._high_scores: List[HighScore] = []
        self._learned_words: List[Word] = []
        self._saved_game: Optional[SessionSnapshot] = None
        self._statistics = GameStatistics()
        self._load()

    @property
    def file_path(self) -> Path:
        return self._file_path

    # -- saved game ---------------------------------------------------------

    def load_snapshot(self) -> Optional[SessionSnapshot]:
        """The saved game, or None if there is none or it has gone stale."""
        if self._saved_game is None:
            return None
        if self._saved_game.is_stale(self._clock(), self._rules):
            logger.info("Discarding saved game from %s (too old)", time.ctime(self._saved_game.saved_at))
            self.clear_snapshot()
            return None
        return self._saved_game

    def has_snapshot(self) -> bool:
        return self.load_snapshot() is not None

    def save_snapshot(self, snapshot: SessionSnapshot) -> None:
        self._saved_game = snapshot
        self._save()

    def clear_snapshot(self) -> None:
        if self._saved_game is None:
            return
        self._saved_game = None
        self._save()

    # -- high scores --------------------------------------------------------

    def high_scores(self) -> List[HighScore]:
        return list(self._high_scores)

    def record_high_score(self, score: int, level: int, words_completed: int) -> Optional[str]:
        """Insert a score into the top list; returns its id, or None if it did not place."""
        if score <= 0:
            return None
        entry = HighScore(score=score, level=level, words_completed=words_completed, date=self._clock())
        # sorted() is stable: an equal score ranks below the ones already there
        ranked = sorted(self._high_scores + [entry], key=lambda h: h.score, reverse=True)
        self._high_scores = ranked[: self._rules.leaderboard_size]
        placed = any(h.id == entry.id for h in self._high_scores)
        if self._high_scores and self._high_scores[0].id == entry.id:
            self._statistics.highest_score = max(self._statistics.highest_score, entry.score)
        self._save()
        return entry.id if placed else None

    def update_high_score_name(self, entry_id: str, name: str) -> bool:
        for entry in self._high_scores:
            if entry.id == entry_id:
                entry.player_name = name.strip()
                self._save()
                return True
        return False

    # -- learned words ------------------------------------------------------

    def record_learned_words(self, words: Iterable[Word]) -> int:
        """Add words to the dictionary, skipping ones already there. Returns how many were new."""
        known = {w.id for w in self._learned_words}
        added = 0
        for word in words:
            if word.id in known:
                continue
            self._learned_words.append(word)
            known.add(word.id)
            added += 1
        if added:
            self._statistics.total_words_learned += added
            self._save()
        return added

    def learned_words(self, level: Optional[int] = None, search: str = "") -> List[Word]:
        words = list(self._learned_words)
        if level is not None:
            length = word_length_for_level(level, self._rules)
            words = [w for w in words if len(w.script) == length]
        term = search.strip().lower()
        if term:
            words = [
                w
                for w in words
                if term in w.script.lower() or term in w.transliteration.lower() or term in w.meaning.lower()
            ]
        return words

    # -- statistics ---------------------------------------------------------

    @property
    def statistics(self) -> GameStatistics:
        return self._statistics

    def record_game_completion(self, score: int, level: int, words_completed: int, play_time_s: float) -> None:
        stats = self._statistics
        stats.games_played += 1
        stats.total_score += score
        stats.average_score = stats.total_score // stats.games_played if stats.games_played else 0
        stats.highest_level = max(stats.highest_level, level)
        stats.highest_score = max(stats.highest_score, score)
        stats.total_words_completed += words_completed
        stats.total_play_time += max(0.0, play_time_s)
        stats.average_game_time = stats.total_play_time / stats.games_played if stats.games_played else 0.0
        self._save()

    def record_hint_used(self) -> None:
        self._statistics.hints_used += 1
        self._save()

    def record_bonus_round(self, success: bool) -> None:
        self._statistics.bonus_rounds_played += 1
        if success:
            self._statistics.bonus_rounds_completed += 1
        self._save()

    def reset_statistics(self) -> None:
        self._statistics = GameStatistics()
        self._save()

    def save(self) -> None:
        """Persist current state to disk (e.g. on app exit)."""
        self._save()

    # -- disk ---------------------------------------------------------------

    def _load(self) -> None:
        if not self._file_path.exists():
            return
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logger.warning("Could not load game data from %s: %s", self._file_path, e)
            return
        if not isinstance(payload, dict):
            logger.warning("Ignoring game data in %s: not a JSON object", self._file_path)
            return

        try:
            self._high_scores = [HighScore(**item) for item in payload.get("high_scores", [])]
            self._high_scores.sort(key=lambda h: h.score, reverse=True)
        except (TypeError, ValueError) as e:
            logger.warning("Discarding corrupt high scores: %s", e)
            self._high_scores = []

        try:
            self._learned_words = [Word(**item) for item in payload.get("learned_words", [])]
        except (TypeError, ValueError) as e:
            logger.warning("Discarding corrupt learned words: %s", e)
            self._learned_words = []

        try:
            self._statistics = GameStatistics.from_dict(payload.get("statistics") or {})
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning("Discarding corrupt statistics: %s", e)
            self._statistics = GameStatistics()

        saved = payload.get("saved_game")
        if saved is None:
            return
        try:
            snapshot = SessionSnapshot.from_dict(saved)
        except (TypeError, ValueError, KeyError, AttributeError) as e:
            logger.warning("Discarding corrupt saved game: %s", e)
            self._save()
            return
        if snapshot.is_stale(self._clock(), self._rules):
            logger.info("Discarding saved game older than %d days", self._rules.snapshot_max_age_days)
            self._save()
            return
        self._saved_game = snapshot

    def _save(self) -> None:
        payload = {
            "high_scores": [asdict(h) for h in self._high_scores],
            "learned_words": [asdict(w) for w in self._learned_words],
            "statistics": asdict(self._statistics),
            "saved_game": self._saved_game.to_dict() if self._saved_game is not None else None,
        }
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save game data to %s: %s", self._file_path, e)
