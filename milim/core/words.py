from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class Word:
    script: str
    transliteration: str
    meaning: str

    @property
    def id(self) -> str:
        """Identity used for de-duplication: the Hebrew script itself."""
        return self.script


@dataclass(frozen=True)
class BonusChallenge:
    letter: str
    options: Tuple[str, ...]
    correct: str
    sound: str
    hint: str

    @property
    def id(self) -> str:
        return f"{self.letter}:{self.sound}"


class WordBank:
    """Read-only table of words keyed by word length, loaded from ``words.yaml``."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path or _DATA_DIR / "words.yaml"
        self._words = self._load_words()

    def words_for_length(self, length: int) -> List[Word]:
        """Words of *length* letters; an empty list for lengths the bank does not cover."""
        return list(self._words.get(length, ()))

    def lengths(self) -> List[int]:
        return sorted(self._words)

    def all(self) -> List[Word]:
        return [word for length in self.lengths() for word in self._words[length]]

    def find(self, script: str) -> Optional[Word]:
        for word in self._words.get(len(script), ()):
            if word.script == script:
                return word
        return None

    def _load_words(self) -> Dict[int, List[Word]]:
        if not self._path.exists():
            raise FileNotFoundError(f"Word bank not found: {self._path}")

        raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict):
            raise ValueError(f"{self._path.name}: expected a mapping of word length to words")

        words: Dict[int, List[Word]] = {}
        for key, entries in raw.items():
            try:
                length = int(key)
            except (TypeError, ValueError):
                raise ValueError(f"{self._path.name}: invalid word length {key!r}") from None
            if not isinstance(entries, list):
                raise ValueError(f"{self._path.name}: words for length {length} must be a list")
            bucket: List[Word] = []
            for entry in entries:
                if not isinstance(entry, dict) or not entry.get("script"):
                    raise ValueError(f"{self._path.name}: entry without 'script' in length {length}")
                script = str(entry["script"]).strip()
                if len(script) != length:
                    raise ValueError(
                        f"{self._path.name}: {script!r} has {len(script)} letters, listed under {length}"
                    )
                bucket.append(
                    Word(
                        script=script,
                        transliteration=str(entry.get("transliteration", "")).strip(),
                        meaning=str(entry.get("meaning", "")).strip(),
                    )
                )
            words[length] = bucket

        if not words:
            raise ValueError(f"{self._path.name}: no words defined")
        return words


class ChallengeBank:
    """Read-only bonus-round challenges per level, loaded from ``challenges.yaml``."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path or _DATA_DIR / "challenges.yaml"
        self._levels = self._load_challenges()

    def challenges_for_level(self, level: int) -> List[BonusChallenge]:
        """Challenges for a 1-based *level*; an empty list outside the table."""
        if level < 1 or level > len(self._levels):
            return []
        return list(self._levels[level - 1])

    def level_count(self) -> int:
        return len(self._levels)

    def _load_challenges(self) -> List[List[BonusChallenge]]:
        if not self._path.exists():
            raise FileNotFoundError(f"Challenge bank not found: {self._path}")

        raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict) or not isinstance(raw.get("levels"), list):
            raise ValueError(f"{self._path.name}: expected YAML with a 'levels' list")

        levels: List[List[BonusChallenge]] = []
        for number, entries in enumerate(raw["levels"], start=1):
            challenges: List[BonusChallenge] = []
            # an empty level is allowed; the bonus round is skipped there
            for entry in entries or []:
                if not isinstance(entry, dict):
                    raise ValueError(f"{self._path.name}: level {number} has a malformed challenge")
                options = tuple(str(o) for o in entry.get("options") or ())
                correct = str(entry.get("correct", ""))
                if not options or correct not in options:
                    raise ValueError(
                        f"{self._path.name}: level {number} challenge {entry.get('letter')!r} "
                        f"must list its correct answer among its options"
                    )
                challenges.append(
                    BonusChallenge(
                        letter=str(entry.get("letter", "")),
                        options=options,
                        correct=correct,
                        sound=str(entry.get("sound", "")),
                        hint=str(entry.get("hint", "")),
                    )
                )
            levels.append(challenges)
        return levels
