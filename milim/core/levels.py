from __future__ import annotations

import random
from typing import AbstractSet, List, Optional

from milim.core.config import DEFAULT_RULES, GameRules
from milim.core.words import Word, WordBank


def word_length_for_level(level: int, rules: GameRules = DEFAULT_RULES) -> int:
    """Level 1 plays two-letter words, level 2 three-letter words, and so on up to the cap."""
    if level < rules.max_level:
        return level + 1
    return rules.max_word_length


class LevelEngine:
    """Chooses the next word for a level and reports how far through the level a player is."""

    def __init__(
        self,
        word_bank: WordBank,
        rng: Optional[random.Random] = None,
        rules: GameRules = DEFAULT_RULES,
    ) -> None:
        self._bank = word_bank
        self._rng = rng or random.Random()
        self._rules = rules

    @property
    def word_bank(self) -> WordBank:
        return self._bank

    def word_length(self, level: int) -> int:
        return word_length_for_level(level, self._rules)

    def remaining_words(self, level: int, completed: AbstractSet[str]) -> List[Word]:
        words = self._bank.words_for_length(self.word_length(level))
        return [word for word in words if word.script not in completed]

    def next_word(self, level: int, completed: AbstractSet[str]) -> Optional[Word]:
        """Pick an unplayed word for *level* uniformly at random.

        Returns None when the level is exhausted (or has no words at all).
        """
        candidates = self.remaining_words(level, completed)
        if not candidates:
            return None
        return self._rng.choice(candidates)

    def is_exhausted(self, level: int, completed: AbstractSet[str]) -> bool:
        return not self.remaining_words(level, completed)

    def progress_percent(self, level: int, completed: AbstractSet[str]) -> float:
        total = len(self._bank.words_for_length(self.word_length(level)))
        if total == 0:
            return 0.0
        return min(100.0, 100.0 * len(completed) / total)
