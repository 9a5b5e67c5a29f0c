"""Letter scrambling and answer checking for a single word."""

from __future__ import annotations

import random
from typing import List, Optional, Sequence

from milim.core.words import Word


def shuffle(word: Word, rng: Optional[random.Random] = None) -> List[str]:
    """Return the word's letters in a random order.

    Never returns the solved order when another arrangement exists, so a
    two-letter word like "אב" always comes back as ["ב", "א"].
    """
    rng = rng or random.Random()
    letters = list(word.script)
    if len(set(letters)) < 2:
        return letters
    while True:
        rng.shuffle(letters)
        if "".join(letters) != word.script:
            return letters


def assemble(indices: Sequence[int], shuffled: Sequence[str]) -> str:
    return "".join(shuffled[i] for i in indices)


def validate(indices: Sequence[int], shuffled: Sequence[str], target: Word) -> bool:
    """True iff the letters picked by *indices* spell the target exactly."""
    if len(indices) != len(target.script):
        return False
    if any(i < 0 or i >= len(shuffled) for i in indices):
        return False
    return assemble(indices, shuffled) == target.script


def is_correct_prefix(indices: Sequence[int], shuffled: Sequence[str], target: Word) -> bool:
    return target.script.startswith(assemble(indices, shuffled))


def find_unselected(letter: str, shuffled: Sequence[str], selected: Sequence[int]) -> Optional[int]:
    """Index of the first tile showing *letter* that has not been picked yet."""
    taken = set(selected)
    for i, candidate in enumerate(shuffled):
        if candidate == letter and i not in taken:
            return i
    return None
