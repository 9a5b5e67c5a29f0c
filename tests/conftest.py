"""Shared fixtures: tiny word/challenge banks and a controller on virtual time."""

from __future__ import annotations

import random
from pathlib import Path
from typing import List

import pytest

from milim.core import puzzle
from milim.core.controller import GameController
from milim.core.progress import GameDataStore
from milim.core.scheduler import ManualScheduler
from milim.core.words import ChallengeBank, WordBank

SMALL_WORDS = """\
2:
  - {script: "אב", transliteration: "av", meaning: "father"}
  - {script: "גן", transliteration: "gan", meaning: "garden"}
3:
  - {script: "יום", transliteration: "yom", meaning: "day"}
"""

SMALL_CHALLENGES = """\
levels:
  - - {letter: "בֵּ", options: ["ve", "bey", "bah"], correct: "bey", sound: "tzere", hint: "e as in they"}
  - []
"""


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture()
def small_words_file(tmp_path: Path) -> Path:
    path = tmp_path / "words.yaml"
    path.write_text(SMALL_WORDS, encoding="utf-8")
    return path


@pytest.fixture()
def small_challenges_file(tmp_path: Path) -> Path:
    path = tmp_path / "challenges.yaml"
    path.write_text(SMALL_CHALLENGES, encoding="utf-8")
    return path


@pytest.fixture()
def word_bank(small_words_file: Path) -> WordBank:
    return WordBank(small_words_file)


@pytest.fixture()
def challenge_bank(small_challenges_file: Path) -> ChallengeBank:
    return ChallengeBank(small_challenges_file)


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(tmp_path: Path, clock: FakeClock) -> GameDataStore:
    """GameDataStore backed by a temp file so tests don't touch ~/.milim."""
    return GameDataStore(tmp_path / "progress.json", clock=clock)


@pytest.fixture()
def controller(word_bank, challenge_bank, scheduler, store, clock) -> GameController:
    return GameController(
        word_bank,
        challenge_bank,
        scheduler,
        store=store,
        rng=random.Random(7),
        clock=clock,
        strict=True,
    )


def solve(controller: GameController) -> None:
    """Tap the tiles that spell the current word."""
    session = controller.session
    picked: List[int] = []
    for letter in session.current_word.script:
        index = puzzle.find_unselected(letter, session.shuffled_letters, picked)
        picked.append(index)
    for index in picked:
        controller.select_letter(index)


def answer_wrong(controller: GameController) -> None:
    """Tap the tiles left to right; the shuffle never shows the solved order."""
    for index in range(len(controller.session.shuffled_letters)):
        controller.select_letter(index)
