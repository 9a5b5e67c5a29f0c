"""Tests for milim.core.scoring – points, streaks, lives and hints."""

from __future__ import annotations

import pytest

from milim.core.config import GameRules
from milim.core.scoring import (
    apply_bonus_reward,
    apply_correct,
    apply_hint,
    apply_incorrect,
    points_for_correct_answer,
)
from milim.core.session import GameSession


@pytest.fixture()
def session() -> GameSession:
    return GameSession.fresh()


class TestPoints:
    @pytest.mark.parametrize("length,expected", [(2, 20), (3, 30), (6, 60)])
    def test_without_streak(self, length: int, expected: int):
        assert points_for_correct_answer(length, False) == expected

    @pytest.mark.parametrize("length,expected", [(2, 30), (3, 45), (5, 75)])
    def test_with_streak(self, length: int, expected: int):
        assert points_for_correct_answer(length, True) == expected

    def test_multiplier_floors(self):
        rules = GameRules(points_per_letter=7)
        # 3 * 7 * 1.5 = 31.5
        assert points_for_correct_answer(3, True, rules) == 31


class TestApplyCorrect:
    def test_first_word_no_streak(self, session: GameSession):
        points = apply_correct(session, 2)
        assert points == 20
        assert session.score == 20
        assert session.streak == 1
        assert session.words_completed == 1

    def test_active_streak_multiplies(self, session: GameSession):
        session.streak = 3
        assert apply_correct(session, 3) == 45
        assert session.score == 45
        assert session.streak == 4

    def test_multiplier_uses_streak_before_answer(self, session: GameSession):
        session.streak = 2
        assert apply_correct(session, 2) == 20
        assert session.bonus_active
        assert apply_correct(session, 2) == 30

    def test_bonus_active_tracks_streak(self, session: GameSession):
        for _ in range(5):
            apply_correct(session, 2)
            assert session.bonus_active == (session.streak >= 3)
        apply_incorrect(session)
        assert not session.bonus_active


class TestApplyIncorrect:
    def test_breaks_streak_and_costs_life(self, session: GameSession):
        session.streak = 4
        assert apply_incorrect(session) is False
        assert session.streak == 0
        assert session.lives == 9

    def test_lives_never_negative(self, session: GameSession):
        results = [apply_incorrect(session) for _ in range(15)]
        assert session.lives == 0
        assert results.index(True) == 9

    def test_score_unchanged(self, session: GameSession):
        session.score = 40
        apply_incorrect(session)
        assert session.score == 40


class TestApplyHint:
    def test_spends_hint_and_penalty(self, session: GameSession):
        session.score = 12
        assert apply_hint(session)
        assert session.hints_remaining == 14
        assert session.score == 7

    def test_score_floor_zero(self, session: GameSession):
        session.score = 3
        apply_hint(session)
        assert session.score == 0

    def test_no_hints_left(self, session: GameSession):
        session.hints_remaining = 0
        session.score = 50
        assert not apply_hint(session)
        assert session.score == 50
        assert session.hints_remaining == 0


def test_bonus_reward(session: GameSession):
    session.hints_remaining = 2
    apply_bonus_reward(session)
    assert session.hints_remaining == 5
    assert session.score == 30
