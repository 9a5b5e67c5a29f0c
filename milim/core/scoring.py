"""Points, streaks, lives and hints.

Each helper mutates a :class:`GameSession` in place and returns what the
controller needs to decide the next transition.
"""

from __future__ import annotations

import math

from milim.core.config import DEFAULT_RULES, GameRules
from milim.core.session import GameSession


def points_for_correct_answer(word_length: int, bonus_active: bool, rules: GameRules = DEFAULT_RULES) -> int:
    points = word_length * rules.points_per_letter
    if bonus_active:
        points = math.floor(points * rules.streak_multiplier)
    return points


def apply_correct(session: GameSession, word_length: int, rules: GameRules = DEFAULT_RULES) -> int:
    """Score a solved word. The multiplier applies if the streak was hot *before* this answer."""
    points = points_for_correct_answer(word_length, session.bonus_active, rules)
    session.score += points
    session.streak += 1
    session.words_completed += 1
    return points


def apply_incorrect(session: GameSession) -> bool:
    """Break the streak and take a life. Returns True when that was the last life."""
    session.streak = 0
    session.lives = max(0, session.lives - 1)
    return session.lives == 0


def apply_hint(session: GameSession, rules: GameRules = DEFAULT_RULES) -> bool:
    """Spend a hint and charge the penalty. Returns False (and changes nothing) if none are left."""
    if session.hints_remaining <= 0:
        return False
    session.hints_remaining -= 1
    session.score = max(0, session.score - rules.hint_penalty)
    return True


def apply_bonus_reward(session: GameSession, rules: GameRules = DEFAULT_RULES) -> None:
    session.hints_remaining += rules.bonus_reward_hints
    session.score += rules.bonus_reward_score
