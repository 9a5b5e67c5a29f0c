"""Tests for milim.core.session – session state and snapshots."""

from __future__ import annotations

import pytest

from milim.core.config import GameRules
from milim.core.session import GameSession, SessionSnapshot

DAY = 24 * 60 * 60


# ---------------------------------------------------------------------------
# GameSession
# ---------------------------------------------------------------------------

class TestGameSession:
    def test_fresh_defaults(self):
        s = GameSession.fresh()
        assert s.level == 1
        assert s.lives == s.max_lives == 10
        assert s.hints_remaining == 15
        assert s.score == 0
        assert not s.is_completed

    def test_fresh_from_rules(self):
        s = GameSession.fresh(GameRules(max_lives=3, starting_hints=1, streak_threshold=2))
        assert s.lives == 3
        assert s.hints_remaining == 1
        s.streak = 2
        assert s.bonus_active

    def test_completed_for_creates_bucket(self):
        s = GameSession()
        s.completed_for(3).add("יום")
        assert s.completed_words == {3: {"יום"}}
        assert s.total_completed() == 1

    def test_selected_text(self):
        s = GameSession(shuffled_letters=["ב", "א"], selected_indices=[1, 0])
        assert s.selected_text() == "אב"

    def test_game_over(self):
        s = GameSession(lives=0)
        assert s.is_game_over
        assert s.is_completed


# ---------------------------------------------------------------------------
# SessionSnapshot
# ---------------------------------------------------------------------------

class TestSnapshot:
    def test_from_session(self):
        s = GameSession(level=2, score=70, lives=8, hints_remaining=12, streak=1)
        s.completed_for(2).update({"גן", "אב"})
        s.completed_for(3)
        snap = SessionSnapshot.from_session(s, saved_at=100.0)
        assert snap.level == 2
        assert snap.score == 70
        assert snap.completed_words == {2: ["אב", "גן"]}
        assert snap.saved_at == 100.0

    def test_dict_uses_string_keys(self):
        snap = SessionSnapshot(1, 0, 10, 15, 0, {2: ["אב"]}, 5.0)
        data = snap.to_dict()
        assert data["completed_words"] == {"2": ["אב"]}
        assert SessionSnapshot.from_dict(data) == snap

    def test_from_dict_missing_key(self):
        with pytest.raises(KeyError):
            SessionSnapshot.from_dict({"level": 1})

    def test_from_dict_bad_words(self):
        with pytest.raises(ValueError):
            SessionSnapshot.from_dict(
                {"level": 1, "score": 0, "lives": 1, "hints_remaining": 0, "streak": 0,
                 "completed_words": ["אב"], "saved_at": 0}
            )

    def test_stale_after_thirty_days(self):
        snap = SessionSnapshot(1, 0, 10, 15, 0, {}, saved_at=0.0)
        assert not snap.is_stale(now=30 * DAY)
        assert snap.is_stale(now=30 * DAY + 1)
