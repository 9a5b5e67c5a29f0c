"""Tests for milim.core.progress – leaderboard, dictionary, statistics and saved game."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from conftest import FakeClock
from milim.core.progress import GameDataStore, GameStatistics
from milim.core.session import SessionSnapshot
from milim.core.words import Word

DAY = 24 * 60 * 60

AV = Word("אב", "av", "father")
GAN = Word("גן", "gan", "garden")
YOM = Word("יום", "yom", "day")


def reopen(store: GameDataStore, clock: FakeClock) -> GameDataStore:
    return GameDataStore(store.file_path, clock=clock)


# ---------------------------------------------------------------------------
# Fresh state
# ---------------------------------------------------------------------------

class TestFresh:
    def test_no_file_gives_defaults(self, store: GameDataStore):
        assert store.high_scores() == []
        assert store.learned_words() == []
        assert store.statistics == GameStatistics()
        assert store.load_snapshot() is None
        assert not store.file_path.exists()

    def test_default_location(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("MILIM_HOME", str(tmp_path / "home"))
        assert GameDataStore().file_path == tmp_path / "home" / "progress.json"


# ---------------------------------------------------------------------------
# High scores
# ---------------------------------------------------------------------------

class TestHighScores:
    def test_sorted_descending(self, store: GameDataStore):
        for score in (50, 200, 120):
            store.record_high_score(score, 2, 4)
        assert [h.score for h in store.high_scores()] == [200, 120, 50]

    def test_zero_score_not_recorded(self, store: GameDataStore):
        assert store.record_high_score(0, 1, 0) is None
        assert store.high_scores() == []

    def test_eleventh_entry_drops_lowest(self, store: GameDataStore):
        for score in range(10, 110, 10):
            store.record_high_score(score, 1, 1)
        assert store.record_high_score(55, 1, 1) is not None
        scores = [h.score for h in store.high_scores()]
        assert len(scores) == 10
        assert 10 not in scores
        assert scores == sorted(scores, reverse=True)

    def test_too_low_for_full_board(self, store: GameDataStore):
        for score in range(10, 110, 10):
            store.record_high_score(score, 1, 1)
        assert store.record_high_score(5, 1, 1) is None
        assert min(h.score for h in store.high_scores()) == 10

    def test_tie_ranks_below_existing(self, store: GameDataStore):
        first = store.record_high_score(80, 1, 1)
        second = store.record_high_score(80, 2, 2)
        assert [h.id for h in store.high_scores()] == [first, second]

    def test_new_best_updates_statistics(self, store: GameDataStore):
        store.record_high_score(70, 1, 1)
        assert store.statistics.highest_score == 70
        assert store.statistics.games_played == 0

    def test_update_name(self, store: GameDataStore, clock: FakeClock):
        entry_id = store.record_high_score(70, 1, 1)
        assert store.update_high_score_name(entry_id, "  Dana ")
        assert not store.update_high_score_name("missing", "x")
        assert reopen(store, clock).high_scores()[0].player_name == "Dana"

    def test_entry_fields(self, store: GameDataStore, clock: FakeClock):
        store.record_high_score(90, 3, 12)
        [entry] = store.high_scores()
        assert (entry.score, entry.level, entry.words_completed, entry.date) == (90, 3, 12, clock.now)


# ---------------------------------------------------------------------------
# Learned words
# ---------------------------------------------------------------------------

class TestLearnedWords:
    def test_deduplicated(self, store: GameDataStore):
        assert store.record_learned_words([AV, GAN]) == 2
        assert store.record_learned_words([AV, YOM]) == 1
        assert [w.script for w in store.learned_words()] == ["אב", "גן", "יום"]
        assert store.statistics.total_words_learned == 3

    def test_filter_by_level(self, store: GameDataStore):
        store.record_learned_words([AV, GAN, YOM])
        assert store.learned_words(level=2) == [YOM]

    def test_level_and_search_combine(self, store: GameDataStore):
        store.record_learned_words([AV, GAN, YOM])
        assert store.learned_words(level=None, search="") == [AV, GAN, YOM]
        assert store.learned_words(level=1, search="gar") == [GAN]
        assert store.learned_words(level=2, search="gar") == []

    @pytest.mark.parametrize("term", ["gar", "GAN", "גן"])
    def test_search(self, store: GameDataStore, term: str):
        store.record_learned_words([AV, GAN, YOM])
        assert store.learned_words(search=term) == [GAN]

    def test_persisted(self, store: GameDataStore, clock: FakeClock):
        store.record_learned_words([YOM])
        assert reopen(store, clock).learned_words() == [YOM]

    def test_hebrew_written_unescaped(self, store: GameDataStore):
        store.record_learned_words([YOM])
        assert "יום" in store.file_path.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

class TestStatistics:
    def test_game_completion(self, store: GameDataStore):
        store.record_game_completion(100, 3, 8, 60.0)
        store.record_game_completion(50, 2, 4, 30.0)
        stats = store.statistics
        assert stats.games_played == 2
        assert stats.total_score == 150
        assert stats.average_score == 75
        assert stats.highest_score == 100
        assert stats.highest_level == 3
        assert stats.total_words_completed == 12
        assert stats.average_game_time == 45.0

    def test_hints_and_bonus_rounds(self, store: GameDataStore):
        store.record_hint_used()
        store.record_bonus_round(True)
        store.record_bonus_round(False)
        stats = store.statistics
        assert stats.hints_used == 1
        assert stats.bonus_rounds_played == 2
        assert stats.bonus_rounds_completed == 1

    def test_reset(self, store: GameDataStore, clock: FakeClock):
        store.record_hint_used()
        store.reset_statistics()
        assert reopen(store, clock).statistics == GameStatistics()


# ---------------------------------------------------------------------------
# Saved game
# ---------------------------------------------------------------------------

class TestSavedGame:
    def test_round_trip(self, store: GameDataStore, clock: FakeClock):
        snap = SessionSnapshot(3, 90, 7, 10, 1, {2: ["אב"], 3: ["יום"]}, clock.now)
        store.save_snapshot(snap)
        assert reopen(store, clock).load_snapshot() == snap

    def test_clear(self, store: GameDataStore, clock: FakeClock):
        store.save_snapshot(SessionSnapshot(1, 0, 10, 15, 0, {}, clock.now))
        store.clear_snapshot()
        assert not reopen(store, clock).has_snapshot()

    def test_stale_discarded_on_load(self, store: GameDataStore, clock: FakeClock):
        store.save_snapshot(SessionSnapshot(2, 40, 8, 12, 0, {}, clock.now))
        clock.now += 31 * DAY
        fresh = reopen(store, clock)
        assert fresh.load_snapshot() is None
        assert json.loads(store.file_path.read_text(encoding="utf-8"))["saved_game"] is None

    def test_goes_stale_while_open(self, store: GameDataStore, clock: FakeClock):
        store.save_snapshot(SessionSnapshot(2, 40, 8, 12, 0, {}, clock.now))
        clock.now += 30 * DAY + 1
        assert not store.has_snapshot()


# ---------------------------------------------------------------------------
# Corrupt files
# ---------------------------------------------------------------------------

class TestCorruptData:
    def test_invalid_json(self, tmp_path: Path, clock: FakeClock, caplog):
        path = tmp_path / "progress.json"
        path.write_text("{not json", encoding="utf-8")
        store = GameDataStore(path, clock=clock)
        assert store.high_scores() == []
        assert "Could not load game data" in caplog.text

    def test_not_an_object(self, tmp_path: Path, clock: FakeClock):
        path = tmp_path / "progress.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert GameDataStore(path, clock=clock).statistics == GameStatistics()

    def test_sections_fall_back_independently(self, tmp_path: Path, clock: FakeClock):
        path = tmp_path / "progress.json"
        payload = {
            "high_scores": [{"bogus": 1}],
            "learned_words": [{"script": "יום", "transliteration": "yom", "meaning": "day"}],
            "statistics": {"games_played": 4},
            "saved_game": {"level": "x"},
        }
        path.write_text(json.dumps(payload), encoding="utf-8")
        store = GameDataStore(path, clock=clock)
        assert store.high_scores() == []
        assert store.learned_words() == [YOM]
        assert store.statistics.games_played == 4
        assert store.load_snapshot() is None

    def test_unwritable_location_is_logged(self, tmp_path: Path, clock: FakeClock, caplog):
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        store = GameDataStore(blocker / "progress.json", clock=clock)
        store.record_hint_used()
        assert store.statistics.hints_used == 1
        assert "Could not save game data" in caplog.text
