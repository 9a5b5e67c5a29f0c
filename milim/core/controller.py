"""Top-level game state machine.

Phases::

    NOT_STARTED -> IN_PROGRESS <-> IN_BONUS_ROUND
    IN_PROGRESS -> GAME_OVER   (lives run out)
    IN_PROGRESS -> COMPLETED   (every word of the last level solved)
    IN_PROGRESS, IN_BONUS_ROUND -> NOT_STARTED   (teardown)

All session mutation goes through the public methods of :class:`GameController`.
Delayed follow-ups (the pause after a correct answer, the short wait before a
hint-completed word is checked, the bonus result screen) are scheduled on the
host's :class:`Scheduler` and tagged with the session epoch, so a callback
that belongs to an abandoned game does nothing when it fires.
"""

from __future__ import annotations

import logging
import random
import time
from enum import Enum, auto
from typing import Callable, Iterable, List, Optional

from milim.core import puzzle
from milim.core.bonus import BonusOutcome, BonusRound, BonusState
from milim.core.config import DEFAULT_RULES, DEFAULT_TIMING, GameRules, GameTiming
from milim.core.errors import GameInvariantError
from milim.core.feedback import EventKind, GameEvent, GameFeedback
from milim.core.levels import LevelEngine
from milim.core.progress import GameDataStore
from milim.core.scheduler import Scheduler, TimerHandle
from milim.core.scoring import apply_bonus_reward, apply_correct, apply_hint, apply_incorrect
from milim.core.session import GameSession, SessionSnapshot
from milim.core.words import BonusChallenge, ChallengeBank, WordBank

logger = logging.getLogger(__name__)


class GamePhase(Enum):
    NOT_STARTED = auto()
    IN_PROGRESS = auto()
    IN_BONUS_ROUND = auto()
    GAME_OVER = auto()
    COMPLETED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (GamePhase.GAME_OVER, GamePhase.COMPLETED)


class GameController:
    def __init__(
        self,
        word_bank: WordBank,
        challenge_bank: ChallengeBank,
        scheduler: Scheduler,
        store: Optional[GameDataStore] = None,
        feedback: Iterable[GameFeedback] = (),
        rng: Optional[random.Random] = None,
        rules: GameRules = DEFAULT_RULES,
        timing: GameTiming = DEFAULT_TIMING,
        clock: Callable[[], float] = time.time,
        strict: bool = False,
    ) -> None:
        self._word_bank = word_bank
        self._challenge_bank = challenge_bank
        self._scheduler = scheduler
        self._store = store
        self._feedback: List[GameFeedback] = list(feedback)
        self._subscribers: List[Callable[[GameEvent], None]] = []
        self._rng = rng or random.Random()
        self._rules = rules
        self._timing = timing
        self._clock = clock
        self._strict = strict

        self._levels = LevelEngine(word_bank, self._rng, rules)
        self._bonus = BonusRound(
            scheduler,
            on_resolved=self._on_bonus_resolved,
            on_tick=self._on_bonus_tick,
            rng=self._rng,
            rules=rules,
            timing=timing,
        )
        self._session = GameSession.fresh(rules)
        self._phase = GamePhase.NOT_STARTED
        self._epoch = 0
        self._pending: List[TimerHandle] = []
        self._validation_pending = False
        self._started_at: Optional[float] = None
        self._result_recorded = False
        self._last_high_score_id: Optional[str] = None

    # -- read access --------------------------------------------------------

    @property
    def session(self) -> GameSession:
        return self._session

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def rules(self) -> GameRules:
        return self._rules

    @property
    def bonus_challenge(self) -> Optional[BonusChallenge]:
        return self._bonus.challenge

    @property
    def input_locked(self) -> bool:
        """True while a solved word is on display or a hinted answer awaits checking."""
        return self._session.animating_correct or self._validation_pending

    @property
    def last_high_score_id(self) -> Optional[str]:
        """Leaderboard id of the game that just ended, or None if it did not place."""
        return self._last_high_score_id

    def play_time(self) -> float:
        if self._started_at is None:
            return 0.0
        return max(0.0, self._clock() - self._started_at)

    def subscribe(self, callback: Callable[[GameEvent], None]) -> None:
        self._subscribers.append(callback)

    def add_feedback(self, feedback: GameFeedback) -> None:
        self._feedback.append(feedback)

    # -- lifecycle ----------------------------------------------------------

    def start(self) -> None:
        """Begin a fresh game: level 1, full lives, starting hints, nothing solved."""
        self._reset(GameSession.fresh(self._rules))
        if self._store is not None:
            self._store.clear_snapshot()
        logger.info("New game started")
        self._cue("on_button_tap")
        self._emit(EventKind.STARTED)
        self._setup_word()

    def restore(self, snapshot: Optional[SessionSnapshot]) -> bool:
        """Resume from *snapshot*; falls back to :meth:`start` if it is missing, stale or invalid.

        Returns True if the snapshot was used.
        """
        reason = self._reject_reason(snapshot)
        if reason is not None:
            logger.info("Not restoring saved game (%s); starting a new one", reason)
            self.start()
            return False

        session = GameSession.fresh(self._rules)
        session.level = snapshot.level
        session.score = snapshot.score
        session.lives = snapshot.lives
        session.hints_remaining = snapshot.hints_remaining
        session.streak = snapshot.streak
        session.completed_words = {length: set(scripts) for length, scripts in snapshot.completed_words.items()}
        session.words_completed = session.total_completed()
        self._reset(session)
        logger.info("Restored saved game at level %d with score %d", session.level, session.score)
        self._cue("on_button_tap")
        self._emit(EventKind.RESTORED)
        self._setup_word()
        return True

    def continue_game(self) -> bool:
        """Resume the stored game if there is one, otherwise start fresh."""
        snapshot = self._store.load_snapshot() if self._store is not None else None
        return self.restore(snapshot)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot.from_session(self._session, saved_at=self._clock())

    def save(self) -> bool:
        """Persist the running game so it can be continued later."""
        if self._store is None or self._phase not in (GamePhase.IN_PROGRESS, GamePhase.IN_BONUS_ROUND):
            return False
        self._store.save_snapshot(self.snapshot())
        logger.info("Saved game at level %d", self._session.level)
        return True

    def cancel_bonus_timer(self) -> None:
        """Abandon a running bonus round: no reward, and play moves on to the next level."""
        if self._phase is not GamePhase.IN_BONUS_ROUND:
            self._bonus.cancel()
            return
        self._cancel_timers()
        logger.info("Bonus round abandoned at level %d", self._session.level)
        self._finish_bonus_round()

    def teardown(self) -> None:
        """Cancel every timer and suspend the game.

        Nothing scheduled before this call will touch the session. An unfinished
        game drops back to ``NOT_STARTED``; only :meth:`start`, :meth:`restore`
        or :meth:`continue_game` bring it back, so save first if it should resume.
        """
        self._cancel_timers()
        self._clear_bonus_round()
        self._session.animating_correct = False
        if not self._phase.is_terminal:
            self._phase = GamePhase.NOT_STARTED
        logger.info("Game controller torn down")

    def name_high_score(self, name: str) -> bool:
        """Attach a player name to the leaderboard entry of the game that just ended."""
        if self._store is None or self._last_high_score_id is None:
            return False
        return self._store.update_high_score_name(self._last_high_score_id, name)

    # -- player actions -----------------------------------------------------

    def select_letter(self, index: int) -> None:
        """Tap a tile: append it to the answer, or take back the most recent pick."""
        if self._phase is not GamePhase.IN_PROGRESS or self.input_locked:
            return
        session = self._session
        word = session.current_word
        if word is None:
            self._invariant("select_letter called without a current word")
            return
        if index < 0 or index >= len(session.shuffled_letters):
            return

        if index in session.selected_indices:
            if session.selected_indices[-1] == index:
                session.selected_indices.pop()
                self._emit(EventKind.SELECTION_CHANGED)
            return

        if len(session.selected_indices) >= len(word.script):
            return
        session.selected_indices.append(index)
        self._cue("on_letter_selected")
        self._emit(EventKind.SELECTION_CHANGED)
        if len(session.selected_indices) == len(word.script):
            self._submit_answer()

    def reset_selection(self) -> None:
        if self._phase is not GamePhase.IN_PROGRESS or self.input_locked:
            return
        self._session.selected_indices = []
        self._cue("on_button_tap")
        self._emit(EventKind.SELECTION_CHANGED)

    def request_hint(self) -> None:
        """Reveal the next correct letter, discarding a wrong partial answer first."""
        if self._phase is not GamePhase.IN_PROGRESS or self.input_locked:
            return
        session = self._session
        if session.hints_remaining <= 0:
            return
        word = session.current_word
        if word is None:
            self._invariant("request_hint called without a current word")
            return

        position = 0
        if session.selected_indices:
            if puzzle.is_correct_prefix(session.selected_indices, session.shuffled_letters, word):
                position = len(session.selected_indices)
            else:
                session.selected_indices = []
        if position >= len(word.script):
            return

        letter = word.script[position]
        index = puzzle.find_unselected(letter, session.shuffled_letters, session.selected_indices)
        if index is None:
            self._invariant(f"letter {letter!r} missing from shuffled tiles")
            return

        session.selected_indices.append(index)
        apply_hint(session, self._rules)
        if self._store is not None:
            self._store.record_hint_used()
        logger.info("Hint used for position %d (%d left)", position + 1, session.hints_remaining)
        self._cue("on_hint_used")
        self._emit(EventKind.HINT, f"Hint: Letter {position + 1} selected")

        if len(session.selected_indices) == len(word.script):
            self._validation_pending = True
            self._defer(self._timing.hint_validation_delay_s, self._check_hinted_answer)

    def select_bonus_option(self, option: str) -> Optional[BonusOutcome]:
        if self._phase is not GamePhase.IN_BONUS_ROUND:
            return None
        self._cue("on_button_tap")
        return self._bonus.select(option)

    # -- answer handling ----------------------------------------------------

    def _check_hinted_answer(self) -> None:
        self._validation_pending = False
        self._submit_answer()

    def _submit_answer(self) -> None:
        session = self._session
        word = session.current_word
        if word is None:
            self._invariant("answer submitted without a current word")
            return
        if len(session.selected_indices) != len(word.script):
            self._invariant(
                f"answer of {len(session.selected_indices)} letters submitted for a {len(word.script)}-letter word"
            )
            session.selected_indices = []
            return

        if puzzle.validate(session.selected_indices, session.shuffled_letters, word):
            self._on_correct()
        else:
            self._on_incorrect()

    def _on_correct(self) -> None:
        session = self._session
        word = session.current_word
        length = self._levels.word_length(session.level)
        session.animating_correct = True
        multiplied = session.bonus_active
        points = apply_correct(session, len(word.script), self._rules)
        completed = session.completed_for(length)
        completed.add(word.script)
        session.level_progress_percent = self._levels.progress_percent(session.level, completed)

        if multiplied:
            message = f"+{points} points with streak bonus!"
        else:
            message = f"AWESOME! +{points} points!"
        logger.debug("Solved %s for %d points (streak %d)", word.script, points, session.streak)
        self._cue("on_correct_answer")
        self._emit(EventKind.CORRECT, message, points)
        self._defer(self._timing.correct_answer_window_s, self._advance_after_correct)

    def _advance_after_correct(self) -> None:
        session = self._session
        session.animating_correct = False
        completed = session.completed_for(self._levels.word_length(session.level))
        if not self._levels.is_exhausted(session.level, completed):
            self._setup_word()
        elif session.level < self._rules.max_level:
            self._start_bonus_round()
        else:
            self._complete()

    def _on_incorrect(self) -> None:
        session = self._session
        out_of_lives = apply_incorrect(session)
        session.selected_indices = []
        self._cue("on_wrong_answer")
        if out_of_lives:
            self._game_over()
            return
        self._emit(EventKind.WRONG, "Try again! Lost 1 life.")

    def _setup_word(self) -> None:
        session = self._session
        while True:
            completed = session.completed_for(self._levels.word_length(session.level))
            word = self._levels.next_word(session.level, completed)
            if word is not None:
                break
            if session.level >= self._rules.max_level:
                self._complete()
                return
            # nothing left at this level: move straight on
            session.level += 1
            session.level_progress_percent = 0.0
            self._announce_level_up()

        session.current_word = word
        session.shuffled_letters = puzzle.shuffle(word, self._rng)
        session.selected_indices = []
        session.animating_correct = False
        session.level_progress_percent = self._levels.progress_percent(session.level, completed)
        self._emit(EventKind.WORD_READY)

    def _announce_level_up(self) -> None:
        length = self._levels.word_length(self._session.level)
        logger.info("Level up: now at level %d (%d-letter words)", self._session.level, length)
        self._cue("on_level_up")
        self._emit(EventKind.LEVEL_UP, f"LEVEL UP! Now playing with {length} letter words!")

    # -- bonus round --------------------------------------------------------

    def _start_bonus_round(self) -> None:
        session = self._session
        self._phase = GamePhase.IN_BONUS_ROUND
        session.in_bonus_round = True
        session.selected_indices = []
        logger.info("Bonus round at level %d", session.level)
        self._bonus.start(self._challenge_bank.challenges_for_level(session.level))
        if self._bonus.state is BonusState.ACTIVE:
            self._cue("on_bonus_round_start")
            session.current_bonus_challenge = self._bonus.challenge
            session.bonus_time_remaining = self._bonus.time_remaining
            self._emit(EventKind.BONUS_STARTED)

    def _on_bonus_tick(self, remaining: int) -> None:
        self._session.bonus_time_remaining = remaining
        self._emit(EventKind.BONUS_TICK)

    def _on_bonus_resolved(self, outcome: BonusOutcome) -> None:
        session = self._session
        session.bonus_time_remaining = self._bonus.time_remaining
        if outcome is BonusOutcome.UNAVAILABLE:
            self._finish_bonus_round()
            return

        if self._store is not None:
            self._store.record_bonus_round(outcome.rewarded)
        delay = 0.0
        if outcome is BonusOutcome.SUCCESS:
            apply_bonus_reward(session, self._rules)
            message = (
                f"CORRECT! +{self._rules.bonus_reward_score} points "
                f"and {self._rules.bonus_reward_hints} bonus hints!"
            )
            delay = self._timing.bonus_success_delay_s
        elif outcome is BonusOutcome.WRONG_ANSWER:
            hint = self._bonus.challenge.hint if self._bonus.challenge is not None else ""
            message = f"Not quite right! Hint: {hint}"
            delay = self._timing.bonus_failure_delay_s
        else:
            message = "Time's up!"
        self._emit(EventKind.BONUS_RESOLVED, message)

        if delay > 0:
            self._defer(delay, self._finish_bonus_round)
        else:
            self._finish_bonus_round()

    def _finish_bonus_round(self) -> None:
        session = self._session
        self._bonus.acknowledge()
        self._clear_bonus_round()
        self._phase = GamePhase.IN_PROGRESS

        if session.level >= self._rules.max_level:
            self._complete()
            return
        session.level += 1
        session.level_progress_percent = 0.0
        self._announce_level_up()
        self._setup_word()

    def _clear_bonus_round(self) -> None:
        session = self._session
        session.in_bonus_round = False
        session.current_bonus_challenge = None
        session.bonus_time_remaining = 0

    # -- endings ------------------------------------------------------------

    def _game_over(self) -> None:
        self._phase = GamePhase.GAME_OVER
        self._cancel_timers()
        logger.info("Game over. Final score: %d", self._session.score)
        self._cue("on_game_over")
        self._emit(EventKind.GAME_OVER, "GAME OVER!")
        self._record_result()

    def _complete(self) -> None:
        session = self._session
        session.all_words_done = True
        session.animating_correct = False
        session.current_word = None
        session.shuffled_letters = []
        session.selected_indices = []
        self._phase = GamePhase.COMPLETED
        self._cancel_timers()
        logger.info("Game completed at level %d with score %d", session.level, session.score)
        self._cue("on_game_complete")
        self._emit(EventKind.COMPLETED, "You finished every word!")
        self._record_result()

    def _record_result(self) -> None:
        if self._result_recorded or self._store is None:
            return
        self._result_recorded = True
        session = self._session
        words_completed = session.total_completed()
        self._store.record_game_completion(session.score, session.level, words_completed, self.play_time())
        self._last_high_score_id = self._store.record_high_score(session.score, session.level, words_completed)
        learned = []
        for scripts in session.completed_words.values():
            for script in sorted(scripts):
                word = self._word_bank.find(script)
                if word is not None:
                    learned.append(word)
        self._store.record_learned_words(learned)
        self._store.clear_snapshot()

    # -- plumbing -----------------------------------------------------------

    def _reset(self, session: GameSession) -> None:
        self._cancel_timers()
        self._session = session
        self._phase = GamePhase.IN_PROGRESS
        self._validation_pending = False
        self._started_at = self._clock()
        self._result_recorded = False
        self._last_high_score_id = None

    def _reject_reason(self, snapshot: Optional[SessionSnapshot]) -> Optional[str]:
        if snapshot is None:
            return "no saved game"
        if snapshot.is_stale(self._clock(), self._rules):
            return f"older than {self._rules.snapshot_max_age_days} days"
        if not 1 <= snapshot.level <= self._rules.max_level:
            return f"level {snapshot.level} out of range"
        if not 0 < snapshot.lives <= self._rules.max_lives:
            return f"{snapshot.lives} lives"
        if snapshot.score < 0 or snapshot.hints_remaining < 0 or snapshot.streak < 0:
            return "negative counters"
        return None

    def _cancel_timers(self) -> None:
        self._epoch += 1
        self._bonus.cancel()
        for handle in self._pending:
            handle.cancel()
        self._pending = []
        self._validation_pending = False

    def _defer(self, delay_s: float, action: Callable[[], None]) -> None:
        epoch = self._epoch

        def fire() -> None:
            if epoch != self._epoch:
                logger.debug("Dropping stale follow-up %s", action.__name__)
                return
            action()

        self._pending = [h for h in self._pending if h.active]
        self._pending.append(self._scheduler.call_later(delay_s, fire))

    def _invariant(self, message: str) -> None:
        logger.error("Invariant violated: %s", message)
        if self._strict:
            raise GameInvariantError(message)

    def _emit(self, kind: EventKind, message: str = "", points: int = 0) -> None:
        event = GameEvent(kind=kind, message=message, points=points)
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception("Game event subscriber failed on %s", kind.value)

    def _cue(self, name: str) -> None:
        for feedback in self._feedback:
            try:
                getattr(feedback, name)()
            except Exception:
                logger.exception("Feedback %s failed", name)
