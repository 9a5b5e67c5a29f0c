"""Timed bonus round played between levels.

A round goes ``IDLE -> ACTIVE -> RESOLVED -> IDLE``. While active, a
one-second tick counts down from the configured duration; picking an option
or running out of time resolves it. Whatever the exit path, the tick timer
is cancelled before the round leaves ``ACTIVE``.
"""

from __future__ import annotations

import logging
import random
from enum import Enum, auto
from typing import Callable, Optional, Sequence

from milim.core.config import DEFAULT_RULES, DEFAULT_TIMING, GameRules, GameTiming
from milim.core.scheduler import Scheduler, TimerHandle
from milim.core.words import BonusChallenge

logger = logging.getLogger(__name__)


class BonusState(Enum):
    IDLE = auto()
    ACTIVE = auto()
    RESOLVED = auto()


class BonusOutcome(Enum):
    SUCCESS = auto()
    WRONG_ANSWER = auto()
    TIMEOUT = auto()
    UNAVAILABLE = auto()  # no challenge defined for the level

    @property
    def rewarded(self) -> bool:
        return self is BonusOutcome.SUCCESS


class BonusRound:
    def __init__(
        self,
        scheduler: Scheduler,
        on_resolved: Callable[[BonusOutcome], None],
        on_tick: Optional[Callable[[int], None]] = None,
        rng: Optional[random.Random] = None,
        rules: GameRules = DEFAULT_RULES,
        timing: GameTiming = DEFAULT_TIMING,
    ) -> None:
        self._scheduler = scheduler
        self._on_resolved = on_resolved
        self._on_tick = on_tick
        self._rng = rng or random.Random()
        self._rules = rules
        self._timing = timing
        self._state = BonusState.IDLE
        self._challenge: Optional[BonusChallenge] = None
        self._outcome: Optional[BonusOutcome] = None
        self._time_remaining = 0
        self._timer: Optional[TimerHandle] = None

    @property
    def state(self) -> BonusState:
        return self._state

    @property
    def challenge(self) -> Optional[BonusChallenge]:
        return self._challenge

    @property
    def outcome(self) -> Optional[BonusOutcome]:
        return self._outcome

    @property
    def time_remaining(self) -> int:
        return self._time_remaining

    @property
    def timer_running(self) -> bool:
        return self._timer is not None and self._timer.active

    def start(self, challenges: Sequence[BonusChallenge]) -> None:
        if self._state is BonusState.ACTIVE:
            self.cancel()
        self._outcome = None
        if not challenges:
            logger.error("No bonus challenges available; skipping bonus round")
            self._challenge = None
            self._time_remaining = 0
            self._resolve(BonusOutcome.UNAVAILABLE)
            return
        self._challenge = self._rng.choice(list(challenges))
        self._time_remaining = self._rules.bonus_duration_s
        self._state = BonusState.ACTIVE
        self._timer = self._scheduler.call_every(self._timing.bonus_tick_s, self.tick)
        logger.info("Bonus round started with %s (%s)", self._challenge.letter, self._challenge.sound)

    def tick(self) -> None:
        """One second of countdown; times out at zero."""
        if self._state is not BonusState.ACTIVE:
            # a tick that outlived its round
            self._stop_timer()
            return
        self._time_remaining = max(0, self._time_remaining - 1)
        if self._on_tick is not None:
            self._on_tick(self._time_remaining)
        if self._time_remaining == 0:
            self._resolve(BonusOutcome.TIMEOUT)

    def select(self, option: str) -> Optional[BonusOutcome]:
        """Answer the challenge. Ignored unless a round is active."""
        if self._state is not BonusState.ACTIVE or self._challenge is None:
            return None
        if option == self._challenge.correct:
            outcome = BonusOutcome.SUCCESS
        else:
            outcome = BonusOutcome.WRONG_ANSWER
        self._resolve(outcome)
        return outcome

    def cancel(self) -> None:
        """Abandon the round without resolving it (session reset or teardown)."""
        self._stop_timer()
        self._state = BonusState.IDLE
        self._challenge = None
        self._time_remaining = 0

    def acknowledge(self) -> None:
        """Return a resolved round to IDLE once the game has moved on."""
        if self._state is BonusState.RESOLVED:
            self._state = BonusState.IDLE
            self._challenge = None

    def _resolve(self, outcome: BonusOutcome) -> None:
        self._stop_timer()
        self._state = BonusState.RESOLVED
        self._outcome = outcome
        logger.info("Bonus round resolved: %s", outcome.name.lower())
        self._on_resolved(outcome)

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
