"""Timers the game uses for countdowns and delayed follow-ups.

The core never sleeps or spins its own threads; it asks a :class:`Scheduler`
supplied by the host. :class:`ManualScheduler` runs on virtual time and is
what tests (and any headless host) use; the Qt host provides a QTimer-backed
implementation.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Callable, List, Optional, Tuple

Callback = Callable[[], None]


class TimerHandle:
    """A pending timer. ``cancel()`` is idempotent."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def active(self) -> bool:
        return not self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def _fired(self) -> None:
        # one-shot timers stop being active once they have run
        self._cancelled = True


class Scheduler:
    def call_later(self, delay_s: float, callback: Callback) -> TimerHandle:
        """Run *callback* once after *delay_s* seconds."""
        raise NotImplementedError

    def call_every(self, interval_s: float, callback: Callback) -> TimerHandle:
        """Run *callback* every *interval_s* seconds until the handle is cancelled."""
        raise NotImplementedError


class _ManualTimer(TimerHandle):
    def __init__(self, callback: Callback, interval_s: Optional[float]) -> None:
        super().__init__()
        self.callback = callback
        self.interval_s = interval_s


class ManualScheduler(Scheduler):
    """Deterministic scheduler driven by :meth:`advance`."""

    def __init__(self) -> None:
        self._now = 0.0
        self._queue: List[Tuple[float, int, _ManualTimer]] = []
        self._counter = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    def call_later(self, delay_s: float, callback: Callback) -> TimerHandle:
        timer = _ManualTimer(callback, None)
        self._push(self._now + max(0.0, delay_s), timer)
        return timer

    def call_every(self, interval_s: float, callback: Callback) -> TimerHandle:
        if interval_s <= 0:
            raise ValueError("interval must be positive")
        timer = _ManualTimer(callback, interval_s)
        self._push(self._now + interval_s, timer)
        return timer

    def pending(self) -> int:
        """Number of timers that can still fire."""
        return sum(1 for _, _, timer in self._queue if timer.active)

    def advance(self, seconds: float) -> None:
        """Move virtual time forward, firing every due callback in order."""
        deadline = self._now + seconds
        while self._queue and self._queue[0][0] <= deadline:
            due, _, timer = heapq.heappop(self._queue)
            if not timer.active:
                continue
            self._now = due
            if timer.interval_s is not None:
                self._push(due + timer.interval_s, timer)
            else:
                timer._fired()
            timer.callback()
        self._now = deadline

    def run_pending(self) -> None:
        """Fire everything already due without moving the clock."""
        self.advance(0.0)

    def _push(self, due: float, timer: _ManualTimer) -> None:
        heapq.heappush(self._queue, (due, next(self._counter), timer))
