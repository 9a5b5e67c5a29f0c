"""QTimer-backed scheduler for running the game inside the Qt event loop."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QObject, QTimer

from milim.core.scheduler import Callback, Scheduler, TimerHandle


class _QtTimerHandle(TimerHandle):
    def __init__(self, timer: QTimer) -> None:
        super().__init__()
        self._timer = timer

    def cancel(self) -> None:
        if self.active:
            self._timer.stop()
            self._timer.deleteLater()
        super().cancel()


class QtScheduler(Scheduler):
    def __init__(self, parent: Optional[QObject] = None) -> None:
        self._parent = parent

    def call_later(self, delay_s: float, callback: Callback) -> TimerHandle:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        handle = _QtTimerHandle(timer)

        def fire() -> None:
            handle._fired()
            timer.deleteLater()
            callback()

        timer.timeout.connect(fire)
        timer.start(max(0, int(delay_s * 1000)))
        return handle

    def call_every(self, interval_s: float, callback: Callback) -> TimerHandle:
        if interval_s <= 0:
            raise ValueError("interval must be positive")
        timer = QTimer(self._parent)
        timer.timeout.connect(callback)
        timer.start(int(interval_s * 1000))
        return _QtTimerHandle(timer)
