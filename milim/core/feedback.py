"""Outbound notifications from the game controller.

:class:`GameFeedback` is the audio/haptics style collaborator: one method per
moment worth a sound or a buzz. :class:`GameEvent` is what state-change
subscribers (the UI) receive after every transition.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EventKind(Enum):
    STARTED = "started"
    RESTORED = "restored"
    WORD_READY = "word_ready"
    SELECTION_CHANGED = "selection_changed"
    CORRECT = "correct"
    WRONG = "wrong"
    HINT = "hint"
    LEVEL_UP = "level_up"
    BONUS_STARTED = "bonus_started"
    BONUS_TICK = "bonus_tick"
    BONUS_RESOLVED = "bonus_resolved"
    GAME_OVER = "game_over"
    COMPLETED = "completed"


@dataclass(frozen=True)
class GameEvent:
    kind: EventKind
    message: str = ""
    points: int = 0


class GameFeedback:
    """No-op base; subclasses override the cues they care about."""

    def on_correct_answer(self) -> None:
        pass

    def on_wrong_answer(self) -> None:
        pass

    def on_hint_used(self) -> None:
        pass

    def on_level_up(self) -> None:
        pass

    def on_bonus_round_start(self) -> None:
        pass

    def on_game_over(self) -> None:
        pass

    def on_game_complete(self) -> None:
        pass

    def on_letter_selected(self) -> None:
        pass

    def on_button_tap(self) -> None:
        pass
