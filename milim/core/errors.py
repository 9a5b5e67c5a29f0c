from __future__ import annotations


class GameInvariantError(RuntimeError):
    """Raised when the game controller is driven into a state it should never reach.

    These are programming errors (e.g. validating an answer with no current word),
    not game conditions such as running out of hints or lives.
    """
