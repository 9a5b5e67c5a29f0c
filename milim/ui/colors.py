"""Theme colors and color utilities for the UI."""

from __future__ import annotations

import re
from typing import Optional, Tuple


class GameColors:
    """Dark night-sky palette used across all screens."""

    BG_TOP = "#0f1419"
    BG_MIDDLE = "#16202a"
    BG_BOTTOM = "#1f2d3a"

    PRIMARY = "#4fc3f7"
    PRIMARY_LIGHT = "#8bf6ff"
    PRIMARY_DARK = "#0093c4"

    CORAL = "#ff8a65"
    AMBER = "#ffb74d"
    MINT = "#69f0ae"
    LAVENDER = "#b39ddb"
    ERROR = "#ef6060"

    CARD_BG = "rgba(255, 255, 255, 0.08)"
    CARD_BORDER = "rgba(255, 255, 255, 0.15)"

    TILE_BG = "#fdf6e3"
    TILE_SELECTED = "#78909c"
    TILE_TEXT = "#1a2a3a"

    TEXT_PRIMARY = "#ffffff"
    TEXT_SECONDARY = "#b0bec5"
    TEXT_MUTED = "#78909c"

    PROGRESS_TRACK = "rgba(255, 255, 255, 0.12)"


_HEX_COLOR = re.compile(r"#([0-9A-Fa-f]{2})([0-9A-Fa-f]{2})([0-9A-Fa-f]{2})")


def _channels(color: str) -> Optional[Tuple[int, int, int]]:
    match = _HEX_COLOR.fullmatch(color.strip())
    if match is None:
        return None
    r, g, b = (int(part, 16) for part in match.groups())
    return r, g, b


def blend_hex(a: str, b: str, t: float) -> str:
    """Mix ``#RRGGBB`` colors *a* and *b*; *t* runs from 0 (all a) to 1 (all b).

    Anything that is not a six-digit hex color comes back as *a*, untouched.
    """
    start, end = _channels(a), _channels(b)
    if start is None or end is None:
        return a
    weight = min(max(float(t), 0.0), 1.0)
    mixed = [int(lo + (hi - lo) * weight) for lo, hi in zip(start, end)]
    return "#" + "".join(f"{c:02X}" for c in mixed)


def countdown_color(remaining: int, total: int) -> str:
    """Mint when the bonus clock is full, fading to coral as it runs out."""
    if total <= 0:
        return GameColors.CORAL
    return blend_hex(GameColors.CORAL, GameColors.MINT, remaining / total)
