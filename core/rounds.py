"""
Difficulty curve and game constants for Pattern Mirror.

Round number is the only input to difficulty: it fixes the grid side length
and the mirror the player has to apply to the pattern.
"""

from __future__ import annotations

from enum import Enum

# Game constants
MAX_ROUNDS = 10
MAX_LIVES = 3
POINTS_PER_ROUND = 10
PATTERN_DENSITY = 0.4

# Result display windows (seconds) before a deferred transition resolves
CORRECT_DELAY_SEC = 0.5
WRONG_DELAY_SEC = 0.6


class MirrorType(str, Enum):
    """Geometric transform applied to the pattern to obtain the target."""
    NONE = "none"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    BOTH = "both"


_MIRROR_LABELS = {
    MirrorType.NONE: "",
    MirrorType.HORIZONTAL: "MIRROR",
    MirrorType.VERTICAL: "MIRROR V",
    MirrorType.BOTH: "MIRROR HV",
}


def _check_round(round_num: int) -> int:
    if round_num < 1:
        raise ValueError(f"Round must be >= 1, got {round_num}")
    return round_num


def grid_size_for_round(round_num: int) -> int:
    """
    Grid side length for a round.

    Rounds 1-2 use 3x3, 3-4 use 4x4, 5-6 use 5x5 and everything from
    round 7 on uses 6x6.
    """
    _check_round(round_num)
    if round_num <= 2:
        return 3
    if round_num <= 4:
        return 4
    if round_num <= 6:
        return 5
    return 6


def mirror_type_for_round(round_num: int) -> MirrorType:
    """
    Mirror transform for a round.

    Only the horizontal mirror is used, from round 8 on. VERTICAL and BOTH
    are supported by the grid engine but not part of this curve.
    """
    _check_round(round_num)
    if round_num <= 7:
        return MirrorType.NONE
    return MirrorType.HORIZONTAL


def mirror_label(mirror_type: MirrorType | str) -> str:
    """Short badge text shown next to the board ("" when no mirror applies)."""
    return _MIRROR_LABELS[MirrorType(mirror_type)]


__all__ = [
    "MAX_ROUNDS",
    "MAX_LIVES",
    "POINTS_PER_ROUND",
    "PATTERN_DENSITY",
    "CORRECT_DELAY_SEC",
    "WRONG_DELAY_SEC",
    "MirrorType",
    "grid_size_for_round",
    "mirror_type_for_round",
    "mirror_label",
]
