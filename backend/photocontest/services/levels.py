from __future__ import annotations
from dataclasses import dataclass
from math import isqrt

XP_LEVEL_FACTOR = 50  # xp_for_level(L) = L² × 50
LEVEL_FORMULA = "level² × 50"


def xp_for_level(level: int) -> int:
    if level < 0:
        raise ValueError("level must be >= 0")
    return level * level * XP_LEVEL_FACTOR


def level_for_xp(xp: int) -> int:
    """Largest level L with xp_for_level(L) <= xp. Exact integer inversion."""
    if xp <= 0:
        return 0
    # floor(sqrt(xp / 50)) == isqrt(xp // 50) for integer xp >= 0
    return isqrt(int(xp) // XP_LEVEL_FACTOR)


@dataclass(frozen=True)
class LevelProgress:
    level: int
    total_xp: int
    current_level_xp: int
    next_level_xp: int
    xp_in_current_level: int
    xp_needed: int
    progress_percent: float


def progress(xp: int, level: int | None = None) -> LevelProgress:
    if level is None:
        level = level_for_xp(xp)
    current_level_xp = xp_for_level(level)
    next_level_xp = xp_for_level(level + 1)
    xp_in_current_level = xp - current_level_xp
    span = next_level_xp - current_level_xp
    pct = (xp_in_current_level / span) * 100 if span > 0 else 0.0
    return LevelProgress(
        level=level,
        total_xp=xp,
        current_level_xp=current_level_xp,
        next_level_xp=next_level_xp,
        xp_in_current_level=xp_in_current_level,
        xp_needed=next_level_xp - xp,
        progress_percent=round(min(100.0, max(0.0, pct)), 2),
    )
