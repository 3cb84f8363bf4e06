import math

from app.config import MAX_LEVEL, XP_CONSTANT


def calculate_level(xp: int) -> int:
    """Level = floor(sqrt(XP / 100)), clamped to [1, MAX_LEVEL]."""
    level = math.isqrt(max(0, int(xp)) // XP_CONSTANT)
    return min(max(level, 1), MAX_LEVEL)


def xp_for_level(level: int) -> int:
    return XP_CONSTANT * level ** 2


def progress_to_next_level(xp: int) -> float:
    """Percentage (0-100) of the way from the current level's threshold to the next one."""
    current_level = calculate_level(xp)
    if current_level >= MAX_LEVEL:
        return 100.0

    current_level_xp = xp_for_level(current_level)
    next_level_xp = xp_for_level(current_level + 1)
    progress = (xp - current_level_xp) / (next_level_xp - current_level_xp) * 100
    return min(100.0, max(0.0, progress))
