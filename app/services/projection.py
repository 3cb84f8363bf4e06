from __future__ import annotations
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from app.config import MAX_LEVEL, MAX_SIMULATION_DAYS, XP_PER_DAY
from app.services.badges import badges_unlocking_on_day
from app.services.levels import calculate_level, xp_for_level

STATUS_MAX_LEVEL = "max_level"
STATUS_PROJECTED = "projected"
STATUS_UNREACHABLE = "unreachable"


@dataclass
class LevelProjection:
    current_level: int
    next_level: Optional[int]
    next_level_xp: Optional[int]
    xp_needed: int
    days_to_next_level: Optional[int]
    projected_date: Optional[date]
    status: str


def project_next_level(
    current_xp: int,
    streak_days: int,
    today: date,
    horizon_days: int = MAX_SIMULATION_DAYS,
) -> LevelProjection:
    """
    Estimate when the live XP reaches the next level if the streak continues.

    Walks forward one day at a time: each day adds XP_PER_DAY, and a day whose
    streak length equals a badge's ``required_days`` adds that badge's reward.
    Gives up after ``horizon_days`` and reports the level as unreachable.
    """
    current_level = calculate_level(current_xp)
    if current_level >= MAX_LEVEL:
        return LevelProjection(
            current_level=current_level,
            next_level=None,
            next_level_xp=None,
            xp_needed=0,
            days_to_next_level=None,
            projected_date=None,
            status=STATUS_MAX_LEVEL,
        )

    next_level_xp = xp_for_level(current_level + 1)
    simulated_xp = current_xp
    simulated_days = streak_days
    days_added = 0

    while simulated_xp < next_level_xp and days_added < horizon_days:
        days_added += 1
        simulated_days += 1
        simulated_xp += XP_PER_DAY
        for badge in badges_unlocking_on_day(simulated_days):
            simulated_xp += badge.xp_reward

    reached = simulated_xp >= next_level_xp
    return LevelProjection(
        current_level=current_level,
        next_level=current_level + 1,
        next_level_xp=next_level_xp,
        xp_needed=max(0, next_level_xp - current_xp),
        days_to_next_level=days_added if reached else None,
        projected_date=today + timedelta(days=days_added) if reached else None,
        status=STATUS_PROJECTED if reached else STATUS_UNREACHABLE,
    )
