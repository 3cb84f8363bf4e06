"""
XP accrual rules.

A streak contributes XP in two different views:

- Ledger (persisted ``users.total_xp``): an open streak is worth only the
  start bonus; its day and badge XP are credited when it is closed. Streaks
  recorded directly as closed are credited in full at creation.
- Live (recomputed on every read): the active streak is valued with the
  closed-streak formula as if it ended now, and the goal badge is evaluated
  against the user's current goal.

The goal badge never contributes XP to either view.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional

import pytz

from app.config import START_BONUS, XP_PER_DAY
from app.models.streak import Streak
from app.services.badges import GOAL_BADGE_ID, badges_earned_for_days, is_goal_reached
from app.services.levels import calculate_level, progress_to_next_level
from app.utils.dates import calendar_days_between, resolve_timezone, utcnow
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class LiveView:
    """XP/level/badges of the active streak as of ``as_of``. Never persisted."""
    days: int
    xp: int
    level: int
    progress_percent: float
    unlocked_badge_ids: List[str] = field(default_factory=list)
    goal: int = 0
    goal_reached: bool = False
    goal_percent: int = 0
    start_date: Optional[datetime] = None


def has_valid_start(streak: Streak) -> bool:
    return isinstance(streak.start_date, datetime)


def streak_timezone(streak: Streak, tz: pytz.BaseTzInfo) -> pytz.BaseTzInfo:
    """Zone a closed streak was credited in; ``tz`` for the open streak and for rows without one."""
    if streak.end_date is not None and streak.timezone:
        return resolve_timezone(streak.timezone)
    return tz


def streak_days(streak: Streak, tz: pytz.BaseTzInfo, now: Optional[datetime] = None) -> Optional[int]:
    """
    Calendar days from start to end (or to ``now`` for the open streak), floored at 0.

    A closed streak is counted in the zone stored on it, so later timezone
    changes of the user do not move its value. Returns None for a streak
    without a usable start date.
    """
    if not has_valid_start(streak):
        return None
    tz = streak_timezone(streak, tz)
    end = streak.end_date if streak.end_date is not None else (now or utcnow())
    return max(0, calendar_days_between(streak.start_date, end, tz))


def badge_xp_for_days(days: int) -> int:
    return sum(badge.xp_reward for badge in badges_earned_for_days(days))


def closed_contribution(days: int) -> int:
    """XP credited for a closed streak lasting ``days`` calendar days."""
    days = max(0, days)
    return START_BONUS + days * XP_PER_DAY + badge_xp_for_days(days)


def relapse_credit(days: int) -> int:
    """XP credited when the active streak is ended: day XP only, badges are not added here."""
    return max(0, days) * XP_PER_DAY


def ledger_contribution(streak: Streak, tz: pytz.BaseTzInfo) -> int:
    """
    What the ledger holds for ``streak`` according to its own stored data.

    Used both to deduct on delete and to recalculate from scratch.
    """
    days = streak_days(streak, tz)
    if days is None:
        logger.warning(f"Skipping streak {streak.id} with invalid start date")
        return 0
    if streak.end_date is None:
        return START_BONUS
    return closed_contribution(days)


def total_ledger_contribution(streaks: Iterable[Streak], tz: pytz.BaseTzInfo) -> int:
    return sum(ledger_contribution(streak, tz) for streak in streaks)


def live_xp(days: int) -> int:
    """Live value of an active streak ``days`` long."""
    return closed_contribution(days)


def build_live_view(
    active_streak: Optional[Streak],
    goal: Optional[int],
    tz: pytz.BaseTzInfo,
    now: Optional[datetime] = None,
) -> LiveView:
    goal = goal or 0
    days = streak_days(active_streak, tz, now) if active_streak is not None else None
    if days is None:
        if active_streak is not None:
            logger.warning(f"Active streak {active_streak.id} has invalid start date; showing empty live view")
        return LiveView(
            days=0,
            xp=0,
            level=calculate_level(0),
            progress_percent=progress_to_next_level(0),
            goal=goal,
        )

    xp = live_xp(days)
    unlocked = [badge.id for badge in badges_earned_for_days(days)]
    goal_reached = is_goal_reached(days, goal)
    if goal_reached:
        unlocked.append(GOAL_BADGE_ID)

    return LiveView(
        days=days,
        xp=xp,
        level=calculate_level(xp),
        progress_percent=progress_to_next_level(xp),
        unlocked_badge_ids=unlocked,
        goal=goal,
        goal_reached=goal_reached,
        goal_percent=min(100, round(days / goal * 100)) if goal > 0 else 0,
        start_date=active_streak.start_date,
    )
