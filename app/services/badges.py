from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class Badge:
    id: str
    name: str
    description: str
    icon: str
    required_days: int  # 0 marks the goal badge
    xp_reward: int

    @property
    def is_goal_badge(self) -> bool:
        return self.required_days == 0


GOAL_BADGE_ID = "goal_target"

BADGES: Tuple[Badge, ...] = (
    Badge("1_day", "First Step", "Complete 1 day", "footprints", 1, 100),
    Badge("2_days", "Double Down", "2 days streak", "zap", 2, 100),
    Badge("3_days", "Hat Trick", "3 days streak", "zap", 3, 100),
    Badge("5_days", "High Five", "5 days streak", "hand", 5, 100),
    Badge("1_week", "One Week", "7 days streak", "calendar", 7, 100),
    Badge("10_days", "Double Digits", "10 days streak", "hash", 10, 100),
    Badge("2_weeks", "Fortnight", "14 days streak", "shield", 14, 100),
    Badge("21_days", "Habit Former", "21 days streak", "repeat", 21, 100),
    Badge("1_month", "Month Master", "30 days streak", "moon", 30, 100),
    Badge("40_days", "Quarantine", "40 days streak", "lock", 40, 100),
    Badge("50_days", "Half Century", "50 days streak", "star", 50, 100),
    Badge("2_months", "Duo Months", "60 days streak", "moon", 60, 100),
    Badge("75_days", "Hard Mode", "75 days streak", "biceps", 75, 100),
    Badge("3_months", "Quarterly King", "90 days streak", "crown", 90, 100),
    Badge("100_days", "Centurion", "100 days streak", "award", 100, 100),
    Badge("4_months", "Seasoned", "120 days streak", "sun", 120, 100),
    Badge("5_months", "Dedicated", "150 days streak", "anchor", 150, 100),
    Badge("6_months", "Half Year Hero", "180 days streak", "medal", 180, 100),
    Badge("8_months", "Resilient", "240 days streak", "shield", 240, 100),
    Badge("9_months", "Rebirth", "270 days streak", "baby", 270, 100),
    Badge("1_year", "Year of Will", "365 days streak", "trophy", 365, 100),
    Badge("400_days", "Four Hundred", "400 days streak", "flame", 400, 100),
    Badge("500_days", "Five Hundred", "500 days streak", "rocket", 500, 100),
    Badge("1.5_years", "Long Haul", "548 days streak", "mountain", 548, 100),
    Badge("2_years", "Master of Self", "730 days streak", "brain", 730, 100),
    Badge("1000_days", "Kilo Day", "1000 days streak", "diamond", 1000, 100),
    Badge("3_years", "Triad", "3 years streak", "triangle", 1095, 100),
    Badge("4_years", "Olympian", "4 years streak", "flag", 1460, 100),
    Badge("5_years", "Legend", "5 years streak", "swords", 1825, 100),
    Badge(GOAL_BADGE_ID, "Goal Getter", "Reach your personal streak goal", "target", 0, 2000),
)


def day_badges() -> Iterable[Badge]:
    """Badges unlocked by a fixed streak length (everything but the goal badge)."""
    return (badge for badge in BADGES if badge.required_days > 0)


def get_badge(badge_id: str) -> Optional[Badge]:
    for badge in BADGES:
        if badge.id == badge_id:
            return badge
    return None


def badges_earned_for_days(days: int) -> List[Badge]:
    return [badge for badge in day_badges() if days >= badge.required_days]


def badges_unlocking_on_day(day: int) -> List[Badge]:
    return [badge for badge in day_badges() if badge.required_days == day]


def is_goal_reached(active_days: int, goal: Optional[int]) -> bool:
    """The goal badge is live-only: unlocked while the active streak has reached a positive goal."""
    return bool(goal) and goal > 0 and active_days >= goal
