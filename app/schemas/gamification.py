from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime

from app.schemas.streak import StreakOut


class LiveViewResponse(BaseModel):
    """XP, level and badges of the active streak as of now. Not persisted."""
    days: int = 0
    xp: int = 0
    level: int = 1
    progress_percent: float = 0.0
    unlocked_badge_ids: List[str] = []
    goal: int = 0
    goal_reached: bool = False
    goal_percent: int = 0
    start_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class LedgerResponse(BaseModel):
    total_xp: int = 0
    level: int = 1
    progress_percent: float = 0.0
    xp_version: Optional[int] = None

    class Config:
        from_attributes = True


class ProjectionResponse(BaseModel):
    current_level: int
    next_level: Optional[int] = None
    next_level_xp: Optional[int] = None
    xp_needed: int = 0
    days_to_next_level: Optional[int] = None
    projected_date: Optional[date] = None
    status: str = Field(..., description="max_level, projected or unreachable")

    class Config:
        from_attributes = True


class ActiveStreakResponse(BaseModel):
    streak: Optional[StreakOut] = None
    live: LiveViewResponse
    warning: Optional[str] = None


class ProgressResponse(BaseModel):
    ledger: LedgerResponse
    live: LiveViewResponse
    projection: Optional[ProjectionResponse] = None
    warning: Optional[str] = None


class BadgeResponse(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    required_days: int
    xp_reward: int
    is_goal_badge: bool
    unlocked: bool


class BadgesResponse(BaseModel):
    badges: List[BadgeResponse]
    unlocked_count: int
    warning: Optional[str] = None


class MotivationResponse(BaseModel):
    streak_days: int
    message: str
