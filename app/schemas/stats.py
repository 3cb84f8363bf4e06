from pydantic import BaseModel
from typing import Dict, List, Optional


class MoodPoint(BaseModel):
    date: str
    mood: int


class StatsResponse(BaseModel):
    total_streaks: int = 0
    longest_streak: int = 0
    average_streak: int = 0
    total_disciplined_days: int = 0
    days_this_year: int = 0
    success_rate: int = 0
    relapses_by_weekday: Dict[str, int] = {}
    relapse_triggers: Dict[str, int] = {}
    monthly_consistency: Dict[str, int] = {}
    mood_history: List[MoodPoint] = []
    warning: Optional[str] = None

    class Config:
        from_attributes = True
