from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime


class StreakOut(BaseModel):
    id: str
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    created_at: Optional[datetime] = None
    relapse_reason: Optional[str] = None
    relapse_notes: Optional[str] = None
    is_active: bool
    days: Optional[int] = Field(None, description="Calendar days covered; None for a record without a usable start")

    class Config:
        from_attributes = True


class RelapseRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=100, description="One of the known relapse reasons")
    notes: Optional[str] = Field(None, max_length=2000)


class ReflectionUpdate(RelapseRequest):
    pass


class PastStreakCreate(BaseModel):
    """An already-finished streak entered after the fact (local calendar dates)."""
    start_date: date
    end_date: date


class StartDateUpdate(BaseModel):
    start_date: date


class StreakMutationResponse(BaseModel):
    """Result of a streak lifecycle change and the ledger after it."""
    streak: Optional[StreakOut] = None
    xp_delta: int = Field(..., description="XP added to (or removed from) the ledger by this change")
    total_xp: int = Field(..., description="Ledger balance after the change")
    streaks_affected: int = 1


class StreakHistoryResponse(BaseModel):
    streaks: List[StreakOut]
    warning: Optional[str] = None
