from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class PublicProfileSettings(BaseModel):
    """Visibility settings of the public profile."""
    is_enabled: bool = False
    show_name: bool = True
    show_level: bool = True
    show_active_streak: bool = True
    show_badges: bool = False
    show_stats: bool = False

    class Config:
        from_attributes = True


class PublicProfileResponse(BaseModel):
    """Public profile as seen by anyone holding the user ID; hidden sections are null."""
    user_id: str
    display_name: str
    photo_url: Optional[str] = None
    level: Optional[int] = None
    total_xp: Optional[int] = None
    active_streak_days: Optional[int] = None
    active_streak_start_date: Optional[datetime] = None
    badges: Optional[List[str]] = None
    success_rate: Optional[int] = Field(None, description="Percent of days since the first streak spent in a streak")
    updated_at: Optional[datetime] = None


class PublicProfileSaveResponse(BaseModel):
    settings: PublicProfileSettings
    synced: bool = Field(..., description="Whether the published snapshot was refreshed")
    profile: Optional[PublicProfileResponse] = None
