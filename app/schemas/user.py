from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional
from datetime import datetime
import pytz


class UserBase(BaseModel):
    """Base user schema with common attributes"""
    email: Optional[EmailStr] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    timezone: Optional[str] = None


class UserUpdate(BaseModel):
    """Schema for updating user information"""
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    photo_url: Optional[str] = None
    timezone: Optional[str] = None

    @validator('display_name')
    def validate_display_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Display name cannot be blank')
        return v.strip() if v is not None else v

    @validator('timezone')
    def validate_timezone(cls, v):
        if v is not None and v not in pytz.all_timezones_set:
            raise ValueError(f'Unknown timezone: {v}')
        return v


class GoalUpdate(BaseModel):
    """Personal streak goal in days; 0 clears it."""
    target_streak: int = Field(..., ge=0, le=100000, description="Goal length in days")


class UserResponse(UserBase):
    """Schema for user response"""
    id: str
    total_xp: int
    level: int
    progress_percent: float
    xp_version: Optional[int] = None
    target_streak: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CurrentUser(BaseModel):
    """Simplified user model for authentication responses"""
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    timezone: Optional[str] = None
