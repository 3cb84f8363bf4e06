from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime


class JournalEntryCreate(BaseModel):
    """Schema for a daily journal entry."""
    mood: int = Field(..., ge=1, le=5, description="1 (terrible) to 5 (great)")
    note: str = Field(..., min_length=1, max_length=5000, description="Free-text reflection")

    @validator('note')
    def validate_note(cls, v):
        if not v.strip():
            raise ValueError('Note cannot be empty')
        return v.strip()


class JournalEntryResponse(BaseModel):
    id: str
    date: datetime
    mood: int
    mood_label: Optional[str] = None
    note: str

    class Config:
        from_attributes = True
