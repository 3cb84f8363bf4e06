from __future__ import annotations
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from app.models.journal_entry import JournalEntry


def create_journal_entry(db: Session, user_id: str, mood: int, note: str, date: Optional[datetime] = None) -> JournalEntry:
    """
    Create a new journal entry.

    One entry per day is advisory only; a second entry on the same day is stored.
    """
    db_entry = JournalEntry(user_id=user_id, mood=mood, note=note)
    if date is not None:
        db_entry.date = date
    db.add(db_entry)
    db.commit()
    db.refresh(db_entry)
    return db_entry


def get_journal_entries(db: Session, user_id: str, skip: int = 0, limit: int = 100) -> List[JournalEntry]:
    """Journal entries for a user, newest first."""
    return db.query(JournalEntry).filter(
        JournalEntry.user_id == user_id
    ).order_by(JournalEntry.date.desc()).offset(skip).limit(limit).all()


def get_all_journal_entries(db: Session, user_id: str) -> List[JournalEntry]:
    return db.query(JournalEntry).filter(JournalEntry.user_id == user_id).order_by(JournalEntry.date.asc()).all()


def get_journal_entry_since(db: Session, user_id: str, since: datetime) -> Optional[JournalEntry]:
    """First entry written at or after ``since`` (e.g. local midnight, to find today's entry)."""
    return db.query(JournalEntry).filter(
        JournalEntry.user_id == user_id,
        JournalEntry.date >= since,
    ).order_by(JournalEntry.date.asc()).first()
