from __future__ import annotations
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from app.models.streak import Streak

# Streak writes here only stage changes; app.services.ledger_service commits
# them together with the matching XP adjustment.


def get_active_streak(db: Session, user_id: str, for_update: bool = False) -> Optional[Streak]:
    """The user's open streak (``end_date IS NULL``), if any."""
    query = db.query(Streak).filter(Streak.user_id == user_id, Streak.end_date.is_(None))
    if for_update:
        query = query.with_for_update()
    return query.first()


def get_streak(db: Session, user_id: str, streak_id: str, for_update: bool = False) -> Optional[Streak]:
    """Get a specific streak by ID for a specific user."""
    query = db.query(Streak).filter(Streak.id == streak_id, Streak.user_id == user_id)
    if for_update:
        query = query.with_for_update()
    return query.first()


def list_streaks(db: Session, user_id: str, newest_first: bool = True, for_update: bool = False) -> List[Streak]:
    """Full history ordered by start date."""
    order = Streak.start_date.desc() if newest_first else Streak.start_date.asc()
    query = db.query(Streak).filter(Streak.user_id == user_id).order_by(order.nulls_last())
    if for_update:
        query = query.with_for_update()
    return query.all()


def add_streak(
    db: Session,
    user_id: str,
    start_date: datetime,
    end_date: Optional[datetime] = None,
    created_at: Optional[datetime] = None,
    timezone: Optional[str] = None,
) -> Streak:
    db_streak = Streak(user_id=user_id, start_date=start_date, end_date=end_date, timezone=timezone)
    if created_at is not None:
        db_streak.created_at = created_at
    db.add(db_streak)
    db.flush()
    return db_streak


def close_streak(
    db: Session,
    streak: Streak,
    end_date: datetime,
    reason: Optional[str],
    notes: Optional[str],
    timezone: Optional[str] = None,
) -> Streak:
    streak.end_date = end_date
    streak.timezone = timezone
    streak.relapse_reason = reason
    streak.relapse_notes = notes
    db.flush()
    return streak


def update_start_date(db: Session, streak: Streak, start_date: datetime) -> Streak:
    streak.start_date = start_date
    db.flush()
    return streak


def update_reflection(db: Session, streak: Streak, reason: Optional[str], notes: Optional[str]) -> Streak:
    streak.relapse_reason = reason
    streak.relapse_notes = notes
    db.flush()
    return streak


def delete_streak(db: Session, streak: Streak) -> None:
    db.delete(streak)
    db.flush()


def delete_streaks(db: Session, streaks: List[Streak]) -> int:
    for streak in streaks:
        db.delete(streak)
    db.flush()
    return len(streaks)
