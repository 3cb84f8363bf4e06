from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional

from app.database import get_db
from app.auth import get_current_user
from app import crud, schemas
from app.config import MOODS
from app.middleware.rate_limit import rate_limit_api_read, rate_limit_api_write
from app.models import JournalEntry
from app.utils.dates import local_date, resolve_timezone, start_of_local_day, utcnow
from app.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/journal", tags=["journal"])


def _entry_response(entry: JournalEntry) -> schemas.JournalEntryResponse:
    return schemas.JournalEntryResponse(
        id=entry.id,
        date=entry.date,
        mood=entry.mood,
        mood_label=MOODS.get(entry.mood),
        note=entry.note,
    )


@router.post("", response_model=schemas.JournalEntryResponse, status_code=201)
@rate_limit_api_write
async def create_entry(
    request: Request,
    payload: schemas.JournalEntryCreate,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Write a journal entry for today."""
    try:
        entry = crud.create_journal_entry(db, current_user.id, payload.mood, payload.note, date=utcnow())
        return _entry_response(entry)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Failed to save journal entry for user {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to save journal entry: {str(e)}")


@router.get("", response_model=List[schemas.JournalEntryResponse])
@rate_limit_api_read
async def list_entries(
    request: Request,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Journal entries, newest first."""
    try:
        entries = crud.get_journal_entries(db, current_user.id, skip=skip, limit=limit)
        return [_entry_response(entry) for entry in entries]
    except SQLAlchemyError as e:
        logger.exception(f"Failed to list journal entries for user {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load journal entries")


@router.get("/today", response_model=Optional[schemas.JournalEntryResponse])
@rate_limit_api_read
async def get_today_entry(
    request: Request,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Today's entry in the user's timezone, or null if none was written yet."""
    tz = resolve_timezone(current_user.timezone)
    midnight = start_of_local_day(local_date(utcnow(), tz), tz)
    try:
        entry = crud.get_journal_entry_since(db, current_user.id, midnight)
    except SQLAlchemyError as e:
        logger.exception(f"Failed to load today's journal entry for user {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load journal entry")
    return _entry_response(entry) if entry is not None else None
