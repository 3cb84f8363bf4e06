from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.database import get_db
from app.auth import get_current_user
from app import crud, schemas
from app.middleware.rate_limit import rate_limit_api_read
from app.services.stats_service import calculate_stats
from app.utils.dates import local_date, resolve_timezone, utcnow
from app.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=schemas.StatsResponse)
@rate_limit_api_read
async def get_my_stats(
    request: Request,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Streak statistics: records, success rate, relapse patterns and recent moods."""
    try:
        user = crud.get_user(db, current_user.id)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        tz = resolve_timezone(user.timezone)
        streaks = crud.list_streaks(db, user.id, newest_first=False)
        entries = crud.get_all_journal_entries(db, user.id)
        stats = calculate_stats(streaks, entries, tz, local_date(utcnow(), tz))
        return schemas.StatsResponse(**asdict(stats))
    except SQLAlchemyError as e:
        logger.error(f"Failed to compute stats for user {current_user.id}: {e}")
        return schemas.StatsResponse(warning="Statistics are temporarily unavailable.")
