from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional

from app.database import get_db
from app.auth import get_current_user
from app import crud, schemas
from app.middleware.rate_limit import rate_limit_api_read, rate_limit_api_write
from app.models import Streak
from app.services.exceptions import (
    ActiveStreakExistsError,
    LedgerError,
    NoActiveStreakError,
    StreakNotFoundError,
    StreakValidationError,
    UserNotFoundError,
)
from app.services.ledger_service import LedgerResult, LedgerService
from app.services.progress_service import get_live_view
from app.services.xp_calculator import streak_days
from app.utils.dates import resolve_timezone, utcnow
from app.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/streaks", tags=["streaks"])


def get_ledger_service(db: Session = Depends(get_db)) -> LedgerService:
    return LedgerService(db)


def _ledger_http_error(e: LedgerError) -> HTTPException:
    if isinstance(e, StreakValidationError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, (ActiveStreakExistsError, NoActiveStreakError)):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, (StreakNotFoundError, UserNotFoundError)):
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


def streak_out(streak: Streak, timezone: Optional[str]) -> schemas.StreakOut:
    tz = resolve_timezone(timezone)
    return schemas.StreakOut(
        id=streak.id,
        start_date=streak.start_date,
        end_date=streak.end_date,
        created_at=streak.created_at,
        relapse_reason=streak.relapse_reason,
        relapse_notes=streak.relapse_notes,
        is_active=streak.is_active,
        days=streak_days(streak, tz, utcnow()),
    )


def _mutation_response(
    service: LedgerService,
    current_user: schemas.CurrentUser,
    result: LedgerResult,
) -> schemas.StreakMutationResponse:
    total_xp, _ = service.current_balance(current_user.id)
    return schemas.StreakMutationResponse(
        streak=streak_out(result.streak, current_user.timezone) if result.streak is not None else None,
        xp_delta=result.xp_delta,
        total_xp=total_xp,
        streaks_affected=result.streaks_affected,
    )


@router.get("/active", response_model=schemas.ActiveStreakResponse)
@rate_limit_api_read
async def get_active_streak(
    request: Request,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Current open streak (if any) with its live XP, level and badges."""
    try:
        user = crud.get_user(db, current_user.id)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        active = crud.get_active_streak(db, current_user.id)
        live = get_live_view(db, user)
        return schemas.ActiveStreakResponse(
            streak=streak_out(active, user.timezone) if active is not None else None,
            live=schemas.LiveViewResponse.model_validate(live),
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to read active streak for user {current_user.id}: {e}")
        return schemas.ActiveStreakResponse(
            streak=None,
            live=schemas.LiveViewResponse(),
            warning="Streak data is temporarily unavailable.",
        )


@router.get("", response_model=schemas.StreakHistoryResponse)
@rate_limit_api_read
async def list_streaks(
    request: Request,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Streak history, newest start first."""
    try:
        streaks = crud.list_streaks(db, current_user.id, newest_first=True)
        return schemas.StreakHistoryResponse(
            streaks=[streak_out(streak, current_user.timezone) for streak in streaks]
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to list streaks for user {current_user.id}: {e}")
        return schemas.StreakHistoryResponse(streaks=[], warning="Streak history is temporarily unavailable.")


@router.post("/start", response_model=schemas.StreakMutationResponse, status_code=201)
@rate_limit_api_write
async def start_streak(
    request: Request,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    service: LedgerService = Depends(get_ledger_service),
):
    """Start a new streak now."""
    try:
        result = service.start_streak(current_user.id)
        return _mutation_response(service, current_user, result)
    except LedgerError as e:
        raise _ledger_http_error(e)
    except Exception as e:
        logger.exception(f"Failed to start streak for user {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to start streak: {str(e)}")


@router.post("/relapse", response_model=schemas.StreakMutationResponse)
@rate_limit_api_write
async def relapse(
    request: Request,
    payload: schemas.RelapseRequest,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    service: LedgerService = Depends(get_ledger_service),
):
    """End the active streak now, recording why."""
    try:
        result = service.relapse(current_user.id, payload.reason, payload.notes)
        return _mutation_response(service, current_user, result)
    except LedgerError as e:
        raise _ledger_http_error(e)
    except Exception as e:
        logger.exception(f"Failed to end streak for user {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to end streak: {str(e)}")


@router.post("/past", response_model=schemas.StreakMutationResponse, status_code=201)
@rate_limit_api_write
async def record_past_streak(
    request: Request,
    payload: schemas.PastStreakCreate,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    service: LedgerService = Depends(get_ledger_service),
):
    """Add a finished streak from the past."""
    try:
        result = service.record_past_streak(current_user.id, payload.start_date, payload.end_date)
        return _mutation_response(service, current_user, result)
    except LedgerError as e:
        raise _ledger_http_error(e)
    except Exception as e:
        logger.exception(f"Failed to record past streak for user {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to record past streak: {str(e)}")


@router.patch("/{streak_id}/start-date", response_model=schemas.StreakMutationResponse)
@rate_limit_api_write
async def update_start_date(
    request: Request,
    streak_id: str,
    payload: schemas.StartDateUpdate,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    service: LedgerService = Depends(get_ledger_service),
):
    try:
        result = service.update_start_date(current_user.id, streak_id, payload.start_date)
        return _mutation_response(service, current_user, result)
    except LedgerError as e:
        raise _ledger_http_error(e)
    except Exception as e:
        logger.exception(f"Failed to update start date of streak {streak_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to update start date: {str(e)}")


@router.patch("/{streak_id}/reflection", response_model=schemas.StreakMutationResponse)
@rate_limit_api_write
async def update_reflection(
    request: Request,
    streak_id: str,
    payload: schemas.ReflectionUpdate,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    service: LedgerService = Depends(get_ledger_service),
):
    try:
        result = service.update_reflection(current_user.id, streak_id, payload.reason, payload.notes)
        return _mutation_response(service, current_user, result)
    except LedgerError as e:
        raise _ledger_http_error(e)
    except Exception as e:
        logger.exception(f"Failed to update reflection of streak {streak_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to update reflection: {str(e)}")


@router.delete("/{streak_id}", response_model=schemas.StreakMutationResponse)
@rate_limit_api_write
async def delete_streak(
    request: Request,
    streak_id: str,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    service: LedgerService = Depends(get_ledger_service),
):
    """Delete one streak and take its XP back out of the ledger."""
    try:
        result = service.delete_streak(current_user.id, streak_id)
        return _mutation_response(service, current_user, result)
    except LedgerError as e:
        raise _ledger_http_error(e)
    except Exception as e:
        logger.exception(f"Failed to delete streak {streak_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to delete streak: {str(e)}")


@router.delete("", response_model=schemas.StreakMutationResponse)
@rate_limit_api_write
async def clear_history(
    request: Request,
    confirm: bool = Query(False, description="Must be true to delete the whole history"),
    current_user: schemas.CurrentUser = Depends(get_current_user),
    service: LedgerService = Depends(get_ledger_service),
):
    """Delete every streak of the current user."""
    if not confirm:
        raise HTTPException(status_code=400, detail="Pass confirm=true to delete the whole streak history")
    try:
        result = service.clear_history(current_user.id)
        return _mutation_response(service, current_user, result)
    except LedgerError as e:
        raise _ledger_http_error(e)
    except Exception as e:
        logger.exception(f"Failed to clear streak history for user {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to clear history: {str(e)}")
