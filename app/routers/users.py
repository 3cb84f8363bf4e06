from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from app.utils.logger import get_logger

from app.database import get_db
from app.auth import get_current_user
from app import schemas, crud
from app.context import ServiceContext, get_context
from app.middleware.rate_limit import rate_limit_api_read, rate_limit_api_write
from app.models import User
from app.services.export_service import export_user_data
from app.services.progress_service import ledger_view
from app.services.xp_migration import needs_migration, run_migration_in_background

router = APIRouter(
    prefix="/users",
    tags=["users"],
    responses={404: {"description": "Not found"}}
)

logger = get_logger(__name__)


def _user_response(db_user: User) -> schemas.UserResponse:
    ledger = ledger_view(db_user)
    return schemas.UserResponse(
        id=db_user.id,
        email=db_user.email,
        display_name=db_user.display_name,
        photo_url=db_user.photo_url,
        timezone=db_user.timezone,
        total_xp=ledger.total_xp,
        level=ledger.level,
        progress_percent=ledger.progress_percent,
        xp_version=db_user.xp_version,
        target_streak=db_user.target_streak or 0,
        created_at=db_user.created_at,
        updated_at=db_user.updated_at,
    )


@router.get("/me", response_model=schemas.UserResponse)
@rate_limit_api_read
async def get_current_user_info(
    request: Request,
    background_tasks: BackgroundTasks,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    context: ServiceContext = Depends(get_context),
):
    """Get the current user's profile and XP ledger. Schedules the XP migration when the ledger is stale."""
    db_user = crud.get_user(db, current_user.id)
    if not db_user:
        raise HTTPException(status_code=404, detail="User not found")

    if needs_migration(db_user):
        background_tasks.add_task(
            run_migration_in_background,
            context.database.session,
            context.migrations,
            current_user.id,
        )
    return _user_response(db_user)


@router.patch("/me", response_model=schemas.UserResponse)
@rate_limit_api_write
async def update_user_info(
    request: Request,
    user_update: schemas.UserUpdate,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update the current user's information"""
    db_user = crud.get_user(db, current_user.id)
    if not db_user:
        raise HTTPException(status_code=404, detail="User not found")

    update_data = user_update.dict(exclude_unset=True)
    if update_data:
        try:
            db_user = crud.update_user_fields(db, db_user, update_data)
        except IntegrityError:
            db.rollback()
            raise HTTPException(status_code=400, detail="Update failed due to constraint violation")
    return _user_response(db_user)


@router.put("/me/goal", response_model=schemas.UserResponse)
@rate_limit_api_write
async def set_goal(
    request: Request,
    goal: schemas.GoalUpdate,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Set the personal streak goal in days (0 clears it). Takes effect on the next live view."""
    try:
        db_user = crud.set_target_streak(db, current_user.id, goal.target_streak)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Failed to set goal for user {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to set goal: {str(e)}")
    if not db_user:
        raise HTTPException(status_code=404, detail="User not found")
    logger.info(f"Goal for user {current_user.id} set to {goal.target_streak} days")
    return _user_response(db_user)


@router.get("/me/export")
@rate_limit_api_read
async def export_my_data(
    request: Request,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Download everything stored for the current user as JSON."""
    db_user = crud.get_user(db, current_user.id)
    if not db_user:
        raise HTTPException(status_code=404, detail="User not found")
    try:
        return export_user_data(db, db_user)
    except SQLAlchemyError as e:
        logger.exception(f"Failed to export data for user {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to export data")
