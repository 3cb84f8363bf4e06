from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.database import get_db
from app.auth import get_current_user
from app import crud, schemas
from app.context import get_llm_client
from app.llm.client import LLMClient
from app.middleware.rate_limit import rate_limit_api_read, rate_limit_motivation
from app.services.badges import BADGES
from app.services.progress_service import badge_statuses, get_live_view, get_progress
from app.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/gamification", tags=["gamification"])

UNAVAILABLE_WARNING = "Progress data is temporarily unavailable."


def _badge_response(badge, unlocked: bool) -> schemas.BadgeResponse:
    return schemas.BadgeResponse(
        id=badge.id,
        name=badge.name,
        description=badge.description,
        icon=badge.icon,
        required_days=badge.required_days,
        xp_reward=badge.xp_reward,
        is_goal_badge=badge.is_goal_badge,
        unlocked=unlocked,
    )


@router.get("/progress", response_model=schemas.ProgressResponse)
@rate_limit_api_read
async def get_my_progress(
    request: Request,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Ledger balance, live view of the active streak and when the next level is due."""
    try:
        user = crud.get_user(db, current_user.id)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        progress = get_progress(db, user)
        return schemas.ProgressResponse(
            ledger=schemas.LedgerResponse.model_validate(progress.ledger),
            live=schemas.LiveViewResponse.model_validate(progress.live),
            projection=schemas.ProjectionResponse.model_validate(progress.projection),
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to compute progress for user {current_user.id}: {e}")
        return schemas.ProgressResponse(
            ledger=schemas.LedgerResponse(),
            live=schemas.LiveViewResponse(),
            warning=UNAVAILABLE_WARNING,
        )


@router.get("/badges", response_model=schemas.BadgesResponse)
@rate_limit_api_read
async def get_badges(
    request: Request,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Badge catalog with unlocked status for the active streak and the current goal."""
    try:
        user = crud.get_user(db, current_user.id)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        statuses = badge_statuses(get_live_view(db, user))
        return schemas.BadgesResponse(
            badges=[_badge_response(status.badge, status.unlocked) for status in statuses],
            unlocked_count=sum(1 for status in statuses if status.unlocked),
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to load badges for user {current_user.id}: {e}")
        return schemas.BadgesResponse(
            badges=[_badge_response(badge, False) for badge in BADGES],
            unlocked_count=0,
            warning=UNAVAILABLE_WARNING,
        )


@router.get("/motivation", response_model=schemas.MotivationResponse)
@rate_limit_motivation
async def get_motivation(
    request: Request,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    llm_client: LLMClient = Depends(get_llm_client),
):
    """A short motivational line tailored to the current streak length."""
    days = 0
    try:
        user = crud.get_user(db, current_user.id)
        if user is not None:
            days = get_live_view(db, user).days
    except SQLAlchemyError as e:
        logger.error(f"Failed to read streak for motivation, user {current_user.id}: {e}")

    message = await llm_client.get_motivational_quote(days)
    return schemas.MotivationResponse(streak_days=days, message=message)
