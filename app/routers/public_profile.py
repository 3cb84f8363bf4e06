from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.database import get_db
from app.auth import get_current_user
from app import crud, schemas
from app.middleware.rate_limit import rate_limit_api_write, rate_limit_public
from app.services.public_profile_service import public_view, save_public_profile
from app.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/public-profile", tags=["public-profile"])


@router.put("", response_model=schemas.PublicProfileSaveResponse)
@rate_limit_api_write
async def save_settings(
    request: Request,
    payload: schemas.PublicProfileSettings,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Save visibility settings; when enabled, publish a fresh snapshot of level, streak and badges."""
    user = crud.get_user(db, current_user.id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    try:
        profile = save_public_profile(db, user, payload.dict())
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Failed to sync public profile for user {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to sync public profile")

    return schemas.PublicProfileSaveResponse(
        settings=schemas.PublicProfileSettings.model_validate(profile),
        synced=profile.is_enabled,
        profile=schemas.PublicProfileResponse(**public_view(profile)) if profile.is_enabled else None,
    )


@router.get("/{user_id}", response_model=schemas.PublicProfileResponse)
@rate_limit_public
async def get_public_profile(
    request: Request,
    user_id: str,
    db: Session = Depends(get_db),
):
    """Anyone holding the user ID may read an enabled profile. No authentication."""
    profile = crud.get_public_profile(db, user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    if not profile.is_enabled:
        raise HTTPException(status_code=403, detail="This profile is private")
    return schemas.PublicProfileResponse(**public_view(profile))
