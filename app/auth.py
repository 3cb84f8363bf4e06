from fastapi import Depends, HTTPException, Request, status, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from firebase_admin import auth
from typing import Optional
from sqlalchemy.orm import Session
from app.context import ServiceContext, get_context
from app.database import get_db
from app.utils.logger import get_logger, set_user_context
from app import crud, schemas

logger = get_logger(__name__)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(HTTPBearer(auto_error=False)),
    x_user_id: Optional[str] = Header(None, alias="X-User-ID"),
    db: Session = Depends(get_db),
    context: ServiceContext = Depends(get_context),
) -> schemas.CurrentUser:
    """
    Verify Firebase ID token and get essential user information.
    Falls back to X-User-ID header if bearer token is not provided and the
    header is allowed by settings.

    The user's row (which holds the XP ledger) is created on first sign-in.

    Args:
        request: The incoming request; the user ID is stored on its state for rate limiting.
        credentials: The HTTP Authorization credentials.
        x_user_id: Optional X-User-ID header value.
        db: The database session.
        context: The application's service context.

    Returns:
        CurrentUser: Simplified user object with id, email, display_name and timezone

    Raises:
        HTTPException: If both token and X-User-ID are invalid or missing
    """
    allow_header = context.settings.ALLOW_USER_ID_HEADER
    if credentials is None and (x_user_id is None or not allow_header):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Bearer authentication is required" if not allow_header
            else "Either Bearer authentication or X-User-ID header is required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        if credentials:
            # Verify Firebase ID token
            try:
                decoded_token = auth.verify_id_token(credentials.credentials, app=context.firebase_app)
            except Exception as firebase_error:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail=f"Invalid token: {str(firebase_error)}",
                    headers={"WWW-Authenticate": "Bearer"},
                )

            # Extract user information from Firebase token
            user_id = decoded_token.get("uid")
            email = decoded_token.get("email")
            display_name = decoded_token.get("name")
            photo_url = decoded_token.get("picture")

            db_user = crud.get_user(db, user_id)
            if not db_user:
                # First sign-in: create the profile with an empty, current-version ledger
                db_user = crud.create_user(db, user_id, email, display_name or "", photo_url=photo_url)
                logger.info(f"Created user {user_id} on first sign-in", user_id=user_id)
        else:
            # Use X-User-ID header
            user_id = x_user_id
            db_user = crud.get_user(db, user_id)
            if not db_user:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Invalid X-User-ID",
                )

        request.state.user_id = user_id
        set_user_context(user_id)

        # Return simplified user object with just the essential info
        return schemas.CurrentUser(
            id=user_id,
            email=db_user.email,
            display_name=db_user.display_name,
            timezone=db_user.timezone,
        )
    except HTTPException:
        # Re-raise HTTP exceptions as-is
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )
