from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app import crud
from app.crud.public_profile import SETTINGS_FIELDS
from app.models import PublicProfile, User
from app.services.badges import badges_earned_for_days
from app.services.levels import calculate_level
from app.services.stats_service import calculate_success_rate
from app.services.xp_calculator import streak_days
from app.utils.dates import local_date, resolve_timezone, utcnow
from app.utils.logger import get_logger

logger = get_logger(__name__)

ANONYMOUS_NAME = "Anonymous Streaker"


def build_snapshot(db: Session, user: User, show_badges: bool, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Values published on the public profile, computed from the user's current state."""
    now = now or utcnow()
    tz = resolve_timezone(user.timezone)

    active = crud.get_active_streak(db, user.id)
    active_days = 0
    active_start = None
    if active is not None:
        days = streak_days(active, tz, now)
        if days is not None:
            active_days = days
            active_start = active.start_date

    streaks = crud.list_streaks(db, user.id, newest_first=False)
    badges = [badge.id for badge in badges_earned_for_days(active_days)] if show_badges else []
    total_xp = user.total_xp or 0

    return {
        "display_name": user.display_name or ANONYMOUS_NAME,
        "photo_url": user.photo_url,
        "level": calculate_level(total_xp),
        "total_xp": total_xp,
        "active_streak_days": active_days,
        "active_streak_start_date": active_start,
        "badges": badges,
        "success_rate": calculate_success_rate(streaks, tz, local_date(now, tz)),
    }


def save_public_profile(db: Session, user: User, settings: Dict[str, bool], now: Optional[datetime] = None) -> PublicProfile:
    """
    Store the visibility settings; when the profile is enabled, refresh the published snapshot too.

    Disabling keeps the previous snapshot so the profile can be switched back on.
    """
    data: Dict[str, Any] = {key: value for key, value in settings.items() if key in SETTINGS_FIELDS}
    if data.get("is_enabled"):
        data.update(build_snapshot(db, user, show_badges=bool(data.get("show_badges")), now=now))
        logger.info(f"Syncing public profile for user {user.id}", user_id=user.id)
    else:
        logger.info(f"Public profile disabled for user {user.id}", user_id=user.id)
    return crud.upsert_public_profile(db, user.id, data)


def public_view(profile: PublicProfile) -> Dict[str, Any]:
    """What an anonymous reader may see, with hidden sections set to None."""
    view: Dict[str, Any] = {
        "user_id": profile.user_id,
        "display_name": profile.display_name if profile.show_name else ANONYMOUS_NAME,
        "photo_url": profile.photo_url if profile.show_name else None,
        "level": None,
        "total_xp": None,
        "active_streak_days": None,
        "active_streak_start_date": None,
        "badges": None,
        "success_rate": None,
        "updated_at": profile.updated_at,
    }
    if profile.show_level:
        view["level"] = profile.level
        view["total_xp"] = profile.total_xp
    if profile.show_active_streak:
        view["active_streak_days"] = profile.active_streak_days
        view["active_streak_start_date"] = profile.active_streak_start_date
    if profile.show_badges:
        view["badges"] = list(profile.badges or [])
    if profile.show_stats:
        view["success_rate"] = profile.success_rate
    return view
