from __future__ import annotations
from typing import Optional
from sqlalchemy.orm import Session

from app.models.public_profile import PublicProfile

SETTINGS_FIELDS = ("is_enabled", "show_name", "show_level", "show_active_streak", "show_badges", "show_stats")


def get_public_profile(db: Session, user_id: str) -> Optional[PublicProfile]:
    return db.query(PublicProfile).filter(PublicProfile.user_id == user_id).first()


def upsert_public_profile(db: Session, user_id: str, data: dict) -> PublicProfile:
    """
    Create or merge into the user's public profile.

    Keys absent from ``data`` keep their stored values, so disabling the
    profile leaves the last published snapshot in place.
    """
    profile = get_public_profile(db, user_id)
    if profile is None:
        profile = PublicProfile(user_id=user_id)
        db.add(profile)

    for field, value in data.items():
        if hasattr(profile, field):
            setattr(profile, field, value)

    db.commit()
    db.refresh(profile)
    return profile
