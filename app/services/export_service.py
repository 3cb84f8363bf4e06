from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app import crud
from app.config import settings
from app.models import User
from app.utils.dates import utcnow


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def export_user_data(db: Session, user: User, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Everything stored for ``user`` as a JSON-ready dict."""
    streaks = crud.list_streaks(db, user.id, newest_first=False)
    entries = crud.get_all_journal_entries(db, user.id)

    return {
        "profile": {
            "id": user.id,
            "email": user.email,
            "display_name": user.display_name,
            "photo_url": user.photo_url,
            "total_xp": user.total_xp,
            "xp_version": user.xp_version,
            "target_streak": user.target_streak,
            "timezone": user.timezone,
            "created_at": _isoformat(user.created_at),
        },
        "streaks": [
            {
                "id": streak.id,
                "start_date": _isoformat(streak.start_date),
                "end_date": _isoformat(streak.end_date),
                "relapse_reason": streak.relapse_reason,
                "relapse_notes": streak.relapse_notes,
                "created_at": _isoformat(streak.created_at),
            }
            for streak in streaks
        ],
        "journal_entries": [
            {
                "id": entry.id,
                "date": _isoformat(entry.date),
                "mood": entry.mood,
                "note": entry.note,
            }
            for entry in entries
        ],
        "export_date": (now or utcnow()).isoformat(),
        "app_name": settings.APP_NAME,
    }
