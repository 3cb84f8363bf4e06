from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app import crud
from app.models import User
from app.services.badges import BADGES, Badge
from app.services.levels import calculate_level, progress_to_next_level
from app.services.projection import LevelProjection, project_next_level
from app.services.xp_calculator import LiveView, build_live_view
from app.utils.dates import local_date, resolve_timezone, utcnow


@dataclass
class LedgerView:
    """Persisted balance and the level derived from it."""
    total_xp: int
    level: int
    progress_percent: float
    xp_version: Optional[int]


@dataclass
class Progress:
    ledger: LedgerView
    live: LiveView
    projection: LevelProjection


@dataclass
class BadgeStatus:
    badge: Badge
    unlocked: bool


def ledger_view(user: User) -> LedgerView:
    total_xp = user.total_xp or 0
    return LedgerView(
        total_xp=total_xp,
        level=calculate_level(total_xp),
        progress_percent=progress_to_next_level(total_xp),
        xp_version=user.xp_version,
    )


def get_live_view(db: Session, user: User, now: Optional[datetime] = None) -> LiveView:
    tz = resolve_timezone(user.timezone)
    active = crud.get_active_streak(db, user.id)
    return build_live_view(active, user.target_streak, tz, now or utcnow())


def get_progress(db: Session, user: User, now: Optional[datetime] = None) -> Progress:
    """Ledger balance, live view of the active streak and next-level projection."""
    now = now or utcnow()
    tz = resolve_timezone(user.timezone)
    live = get_live_view(db, user, now)
    projection = project_next_level(live.xp, live.days, local_date(now, tz))
    return Progress(ledger=ledger_view(user), live=live, projection=projection)


def badge_statuses(live: LiveView) -> List[BadgeStatus]:
    unlocked = set(live.unlocked_badge_ids)
    return [BadgeStatus(badge=badge, unlocked=badge.id in unlocked) for badge in BADGES]
