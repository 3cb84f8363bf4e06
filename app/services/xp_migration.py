"""
One-shot recalculation of ``users.total_xp`` when the accrual formula changes.

A user whose ``xp_version`` is missing or older than CURRENT_XP_VERSION gets
their balance rebuilt from the full streak history and the new version
stamped in the same write. Rerunning it over unchanged history yields the
same total, and the conditional write turns a concurrent duplicate run into
a no-op.
"""
from __future__ import annotations
import threading
from typing import Callable, Iterable, Optional, Set

import pytz
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app import crud
from app.config import CURRENT_XP_VERSION
from app.models import Streak, User
from app.services.xp_calculator import total_ledger_contribution
from app.utils.dates import resolve_timezone
from app.utils.logger import get_logger

logger = get_logger(__name__)


def needs_migration(user: User, current_version: int = CURRENT_XP_VERSION) -> bool:
    return user.xp_version is None or user.xp_version < current_version


def recalculate_total_xp(streaks: Iterable[Streak], tz: pytz.BaseTzInfo) -> int:
    """Start bonus for every streak plus day and badge XP for the closed ones."""
    return total_ledger_contribution(streaks, tz)


class MigrationTracker:
    """
    Users whose recalculation is running in this process right now.

    Stops two requests in the same process from running it side by side.
    Once a run commits, the stamped ``xp_version`` keeps it from being
    scheduled again.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._in_flight: Set[str] = set()

    def claim(self, user_id: str) -> bool:
        with self._lock:
            if user_id in self._in_flight:
                return False
            self._in_flight.add(user_id)
            return True

    def release(self, user_id: str) -> None:
        with self._lock:
            self._in_flight.discard(user_id)


class XPMigration:
    def __init__(self, db: Session, current_version: int = CURRENT_XP_VERSION):
        self.db = db
        self.current_version = current_version

    def run_if_needed(self, user_id: str) -> Optional[int]:
        """
        Recalculate if the stored version is stale.

        Returns the new total, or None when nothing was written (up to date,
        unknown user, or another run got there first).
        """
        user = crud.get_user(self.db, user_id)
        if user is None or not needs_migration(user, self.current_version):
            return None

        logger.info(f"Migrating XP for user {user_id} from version {user.xp_version} to {self.current_version}", user_id=user_id)
        tz = resolve_timezone(user.timezone)
        try:
            streaks = crud.list_streaks(self.db, user_id, newest_first=False)
            new_total = recalculate_total_xp(streaks, tz)
            updated = crud.set_recalculated_ledger(self.db, user_id, new_total, self.current_version)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        if not updated:
            logger.info(f"XP migration for user {user_id} already applied elsewhere", user_id=user_id)
            return None
        logger.info(f"XP migration complete for user {user_id}. New total: {new_total}", user_id=user_id)
        return new_total


def run_migration_in_background(
    session_factory: Callable[[], Session],
    tracker: MigrationTracker,
    user_id: str,
) -> None:
    """
    Fire-and-forget entry point for FastAPI BackgroundTasks.

    Uses its own session. Failures are logged and leave ``xp_version`` stale so
    the next session tries again.
    """
    if not tracker.claim(user_id):
        return

    db = session_factory()
    try:
        XPMigration(db).run_if_needed(user_id)
    except Exception as e:
        logger.exception(f"XP migration failed for user {user_id}: {e}", user_id=user_id)
    finally:
        db.close()
        tracker.release(user_id)
