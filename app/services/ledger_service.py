"""
Streak lifecycle operations and the XP ledger adjustments that go with them.

Every operation runs as one transaction: the user's row is locked, the streak
rows are written and ``total_xp`` is moved by a server-side increment, then
everything commits together. Whatever an operation credits, deleting the
streak later deducts exactly the same amount, recomputed from the streak's
own stored dates and timezone (see ``xp_calculator.ledger_contribution``).
"""
from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Iterable, Optional, Tuple

import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app import crud
from app.config import RELAPSE_REASONS, START_BONUS
from app.models import Streak, User
from app.services.exceptions import (
    ActiveStreakExistsError,
    NoActiveStreakError,
    StreakNotFoundError,
    StreakValidationError,
    UserNotFoundError,
)
from app.services.xp_calculator import (
    closed_contribution,
    has_valid_start,
    ledger_contribution,
    relapse_credit,
    streak_days,
)
from app.utils.dates import local_date, resolve_timezone, start_of_local_day, utcnow
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class LedgerResult:
    """A streak mutation and the XP delta applied with it."""
    streak: Optional[Streak]
    xp_delta: int
    streaks_affected: int = 1


def find_overlapping_streak(
    streaks: Iterable[Streak],
    start_day: date,
    end_day: date,
    tz: pytz.BaseTzInfo,
    exclude_id: Optional[str] = None,
) -> Optional[Streak]:
    """
    First stored streak intersecting the calendar range [start_day, end_day).

    Half-open test: ``start < existing_end AND end > existing_start`` with an
    open streak's end taken as +infinity. Ranges that only touch at a boundary
    do not overlap; a range sharing the exact start day always does.
    """
    for streak in streaks:
        if streak.id == exclude_id or not has_valid_start(streak):
            continue
        existing_start = local_date(streak.start_date, tz)
        if existing_start == start_day:
            return streak
        existing_end = local_date(streak.end_date, tz) if streak.end_date is not None else date.max
        if start_day < existing_end and end_day > existing_start:
            return streak
    return None


class LedgerService:
    """Applies streak lifecycle transitions to the store and the user's XP ledger."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock

    @contextmanager
    def _transaction(self, on_conflict: Optional[Exception] = None):
        """Commit on success, roll back on any error. ``on_conflict`` replaces an IntegrityError."""
        try:
            yield
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if on_conflict is not None:
                raise on_conflict from e
            raise
        except Exception:
            self.db.rollback()
            raise

    def _lock_user(self, user_id: str) -> User:
        user = crud.get_user_for_update(self.db, user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")
        return user

    def _today(self, tz: pytz.BaseTzInfo) -> date:
        return local_date(self.clock(), tz)

    def start_streak(self, user_id: str) -> LedgerResult:
        """Open a new streak now and credit the start bonus."""
        # The partial unique index catches a concurrent start that slipped past the check
        with self._transaction(on_conflict=ActiveStreakExistsError("An active streak already exists.")):
            user = self._lock_user(user_id)
            if crud.get_active_streak(self.db, user_id) is not None:
                raise ActiveStreakExistsError("An active streak already exists.")

            tz = resolve_timezone(user.timezone)
            streak = crud.add_streak(self.db, user_id, start_date=self.clock(), timezone=tz.zone)
            crud.increment_total_xp(self.db, user_id, START_BONUS)

        logger.info(f"Started streak {streak.id} for user {user_id}: +{START_BONUS} XP", user_id=user_id)
        return LedgerResult(streak=streak, xp_delta=START_BONUS)

    def relapse(self, user_id: str, reason: Optional[str] = None, notes: Optional[str] = None) -> LedgerResult:
        """
        Close the active streak now.

        Credits ``days * XP_PER_DAY`` only. Badge XP of the streak being closed
        is not credited here, although deleting it later deducts it.
        """
        if reason is not None and reason not in RELAPSE_REASONS:
            raise StreakValidationError(f"Unknown relapse reason: {reason}")

        with self._transaction():
            user = self._lock_user(user_id)
            tz = resolve_timezone(user.timezone)
            streak = crud.get_active_streak(self.db, user_id, for_update=True)
            if streak is None:
                raise NoActiveStreakError("No active streak to end.")

            now = self.clock()
            days = streak_days(streak, tz, now)
            if days is None:
                logger.warning(f"Ending streak {streak.id} with invalid start date; no day XP credited", user_id=user_id)
                days = 0
            credit = relapse_credit(days)

            crud.close_streak(self.db, streak, now, reason, notes, timezone=tz.zone)
            crud.increment_total_xp(self.db, user_id, credit)

        logger.info(f"Ended streak {streak.id} after {days} days for user {user_id}: +{credit} XP", user_id=user_id)
        return LedgerResult(streak=streak, xp_delta=credit)

    def record_past_streak(self, user_id: str, start_day: date, end_day: date) -> LedgerResult:
        """Insert an already-closed streak and credit start bonus, day XP and badge XP."""
        if end_day < start_day:
            raise StreakValidationError("End date cannot be before start date.")

        with self._transaction():
            user = self._lock_user(user_id)
            tz = resolve_timezone(user.timezone)
            today = self._today(tz)
            if start_day > today or end_day > today:
                raise StreakValidationError("Invalid date range: dates cannot be in the future.")

            existing = crud.list_streaks(self.db, user_id)
            clash = find_overlapping_streak(existing, start_day, end_day, tz)
            if clash is not None:
                raise StreakValidationError("This date range overlaps with an existing streak.")

            days = (end_day - start_day).days
            credit = closed_contribution(days)
            streak = crud.add_streak(
                self.db,
                user_id,
                start_date=start_of_local_day(start_day, tz),
                end_date=start_of_local_day(end_day, tz),
                timezone=tz.zone,
            )
            crud.increment_total_xp(self.db, user_id, credit)

        logger.info(
            f"Recorded past streak {streak.id} ({start_day} -> {end_day}, {days} days) for user {user_id}: +{credit} XP",
            user_id=user_id,
        )
        return LedgerResult(streak=streak, xp_delta=credit)

    def update_start_date(self, user_id: str, streak_id: str, new_start_day: date) -> LedgerResult:
        """Move the active streak's start. No XP moves; the live view and the eventual relapse use the new start."""
        with self._transaction():
            user = self._lock_user(user_id)
            tz = resolve_timezone(user.timezone)
            streak = crud.get_streak(self.db, user_id, streak_id, for_update=True)
            if streak is None:
                raise StreakNotFoundError(f"Streak {streak_id} not found")
            if streak.end_date is not None:
                raise StreakValidationError("Only the active streak's start date can be changed.")
            if new_start_day > self._today(tz):
                raise StreakValidationError("Start date cannot be in the future.")

            others = crud.list_streaks(self.db, user_id)
            clash = find_overlapping_streak(others, new_start_day, date.max, tz, exclude_id=streak.id)
            if clash is not None:
                raise StreakValidationError("The new start date overlaps with an existing streak.")

            crud.update_start_date(self.db, streak, start_of_local_day(new_start_day, tz))

        logger.info(f"Moved start of streak {streak.id} to {new_start_day} for user {user_id}", user_id=user_id)
        return LedgerResult(streak=streak, xp_delta=0)

    def update_reflection(self, user_id: str, streak_id: str, reason: Optional[str], notes: Optional[str]) -> LedgerResult:
        """Edit the relapse reason/notes of an ended streak."""
        if reason is not None and reason not in RELAPSE_REASONS:
            raise StreakValidationError(f"Unknown relapse reason: {reason}")

        with self._transaction():
            streak = crud.get_streak(self.db, user_id, streak_id, for_update=True)
            if streak is None:
                raise StreakNotFoundError(f"Streak {streak_id} not found")
            if streak.end_date is None:
                raise StreakValidationError("The active streak has no relapse reflection yet.")
            crud.update_reflection(self.db, streak, reason, notes)

        return LedgerResult(streak=streak, xp_delta=0)

    def delete_streak(self, user_id: str, streak_id: str) -> LedgerResult:
        """Delete one streak and deduct what the ledger holds for it, in one batch."""
        with self._transaction():
            user = self._lock_user(user_id)
            tz = resolve_timezone(user.timezone)
            streak = crud.get_streak(self.db, user_id, streak_id, for_update=True)
            if streak is None:
                raise StreakNotFoundError(f"Streak {streak_id} not found")

            # total_xp may go negative here; users.total_xp must stay unconstrained
            deduction = ledger_contribution(streak, tz)
            crud.delete_streak(self.db, streak)
            crud.increment_total_xp(self.db, user_id, -deduction)

        logger.info(f"Deleted streak {streak_id} for user {user_id}: -{deduction} XP", user_id=user_id)
        return LedgerResult(streak=None, xp_delta=-deduction)

    def clear_history(self, user_id: str) -> LedgerResult:
        """Delete every streak of the user with a single summed decrement."""
        with self._transaction():
            user = self._lock_user(user_id)
            tz = resolve_timezone(user.timezone)
            streaks = crud.list_streaks(self.db, user_id, for_update=True)

            deduction = sum(ledger_contribution(streak, tz) for streak in streaks)
            count = crud.delete_streaks(self.db, streaks)
            crud.increment_total_xp(self.db, user_id, -deduction)

        logger.info(f"Cleared {count} streaks for user {user_id}: -{deduction} XP", user_id=user_id)
        return LedgerResult(streak=None, xp_delta=-deduction, streaks_affected=count)

    def current_balance(self, user_id: str) -> Tuple[int, Optional[int]]:
        """``(total_xp, xp_version)`` as stored right now."""
        user = crud.get_user(self.db, user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")
        self.db.refresh(user)
        return user.total_xp, user.xp_version

