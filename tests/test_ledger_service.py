from datetime import date, datetime, timezone

import pytest

from app import crud
from app.config import START_BONUS, XP_PER_DAY
from app.models import Streak
from app.services.exceptions import (
    ActiveStreakExistsError,
    NoActiveStreakError,
    StreakNotFoundError,
    StreakValidationError,
    UserNotFoundError,
)
from app.services.ledger_service import find_overlapping_streak
from app.services.xp_calculator import badge_xp_for_days, closed_contribution, total_ledger_contribution
from app.utils.dates import resolve_timezone

UTC = resolve_timezone("UTC")


def _balance(ledger, user):
    return ledger.current_balance(user.id)[0]


def _assert_ledger_matches_history(db, ledger, user):
    streaks = crud.list_streaks(db, user.id)
    open_streaks = [s for s in streaks if s.end_date is None]
    # Relapse credits omit badge XP, so only check histories without relapses
    assert len(open_streaks) <= 1
    assert _balance(ledger, user) == total_ledger_contribution(streaks, UTC)


# ============================================================================
# Start
# ============================================================================

def test_start_credits_bonus(db, ledger, user):
    result = ledger.start_streak(user.id)

    assert result.xp_delta == START_BONUS
    assert result.streak.is_active
    assert _balance(ledger, user) == START_BONUS
    _assert_ledger_matches_history(db, ledger, user)


def test_second_start_is_rejected_without_writing(db, ledger, user):
    ledger.start_streak(user.id)

    with pytest.raises(ActiveStreakExistsError):
        ledger.start_streak(user.id)

    assert _balance(ledger, user) == START_BONUS
    assert len(crud.list_streaks(db, user.id)) == 1


def test_start_for_unknown_user(ledger):
    with pytest.raises(UserNotFoundError):
        ledger.start_streak("nobody")


# ============================================================================
# Relapse
# ============================================================================

def test_relapse_after_ten_days_credits_day_xp_only(db, ledger, user, clock):
    ledger.start_streak(user.id)
    clock.advance(days=10)

    result = ledger.relapse(user.id, "Boredom", "long weekend")

    assert result.xp_delta == 10 * XP_PER_DAY
    assert _balance(ledger, user) == START_BONUS + 100
    assert result.streak.end_date is not None
    assert result.streak.relapse_reason == "Boredom"
    assert crud.get_active_streak(db, user.id) is None


def test_relapse_on_day_zero_credits_nothing(ledger, user, clock):
    ledger.start_streak(user.id)
    clock.advance(hours=3)

    result = ledger.relapse(user.id)

    assert result.xp_delta == 0
    assert _balance(ledger, user) == START_BONUS


def test_relapse_without_active_streak(ledger, user):
    with pytest.raises(NoActiveStreakError):
        ledger.relapse(user.id)


def test_relapse_with_unknown_reason(ledger, user):
    ledger.start_streak(user.id)
    with pytest.raises(StreakValidationError):
        ledger.relapse(user.id, "Because")
    assert _balance(ledger, user) == START_BONUS


def test_relapse_then_delete_keeps_badge_asymmetry(db, ledger, user, clock):
    """Relapse credits days only while delete deducts the full closed contribution."""
    ledger.start_streak(user.id)
    clock.advance(days=10)
    closed = ledger.relapse(user.id).streak

    ledger.delete_streak(user.id, closed.id)

    assert _balance(ledger, user) == -badge_xp_for_days(10)
    assert crud.list_streaks(db, user.id) == []


# ============================================================================
# Past streaks
# ============================================================================

def test_record_past_streak_credits_full_contribution(db, ledger, user):
    result = ledger.record_past_streak(user.id, date(2025, 6, 1), date(2025, 6, 8))

    assert result.xp_delta == START_BONUS + 70 + 500
    assert _balance(ledger, user) == 580
    _assert_ledger_matches_history(db, ledger, user)


def test_delete_past_streak_restores_balance(ledger, user):
    ledger.start_streak(user.id)
    before = _balance(ledger, user)
    streak = ledger.record_past_streak(user.id, date(2025, 6, 1), date(2025, 6, 8)).streak

    result = ledger.delete_streak(user.id, streak.id)

    assert result.xp_delta == -580
    assert _balance(ledger, user) == before


def test_delete_after_timezone_change_restores_balance(db, ledger, user):
    crud.update_user_fields(db, user, {"timezone": "Europe/London"})
    # March 30 is 23 hours long in London
    credit = ledger.record_past_streak(user.id, date(2025, 3, 1), date(2025, 4, 1)).xp_delta
    streak = crud.list_streaks(db, user.id)[0]
    assert streak.timezone == "Europe/London"
    assert credit == closed_contribution(31)

    crud.update_user_fields(db, user, {"timezone": "UTC"})
    result = ledger.delete_streak(user.id, streak.id)

    assert result.xp_delta == -credit
    assert _balance(ledger, user) == 0


def test_relapse_stamps_credit_timezone(db, ledger, user, clock):
    crud.update_user_fields(db, user, {"timezone": "Asia/Tokyo"})
    ledger.start_streak(user.id)
    clock.advance(days=4)

    closed = ledger.relapse(user.id).streak

    assert closed.timezone == "Asia/Tokyo"



def test_zero_length_past_streak(ledger, user):
    result = ledger.record_past_streak(user.id, date(2025, 6, 1), date(2025, 6, 1))
    assert result.xp_delta == START_BONUS


@pytest.mark.parametrize("start,end", [
    (date(2025, 6, 8), date(2025, 6, 1)),
    (date(2025, 6, 10), date(2025, 6, 16)),
    (date(2025, 6, 16), date(2025, 6, 20)),
])
def test_invalid_past_ranges_write_nothing(db, ledger, user, start, end):
    with pytest.raises(StreakValidationError):
        ledger.record_past_streak(user.id, start, end)
    assert _balance(ledger, user) == 0
    assert crud.list_streaks(db, user.id) == []


def test_overlapping_past_streak_rejected(ledger, user):
    ledger.record_past_streak(user.id, date(2025, 6, 1), date(2025, 6, 8))

    with pytest.raises(StreakValidationError):
        ledger.record_past_streak(user.id, date(2025, 6, 5), date(2025, 6, 9))
    with pytest.raises(StreakValidationError):
        ledger.record_past_streak(user.id, date(2025, 5, 20), date(2025, 6, 2))
    assert _balance(ledger, user) == 580


def test_adjacent_past_streak_accepted(ledger, user):
    ledger.record_past_streak(user.id, date(2025, 6, 1), date(2025, 6, 8))
    result = ledger.record_past_streak(user.id, date(2025, 6, 8), date(2025, 6, 10))

    assert result.xp_delta == closed_contribution(2)


def test_past_streak_overlapping_active_streak_rejected(ledger, user, clock):
    ledger.start_streak(user.id)
    clock.advance(days=5)

    with pytest.raises(StreakValidationError):
        ledger.record_past_streak(user.id, date(2025, 6, 16), date(2025, 6, 18))
    # Ending on the active streak's start day only touches it
    result = ledger.record_past_streak(user.id, date(2025, 6, 10), date(2025, 6, 15))
    assert result.xp_delta == closed_contribution(5)


def test_overlap_same_start_day_counts():
    existing = Streak(
        id="a",
        start_date=datetime(2025, 6, 1, tzinfo=timezone.utc),
        end_date=datetime(2025, 6, 1, tzinfo=timezone.utc),
    )
    assert find_overlapping_streak([existing], date(2025, 6, 1), date(2025, 6, 1), UTC) is existing
    assert find_overlapping_streak([existing], date(2025, 6, 2), date(2025, 6, 3), UTC) is None


# ============================================================================
# Start date / reflection edits
# ============================================================================

def test_update_start_date_moves_no_xp(db, ledger, user, clock):
    streak = ledger.start_streak(user.id).streak

    result = ledger.update_start_date(user.id, streak.id, date(2025, 6, 5))

    assert result.xp_delta == 0
    assert _balance(ledger, user) == START_BONUS
    stored = crud.get_streak(db, user.id, streak.id)
    assert stored.start_date.date() == date(2025, 6, 5)

    clock.advance(days=1)
    assert ledger.relapse(user.id).xp_delta == 11 * XP_PER_DAY


def test_update_start_date_rejects_future_and_closed(ledger, user):
    closed = ledger.record_past_streak(user.id, date(2025, 6, 1), date(2025, 6, 3)).streak
    active = ledger.start_streak(user.id).streak

    with pytest.raises(StreakValidationError):
        ledger.update_start_date(user.id, active.id, date(2025, 6, 16))
    with pytest.raises(StreakValidationError):
        ledger.update_start_date(user.id, closed.id, date(2025, 5, 1))
    with pytest.raises(StreakValidationError):
        ledger.update_start_date(user.id, active.id, date(2025, 6, 2))
    with pytest.raises(StreakNotFoundError):
        ledger.update_start_date(user.id, "missing", date(2025, 6, 10))


def test_update_reflection_on_closed_streak(ledger, user):
    closed = ledger.record_past_streak(user.id, date(2025, 6, 1), date(2025, 6, 3)).streak

    result = ledger.update_reflection(user.id, closed.id, "Fatigue / Tiredness", "late nights")

    assert result.xp_delta == 0
    assert result.streak.relapse_reason == "Fatigue / Tiredness"
    assert result.streak.relapse_notes == "late nights"


def test_update_reflection_rejects_active_streak(ledger, user):
    active = ledger.start_streak(user.id).streak
    with pytest.raises(StreakValidationError):
        ledger.update_reflection(user.id, active.id, "Other", None)


# ============================================================================
# Delete / clear
# ============================================================================

def test_delete_active_streak_deducts_start_bonus(ledger, user):
    active = ledger.start_streak(user.id).streak
    result = ledger.delete_streak(user.id, active.id)

    assert result.xp_delta == -START_BONUS
    assert _balance(ledger, user) == 0


def test_delete_unknown_streak(ledger, user):
    with pytest.raises(StreakNotFoundError):
        ledger.delete_streak(user.id, "missing")


def test_delete_is_scoped_to_owner(db, ledger, user):
    crud.create_user(db, "user-2", "user2@example.com", "Other")
    streak = ledger.record_past_streak(user.id, date(2025, 6, 1), date(2025, 6, 3)).streak

    with pytest.raises(StreakNotFoundError):
        ledger.delete_streak("user-2", streak.id)
    assert _balance(ledger, user) == closed_contribution(2)


def test_clear_history_restores_pre_history_balance(db, ledger, user):
    ledger.record_past_streak(user.id, date(2025, 5, 1), date(2025, 5, 20))
    ledger.record_past_streak(user.id, date(2025, 6, 1), date(2025, 6, 8))
    ledger.start_streak(user.id)

    result = ledger.clear_history(user.id)

    assert result.streaks_affected == 3
    assert result.xp_delta == -(closed_contribution(19) + closed_contribution(7) + START_BONUS)
    assert _balance(ledger, user) == 0
    assert crud.list_streaks(db, user.id) == []


def test_clear_empty_history(ledger, user):
    result = ledger.clear_history(user.id)
    assert result.streaks_affected == 0
    assert result.xp_delta == 0


def test_malformed_streak_is_skipped_on_delete(db, ledger, user):
    db.add(Streak(id="broken", user_id=user.id, start_date=None, end_date=datetime(2025, 6, 1, tzinfo=timezone.utc)))
    db.commit()

    result = ledger.delete_streak(user.id, "broken")
    assert result.xp_delta == 0
    assert _balance(ledger, user) == 0
