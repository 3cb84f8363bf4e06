from datetime import date

from app import crud
from app.services.public_profile_service import ANONYMOUS_NAME, build_snapshot, public_view, save_public_profile

ALL_VISIBLE = {
    "is_enabled": True,
    "show_name": True,
    "show_level": True,
    "show_active_streak": True,
    "show_badges": True,
    "show_stats": True,
}


def _seed(ledger, user, clock):
    ledger.record_past_streak(user.id, date(2025, 6, 1), date(2025, 6, 8))
    ledger.start_streak(user.id)
    clock.advance(days=3)


def test_snapshot_uses_ledger_and_active_streak(db, ledger, user, clock):
    _seed(ledger, user, clock)
    db.refresh(user)

    snapshot = build_snapshot(db, user, show_badges=True, now=clock())

    assert snapshot["total_xp"] == 590
    assert snapshot["level"] == 2
    assert snapshot["active_streak_days"] == 3
    assert snapshot["badges"] == ["1_day", "2_days", "3_days"]
    # 7 + 3 disciplined days over the 17 days since June 1
    assert snapshot["success_rate"] == 59


def test_snapshot_without_badges(db, ledger, user, clock):
    _seed(ledger, user, clock)
    snapshot = build_snapshot(db, user, show_badges=False, now=clock())
    assert snapshot["badges"] == []


def test_save_enabled_publishes_snapshot(db, ledger, user, clock):
    _seed(ledger, user, clock)
    db.refresh(user)

    profile = save_public_profile(db, user, ALL_VISIBLE, now=clock())

    assert profile.is_enabled
    assert profile.total_xp == 590
    assert profile.active_streak_days == 3
    assert crud.get_public_profile(db, user.id) is profile


def test_disable_keeps_last_snapshot(db, ledger, user, clock):
    _seed(ledger, user, clock)
    db.refresh(user)
    save_public_profile(db, user, ALL_VISIBLE, now=clock())

    profile = save_public_profile(db, user, dict(ALL_VISIBLE, is_enabled=False), now=clock())

    assert not profile.is_enabled
    assert profile.total_xp == 590


def test_public_view_hides_sections(db, ledger, user, clock):
    _seed(ledger, user, clock)
    db.refresh(user)
    settings = dict(ALL_VISIBLE, show_name=False, show_badges=False, show_stats=False)
    profile = save_public_profile(db, user, settings, now=clock())

    view = public_view(profile)

    assert view["display_name"] == ANONYMOUS_NAME
    assert view["photo_url"] is None
    assert view["level"] == 2
    assert view["active_streak_days"] == 3
    assert view["badges"] is None
    assert view["success_rate"] is None


def test_unknown_settings_keys_are_ignored(db, user, clock):
    profile = save_public_profile(db, user, {"is_enabled": False, "total_xp": 10 ** 6}, now=clock())
    assert profile.total_xp == 0
