from datetime import date

from app.services.levels import xp_for_level
from app.services.projection import (
    STATUS_MAX_LEVEL,
    STATUS_PROJECTED,
    STATUS_UNREACHABLE,
    project_next_level,
)

TODAY = date(2025, 6, 15)


def test_projection_counts_badge_days():
    # Day 1: 10 + 100 (1_day), day 2: +110, day 3: +110, day 4: +10, day 5: +110 -> 450
    projection = project_next_level(0, 0, TODAY)

    assert projection.status == STATUS_PROJECTED
    assert projection.current_level == 1
    assert projection.next_level == 2
    assert projection.next_level_xp == 400
    assert projection.xp_needed == 400
    assert projection.days_to_next_level == 5
    assert projection.projected_date == date(2025, 6, 20)


def test_projection_without_badges_in_range():
    # Days 11..13 unlock no badge, so each adds XP_PER_DAY only
    projection = project_next_level(880, 10, TODAY)

    assert projection.current_level == 2
    assert projection.next_level_xp == 900
    assert projection.days_to_next_level == 2


def test_projection_already_at_threshold_needs_no_days():
    projection = project_next_level(xp_for_level(3) - 1, 3, TODAY)
    assert projection.days_to_next_level == 1


def test_max_level():
    projection = project_next_level(xp_for_level(10), 400, TODAY)

    assert projection.status == STATUS_MAX_LEVEL
    assert projection.next_level is None
    assert projection.days_to_next_level is None
    assert projection.projected_date is None


def test_unreachable_within_horizon():
    projection = project_next_level(0, 0, TODAY, horizon_days=1)

    assert projection.status == STATUS_UNREACHABLE
    assert projection.days_to_next_level is None
    assert projection.projected_date is None
    assert projection.xp_needed == 400
