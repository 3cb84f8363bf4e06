import pytest

from app.config import MAX_LEVEL
from app.services.levels import calculate_level, progress_to_next_level, xp_for_level


@pytest.mark.parametrize("xp,expected", [
    (-50, 1),
    (0, 1),
    (399, 1),
    (400, 2),
    (899, 2),
    (900, 3),
    (8100, 9),
    (10000, 10),
    (10 ** 9, MAX_LEVEL),
])
def test_calculate_level(xp, expected):
    assert calculate_level(xp) == expected


def test_level_is_monotonic_and_bounded():
    previous = calculate_level(0)
    for xp in range(0, 20000, 37):
        level = calculate_level(xp)
        assert 1 <= level <= MAX_LEVEL
        assert level >= previous
        previous = level


def test_xp_for_level_is_threshold():
    for level in range(2, MAX_LEVEL + 1):
        assert calculate_level(xp_for_level(level)) == level
        assert calculate_level(xp_for_level(level) - 1) == level - 1


def test_progress_within_level():
    assert progress_to_next_level(100) == 0.0
    assert progress_to_next_level(250) == pytest.approx(50.0)
    assert progress_to_next_level(0) == 0.0


def test_progress_at_max_level_is_full():
    assert progress_to_next_level(xp_for_level(MAX_LEVEL)) == 100.0
    assert progress_to_next_level(10 ** 6) == 100.0
