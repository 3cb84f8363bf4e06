from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence

import pytz

from app.models import JournalEntry, Streak
from app.services.xp_calculator import has_valid_start
from app.utils.dates import local_date

WEEKDAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


@dataclass
class StreakStats:
    total_streaks: int = 0
    longest_streak: int = 0
    average_streak: int = 0
    total_disciplined_days: int = 0
    days_this_year: int = 0
    success_rate: int = 0
    relapses_by_weekday: Dict[str, int] = field(default_factory=dict)
    relapse_triggers: Dict[str, int] = field(default_factory=dict)
    monthly_consistency: Dict[str, int] = field(default_factory=dict)
    mood_history: List[dict] = field(default_factory=list)


@dataclass
class _Span:
    start: date
    end: date  # exclusive for ended streaks, today for the active one
    ended: bool
    end_instant: Optional[datetime]
    reason: Optional[str]


def _spans(streaks: Sequence[Streak], tz: pytz.BaseTzInfo, today: date) -> List[_Span]:
    spans = []
    for streak in streaks:
        if not has_valid_start(streak):
            continue
        ended = streak.end_date is not None
        spans.append(_Span(
            start=local_date(streak.start_date, tz),
            end=local_date(streak.end_date, tz) if ended else today,
            ended=ended,
            end_instant=streak.end_date,
            reason=streak.relapse_reason,
        ))
    spans.sort(key=lambda s: s.start)
    return spans


def calculate_success_rate(streaks: Sequence[Streak], tz: pytz.BaseTzInfo, today: date) -> int:
    """Share (0-100) of the days since the first streak began that were spent inside a streak."""
    spans = _spans(streaks, tz, today)
    if not spans:
        return 0
    disciplined = sum(max(0, (span.end - span.start).days) for span in spans)
    days_since_start = max(1, (today - spans[0].start).days)
    return min(100, round(disciplined / days_since_start * 100))


def _days_in_year(span: _Span, today: date) -> int:
    year_start = date(today.year, 1, 1)
    year_end = date(today.year, 12, 31)
    start = max(span.start, year_start)
    end = min(span.end, year_end)
    return (end - start).days if start <= end else 0


def _monthly_consistency(spans: Sequence[_Span], today: date) -> Dict[str, int]:
    months = {name: 0 for name in MONTH_NAMES}
    day = date(today.year, 1, 1)
    while day <= today:
        for span in spans:
            if span.start <= day < span.end:
                months[MONTH_NAMES[day.month - 1]] += 1
                break
        day += timedelta(days=1)
    return months


def calculate_stats(
    streaks: Sequence[Streak],
    journal_entries: Sequence[JournalEntry],
    tz: pytz.BaseTzInfo,
    today: date,
    mood_limit: int = 30,
) -> StreakStats:
    spans = _spans(streaks, tz, today)
    lengths = [max(0, (span.end - span.start).days) for span in spans]

    weekdays = {name: 0 for name in WEEKDAY_NAMES}
    for span in spans:
        if span.ended:
            # isoweekday: Mon=1 .. Sun=7
            weekdays[WEEKDAY_NAMES[local_date(span.end_instant, tz).isoweekday() % 7]] += 1

    triggers = Counter(span.reason for span in spans if span.reason)

    recent = sorted(journal_entries, key=lambda entry: entry.date)[-mood_limit:]
    mood_history = [
        {"date": local_date(entry.date, tz).isoformat(), "mood": entry.mood}
        for entry in recent
    ]

    return StreakStats(
        total_streaks=len(spans),
        longest_streak=max(lengths, default=0),
        average_streak=round(sum(lengths) / len(lengths)) if lengths else 0,
        total_disciplined_days=sum(lengths),
        days_this_year=sum(_days_in_year(span, today) for span in spans),
        success_rate=calculate_success_rate(streaks, tz, today),
        relapses_by_weekday=weekdays,
        relapse_triggers=dict(triggers),
        monthly_consistency=_monthly_consistency(spans, today),
        mood_history=mood_history,
    )
