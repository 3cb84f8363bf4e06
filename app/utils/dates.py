from __future__ import annotations
from datetime import date, datetime, time, timezone as dt_timezone
from typing import Optional
import pytz

from app.config import settings


def resolve_timezone(tz_name: Optional[str]) -> pytz.BaseTzInfo:
    """Return the pytz zone for ``tz_name``, falling back to the configured default."""
    try:
        return pytz.timezone(tz_name or settings.DEFAULT_TIMEZONE)
    except pytz.UnknownTimeZoneError:
        return pytz.timezone(settings.DEFAULT_TIMEZONE)


def utcnow() -> datetime:
    return datetime.now(dt_timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt_timezone.utc)
    return value


def local_date(value: datetime, tz: pytz.BaseTzInfo) -> date:
    return ensure_aware(value).astimezone(tz).date()


def calendar_days_between(start: datetime, end: datetime, tz: pytz.BaseTzInfo) -> int:
    """
    Number of local midnights crossed going from ``start`` to ``end``.

    23:00 -> 01:00 the next day is 1; 00:01 -> 23:59 the same day is 0.
    Negative when ``end`` falls on an earlier calendar day.
    """
    return (local_date(end, tz) - local_date(start, tz)).days


def start_of_local_day(day: date, tz: pytz.BaseTzInfo) -> datetime:
    """Midnight of ``day`` in ``tz`` as an aware UTC datetime."""
    return tz.localize(datetime.combine(day, time.min)).astimezone(dt_timezone.utc)
