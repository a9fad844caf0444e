"""Day-granularity interval helpers.

Every comparison drops the time of day (after converting aware datetimes to
UTC), so a leave stamped 2024-03-04T15:00Z and the date 2024-03-04 are the
same day. Ranges are inclusive on both ends unless the name says otherwise.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

ONE_DAY = timedelta(days=1)
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

DayLike = date | datetime


def as_day(value: DayLike) -> date:
    """Drop the time of day, converting aware datetimes to UTC first."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date()
    return value


def as_utc(value: DayLike) -> datetime:
    """Lift a date or naive datetime to an aware UTC datetime."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    return datetime.combine(value, time.min, tzinfo=UTC)


def midnight(value: DayLike) -> datetime:
    """Midnight UTC of the value's day."""
    return as_utc(as_day(value))


def has_time_of_day(value: datetime) -> bool:
    return as_utc(value).hour != 0


def same_day(a: DayLike, b: DayLike) -> bool:
    return as_day(a) == as_day(b)


def contains(start: DayLike, end: DayLike, day: DayLike) -> bool:
    """True when ``day`` lies in ``[start, end]``."""
    return as_day(start) <= as_day(day) <= as_day(end)


def contains_half_open(start: DayLike, end: DayLike, day: DayLike) -> bool:
    """True when ``day`` lies in ``[start, end)``."""
    return as_day(start) <= as_day(day) < as_day(end)


def overlaps(a_start: DayLike, a_end: DayLike, b_start: DayLike, b_end: DayLike) -> bool:
    """True when the inclusive ranges share at least one day."""
    return as_day(a_start) <= as_day(b_end) and as_day(b_start) <= as_day(a_end)


def daterange(start: DayLike, end: DayLike) -> Iterator[date]:
    """Yield each day from ``start`` through ``end`` inclusive."""
    current = as_day(start)
    last = as_day(end)
    while current <= last:
        yield current
        current += ONE_DAY


def week_bounds(day: DayLike) -> tuple[date, date]:
    """The Sunday..Saturday week containing ``day``."""
    current = as_day(day)
    sunday = current - timedelta(days=(current.weekday() + 1) % 7)
    return sunday, sunday + timedelta(days=6)
