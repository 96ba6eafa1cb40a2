"""Working-day calendar helpers (weekends, holidays, month bounds).

Pure functions shared by attendance summaries and leave day counting.
Saturday and Sunday are weekend days.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable, Iterator
from datetime import date, timedelta

WEEKEND_DAYS = frozenset({5, 6})


def is_weekend(day: date) -> bool:
    return day.weekday() in WEEKEND_DAYS


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end inclusive (nothing when end < start)."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def business_days(
    start: date, end: date, holidays: Iterable[date] = ()
) -> list[date]:
    """Dates in [start, end] that are neither weekend days nor holidays."""
    holiday_set = set(holidays)
    return [
        d for d in iter_days(start, end) if not is_weekend(d) and d not in holiday_set
    ]


def count_business_days(
    start: date, end: date, holidays: Iterable[date] = ()
) -> int:
    return len(business_days(start, end, holidays))


def business_days_between(start: date, end: date) -> int:
    """Business days strictly after start up to and including end (0 when end <= start).

    Used for advance-notice checks: requesting on Friday for Monday is one
    business day of notice.
    """
    if end <= start:
        return 0
    return count_business_days(start + timedelta(days=1), end)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last date of a month."""
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def clip_range(
    start: date, end: date, lower: date, upper: date
) -> tuple[date, date] | None:
    """Intersection of [start, end] with [lower, upper], or None when disjoint."""
    lo = max(start, lower)
    hi = min(end, upper)
    if lo > hi:
        return None
    return lo, hi


def format_minutes_of_day(minutes: float) -> str:
    """Minutes since midnight as HH:MM (rounded to the nearest minute)."""
    total = int(round(minutes)) % (24 * 60)
    return f"{total // 60:02d}:{total % 60:02d}"
