"""
Business Calendar.

Counts business days (Mon-Fri, not a holiday) and the standard working
hours of a month. All functions are pure.
"""

import calendar
from collections.abc import Iterable, Iterator
from datetime import date, timedelta

from modules.evaluation.schemas.records import Holiday

STANDARD_DAILY_HOURS = 8

HolidayInput = Iterable[date | Holiday]


def to_holiday_set(holidays: HolidayInput | None) -> frozenset[date]:
    """Normalize Holiday models and plain dates into a set of dates."""
    if not holidays:
        return frozenset()
    return frozenset(h.date if isinstance(h, Holiday) else h for h in holidays)


def is_business_day(day: date, holidays: frozenset[date]) -> bool:
    return day.weekday() < 5 and day not in holidays


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month."""
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day in the inclusive range."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def clip_to_month(start: date, end: date, year: int, month: int) -> tuple[date, date] | None:
    """
    Intersect an inclusive date range with a month.

    Returns:
        The clipped (start, end), or None if the range misses the month.
    """
    first, last = month_bounds(year, month)
    clipped_start = max(start, first)
    clipped_end = min(end, last)
    if clipped_start > clipped_end:
        return None
    return clipped_start, clipped_end


def business_days_between(start: date, end: date, holidays: HolidayInput | None = None) -> int:
    """Number of business days in the inclusive range. An inverted range has none."""
    holiday_set = to_holiday_set(holidays)
    return sum(1 for day in iter_days(start, end) if is_business_day(day, holiday_set))


def business_day_count(year: int, month: int, holidays: HolidayInput | None = None) -> int:
    """Number of business days in a month."""
    first, last = month_bounds(year, month)
    return business_days_between(first, last, holidays)


def standard_monthly_hours(
    year: int,
    month: int,
    holidays: HolidayInput | None = None,
    daily_hours: float = STANDARD_DAILY_HOURS,
) -> float:
    """Business days of the month times the standard day length."""
    return business_day_count(year, month, holidays) * daily_hours
