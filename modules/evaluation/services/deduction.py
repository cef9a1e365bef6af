"""
Deduction Resolver.

Converts one attendance-exception record into deducted working hours.

- Daily attendance: ``deduction_days x standard day``. An unconfigured type
  deducts nothing and comes back with an ``UnknownAttendanceType`` warning.
- Shortened work: for each business day of the (optionally month-clipped)
  range, ``max(0, standard day - actual hours)``.

Nothing here raises for expected business conditions.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date

from modules.evaluation.schemas.evaluation import (
    DailyAttendanceDetail,
    ShortenedWorkDetail,
    UnknownAttendanceType,
)
from modules.evaluation.schemas.records import (
    AttendanceType,
    DailyAttendanceRecord,
    ShortenedWorkHourRecord,
)
from modules.evaluation.services.business_calendar import (
    STANDARD_DAILY_HOURS,
    HolidayInput,
    business_days_between,
    clip_to_month,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """Deducted hours of one record, with its detail row and any warning."""

    hours: float
    detail: ShortenedWorkDetail | DailyAttendanceDetail | None = None
    warning: UnknownAttendanceType | None = None


def deduction_table(
    attendance_types: Iterable[AttendanceType] | Mapping[str, float],
) -> dict[str, float]:
    """Attendance type name -> deduction days."""
    if isinstance(attendance_types, Mapping):
        return dict(attendance_types)
    return {t.name: t.deduction_days for t in attendance_types}


def actual_work_hours(work_hours: float, apply_break: bool = False) -> float:
    """
    Hours that count as worked in a shortened day.

    With ``apply_break``, the statutory break is not counted: 1h for a day of
    6h or more, 0.5h for a day of 4h or more.
    """
    if not apply_break:
        return work_hours
    if work_hours >= 6:
        return work_hours - 1
    if work_hours >= 4:
        return work_hours - 0.5
    return work_hours


def resolve_daily_attendance(
    record: DailyAttendanceRecord,
    attendance_types: Iterable[AttendanceType] | Mapping[str, float],
    daily_hours: float = STANDARD_DAILY_HOURS,
) -> Resolution:
    """Deducted hours of one exception day."""
    table = deduction_table(attendance_types)
    deduction_days = table.get(record.type)
    warning = None

    if deduction_days is None:
        logger.warning(
            f"Unknown attendance type '{record.type}' for {record.unique_id} "
            f"on {record.date}; counting no deduction"
        )
        warning = UnknownAttendanceType(
            employee_id=record.unique_id,
            type_name=record.type,
            record_date=record.date,
        )
        deduction_days = 0

    hours = deduction_days * daily_hours
    detail = DailyAttendanceDetail(
        unique_id=record.unique_id,
        name=record.name,
        date=record.date,
        type=record.type,
        deduction_days=deduction_days,
        total_deduction_hours=hours,
        known_type=warning is None,
    )
    return Resolution(hours=hours, detail=detail, warning=warning)


def resolve_shortened_work(
    record: ShortenedWorkHourRecord,
    holidays: HolidayInput | None = None,
    year: int | None = None,
    month: int | None = None,
    daily_hours: float = STANDARD_DAILY_HOURS,
    apply_break: bool = False,
) -> Resolution:
    """
    Deducted hours of a shortened-work period.

    Args:
        record: The shortened-work record.
        holidays: Dates that are not business days.
        year, month: When given, only the days of this month count.
        daily_hours: Length of a standard day.
        apply_break: Do not count the statutory break as worked.

    Returns:
        Resolution with zero hours and no detail if the range misses the month.
    """
    start: date = record.start_date
    end: date = record.end_date
    if year is not None and month is not None:
        clipped = clip_to_month(start, end, year, month)
        if clipped is None:
            return Resolution(hours=0.0)
        start, end = clipped

    work_hours = record.daily_hours
    actual_hours = actual_work_hours(work_hours, apply_break)
    daily_deduction = max(0.0, daily_hours - actual_hours)
    business_days = business_days_between(start, end, holidays)
    total = business_days * daily_deduction

    detail = ShortenedWorkDetail(
        unique_id=record.unique_id,
        name=record.name,
        type=record.type,
        start_date=record.start_date,
        end_date=record.end_date,
        work_hours=work_hours,
        actual_work_hours=actual_hours,
        daily_deduction=daily_deduction,
        business_days=business_days,
        total_deduction_hours=total,
    )
    return Resolution(hours=total, detail=detail)
