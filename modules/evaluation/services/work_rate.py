"""
Work-Rate Aggregator.

Sums one employee's deductions for a month and derives the monthly work
rate. ``calculate_work_rate`` is a pure function of its inputs;
``WorkRateCalculator`` wires it to the record and standards stores.
"""

import logging
from collections.abc import Iterable, Mapping

from modules.evaluation.core.config import EvaluationSettings, get_evaluation_settings
from modules.evaluation.repositories.base import AttendanceStandardsStore, RecordStore
from modules.evaluation.schemas.evaluation import (
    DailyAttendanceDetail,
    ShortenedWorkDetail,
    WorkRateSummary,
)
from modules.evaluation.schemas.records import (
    AttendanceRecord,
    AttendanceType,
    DailyAttendanceRecord,
    ShortenedWorkHourRecord,
    ShortenedWorkType,
)
from modules.evaluation.services.business_calendar import (
    STANDARD_DAILY_HOURS,
    HolidayInput,
    business_day_count,
    to_holiday_set,
)
from modules.evaluation.services.deduction import (
    deduction_table,
    resolve_daily_attendance,
    resolve_shortened_work,
)

logger = logging.getLogger(__name__)


def _split_records(
    employee_id: str, records: Iterable[AttendanceRecord]
) -> tuple[list[DailyAttendanceRecord], list[ShortenedWorkHourRecord]]:
    daily, shortened = [], []
    for record in records:
        if record.unique_id != employee_id:
            continue
        if isinstance(record, ShortenedWorkHourRecord):
            shortened.append(record)
        else:
            daily.append(record)
    return daily, shortened


def calculate_work_rate(
    employee_id: str,
    year: int,
    month: int,
    records: Iterable[AttendanceRecord],
    attendance_types: Iterable[AttendanceType] | Mapping[str, float],
    holidays: HolidayInput | None = None,
    daily_hours: float = STANDARD_DAILY_HOURS,
    apply_break: bool = False,
) -> WorkRateSummary:
    """
    Compute the work-rate summary of one employee for one month.

    Records of other employees and daily records outside the month are
    ignored. Shortened-work ranges are clipped to the month.
    """
    holiday_set = to_holiday_set(holidays)
    table = deduction_table(attendance_types)
    daily, shortened = _split_records(employee_id, records)

    business_days = business_day_count(year, month, holiday_set)
    standard_hours = business_days * daily_hours

    attendance_hours = 0.0
    warnings = []
    for record in daily:
        if (record.date.year, record.date.month) != (year, month):
            continue
        resolution = resolve_daily_attendance(record, table, daily_hours)
        attendance_hours += resolution.hours
        if resolution.warning is not None:
            warnings.append(resolution.warning)

    by_type = {ShortenedWorkType.PREGNANCY: 0.0, ShortenedWorkType.CARE: 0.0}
    for record in shortened:
        resolution = resolve_shortened_work(
            record, holiday_set, year, month, daily_hours, apply_break
        )
        by_type[record.type] += resolution.hours

    total_deduction = attendance_hours + sum(by_type.values())
    total_work = max(0.0, standard_hours - total_deduction)
    rate = total_work / standard_hours if standard_hours > 0 else 0.0

    return WorkRateSummary(
        employee_id=employee_id,
        year=year,
        month=month,
        business_days=business_days,
        standard_hours=standard_hours,
        deduction_hours_attendance=attendance_hours,
        deduction_hours_pregnancy=by_type[ShortenedWorkType.PREGNANCY],
        deduction_hours_care=by_type[ShortenedWorkType.CARE],
        total_deduction_hours=total_deduction,
        total_work_hours=total_work,
        monthly_work_rate=min(1.0, rate),
        warnings=warnings,
    )


def work_rate_details(
    year: int,
    month: int,
    records: Iterable[AttendanceRecord],
    attendance_types: Iterable[AttendanceType] | Mapping[str, float],
    holidays: HolidayInput | None = None,
    daily_hours: float = STANDARD_DAILY_HOURS,
    apply_break: bool = False,
) -> tuple[list[ShortenedWorkDetail], list[DailyAttendanceDetail]]:
    """Per-record detail rows of every record that counts toward the month."""
    holiday_set = to_holiday_set(holidays)
    table = deduction_table(attendance_types)

    shortened_details: list[ShortenedWorkDetail] = []
    daily_details: list[DailyAttendanceDetail] = []
    for record in records:
        if isinstance(record, ShortenedWorkHourRecord):
            resolution = resolve_shortened_work(
                record, holiday_set, year, month, daily_hours, apply_break
            )
            if resolution.detail is not None:
                shortened_details.append(resolution.detail)
        elif (record.date.year, record.date.month) == (year, month):
            daily_details.append(resolve_daily_attendance(record, table, daily_hours).detail)
    return shortened_details, daily_details


class WorkRateCalculator:
    """Computes work rates from the stored records and standards."""

    def __init__(
        self,
        record_store: RecordStore,
        standards: AttendanceStandardsStore,
        settings: EvaluationSettings | None = None,
    ) -> None:
        self._records = record_store
        self._standards = standards
        self._settings = settings or get_evaluation_settings()

    def summarize(self, employee_id: str, year: int, month: int) -> WorkRateSummary:
        records = self._records.query_by_period(employee_id, year, month)
        summary = calculate_work_rate(
            employee_id,
            year,
            month,
            records,
            self._standards.attendance_types(),
            self._standards.holidays(),
            daily_hours=self._settings.standard_daily_hours,
            apply_break=self._settings.apply_break_deduction,
        )
        logger.debug(
            f"Work rate for {employee_id} {year}-{month:02d}: "
            f"{summary.total_work_hours}/{summary.standard_hours}h"
        )
        return summary

    def details(
        self, employee_id: str, year: int, month: int
    ) -> tuple[list[ShortenedWorkDetail], list[DailyAttendanceDetail]]:
        records = self._records.query_by_period(employee_id, year, month)
        return work_rate_details(
            year,
            month,
            records,
            self._standards.attendance_types(),
            self._standards.holidays(),
            daily_hours=self._settings.standard_daily_hours,
            apply_break=self._settings.apply_break_deduction,
        )
