"""
Unit Tests for the Deduction Resolver.
"""

import logging
from datetime import date, time

import pytest

from modules.evaluation.schemas.records import (
    DEFAULT_ATTENDANCE_TYPES,
    DailyAttendanceRecord,
    ShortenedWorkHourRecord,
    ShortenedWorkType,
)
from modules.evaluation.services.deduction import (
    actual_work_hours,
    deduction_table,
    resolve_daily_attendance,
    resolve_shortened_work,
)


def _daily(type_name: str, day: date = date(2024, 1, 15)) -> DailyAttendanceRecord:
    return DailyAttendanceRecord(unique_id="E001", date=day, type=type_name)


def _shortened(start: date, end: date, start_time: time, end_time: time) -> ShortenedWorkHourRecord:
    return ShortenedWorkHourRecord(
        unique_id="E001",
        start_date=start,
        end_date=end,
        start_time=start_time,
        end_time=end_time,
        type=ShortenedWorkType.PREGNANCY,
    )


class TestDeductionTable:
    """Tests for deduction_table()."""

    def test_from_attendance_types(self):
        table = deduction_table(DEFAULT_ATTENDANCE_TYPES)
        assert table["연차"] == 1
        assert table["오전반차"] == 0.5

    def test_from_mapping(self):
        assert deduction_table({"연차": 1}) == {"연차": 1}


class TestResolveDailyAttendance:
    """Tests for resolve_daily_attendance()."""

    def test_full_day_leave(self):
        """One 연차 deducts one standard day."""
        resolution = resolve_daily_attendance(_daily("연차"), DEFAULT_ATTENDANCE_TYPES)

        assert resolution.hours == 8
        assert resolution.warning is None
        assert resolution.detail.deduction_days == 1
        assert resolution.detail.known_type is True

    def test_half_day_leave(self):
        resolution = resolve_daily_attendance(_daily("오후반차"), DEFAULT_ATTENDANCE_TYPES)
        assert resolution.hours == 4

    def test_custom_day_length(self):
        resolution = resolve_daily_attendance(_daily("연차"), DEFAULT_ATTENDANCE_TYPES, daily_hours=7.5)
        assert resolution.hours == 7.5

    def test_unknown_type_warns_and_deducts_nothing(self, caplog):
        """An unconfigured type is a warning value, not an error."""
        with caplog.at_level(logging.WARNING):
            resolution = resolve_daily_attendance(_daily("교육"), DEFAULT_ATTENDANCE_TYPES)

        assert resolution.hours == 0
        assert resolution.warning is not None
        assert resolution.warning.type_name == "교육"
        assert resolution.warning.employee_id == "E001"
        assert resolution.warning.record_date == date(2024, 1, 15)
        assert resolution.detail.known_type is False
        assert "Unknown attendance type" in caplog.text


class TestActualWorkHours:
    """Tests for actual_work_hours()."""

    def test_break_not_applied_by_default(self):
        assert actual_work_hours(6) == 6

    @pytest.mark.parametrize(
        "work_hours,expected",
        [(6, 5), (7, 6), (4, 3.5), (5.5, 5), (3, 3)],
    )
    def test_break_deduction(self, work_hours, expected):
        assert actual_work_hours(work_hours, apply_break=True) == expected


class TestResolveShortenedWork:
    """Tests for resolve_shortened_work()."""

    def test_six_hour_days_over_one_week(self):
        """09:00-15:00 on five business days deducts 2h x 5 = 10h."""
        record = _shortened(date(2024, 1, 8), date(2024, 1, 12), time(9), time(15))

        resolution = resolve_shortened_work(record)

        assert resolution.hours == 10
        assert resolution.detail.business_days == 5
        assert resolution.detail.work_hours == 6
        assert resolution.detail.daily_deduction == 2

    def test_weekend_and_holiday_not_counted(self, new_year_holiday):
        """Range 2023-12-30..2024-01-07 has four business days after 신정."""
        record = _shortened(date(2023, 12, 30), date(2024, 1, 7), time(10), time(16))

        resolution = resolve_shortened_work(record, [new_year_holiday], 2024, 1)

        assert resolution.detail.business_days == 4
        assert resolution.hours == 8

    def test_clipped_to_month(self):
        """Only the days inside the requested month count."""
        record = _shortened(date(2024, 1, 29), date(2024, 2, 2), time(9), time(13))

        january = resolve_shortened_work(record, year=2024, month=1)
        february = resolve_shortened_work(record, year=2024, month=2)

        assert january.detail.business_days == 3
        assert january.hours == 12
        assert february.detail.business_days == 2
        assert february.hours == 8

    def test_range_outside_month(self):
        record = _shortened(date(2024, 3, 4), date(2024, 3, 8), time(9), time(15))

        resolution = resolve_shortened_work(record, year=2024, month=1)

        assert resolution.hours == 0
        assert resolution.detail is None

    def test_full_length_day_deducts_nothing(self):
        """A window of a full day or more never adds time back."""
        record = _shortened(date(2024, 1, 8), date(2024, 1, 12), time(8), time(18))

        assert resolve_shortened_work(record).hours == 0

    def test_fractional_window(self):
        """09:00-14:30 is 5.5h worked, 2.5h deducted per day."""
        record = _shortened(date(2024, 1, 15), date(2024, 1, 15), time(9), time(14, 30))

        assert resolve_shortened_work(record).hours == 2.5

    def test_break_deduction_applied(self):
        """With the break applied a 6h window counts as 5h worked."""
        record = _shortened(date(2024, 1, 15), date(2024, 1, 15), time(9), time(15))

        resolution = resolve_shortened_work(record, apply_break=True)

        assert resolution.detail.actual_work_hours == 5
        assert resolution.hours == 3
