"""
Attendance Record Schemas.

Pydantic models for the evaluation standards (grading scale, attendance
types, holidays) and the two attendance-exception record kinds.

Fields are snake_case in Python; the camelCase keys used by the flat
Excel/JSON rows (uniqueId, startDate, deductionDays, ...) are accepted as
aliases and produced by ``model_dump(by_alias=True)``.
"""

from datetime import date, datetime, time
from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting both snake_case names and camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# Standards
# =============================================================================


class GradeInfo(CamelModel):
    """Score and payout rate of one grade."""

    score: float = Field(..., ge=0, description="평가 점수")
    payout_rate_percent: float = Field(..., ge=0, description="지급률 (%)")
    description: str = Field(default="", description="등급 설명")


GradingScale = dict[str, GradeInfo]


DEFAULT_GRADING_SCALE: GradingScale = {
    "S": GradeInfo(score=150, payout_rate_percent=150, description="최고 성과"),
    "A+": GradeInfo(score=130, payout_rate_percent=130, description="우수 성과"),
    "A": GradeInfo(score=115, payout_rate_percent=115, description="좋은 성과"),
    "B+": GradeInfo(score=105, payout_rate_percent=105, description="기대 이상"),
    "B": GradeInfo(score=100, payout_rate_percent=100, description="기대치 충족 (기준)"),
    "B-": GradeInfo(score=95, payout_rate_percent=95, description="기대 이하"),
    "C": GradeInfo(score=85, payout_rate_percent=85, description="개선 필요"),
    "C-": GradeInfo(score=70, payout_rate_percent=70, description="상당한 개선 필요"),
    "D": GradeInfo(score=0, payout_rate_percent=0, description="미흡"),
}


def ordered_grades(grading_scale: GradingScale) -> list[str]:
    """Grades ordered for reports: descending payout rate."""
    return sorted(
        grading_scale,
        key=lambda grade: grading_scale[grade].payout_rate_percent,
        reverse=True,
    )


class AttendanceType(CamelModel):
    """Daily attendance exception type with its full-day deduction."""

    id: str = Field(..., description="근태 유형 ID")
    name: str = Field(..., min_length=1, description="근태 유형명 (예: 연차, 오전반차)")
    deduction_days: float = Field(..., ge=0, description="차감 일수 (0.5 = 반일)")
    description: str = Field(default="")


DEFAULT_ATTENDANCE_TYPES: list[AttendanceType] = [
    AttendanceType(id="att-1", name="연차", deduction_days=1),
    AttendanceType(id="att-2", name="오전반차", deduction_days=0.5),
    AttendanceType(id="att-3", name="오후반차", deduction_days=0.5),
    AttendanceType(id="att-4", name="병가", deduction_days=1),
    AttendanceType(id="att-5", name="공가", deduction_days=1),
]


class HolidayType(str, Enum):
    """Kind of non-working day."""

    PUBLIC = "공휴일"
    COMPANY = "회사휴일"

    def __str__(self) -> str:
        return self.value


class Holiday(CamelModel):
    """A date excluded from business-day counting regardless of weekday."""

    date: date
    name: str = Field(default="")
    type: HolidayType = Field(default=HolidayType.PUBLIC)
    id: str | None = Field(default=None)


# =============================================================================
# Attendance Records
# =============================================================================


class ShortenedWorkType(str, Enum):
    """Reason category of a shortened-work period."""

    PREGNANCY = "임신"
    CARE = "육아/돌봄"

    def __str__(self) -> str:
        return self.value


class DailyAttendanceRecord(CamelModel):
    """One exception day (leave, half-day, sick leave, ...) of one employee."""

    unique_id: str = Field(..., min_length=1, description="고유사번")
    date: date
    type: str = Field(..., min_length=1, description="근태 유형명")
    name: str = Field(default="", description="직원 이름")
    last_modified: datetime | None = Field(default=None)

    @property
    def key(self) -> tuple[str, date]:
        return (self.unique_id, self.date)


class ShortenedWorkHourRecord(CamelModel):
    """
    A date range during which the employee works ``[start_time, end_time)``
    on each business day instead of the standard day.
    """

    unique_id: str = Field(..., min_length=1, description="고유사번")
    start_date: date
    end_date: date
    start_time: time
    end_time: time
    type: ShortenedWorkType
    name: str = Field(default="", description="직원 이름")
    last_modified: datetime | None = Field(default=None)

    @model_validator(mode="after")
    def _check_ranges(self) -> "ShortenedWorkHourRecord":
        if self.end_time <= self.start_time:
            raise ValueError(
                f"end_time ({self.end_time:%H:%M}) must be after start_time ({self.start_time:%H:%M})"
            )
        if self.end_date < self.start_date:
            raise ValueError(
                f"end_date ({self.end_date}) must not be before start_date ({self.start_date})"
            )
        return self

    @property
    def key(self) -> tuple[str, date, date, str]:
        return (self.unique_id, self.start_date, self.end_date, self.type.value)

    @property
    def daily_hours(self) -> float:
        """Wall-clock length of the reduced daily window, in hours."""
        start = self.start_time.hour * 60 + self.start_time.minute
        end = self.end_time.hour * 60 + self.end_time.minute
        return (end - start) / 60


AttendanceRecord = Union[DailyAttendanceRecord, ShortenedWorkHourRecord]
