"""
Evaluation Schemas.

Derived work-rate summaries, detail rows, evaluation results and the
warning values returned alongside them.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from modules.evaluation.schemas.approval import ApprovalAction, ApprovalDataType
from modules.evaluation.schemas.records import (
    AttendanceRecord,
    CamelModel,
    ShortenedWorkHourRecord,
    ShortenedWorkType,
)


# =============================================================================
# Warnings
# =============================================================================


class UnknownAttendanceType(BaseModel):
    """A daily record named an attendance type that is not configured."""

    employee_id: str
    type_name: str
    record_date: date | None = None

    def __str__(self) -> str:
        return f"Unknown attendance type '{self.type_name}' for {self.employee_id}"


class GroupScoreOverage(BaseModel):
    """The members of a group were scored above their combined budget."""

    group_key: str
    total_score: float
    max_score: float

    @property
    def overage(self) -> float:
        return self.total_score - self.max_score

    def __str__(self) -> str:
        return f"<{self.group_key}> 그룹의 점수가 <{self.overage:g}>점 초과하였습니다."


# =============================================================================
# Work Rate
# =============================================================================


class WorkRateSummary(CamelModel):
    """Per-employee, per-month deduction totals and the resulting work rate."""

    employee_id: str
    year: int
    month: int = Field(..., ge=1, le=12)
    business_days: int = Field(..., ge=0)
    standard_hours: float = Field(..., ge=0)
    deduction_hours_attendance: float = 0
    deduction_hours_pregnancy: float = 0
    deduction_hours_care: float = 0
    total_deduction_hours: float = 0
    total_work_hours: float = Field(default=0, ge=0)
    monthly_work_rate: float = Field(default=0, ge=0, le=1)
    warnings: list[UnknownAttendanceType] = Field(default_factory=list)


class ShortenedWorkDetail(CamelModel):
    """One shortened-work record as it counts toward a month."""

    unique_id: str
    name: str = ""
    type: ShortenedWorkType
    start_date: date
    end_date: date
    work_hours: float
    actual_work_hours: float
    daily_deduction: float
    business_days: int
    total_deduction_hours: float


class DailyAttendanceDetail(CamelModel):
    """One daily-attendance record as it counts toward a month."""

    unique_id: str
    name: str = ""
    date: date
    type: str
    deduction_days: float
    total_deduction_hours: float
    known_type: bool = True


# =============================================================================
# Evaluation Result
# =============================================================================


class EvaluationResult(CamelModel):
    """Grade, work rate and payout of one employee for one evaluation period."""

    employee_id: str
    year: int
    month: int = Field(..., ge=1, le=12)
    name: str = ""
    group_key: str = ""
    grade: str | None = None
    score: float = 0
    payout_rate_percent: float = 0
    base_amount: int = Field(default=0, ge=0)
    grade_amount: Decimal = Decimal(0)
    work_rate: float = Field(default=1, ge=0, le=1)
    final_amount: int = 0
    work_rate_band: str = ""
    detailed_group: str = ""
    memo: str = ""


class GradeAssignment(BaseModel):
    """A committed grade change with any warnings it produced."""

    result: EvaluationResult
    warnings: list[GroupScoreOverage] = Field(default_factory=list)


class CommittedChange(BaseModel):
    """A record change written to the record store by a final approval."""

    request_id: str
    data_type: ApprovalDataType
    action: ApprovalAction
    record: AttendanceRecord
    committed_at: datetime

    @property
    def employee_id(self) -> str:
        return self.record.unique_id

    def affected_months(self) -> list[tuple[int, int]]:
        """(year, month) pairs whose work rate this change can shift."""
        if isinstance(self.record, ShortenedWorkHourRecord):
            start, end = self.record.start_date, self.record.end_date
        else:
            start = end = self.record.date
        months = []
        year, month = start.year, start.month
        while (year, month) <= (end.year, end.month):
            months.append((year, month))
            year, month = (year + 1, 1) if month == 12 else (year, month + 1)
        return months
