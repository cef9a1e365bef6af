"""
Approval Request Schemas.

Pydantic models for attendance-change approval requests.

Internally a request carries a single ``stage``. The legacy pair of status
fields (``status`` for the team stage, ``status_hr`` for the HR stage) is
derived from it and exposed only at the serialization boundary.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, computed_field

from modules.evaluation.schemas.records import (
    AttendanceRecord,
    CamelModel,
    DailyAttendanceRecord,
    ShortenedWorkHourRecord,
)


class Role(str, Enum):
    """Role of the calling user."""

    ADMIN = "admin"
    EVALUATOR = "evaluator"
    EMPLOYEE = "employee"

    def __str__(self) -> str:
        return self.value


class LegacyStatus(str, Enum):
    """Per-stage status labels as stored in the legacy data and shown in the UI."""

    PENDING = "결재중"
    TEAM_APPROVED = "현업승인"
    FINAL_APPROVED = "최종승인"
    REJECTED = "반려"

    def __str__(self) -> str:
        return self.value


class ApprovalStage(str, Enum):
    """
    Combined state of the two approval stages.

    - PENDING: waiting for the team approver
    - TEAM_APPROVED: team approved, waiting for HR
    - HR_APPROVED: final; the payload has been committed
    - REJECTED_TEAM / REJECTED_HR: rejected at that stage, may be resubmitted
    """

    PENDING = "pending"
    TEAM_APPROVED = "team_approved"
    HR_APPROVED = "hr_approved"
    REJECTED_TEAM = "rejected_team"
    REJECTED_HR = "rejected_hr"

    def __str__(self) -> str:
        return self.value

    @property
    def is_rejected(self) -> bool:
        return self in (ApprovalStage.REJECTED_TEAM, ApprovalStage.REJECTED_HR)

    @property
    def status(self) -> LegacyStatus:
        """Team-stage status."""
        return _LEGACY_STATUS[self][0]

    @property
    def status_hr(self) -> LegacyStatus:
        """HR-stage status."""
        return _LEGACY_STATUS[self][1]

    @classmethod
    def from_legacy(cls, status: str, status_hr: str) -> "ApprovalStage":
        """
        Map a legacy (status, status_hr) pair back to a stage.

        Raises:
            ValueError: If the pair is not a reachable combination.
        """
        pair = (LegacyStatus(status), LegacyStatus(status_hr))
        for stage, legacy in _LEGACY_STATUS.items():
            if legacy == pair:
                return stage
        raise ValueError(f"Unreachable status combination: {status}/{status_hr}")


_LEGACY_STATUS: dict[ApprovalStage, tuple[LegacyStatus, LegacyStatus]] = {
    ApprovalStage.PENDING: (LegacyStatus.PENDING, LegacyStatus.PENDING),
    ApprovalStage.TEAM_APPROVED: (LegacyStatus.TEAM_APPROVED, LegacyStatus.PENDING),
    ApprovalStage.HR_APPROVED: (LegacyStatus.TEAM_APPROVED, LegacyStatus.FINAL_APPROVED),
    ApprovalStage.REJECTED_TEAM: (LegacyStatus.REJECTED, LegacyStatus.PENDING),
    ApprovalStage.REJECTED_HR: (LegacyStatus.TEAM_APPROVED, LegacyStatus.REJECTED),
}


class ApprovalDataType(str, Enum):
    """Which record collection a request changes."""

    DAILY_ATTENDANCE = "dailyAttendance"
    SHORTENED_WORK_HOURS = "shortenedWorkHours"

    def __str__(self) -> str:
        return self.value


class ApprovalAction(str, Enum):
    """What the request does to the record."""

    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"

    def __str__(self) -> str:
        return self.value


_DATA_TYPE_TEXT = {
    ApprovalDataType.SHORTENED_WORK_HOURS: "단축근로",
    ApprovalDataType.DAILY_ATTENDANCE: "일근태",
}

_ACTION_TEXT = {
    ApprovalAction.ADD: "추가",
    ApprovalAction.EDIT: "수정",
    ApprovalAction.DELETE: "삭제",
}


class ApprovalPayload(CamelModel):
    """The change a request carries. ``data`` stays opaque until commit."""

    data_type: ApprovalDataType
    action: ApprovalAction
    data: dict[str, Any] = Field(default_factory=dict)

    @property
    def type_text(self) -> str:
        """Display label such as '단축근로 추가'."""
        return f"{_DATA_TYPE_TEXT[self.data_type]} {_ACTION_TEXT[self.action]}"

    def to_record(self) -> AttendanceRecord:
        """
        Parse ``data`` into the record model named by ``data_type``.

        Raises:
            pydantic.ValidationError: If the data does not form a valid record.
        """
        if self.data_type is ApprovalDataType.SHORTENED_WORK_HOURS:
            return ShortenedWorkHourRecord.model_validate(self.data)
        return DailyAttendanceRecord.model_validate(self.data)


class ApprovalRequest(CamelModel):
    """An add/edit/delete of one attendance record awaiting sign-off."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    requester_id: str = Field(..., min_length=1)
    requester_name: str = Field(default="")
    approver_team_id: str = Field(..., min_length=1, description="1차 결재자 (현업)")
    approver_hr_id: str = Field(default="admin", description="2차 결재자 (인사)")
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    payload: ApprovalPayload
    stage: ApprovalStage = Field(default=ApprovalStage.PENDING)
    approved_at_team: datetime | None = Field(default=None)
    approved_at_hr: datetime | None = Field(default=None)
    rejection_reason: str | None = Field(default=None)
    version: int = Field(default=0, ge=0)

    @computed_field
    @property
    def status(self) -> LegacyStatus:
        return self.stage.status

    @computed_field
    @property
    def status_hr(self) -> LegacyStatus:
        return self.stage.status_hr


class Actor(BaseModel):
    """The user performing an action."""

    user_id: str = Field(..., min_length=1)
    role: Role


class AllowedActions(BaseModel):
    """What a given user may do with a given request."""

    can_approve_team: bool = False
    can_approve_hr: bool = False
    can_skip: bool = False
    can_delete: bool = False
    can_resubmit: bool = False

    @property
    def can_approve(self) -> bool:
        return self.can_approve_team or self.can_approve_hr


class NotificationEvent(BaseModel):
    """Fire-and-forget message emitted on approval transitions."""

    recipient_id: str
    message: str
    request_id: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# =============================================================================
# API bodies
# =============================================================================


class ApprovalCreateRequest(CamelModel):
    """Request body for submitting a new approval request."""

    requester_name: str = Field(default="")
    approver_team_id: str = Field(..., min_length=1)
    approver_hr_id: str = Field(default="admin")
    payload: ApprovalPayload


class RejectRequest(BaseModel):
    """Request body for a rejection."""

    reason: str = Field(..., description="반려 사유")


class ResubmitRequest(BaseModel):
    """Request body for a resubmission, optionally with edited data."""

    data: dict[str, Any] | None = None


class ApprovalResponse(BaseModel):
    """A request together with what the caller may do with it."""

    request: ApprovalRequest
    actions: AllowedActions
