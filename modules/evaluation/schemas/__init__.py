"""
Evaluation Module Schemas.

Pydantic models for standards, attendance records, approval requests and
derived evaluation results.
"""

from modules.evaluation.schemas.records import (
    DEFAULT_ATTENDANCE_TYPES,
    DEFAULT_GRADING_SCALE,
    AttendanceRecord,
    AttendanceType,
    CamelModel,
    DailyAttendanceRecord,
    GradeInfo,
    GradingScale,
    Holiday,
    HolidayType,
    ShortenedWorkHourRecord,
    ShortenedWorkType,
    ordered_grades,
)
from modules.evaluation.schemas.approval import (
    Actor,
    AllowedActions,
    ApprovalAction,
    ApprovalCreateRequest,
    ApprovalDataType,
    ApprovalPayload,
    ApprovalRequest,
    ApprovalResponse,
    ApprovalStage,
    LegacyStatus,
    NotificationEvent,
    RejectRequest,
    ResubmitRequest,
    Role,
)
from modules.evaluation.schemas.evaluation import (
    CommittedChange,
    DailyAttendanceDetail,
    EvaluationResult,
    GradeAssignment,
    GroupScoreOverage,
    ShortenedWorkDetail,
    UnknownAttendanceType,
    WorkRateSummary,
)

__all__ = [
    # Standards & records
    "DEFAULT_ATTENDANCE_TYPES",
    "DEFAULT_GRADING_SCALE",
    "AttendanceRecord",
    "AttendanceType",
    "CamelModel",
    "DailyAttendanceRecord",
    "GradeInfo",
    "GradingScale",
    "Holiday",
    "HolidayType",
    "ShortenedWorkHourRecord",
    "ShortenedWorkType",
    "ordered_grades",
    # Approval
    "Actor",
    "AllowedActions",
    "ApprovalAction",
    "ApprovalCreateRequest",
    "ApprovalDataType",
    "ApprovalPayload",
    "ApprovalRequest",
    "ApprovalResponse",
    "ApprovalStage",
    "LegacyStatus",
    "NotificationEvent",
    "RejectRequest",
    "ResubmitRequest",
    "Role",
    # Evaluation
    "CommittedChange",
    "DailyAttendanceDetail",
    "EvaluationResult",
    "GradeAssignment",
    "GroupScoreOverage",
    "ShortenedWorkDetail",
    "UnknownAttendanceType",
    "WorkRateSummary",
]
