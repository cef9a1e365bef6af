"""
Evaluation Module Services.

Contains the calculation pipeline and the approval workflow.

Pipeline:
    - business_calendar: business days and standard monthly hours
    - deduction: deducted hours of one record
    - work_rate: monthly work rate of one employee
    - payout: grade amount, final amount and work-rate bands

Workflow:
    - ApprovalWorkflow: two-stage approval of record changes
    - actions_allowed: permission policy
    - EvaluationService: grades and work-rate refresh
"""

from modules.evaluation.services.approval_workflow import ApprovalWorkflow, validate_payload
from modules.evaluation.services.business_calendar import (
    business_day_count,
    business_days_between,
    standard_monthly_hours,
)
from modules.evaluation.services.deduction import (
    Resolution,
    resolve_daily_attendance,
    resolve_shortened_work,
)
from modules.evaluation.services.evaluation import EvaluationService
from modules.evaluation.services.notification import (
    InMemoryNotificationSink,
    LoggingNotificationSink,
    NotificationSink,
)
from modules.evaluation.services.payout import (
    PayoutCalculator,
    final_amount,
    grade_amount,
    score_and_payout_rate,
)
from modules.evaluation.services.permissions import actions_allowed
from modules.evaluation.services.work_rate import WorkRateCalculator, calculate_work_rate

__all__ = [
    # Calendar
    "business_day_count",
    "business_days_between",
    "standard_monthly_hours",
    # Deduction
    "Resolution",
    "resolve_daily_attendance",
    "resolve_shortened_work",
    # Work rate
    "WorkRateCalculator",
    "calculate_work_rate",
    # Payout
    "PayoutCalculator",
    "final_amount",
    "grade_amount",
    "score_and_payout_rate",
    # Workflow
    "ApprovalWorkflow",
    "validate_payload",
    "actions_allowed",
    "EvaluationService",
    # Notification
    "InMemoryNotificationSink",
    "LoggingNotificationSink",
    "NotificationSink",
]
