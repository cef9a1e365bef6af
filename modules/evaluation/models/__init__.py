"""
Evaluation Module Database Models.

Contains SQLAlchemy models for attendance records and approval requests.
"""

from modules.evaluation.models.approval import ApprovalRequestRow
from modules.evaluation.models.records import DailyAttendanceRow, ShortenedWorkRow

__all__ = ["ApprovalRequestRow", "DailyAttendanceRow", "ShortenedWorkRow"]
