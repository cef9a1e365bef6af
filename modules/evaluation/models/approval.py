"""
Approval Request Model.

SQLAlchemy model for attendance-change approval requests. ``version`` is
incremented on every update and checked by the repository so that two
concurrent decisions cannot both apply.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from core.database.base import Base, TimestampMixin


class ApprovalRequestRow(Base, TimestampMixin):
    """
    Approval request table.

    Attributes:
        id: Request ID (hex UUID).
        stage: pending, team_approved, hr_approved, rejected_team or rejected_hr.
        data_type, action, data: The change the request carries.
        version: Optimistic concurrency counter.
    """

    __tablename__ = "evaluation_approval_request"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    requester_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    requester_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    approver_team_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    approver_hr_id: Mapped[str] = mapped_column(String(64), nullable=False, default="admin")
    requested_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    data_type: Mapped[str] = mapped_column(String(32), nullable=False)
    action: Mapped[str] = mapped_column(String(16), nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    stage: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    approved_at_team: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_at_hr: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<ApprovalRequestRow(id={self.id}, stage={self.stage}, version={self.version})>"
