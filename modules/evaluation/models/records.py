"""
Attendance Record Models.

SQLAlchemy models for the two attendance-exception collections read by the
work-rate calculation. Rows are written only when an approval commits.
"""

import datetime as dt

from sqlalchemy import Date, DateTime, Integer, String, Time, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from core.database.base import Base, TimestampMixin


class DailyAttendanceRow(Base, TimestampMixin):
    """
    One exception day of one employee.

    Attributes:
        unique_id: Employee number (고유사번).
        date: The exception day.
        type: Attendance type name (연차, 오전반차, ...).
    """

    __tablename__ = "evaluation_daily_attendance"
    __table_args__ = (
        UniqueConstraint("unique_id", "date", name="uq_daily_attendance_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    unique_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    last_modified: Mapped[dt.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<DailyAttendanceRow(unique_id={self.unique_id}, date={self.date}, type={self.type})>"


class ShortenedWorkRow(Base, TimestampMixin):
    """
    A shortened-work period of one employee.

    Attributes:
        unique_id: Employee number (고유사번).
        start_date, end_date: Inclusive date range.
        start_time, end_time: Daily working window.
        type: 임신 or 육아/돌봄.
    """

    __tablename__ = "evaluation_shortened_work"
    __table_args__ = (
        UniqueConstraint("unique_id", "start_date", "end_date", "type", name="uq_shortened_work_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    unique_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    start_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    start_time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    end_time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    last_modified: Mapped[dt.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return (
            f"<ShortenedWorkRow(unique_id={self.unique_id}, "
            f"{self.start_date}~{self.end_date}, type={self.type})>"
        )
