"""
Declarative Base.

Every evaluation_* table derives from ``Base``. Rows written by the approval
workflow also carry the ``TimestampMixin`` audit columns.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Shared metadata of the evaluation tables, created by ``init_database()``."""


class TimestampMixin:
    """created_at / updated_at audit columns, timezone-aware UTC."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )
