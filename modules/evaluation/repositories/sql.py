"""
SQLAlchemy Repositories.

Database-backed record store and approval repository. Each public method
runs in its own ``session_scope`` transaction, unless it is called inside
``SqlApprovalRepository.atomic()``: then it joins that transaction, so a
record write and the versioned request update commit or roll back together.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session, sessionmaker

from core.database import get_session_factory, session_scope
from modules.evaluation.exceptions import ConcurrentModificationError, RequestNotFoundError
from modules.evaluation.models import ApprovalRequestRow, DailyAttendanceRow, ShortenedWorkRow
from modules.evaluation.repositories.base import ApprovalRepository, RecordStore
from modules.evaluation.schemas.approval import (
    ApprovalPayload,
    ApprovalRequest,
    ApprovalStage,
)
from modules.evaluation.schemas.records import (
    AttendanceRecord,
    DailyAttendanceRecord,
    ShortenedWorkHourRecord,
)

logger = logging.getLogger(__name__)

# Transaction opened by atomic() on this thread, with the factory it came from
_active = threading.local()


@contextmanager
def _scope(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """Join the thread's open transaction on the same database, or run a new one."""
    current = getattr(_active, "transaction", None)
    if current is not None and current[0] is session_factory:
        yield current[1]
        return
    with session_scope(session_factory) as session:
        yield session


def _month_range(year: int, month: int) -> tuple[date, date]:
    first = date(year, month, 1)
    next_first = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return first, date.fromordinal(next_first.toordinal() - 1)


# =============================================================================
# Row <-> Schema
# =============================================================================


def _daily_from_row(row: DailyAttendanceRow) -> DailyAttendanceRecord:
    return DailyAttendanceRecord(
        unique_id=row.unique_id,
        date=row.date,
        type=row.type,
        name=row.name,
        last_modified=row.last_modified,
    )


def _shortened_from_row(row: ShortenedWorkRow) -> ShortenedWorkHourRecord:
    return ShortenedWorkHourRecord(
        unique_id=row.unique_id,
        start_date=row.start_date,
        end_date=row.end_date,
        start_time=row.start_time,
        end_time=row.end_time,
        type=row.type,
        name=row.name,
        last_modified=row.last_modified,
    )


def _record_values(record: AttendanceRecord) -> dict:
    if isinstance(record, ShortenedWorkHourRecord):
        return {
            "unique_id": record.unique_id,
            "start_date": record.start_date,
            "end_date": record.end_date,
            "start_time": record.start_time,
            "end_time": record.end_time,
            "type": record.type.value,
            "name": record.name,
            "last_modified": record.last_modified,
        }
    return {
        "unique_id": record.unique_id,
        "date": record.date,
        "type": record.type,
        "name": record.name,
        "last_modified": record.last_modified,
    }


def _request_from_row(row: ApprovalRequestRow) -> ApprovalRequest:
    return ApprovalRequest(
        id=row.id,
        requester_id=row.requester_id,
        requester_name=row.requester_name,
        approver_team_id=row.approver_team_id,
        approver_hr_id=row.approver_hr_id,
        date=row.requested_at,
        payload=ApprovalPayload(
            data_type=row.data_type,
            action=row.action,
            data=dict(row.data or {}),
        ),
        stage=ApprovalStage(row.stage),
        approved_at_team=row.approved_at_team,
        approved_at_hr=row.approved_at_hr,
        rejection_reason=row.rejection_reason,
        version=row.version,
    )


def _request_values(request: ApprovalRequest) -> dict:
    return {
        "requester_id": request.requester_id,
        "requester_name": request.requester_name,
        "approver_team_id": request.approver_team_id,
        "approver_hr_id": request.approver_hr_id,
        "requested_at": request.date,
        "data_type": request.payload.data_type.value,
        "action": request.payload.action.value,
        "data": request.payload.model_dump(mode="json")["data"],
        "stage": request.stage.value,
        "approved_at_team": request.approved_at_team,
        "approved_at_hr": request.approved_at_hr,
        "rejection_reason": request.rejection_reason,
    }


# =============================================================================
# Record Store
# =============================================================================


class SqlRecordStore(RecordStore):
    """Attendance records in the evaluation_* tables."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._session_factory = session_factory or get_session_factory()

    @staticmethod
    def _key_filter(record: AttendanceRecord):
        if isinstance(record, ShortenedWorkHourRecord):
            return ShortenedWorkRow, (
                ShortenedWorkRow.unique_id == record.unique_id,
                ShortenedWorkRow.start_date == record.start_date,
                ShortenedWorkRow.end_date == record.end_date,
                ShortenedWorkRow.type == record.type.value,
            )
        return DailyAttendanceRow, (
            DailyAttendanceRow.unique_id == record.unique_id,
            DailyAttendanceRow.date == record.date,
        )

    def add(self, record: AttendanceRecord) -> bool:
        model, key = self._key_filter(record)
        with _scope(self._session_factory) as session:
            existing = session.execute(select(model).where(*key)).scalar_one_or_none()
            if existing is not None:
                return False
            session.add(model(**_record_values(record)))
        return True

    def upsert(self, record: AttendanceRecord) -> None:
        model, key = self._key_filter(record)
        values = _record_values(record)
        with _scope(self._session_factory) as session:
            existing = session.execute(select(model).where(*key)).scalar_one_or_none()
            if existing is None:
                session.add(model(**values))
            else:
                for field, value in values.items():
                    setattr(existing, field, value)

    def delete(self, record: AttendanceRecord) -> bool:
        model, key = self._key_filter(record)
        with _scope(self._session_factory) as session:
            deleted = session.execute(delete(model).where(*key)).rowcount
        return deleted > 0

    def query_by_period(self, employee_id: str, year: int, month: int) -> list[AttendanceRecord]:
        first, last = _month_range(year, month)
        with _scope(self._session_factory) as session:
            daily = session.execute(
                select(DailyAttendanceRow)
                .where(
                    DailyAttendanceRow.unique_id == employee_id,
                    DailyAttendanceRow.date >= first,
                    DailyAttendanceRow.date <= last,
                )
                .order_by(DailyAttendanceRow.date)
            ).scalars().all()
            shortened = session.execute(
                select(ShortenedWorkRow)
                .where(
                    ShortenedWorkRow.unique_id == employee_id,
                    ShortenedWorkRow.start_date <= last,
                    ShortenedWorkRow.end_date >= first,
                )
                .order_by(ShortenedWorkRow.start_date)
            ).scalars().all()
            return [_daily_from_row(r) for r in daily] + [_shortened_from_row(r) for r in shortened]

    def list_records(self, employee_id: str | None = None) -> list[AttendanceRecord]:
        daily_query = select(DailyAttendanceRow).order_by(DailyAttendanceRow.date)
        shortened_query = select(ShortenedWorkRow).order_by(ShortenedWorkRow.start_date)
        if employee_id is not None:
            daily_query = daily_query.where(DailyAttendanceRow.unique_id == employee_id)
            shortened_query = shortened_query.where(ShortenedWorkRow.unique_id == employee_id)
        with _scope(self._session_factory) as session:
            daily = session.execute(daily_query).scalars().all()
            shortened = session.execute(shortened_query).scalars().all()
            return [_daily_from_row(r) for r in daily] + [_shortened_from_row(r) for r in shortened]


# =============================================================================
# Approval Repository
# =============================================================================


class SqlApprovalRepository(ApprovalRepository):
    """
    Approval requests in evaluation_approval_request.

    ``save`` is a single ``UPDATE ... WHERE id = :id AND version = :expected``
    so the version check and the write cannot be interleaved.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._session_factory = session_factory or get_session_factory()

    def add(self, request: ApprovalRequest) -> ApprovalRequest:
        with _scope(self._session_factory) as session:
            session.add(
                ApprovalRequestRow(id=request.id, version=request.version, **_request_values(request))
            )
        logger.debug(f"Stored approval request {request.id}")
        return request

    def get(self, request_id: str) -> ApprovalRequest:
        with _scope(self._session_factory) as session:
            row = session.get(ApprovalRequestRow, request_id)
            if row is None:
                raise RequestNotFoundError(request_id)
            return _request_from_row(row)

    def save(self, request: ApprovalRequest, expected_version: int) -> ApprovalRequest:
        new_version = expected_version + 1
        with _scope(self._session_factory) as session:
            result = session.execute(
                update(ApprovalRequestRow)
                .where(
                    ApprovalRequestRow.id == request.id,
                    ApprovalRequestRow.version == expected_version,
                )
                .values(version=new_version, **_request_values(request))
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                if session.get(ApprovalRequestRow, request.id) is None:
                    raise RequestNotFoundError(request.id)
                raise ConcurrentModificationError(request.id, expected_version)
        return request.model_copy(update={"version": new_version}, deep=True)

    def delete(self, request_id: str) -> None:
        with _scope(self._session_factory) as session:
            result = session.execute(
                delete(ApprovalRequestRow).where(ApprovalRequestRow.id == request_id)
            )
            if result.rowcount == 0:
                raise RequestNotFoundError(request_id)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """
        One database transaction for the block. Record-store and repository
        calls on the same session factory join it; any exception rolls back
        all of them.
        """
        if getattr(_active, "transaction", None) is not None:
            yield
            return
        with session_scope(self._session_factory) as session:
            _active.transaction = (self._session_factory, session)
            try:
                yield
            finally:
                _active.transaction = None

    def list_requests(self, requester_id: str | None = None) -> list[ApprovalRequest]:
        query = select(ApprovalRequestRow).order_by(ApprovalRequestRow.requested_at.desc())
        if requester_id is not None:
            query = query.where(ApprovalRequestRow.requester_id == requester_id)
        with _scope(self._session_factory) as session:
            return [_request_from_row(row) for row in session.execute(query).scalars().all()]
