"""
Unit Tests for the SQLAlchemy Repositories.

Runs against an in-memory SQLite database.
"""

from datetime import date, time

import pytest

from core.database import create_db_engine, create_session_factory, init_database
from modules.evaluation.exceptions import ConcurrentModificationError, RequestNotFoundError
from modules.evaluation.repositories.sql import SqlApprovalRepository, SqlRecordStore
from modules.evaluation.schemas.approval import (
    Actor,
    ApprovalAction,
    ApprovalDataType,
    ApprovalPayload,
    ApprovalRequest,
    ApprovalStage,
    Role,
)
from modules.evaluation.schemas.records import (
    DailyAttendanceRecord,
    ShortenedWorkHourRecord,
    ShortenedWorkType,
)
from modules.evaluation.services.approval_workflow import ApprovalWorkflow

EMPLOYEE = Actor(user_id="E001", role=Role.EMPLOYEE)
EVALUATOR = Actor(user_id="M001", role=Role.EVALUATOR)
ADMIN = Actor(user_id="admin", role=Role.ADMIN)


@pytest.fixture
def session_factory():
    """Session factory over a fresh in-memory database."""
    engine = create_db_engine("sqlite://")
    init_database(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def sql_records(session_factory):
    return SqlRecordStore(session_factory)


@pytest.fixture
def sql_approvals(session_factory):
    return SqlApprovalRepository(session_factory)


def _leave(day: date, type_name: str = "연차") -> DailyAttendanceRecord:
    return DailyAttendanceRecord(unique_id="E001", date=day, type=type_name, name="김직원")


def _shortened(start: date, end: date) -> ShortenedWorkHourRecord:
    return ShortenedWorkHourRecord(
        unique_id="E001",
        start_date=start,
        end_date=end,
        start_time=time(9),
        end_time=time(15),
        type=ShortenedWorkType.CARE,
    )


def _request() -> ApprovalRequest:
    return ApprovalRequest(
        requester_id="E001",
        requester_name="김직원",
        approver_team_id="M001",
        payload=ApprovalPayload(
            data_type=ApprovalDataType.DAILY_ATTENDANCE,
            action=ApprovalAction.ADD,
            data={"uniqueId": "E001", "date": "2024-01-15", "type": "연차"},
        ),
    )


class TestSqlRecordStore:
    """Tests for SqlRecordStore."""

    def test_add_and_query(self, sql_records):
        assert sql_records.add(_leave(date(2024, 1, 15))) is True
        assert sql_records.add(_shortened(date(2023, 12, 28), date(2024, 1, 5))) is True

        records = sql_records.query_by_period("E001", 2024, 1)

        assert len(records) == 2
        daily = [r for r in records if isinstance(r, DailyAttendanceRecord)]
        shortened = [r for r in records if isinstance(r, ShortenedWorkHourRecord)]
        assert daily[0].type == "연차"
        assert shortened[0].type is ShortenedWorkType.CARE
        assert shortened[0].start_time == time(9)

    def test_add_existing_key(self, sql_records):
        sql_records.add(_leave(date(2024, 1, 15)))

        assert sql_records.add(_leave(date(2024, 1, 15), "병가")) is False
        assert sql_records.list_records()[0].type == "연차"

    def test_upsert_replaces(self, sql_records):
        sql_records.add(_leave(date(2024, 1, 15)))
        sql_records.upsert(_leave(date(2024, 1, 15), "오전반차"))

        records = sql_records.list_records("E001")
        assert len(records) == 1
        assert records[0].type == "오전반차"

    def test_delete(self, sql_records):
        sql_records.add(_leave(date(2024, 1, 15)))

        assert sql_records.delete(_leave(date(2024, 1, 15))) is True
        assert sql_records.delete(_leave(date(2024, 1, 15))) is False
        assert sql_records.list_records() == []

    def test_query_excludes_other_months(self, sql_records):
        sql_records.add(_leave(date(2024, 2, 1)))
        sql_records.add(_shortened(date(2024, 3, 4), date(2024, 3, 8)))

        assert sql_records.query_by_period("E001", 2024, 1) == []

    def test_shortened_type_is_part_of_key(self, sql_records):
        care = _shortened(date(2024, 1, 8), date(2024, 1, 12))
        pregnancy = care.model_copy(update={"type": ShortenedWorkType.PREGNANCY})

        assert sql_records.add(care) is True
        assert sql_records.add(pregnancy) is True
        assert sql_records.delete(pregnancy) is True

        remaining = sql_records.list_records("E001")
        assert [r.type for r in remaining] == [ShortenedWorkType.CARE]


class TestSqlApprovalRepository:
    """Tests for SqlApprovalRepository."""

    def test_round_trip(self, sql_approvals):
        request = _request()
        sql_approvals.add(request)

        stored = sql_approvals.get(request.id)

        assert stored.id == request.id
        assert stored.stage is ApprovalStage.PENDING
        assert stored.payload.data_type is ApprovalDataType.DAILY_ATTENDANCE
        assert stored.payload.data == request.payload.data
        assert stored.version == 0

    def test_get_missing(self, sql_approvals):
        with pytest.raises(RequestNotFoundError):
            sql_approvals.get("missing")

    def test_save_bumps_version(self, sql_approvals):
        request = _request()
        sql_approvals.add(request)

        saved = sql_approvals.save(
            request.model_copy(update={"stage": ApprovalStage.TEAM_APPROVED}), expected_version=0
        )

        assert saved.version == 1
        stored = sql_approvals.get(request.id)
        assert stored.stage is ApprovalStage.TEAM_APPROVED
        assert stored.version == 1

    def test_stale_save_rejected(self, sql_approvals):
        request = _request()
        sql_approvals.add(request)
        sql_approvals.save(request.model_copy(update={"stage": ApprovalStage.TEAM_APPROVED}), 0)

        with pytest.raises(ConcurrentModificationError):
            sql_approvals.save(request.model_copy(update={"stage": ApprovalStage.REJECTED_TEAM}), 0)

        assert sql_approvals.get(request.id).stage is ApprovalStage.TEAM_APPROVED

    def test_save_missing(self, sql_approvals):
        with pytest.raises(RequestNotFoundError):
            sql_approvals.save(_request(), 0)

    def test_delete_and_list(self, sql_approvals):
        first, second = _request(), _request()
        sql_approvals.add(first)
        sql_approvals.add(second)

        sql_approvals.delete(first.id)

        assert [r.id for r in sql_approvals.list_requests("E001")] == [second.id]
        with pytest.raises(RequestNotFoundError):
            sql_approvals.delete(first.id)


class TestWorkflowOnDatabase:
    """The workflow end to end on the SQL stores."""

    def test_skip_commits_record(self, sql_approvals, sql_records):
        workflow = ApprovalWorkflow(sql_approvals, sql_records)

        request = workflow.submit(EMPLOYEE, _request().payload, approver_team_id="M001")
        final = workflow.skip_first_approval(request.id, ADMIN)

        assert final.stage is ApprovalStage.HR_APPROVED
        assert sql_approvals.get(request.id).version == 1
        assert len(sql_records.query_by_period("E001", 2024, 1)) == 1

    def test_rejection_between_read_and_commit_leaves_no_record(
        self, sql_approvals, sql_records, monkeypatch
    ):
        """HR rejection lands after approve_hr read the request: nothing is committed."""
        workflow = ApprovalWorkflow(sql_approvals, sql_records)
        request = workflow.submit(EMPLOYEE, _request().payload, approver_team_id="M001")
        workflow.approve_team(request.id, EVALUATOR)

        real_get = sql_approvals.get

        def get_then_reject(request_id):
            current = real_get(request_id)
            monkeypatch.setattr(sql_approvals, "get", real_get)
            workflow.reject_hr(request_id, ADMIN, "중복")
            return current

        monkeypatch.setattr(sql_approvals, "get", get_then_reject)

        with pytest.raises(ConcurrentModificationError):
            workflow.approve_hr(request.id, ADMIN)

        assert sql_approvals.get(request.id).stage is ApprovalStage.REJECTED_HR
        assert sql_records.list_records() == []
        assert sql_records.query_by_period("E001", 2024, 1) == []


class TestAtomic:
    """Tests for SqlApprovalRepository.atomic()."""

    def test_failed_save_rolls_back_record_write(self, sql_approvals, sql_records):
        request = _request()
        sql_approvals.add(request)

        with pytest.raises(ConcurrentModificationError):
            with sql_approvals.atomic():
                sql_records.add(_leave(date(2024, 1, 15)))
                sql_approvals.save(request, expected_version=5)

        assert sql_records.list_records() == []
        assert sql_approvals.get(request.id).version == 0

    def test_success_commits_both(self, sql_approvals, sql_records):
        request = _request()
        sql_approvals.add(request)

        with sql_approvals.atomic():
            sql_records.add(_leave(date(2024, 1, 15)))
            sql_approvals.save(request.model_copy(update={"stage": ApprovalStage.HR_APPROVED}), 0)

        assert len(sql_records.list_records("E001")) == 1
        stored = sql_approvals.get(request.id)
        assert stored.stage is ApprovalStage.HR_APPROVED
        assert stored.version == 1

    def test_other_database_not_joined(self, sql_approvals):
        """Stores on another session factory keep their own transactions."""
        engine = create_db_engine("sqlite://")
        init_database(engine)
        other_records = SqlRecordStore(create_session_factory(engine))
        request = _request()
        sql_approvals.add(request)

        with pytest.raises(ConcurrentModificationError):
            with sql_approvals.atomic():
                other_records.add(_leave(date(2024, 1, 15)))
                sql_approvals.save(request, expected_version=5)

        assert len(other_records.list_records()) == 1
        engine.dispose()
