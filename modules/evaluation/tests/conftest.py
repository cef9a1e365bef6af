"""
Conftest for Evaluation Module Tests.

Provides shared fixtures for unit testing the evaluation module.
"""

from datetime import date, datetime, timezone

import pytest

from modules.evaluation.core.config import EvaluationSettings
from modules.evaluation.repositories.memory import (
    InMemoryApprovalRepository,
    InMemoryEvaluationResultStore,
    InMemoryRecordStore,
    StaticGradingScaleStore,
    StaticStandardsStore,
)
from modules.evaluation.schemas.approval import (
    Actor,
    ApprovalAction,
    ApprovalDataType,
    ApprovalPayload,
    Role,
)
from modules.evaluation.schemas.records import Holiday
from modules.evaluation.services.approval_workflow import ApprovalWorkflow
from modules.evaluation.services.evaluation import EvaluationService
from modules.evaluation.services.notification import InMemoryNotificationSink
from modules.evaluation.services.work_rate import WorkRateCalculator


FIXED_NOW = datetime(2024, 2, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings():
    """Evaluation settings with the documented defaults, no .env file."""
    return EvaluationSettings(_env_file=None)


@pytest.fixture
def new_year_holiday():
    """신정 2024-01-01 (a Monday)."""
    return Holiday(date=date(2024, 1, 1), name="신정")


@pytest.fixture
def record_store():
    return InMemoryRecordStore()


@pytest.fixture
def standards(new_year_holiday):
    return StaticStandardsStore(holidays=[new_year_holiday])


@pytest.fixture
def grading_scales():
    return StaticGradingScaleStore()


@pytest.fixture
def approvals():
    return InMemoryApprovalRepository()


@pytest.fixture
def notifier():
    return InMemoryNotificationSink()


@pytest.fixture
def clock():
    """Fixed clock for deterministic timestamps."""
    return lambda: FIXED_NOW


@pytest.fixture
def workflow(approvals, record_store, notifier, clock):
    """ApprovalWorkflow over in-memory stores."""
    return ApprovalWorkflow(approvals, record_store, notifier, clock=clock)


@pytest.fixture
def work_rates(record_store, standards, settings):
    return WorkRateCalculator(record_store, standards, settings)


@pytest.fixture
def evaluation_service(work_rates, grading_scales, notifier, settings):
    """EvaluationService with an empty result store."""
    return EvaluationService(
        InMemoryEvaluationResultStore(), work_rates, grading_scales, notifier, settings
    )


# =============================================================================
# Actors
# =============================================================================


@pytest.fixture
def employee():
    return Actor(user_id="E001", role=Role.EMPLOYEE)


@pytest.fixture
def evaluator():
    return Actor(user_id="M001", role=Role.EVALUATOR)


@pytest.fixture
def other_evaluator():
    return Actor(user_id="M002", role=Role.EVALUATOR)


@pytest.fixture
def admin():
    return Actor(user_id="admin", role=Role.ADMIN)


# =============================================================================
# Payloads
# =============================================================================


@pytest.fixture
def daily_add_payload():
    """연차 on Monday 2024-01-15 for E001."""
    return ApprovalPayload(
        data_type=ApprovalDataType.DAILY_ATTENDANCE,
        action=ApprovalAction.ADD,
        data={"uniqueId": "E001", "date": "2024-01-15", "type": "연차", "name": "김직원"},
    )


@pytest.fixture
def shortened_add_payload():
    """09:00-15:00 pregnancy shortened work over Mon-Fri 2024-01-08..12."""
    return ApprovalPayload(
        data_type=ApprovalDataType.SHORTENED_WORK_HOURS,
        action=ApprovalAction.ADD,
        data={
            "uniqueId": "E001",
            "startDate": "2024-01-08",
            "endDate": "2024-01-12",
            "startTime": "09:00",
            "endTime": "15:00",
            "type": "임신",
            "name": "김직원",
        },
    )


@pytest.fixture
def submit(workflow, employee, evaluator):
    """Submit a payload as E001 with M001 as team approver."""

    def _submit(payload):
        return workflow.submit(
            employee, payload, approver_team_id=evaluator.user_id, requester_name="김직원"
        )

    return _submit
