"""
Evaluation Dependencies.

Wires stores and services together and exposes them to the API routers as
``Annotated[..., Depends(...)]`` aliases.

Usage:
    from modules.evaluation.dependencies import ActorDep, WorkflowDep

    @router.post("/{request_id}/approve-team")
    def approve_team(request_id: str, actor: ActorDep, workflow: WorkflowDep):
        ...
"""

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from modules.evaluation.core.config import EvaluationSettings, get_evaluation_settings
from modules.evaluation.repositories.base import (
    ApprovalRepository,
    AttendanceStandardsStore,
    EvaluationResultStore,
    GradingScaleStore,
    RecordStore,
)
from modules.evaluation.repositories.memory import (
    InMemoryApprovalRepository,
    InMemoryEvaluationResultStore,
    InMemoryRecordStore,
    StaticGradingScaleStore,
    StaticStandardsStore,
)
from modules.evaluation.schemas.approval import Actor, Role
from modules.evaluation.services.approval_workflow import ApprovalWorkflow
from modules.evaluation.services.evaluation import EvaluationService
from modules.evaluation.services.notification import LoggingNotificationSink, NotificationSink
from modules.evaluation.services.work_rate import WorkRateCalculator

logger = logging.getLogger(__name__)


@dataclass
class EvaluationContainer:
    """All collaborators of the evaluation module."""

    settings: EvaluationSettings
    records: RecordStore
    approvals: ApprovalRepository
    standards: AttendanceStandardsStore
    grading_scales: GradingScaleStore
    results: EvaluationResultStore
    notifier: NotificationSink
    work_rates: WorkRateCalculator
    workflow: ApprovalWorkflow
    evaluations: EvaluationService


def build_container(
    settings: EvaluationSettings | None = None,
    use_database: bool = True,
    records: RecordStore | None = None,
    approvals: ApprovalRepository | None = None,
    standards: AttendanceStandardsStore | None = None,
    grading_scales: GradingScaleStore | None = None,
    notifier: NotificationSink | None = None,
) -> EvaluationContainer:
    """
    Build the module's object graph.

    With ``use_database`` the record store and approval repository are the
    SQLAlchemy ones on ``settings.database_url``; otherwise in-memory.
    Committed approvals refresh the affected employees' work rates.
    """
    settings = settings or get_evaluation_settings()

    if use_database and (records is None or approvals is None):
        from core.database import get_engine, init_database
        from modules.evaluation.repositories.sql import SqlApprovalRepository, SqlRecordStore

        init_database(get_engine(settings.database_url))
        records = records or SqlRecordStore()
        approvals = approvals or SqlApprovalRepository()

    records = records or InMemoryRecordStore()
    approvals = approvals or InMemoryApprovalRepository()
    standards = standards or StaticStandardsStore()
    grading_scales = grading_scales or StaticGradingScaleStore()
    notifier = notifier or LoggingNotificationSink()
    results = InMemoryEvaluationResultStore()

    work_rates = WorkRateCalculator(records, standards, settings)
    workflow = ApprovalWorkflow(approvals, records, notifier)
    evaluations = EvaluationService(results, work_rates, grading_scales, notifier, settings)
    workflow.add_commit_listener(evaluations.handle_commit)

    return EvaluationContainer(
        settings=settings,
        records=records,
        approvals=approvals,
        standards=standards,
        grading_scales=grading_scales,
        results=results,
        notifier=notifier,
        work_rates=work_rates,
        workflow=workflow,
        evaluations=evaluations,
    )


# Global container (initialized lazily)
_container: EvaluationContainer | None = None


def get_container() -> EvaluationContainer:
    """Get singleton EvaluationContainer instance."""
    global _container
    if _container is None:
        _container = build_container()
        logger.info("Evaluation container initialized")
    return _container


def reset_container() -> None:
    """Drop the singleton so the next request rebuilds it."""
    global _container
    _container = None


ContainerDep = Annotated[EvaluationContainer, Depends(get_container)]


def get_workflow(container: ContainerDep) -> ApprovalWorkflow:
    return container.workflow


def get_work_rate_calculator(container: ContainerDep) -> WorkRateCalculator:
    return container.work_rates


WorkflowDep = Annotated[ApprovalWorkflow, Depends(get_workflow)]
WorkRateDep = Annotated[WorkRateCalculator, Depends(get_work_rate_calculator)]


# =============================================================================
# Caller Identity
# =============================================================================


def get_actor(
    x_user_id: Annotated[str | None, Header(alias="X-User-Id")] = None,
    x_user_role: Annotated[str | None, Header(alias="X-User-Role")] = None,
) -> Actor:
    """
    Build the calling Actor from the headers set by the auth layer.

    Raises:
        HTTPException 401: If the user ID header is missing.
        HTTPException 400: If the role is not admin, evaluator or employee.
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Id header is required",
        )
    try:
        role = Role((x_user_role or Role.EMPLOYEE.value).lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown role '{x_user_role}'. Expected one of: admin, evaluator, employee",
        )
    return Actor(user_id=x_user_id, role=role)


ActorDep = Annotated[Actor, Depends(get_actor)]
