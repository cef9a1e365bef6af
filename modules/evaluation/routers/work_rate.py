"""
Work-Rate API Router.

Read-only endpoints for an employee's monthly work rate and the per-record
deductions behind it. Employees may only read their own figures.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from modules.evaluation.dependencies import ActorDep, WorkRateDep
from modules.evaluation.schemas.approval import Actor, Role
from modules.evaluation.schemas.evaluation import (
    DailyAttendanceDetail,
    ShortenedWorkDetail,
    WorkRateSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/evaluation/work-rate", tags=["Work Rate"])

YearQuery = Annotated[int, Query(ge=2000, le=2100)]
MonthQuery = Annotated[int, Query(ge=1, le=12)]


class WorkRateDetailResponse(BaseModel):
    """Detail rows behind a work-rate summary."""

    summary: WorkRateSummary
    shortened_work: list[ShortenedWorkDetail]
    daily_attendance: list[DailyAttendanceDetail]


def _check_access(actor: Actor, employee_id: str) -> None:
    if actor.role is Role.EMPLOYEE and actor.user_id != employee_id:
        logger.warning(f"{actor.user_id} tried to read the work rate of {employee_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Employees may only view their own work rate",
        )


@router.get("/{employee_id}", response_model=WorkRateSummary)
def get_work_rate(
    employee_id: str,
    year: YearQuery,
    month: MonthQuery,
    actor: ActorDep,
    calculator: WorkRateDep,
) -> WorkRateSummary:
    """Monthly work-rate summary of one employee."""
    _check_access(actor, employee_id)
    return calculator.summarize(employee_id, year, month)


@router.get("/{employee_id}/details", response_model=WorkRateDetailResponse)
def get_work_rate_details(
    employee_id: str,
    year: YearQuery,
    month: MonthQuery,
    actor: ActorDep,
    calculator: WorkRateDep,
) -> WorkRateDetailResponse:
    """Work-rate summary with the deduction of every contributing record."""
    _check_access(actor, employee_id)
    shortened, daily = calculator.details(employee_id, year, month)
    return WorkRateDetailResponse(
        summary=calculator.summarize(employee_id, year, month),
        shortened_work=shortened,
        daily_attendance=daily,
    )
