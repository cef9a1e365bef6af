"""
Approval Request API Router.

Endpoints for submitting attendance-change requests and moving them
through the team and HR approval stages.

The caller is identified by the X-User-Id / X-User-Role headers set by the
external authentication layer.
"""

import logging
from typing import NoReturn

from fastapi import APIRouter, HTTPException, Query, status

from modules.evaluation.dependencies import ActorDep, WorkflowDep
from modules.evaluation.exceptions import (
    ConcurrentModificationError,
    EvaluationError,
    InvalidTransition,
    RequestNotFoundError,
    ValidationError,
)
from modules.evaluation.schemas.approval import (
    Actor,
    ApprovalCreateRequest,
    ApprovalRequest,
    ApprovalResponse,
    RejectRequest,
    ResubmitRequest,
    Role,
)
from modules.evaluation.services.permissions import actions_allowed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/evaluation/approvals", tags=["Approval"])


def raise_http_error(exc: EvaluationError) -> NoReturn:
    """Translate an evaluation error into the matching HTTP error."""
    if isinstance(exc, RequestNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(exc), "field": exc.field},
        )
    if isinstance(exc, (InvalidTransition, ConcurrentModificationError)):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    logger.error(f"Unhandled evaluation error: {exc}")
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _respond(request: ApprovalRequest, actor: Actor) -> ApprovalResponse:
    return ApprovalResponse(
        request=request,
        actions=actions_allowed(actor.role, actor.user_id, request),
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.post("", response_model=ApprovalResponse, status_code=status.HTTP_201_CREATED)
def create_request(
    body: ApprovalCreateRequest,
    actor: ActorDep,
    workflow: WorkflowDep,
) -> ApprovalResponse:
    """Submit a new attendance-change request for approval."""
    try:
        request = workflow.submit(
            actor,
            body.payload,
            approver_team_id=body.approver_team_id,
            requester_name=body.requester_name,
            approver_hr_id=body.approver_hr_id,
        )
    except EvaluationError as e:
        raise_http_error(e)
    return _respond(request, actor)


@router.get("", response_model=list[ApprovalRequest])
def list_requests(
    actor: ActorDep,
    workflow: WorkflowDep,
    requester_id: str | None = Query(default=None, alias="requesterId"),
) -> list[ApprovalRequest]:
    """
    List requests, newest first, optionally for one requester.

    Employees only ever see their own requests.
    """
    if actor.role is Role.EMPLOYEE:
        requester_id = actor.user_id
    return workflow.list_requests(requester_id)


@router.get("/{request_id}", response_model=ApprovalResponse)
def get_request(request_id: str, actor: ActorDep, workflow: WorkflowDep) -> ApprovalResponse:
    """Get a request together with what the caller may do with it."""
    try:
        request = workflow.get(request_id)
    except EvaluationError as e:
        raise_http_error(e)
    if actor.role is Role.EMPLOYEE and actor.user_id != request.requester_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Employees may only view their own requests",
        )
    return _respond(request, actor)


def _run(actor: Actor, action, *args) -> ApprovalResponse:
    try:
        request = action(*args)
    except EvaluationError as e:
        logger.warning(f"{getattr(action, '__name__', action)} rejected for {actor.user_id}: {e}")
        raise_http_error(e)
    return _respond(request, actor)


@router.post("/{request_id}/approve-team", response_model=ApprovalResponse)
def approve_team(request_id: str, actor: ActorDep, workflow: WorkflowDep) -> ApprovalResponse:
    """1차 결재 (현업승인)."""
    return _run(actor, workflow.approve_team, request_id, actor)


@router.post("/{request_id}/reject-team", response_model=ApprovalResponse)
def reject_team(
    request_id: str, body: RejectRequest, actor: ActorDep, workflow: WorkflowDep
) -> ApprovalResponse:
    """1차 결재 반려."""
    return _run(actor, workflow.reject_team, request_id, actor, body.reason)


@router.post("/{request_id}/approve-hr", response_model=ApprovalResponse)
def approve_hr(request_id: str, actor: ActorDep, workflow: WorkflowDep) -> ApprovalResponse:
    """2차 결재 (최종승인). Commits the change."""
    return _run(actor, workflow.approve_hr, request_id, actor)


@router.post("/{request_id}/reject-hr", response_model=ApprovalResponse)
def reject_hr(
    request_id: str, body: RejectRequest, actor: ActorDep, workflow: WorkflowDep
) -> ApprovalResponse:
    """2차 결재 반려."""
    return _run(actor, workflow.reject_hr, request_id, actor, body.reason)


@router.post("/{request_id}/skip", response_model=ApprovalResponse)
def skip_first_approval(request_id: str, actor: ActorDep, workflow: WorkflowDep) -> ApprovalResponse:
    """1차 결재 생략 후 최종승인 (admin only)."""
    return _run(actor, workflow.skip_first_approval, request_id, actor)


@router.post("/{request_id}/resubmit", response_model=ApprovalResponse)
def resubmit(
    request_id: str, body: ResubmitRequest, actor: ActorDep, workflow: WorkflowDep
) -> ApprovalResponse:
    """재상신, optionally with edited data."""
    return _run(actor, workflow.resubmit, request_id, actor, body.data)


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_request(request_id: str, actor: ActorDep, workflow: WorkflowDep) -> None:
    """Delete a request."""
    try:
        workflow.delete(request_id, actor)
    except EvaluationError as e:
        raise_http_error(e)
