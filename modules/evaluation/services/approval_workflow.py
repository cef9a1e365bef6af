"""
Approval Workflow.

Two-stage (team, then HR) sign-off for changes to attendance records.
Only a request that reaches ``hr_approved`` writes to the record store.

Each transition runs as one unit under the repository's per-request lock:
read the request, check stage and actor, then commit the record change (if
the transition is final) and save with an optimistic version check inside
one ``atomic()`` block. A failed save leaves no record behind. Record
writes are keyed, so a retried commit never duplicates a record.

Notifications and commit listeners run after the save and never undo it.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from modules.evaluation.exceptions import InvalidTransition, ValidationError
from modules.evaluation.repositories.base import ApprovalRepository, RecordStore
from modules.evaluation.schemas.approval import (
    Actor,
    AllowedActions,
    ApprovalAction,
    ApprovalPayload,
    ApprovalRequest,
    ApprovalStage,
    NotificationEvent,
    Role,
)
from modules.evaluation.schemas.evaluation import CommittedChange
from modules.evaluation.schemas.records import AttendanceRecord
from modules.evaluation.services.notification import (
    NotificationSink,
    final_approved_event,
    rejected_event,
    resubmitted_event,
    safe_notify,
    submitted_event,
    team_approved_event,
)
from modules.evaluation.services.permissions import actions_allowed

logger = logging.getLogger(__name__)

CommitListener = Callable[[CommittedChange], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _first_error(exc: PydanticValidationError) -> tuple[str, str | None]:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error.get("loc", ())) or None
    return error.get("msg", str(exc)), field


def validate_payload(payload: ApprovalPayload) -> AttendanceRecord:
    """
    Check that a payload's data forms a valid record.

    Raises:
        ValidationError: Missing field, bad date/time, end_time not after
            start_time, end_date before start_date, ...
    """
    try:
        return payload.to_record()
    except PydanticValidationError as e:
        message, field = _first_error(e)
        raise ValidationError(f"Invalid {payload.data_type} data: {message}", field=field) from e


def _require_reason(reason: str | None) -> str:
    if reason is None or not reason.strip():
        raise ValidationError("A rejection reason is required", field="reason")
    return reason.strip()


class ApprovalWorkflow:
    """
    State machine over approval requests.

    Transitions:
        pending        --approve_team--> team_approved
        pending        --reject_team---> rejected_team
        team_approved  --approve_hr----> hr_approved   (commit)
        team_approved  --reject_hr-----> rejected_hr
        pending        --skip----------> hr_approved   (commit)
        rejected_*     --resubmit------> pending
        any            --delete--------> removed       (see permission policy)
    """

    def __init__(
        self,
        repository: ApprovalRepository,
        record_store: RecordStore,
        notifier: NotificationSink | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._repository = repository
        self._records = record_store
        self._notifier = notifier
        self._clock = clock or _utcnow
        self._commit_listeners: list[CommitListener] = []

    def add_commit_listener(self, listener: CommitListener) -> None:
        """Register a callback run after each committed record change."""
        self._commit_listeners.append(listener)

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, request_id: str) -> ApprovalRequest:
        return self._repository.get(request_id)

    def list_requests(self, requester_id: str | None = None) -> list[ApprovalRequest]:
        return self._repository.list_requests(requester_id)

    def allowed_actions(self, actor: Actor, request_id: str) -> AllowedActions:
        request = self._repository.get(request_id)
        return actions_allowed(actor.role, actor.user_id, request)

    # =========================================================================
    # Submission
    # =========================================================================

    def submit(
        self,
        actor: Actor,
        payload: ApprovalPayload,
        approver_team_id: str,
        requester_name: str = "",
        approver_hr_id: str = "admin",
    ) -> ApprovalRequest:
        """
        Create a pending request for ``actor``.

        Raises:
            ValidationError: If the payload data is not a valid record.
        """
        validate_payload(payload)
        if not approver_team_id:
            raise ValidationError("A team approver is required", field="approver_team_id")

        request = ApprovalRequest(
            requester_id=actor.user_id,
            requester_name=requester_name,
            approver_team_id=approver_team_id,
            approver_hr_id=approver_hr_id,
            date=self._clock(),
            payload=payload,
        )
        self._repository.add(request)
        logger.info(
            f"Approval request {request.id} submitted by {actor.user_id}: "
            f"{payload.type_text}"
        )
        self._notify(submitted_event(request))
        return request

    # =========================================================================
    # Team stage
    # =========================================================================

    def approve_team(self, request_id: str, actor: Actor) -> ApprovalRequest:
        def apply(request: ApprovalRequest) -> dict[str, Any]:
            self._check_stage(request, "approve_team", ApprovalStage.PENDING)
            self._check_team_approver(request, "approve_team", actor)
            return {"stage": ApprovalStage.TEAM_APPROVED, "approved_at_team": self._clock()}

        request, _ = self._transition(request_id, "approve_team", actor, apply)
        self._notify(team_approved_event(request))
        return request

    def reject_team(self, request_id: str, actor: Actor, reason: str) -> ApprovalRequest:
        reason = _require_reason(reason)

        def apply(request: ApprovalRequest) -> dict[str, Any]:
            self._check_stage(request, "reject_team", ApprovalStage.PENDING)
            self._check_team_approver(request, "reject_team", actor)
            return {"stage": ApprovalStage.REJECTED_TEAM, "rejection_reason": reason}

        request, _ = self._transition(request_id, "reject_team", actor, apply)
        self._notify(rejected_event(request))
        return request

    # =========================================================================
    # HR stage
    # =========================================================================

    def approve_hr(self, request_id: str, actor: Actor) -> ApprovalRequest:
        """
        Final approval. Commits the payload into the record store.

        Re-approving an already final request as admin changes nothing.
        """

        def apply(request: ApprovalRequest) -> dict[str, Any] | None:
            self._check_admin(request, "approve_hr", actor)
            if request.stage is ApprovalStage.HR_APPROVED:
                return None
            self._check_stage(request, "approve_hr", ApprovalStage.TEAM_APPROVED)
            return {"stage": ApprovalStage.HR_APPROVED, "approved_at_hr": self._clock()}

        request, change = self._transition(request_id, "approve_hr", actor, apply, commit=True)
        if change is not None:
            self._notify(final_approved_event(request))
        return request

    def reject_hr(self, request_id: str, actor: Actor, reason: str) -> ApprovalRequest:
        reason = _require_reason(reason)

        def apply(request: ApprovalRequest) -> dict[str, Any]:
            self._check_stage(request, "reject_hr", ApprovalStage.TEAM_APPROVED)
            self._check_admin(request, "reject_hr", actor)
            return {"stage": ApprovalStage.REJECTED_HR, "rejection_reason": reason}

        request, _ = self._transition(request_id, "reject_hr", actor, apply)
        self._notify(rejected_event(request))
        return request

    def skip_first_approval(self, request_id: str, actor: Actor) -> ApprovalRequest:
        """Admin override: finalize a pending request without the team stage."""

        def apply(request: ApprovalRequest) -> dict[str, Any] | None:
            self._check_admin(request, "skip_first_approval", actor)
            if request.stage is ApprovalStage.HR_APPROVED:
                return None
            self._check_stage(request, "skip_first_approval", ApprovalStage.PENDING)
            now = self._clock()
            return {
                "stage": ApprovalStage.HR_APPROVED,
                "approved_at_team": now,
                "approved_at_hr": now,
            }

        request, change = self._transition(
            request_id, "skip_first_approval", actor, apply, commit=True
        )
        if change is not None:
            self._notify(final_approved_event(request))
        return request

    # =========================================================================
    # Rejected requests
    # =========================================================================

    def resubmit(
        self,
        request_id: str,
        actor: Actor,
        data: dict[str, Any] | None = None,
    ) -> ApprovalRequest:
        """
        Send a rejected request back to the team stage, optionally with
        edited payload data.

        Raises:
            ValidationError: If the edited data is not a valid record.
        """

        def apply(request: ApprovalRequest) -> dict[str, Any]:
            if not request.stage.is_rejected:
                raise InvalidTransition(request.stage.value, "resubmit")
            if actor.user_id != request.requester_id:
                raise InvalidTransition(
                    request.stage.value, "resubmit", f"{actor.user_id} is not the requester"
                )
            payload = request.payload
            if data is not None:
                payload = payload.model_copy(update={"data": dict(data)})
                validate_payload(payload)
            return {
                "stage": ApprovalStage.PENDING,
                "payload": payload,
                "rejection_reason": None,
                "approved_at_team": None,
                "approved_at_hr": None,
            }

        request, _ = self._transition(request_id, "resubmit", actor, apply)
        self._notify(resubmitted_event(request))
        return request

    def delete(self, request_id: str, actor: Actor) -> None:
        """
        Remove a request. Admins may delete any request, requesters only
        their rejected ones. A committed record is not rolled back.
        """
        with self._repository.lock(request_id):
            request = self._repository.get(request_id)
            if not actions_allowed(actor.role, actor.user_id, request).can_delete:
                raise InvalidTransition(
                    request.stage.value,
                    "delete",
                    f"{actor.user_id} ({actor.role}) may not delete this request",
                )
            self._repository.delete(request_id)
        logger.info(f"Approval request {request_id} deleted by {actor.user_id}")

    # =========================================================================
    # Internals
    # =========================================================================

    @staticmethod
    def _check_stage(request: ApprovalRequest, action: str, expected: ApprovalStage) -> None:
        if request.stage is not expected:
            raise InvalidTransition(request.stage.value, action)

    @staticmethod
    def _check_team_approver(request: ApprovalRequest, action: str, actor: Actor) -> None:
        if actor.role is not Role.EVALUATOR or actor.user_id != request.approver_team_id:
            raise InvalidTransition(
                request.stage.value,
                action,
                f"{actor.user_id} is not the team approver of this request",
            )

    @staticmethod
    def _check_admin(request: ApprovalRequest, action: str, actor: Actor) -> None:
        if actor.role is not Role.ADMIN:
            raise InvalidTransition(request.stage.value, action, "admin role required")

    def _transition(
        self,
        request_id: str,
        action: str,
        actor: Actor,
        apply: Callable[[ApprovalRequest], dict[str, Any] | None],
        commit: bool = False,
    ) -> tuple[ApprovalRequest, CommittedChange | None]:
        """
        Run one transition as a unit.

        ``apply`` validates the request and returns the field updates, or
        None when the transition is an idempotent no-op.
        """
        with self._repository.lock(request_id):
            request = self._repository.get(request_id)
            updates = apply(request)
            if updates is None:
                logger.info(
                    f"{action} on {request_id} by {actor.user_id}: already {request.stage}, nothing to do"
                )
                return request, None

            updated = request.model_copy(update=updates)
            with self._repository.atomic():
                change = self._commit(updated) if commit else None
                saved = self._repository.save(updated, expected_version=request.version)

        logger.info(
            f"Approval request {request_id}: {request.stage} -> {saved.stage} "
            f"({action} by {actor.user_id})"
        )
        if change is not None:
            self._run_commit_listeners(change)
        return saved, change

    def _commit(self, request: ApprovalRequest) -> CommittedChange:
        """Write the payload's record change into the record store."""
        record = validate_payload(request.payload)
        now = self._clock()
        action = request.payload.action

        if action is ApprovalAction.ADD:
            record = record.model_copy(update={"last_modified": now})
            if not self._records.add(record):
                logger.warning(
                    f"Commit of {request.id}: record {record.key} already exists, left unchanged"
                )
        elif action is ApprovalAction.EDIT:
            record = record.model_copy(update={"last_modified": now})
            self._records.upsert(record)
        else:
            if not self._records.delete(record):
                logger.warning(f"Commit of {request.id}: record {record.key} was already absent")

        logger.info(f"Committed {request.payload.type_text} for {record.unique_id} ({request.id})")
        return CommittedChange(
            request_id=request.id,
            data_type=request.payload.data_type,
            action=action,
            record=record,
            committed_at=now,
        )

    def _run_commit_listeners(self, change: CommittedChange) -> None:
        for listener in self._commit_listeners:
            try:
                listener(change)
            except Exception as e:
                logger.exception(f"Commit listener failed for request {change.request_id}: {e}")

    def _notify(self, event: NotificationEvent) -> None:
        safe_notify(self._notifier, event)
