"""
Permission Policy.

Pure mapping from (role, user, request state) to the actions the user may
take on an approval request. The workflow enforces the same rules.
"""

from modules.evaluation.schemas.approval import (
    AllowedActions,
    ApprovalRequest,
    ApprovalStage,
    Role,
)


def actions_allowed(role: Role | str, current_user_id: str, request: ApprovalRequest) -> AllowedActions:
    """
    Compute what ``current_user_id`` acting as ``role`` may do with ``request``.

    - approve/reject team: the assigned evaluator while the team stage is pending
    - approve/reject HR: an admin once the team stage has approved
    - skip: an admin while both stages are pending
    - delete: an admin, or the requester of a rejected request
    - resubmit: the requester of a rejected request
    """
    role = Role(role)
    stage = request.stage
    is_admin = role is Role.ADMIN
    is_requester = current_user_id == request.requester_id

    return AllowedActions(
        can_approve_team=(
            role is Role.EVALUATOR
            and current_user_id == request.approver_team_id
            and stage is ApprovalStage.PENDING
        ),
        can_approve_hr=is_admin and stage is ApprovalStage.TEAM_APPROVED,
        can_skip=is_admin and stage is ApprovalStage.PENDING,
        can_delete=is_admin or (is_requester and stage.is_rejected),
        can_resubmit=is_requester and stage.is_rejected,
    )
