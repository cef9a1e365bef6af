"""
Unit Tests for the Permission Policy.
"""

import pytest

from modules.evaluation.schemas.approval import (
    ApprovalAction,
    ApprovalDataType,
    ApprovalPayload,
    ApprovalRequest,
    ApprovalStage,
    Role,
)
from modules.evaluation.services.permissions import actions_allowed


def _request(stage: ApprovalStage) -> ApprovalRequest:
    return ApprovalRequest(
        requester_id="E001",
        approver_team_id="M001",
        payload=ApprovalPayload(
            data_type=ApprovalDataType.DAILY_ATTENDANCE,
            action=ApprovalAction.ADD,
            data={"uniqueId": "E001", "date": "2024-01-15", "type": "연차"},
        ),
        stage=stage,
    )


class TestTeamStage:
    """Who may decide the team stage."""

    def test_assigned_evaluator_on_pending(self):
        actions = actions_allowed(Role.EVALUATOR, "M001", _request(ApprovalStage.PENDING))

        assert actions.can_approve_team
        assert actions.can_approve
        assert not actions.can_approve_hr
        assert not actions.can_skip

    def test_other_evaluator(self):
        actions = actions_allowed(Role.EVALUATOR, "M002", _request(ApprovalStage.PENDING))
        assert not actions.can_approve_team

    def test_admin_is_not_team_approver(self):
        actions = actions_allowed(Role.ADMIN, "M001", _request(ApprovalStage.PENDING))
        assert not actions.can_approve_team

    @pytest.mark.parametrize(
        "stage",
        [ApprovalStage.TEAM_APPROVED, ApprovalStage.HR_APPROVED, ApprovalStage.REJECTED_TEAM],
    )
    def test_only_while_pending(self, stage):
        actions = actions_allowed(Role.EVALUATOR, "M001", _request(stage))
        assert not actions.can_approve_team


class TestHrStage:
    """Who may decide the HR stage or skip the team stage."""

    def test_admin_after_team_approval(self):
        actions = actions_allowed(Role.ADMIN, "admin", _request(ApprovalStage.TEAM_APPROVED))

        assert actions.can_approve_hr
        assert not actions.can_skip

    def test_admin_may_skip_pending(self):
        actions = actions_allowed(Role.ADMIN, "admin", _request(ApprovalStage.PENDING))

        assert actions.can_skip
        assert not actions.can_approve_hr

    @pytest.mark.parametrize("role", [Role.EVALUATOR, Role.EMPLOYEE])
    def test_non_admin_never_hr(self, role):
        actions = actions_allowed(role, "M001", _request(ApprovalStage.TEAM_APPROVED))

        assert not actions.can_approve_hr
        assert not actions.can_skip

    def test_nothing_after_final_approval(self):
        actions = actions_allowed(Role.ADMIN, "admin", _request(ApprovalStage.HR_APPROVED))

        assert not actions.can_approve
        assert not actions.can_skip
        assert actions.can_delete


class TestRequesterActions:
    """What the requester may do with their own request."""

    @pytest.mark.parametrize("stage", [ApprovalStage.REJECTED_TEAM, ApprovalStage.REJECTED_HR])
    def test_rejected_request(self, stage):
        actions = actions_allowed(Role.EMPLOYEE, "E001", _request(stage))

        assert actions.can_resubmit
        assert actions.can_delete

    @pytest.mark.parametrize(
        "stage",
        [ApprovalStage.PENDING, ApprovalStage.TEAM_APPROVED, ApprovalStage.HR_APPROVED],
    )
    def test_open_or_final_request(self, stage):
        actions = actions_allowed(Role.EMPLOYEE, "E001", _request(stage))

        assert not actions.can_resubmit
        assert not actions.can_delete

    def test_stranger_cannot_resubmit(self):
        actions = actions_allowed(Role.EMPLOYEE, "E999", _request(ApprovalStage.REJECTED_TEAM))

        assert not actions.can_resubmit
        assert not actions.can_delete

    def test_role_given_as_string(self):
        actions = actions_allowed("evaluator", "M001", _request(ApprovalStage.PENDING))
        assert actions.can_approve_team
