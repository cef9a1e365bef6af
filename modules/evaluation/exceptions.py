"""
Evaluation-specific exceptions.

Custom exception classes for approval and evaluation errors.
Expected business conditions (unknown attendance type, group score overage)
are warning values returned alongside results, not exceptions.
"""


class EvaluationError(Exception):
    """Base exception for evaluation-related errors."""
    pass


class ValidationError(EvaluationError):
    """
    Raised when an approval payload or command fails validation.

    Examples:
        - end_time is not after start_time
        - a required payload field is missing
        - a rejection without a reason
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class InvalidTransition(EvaluationError):
    """
    Raised when an approval action is not allowed from the current stage
    or for the calling user. The request is left unchanged.
    """

    def __init__(self, stage: str, action: str, detail: str = "") -> None:
        self.stage = stage
        self.action = action
        self.detail = detail
        message = f"Cannot {action} a request in stage '{stage}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class RequestNotFoundError(EvaluationError):
    """Raised when an approval request does not exist."""

    def __init__(self, request_id: str) -> None:
        self.request_id = request_id
        super().__init__(f"Approval request not found: {request_id}")


class ConcurrentModificationError(EvaluationError):
    """Raised when a request was changed by someone else since it was read."""

    def __init__(self, request_id: str, expected_version: int) -> None:
        self.request_id = request_id
        self.expected_version = expected_version
        super().__init__(
            f"Approval request {request_id} was modified concurrently "
            f"(expected version {expected_version})"
        )
