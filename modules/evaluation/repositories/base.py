"""
Repository Ports.

Abstract interfaces through which the evaluation services read and write
state. Services receive implementations by injection and hold no ambient
state of their own.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager

from modules.evaluation.schemas.approval import ApprovalRequest
from modules.evaluation.schemas.evaluation import EvaluationResult
from modules.evaluation.schemas.records import (
    AttendanceRecord,
    AttendanceType,
    GradingScale,
    Holiday,
)


class RecordStore(ABC):
    """
    Attendance-exception records, keyed per kind.

    Daily records are keyed by (unique_id, date); shortened-work records by
    (unique_id, start_date, end_date, type). Only an approval commit writes here.
    """

    @abstractmethod
    def add(self, record: AttendanceRecord) -> bool:
        """Insert a record. Returns False and changes nothing if the key exists."""
        pass

    @abstractmethod
    def upsert(self, record: AttendanceRecord) -> None:
        """Insert a record or replace the one with the same key."""
        pass

    @abstractmethod
    def delete(self, record: AttendanceRecord) -> bool:
        """Remove the record with the same key. Returns False if absent."""
        pass

    @abstractmethod
    def query_by_period(self, employee_id: str, year: int, month: int) -> list[AttendanceRecord]:
        """Records of one employee that fall in or overlap the month."""
        pass

    @abstractmethod
    def list_records(self, employee_id: str | None = None) -> list[AttendanceRecord]:
        pass


class GradingScaleStore(ABC):
    """Read-only access to the current grading scale."""

    @abstractmethod
    def get(self) -> GradingScale:
        pass


class AttendanceStandardsStore(ABC):
    """Read-only access to the attendance types and the holiday calendar."""

    @abstractmethod
    def attendance_types(self) -> list[AttendanceType]:
        pass

    @abstractmethod
    def holidays(self) -> list[Holiday]:
        pass


class ApprovalRepository(ABC):
    """
    Approval request storage with optimistic concurrency.

    ``save`` succeeds only if the stored version still equals
    ``expected_version`` and returns the request with its version bumped.
    """

    @abstractmethod
    def add(self, request: ApprovalRequest) -> ApprovalRequest:
        pass

    @abstractmethod
    def get(self, request_id: str) -> ApprovalRequest:
        """
        Raises:
            RequestNotFoundError: If no request has this ID.
        """
        pass

    @abstractmethod
    def save(self, request: ApprovalRequest, expected_version: int) -> ApprovalRequest:
        """
        Raises:
            RequestNotFoundError: If the request no longer exists.
            ConcurrentModificationError: If the stored version moved on.
        """
        pass

    @abstractmethod
    def delete(self, request_id: str) -> None:
        """
        Raises:
            RequestNotFoundError: If no request has this ID.
        """
        pass

    @abstractmethod
    def list_requests(self, requester_id: str | None = None) -> list[ApprovalRequest]:
        pass

    @contextmanager
    def lock(self, request_id: str) -> Iterator[None]:
        """Serialize work on one request. The default relies on ``save`` alone."""
        yield

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """
        Make the block's record writes and ``save`` one unit: if ``save``
        raises, the record writes are undone. The default has nothing to
        undo because ``lock`` already serializes the block.
        """
        yield


class EvaluationResultStore(ABC):
    """Per-period evaluation results."""

    @abstractmethod
    def get(self, employee_id: str, year: int, month: int) -> EvaluationResult | None:
        pass

    @abstractmethod
    def save(self, result: EvaluationResult) -> None:
        pass

    @abstractmethod
    def list_results(self, year: int, month: int, group_key: str | None = None) -> list[EvaluationResult]:
        pass
