"""
In-Memory Repositories.

Thread-safe in-process implementations of every repository port. Used by
tests and by the API server when no database is configured.
"""

import logging
import threading
from collections import defaultdict
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from modules.evaluation.exceptions import ConcurrentModificationError, RequestNotFoundError
from modules.evaluation.repositories.base import (
    ApprovalRepository,
    AttendanceStandardsStore,
    EvaluationResultStore,
    GradingScaleStore,
    RecordStore,
)
from modules.evaluation.schemas.approval import ApprovalRequest
from modules.evaluation.schemas.evaluation import EvaluationResult
from modules.evaluation.schemas.records import (
    DEFAULT_ATTENDANCE_TYPES,
    DEFAULT_GRADING_SCALE,
    AttendanceRecord,
    AttendanceType,
    GradingScale,
    Holiday,
    ShortenedWorkHourRecord,
)

logger = logging.getLogger(__name__)


def _overlaps_month(record: ShortenedWorkHourRecord, year: int, month: int) -> bool:
    start = (record.start_date.year, record.start_date.month)
    end = (record.end_date.year, record.end_date.month)
    return start <= (year, month) <= end


class InMemoryRecordStore(RecordStore):
    """Records held in two dictionaries keyed by record key."""

    def __init__(self, records: Iterable[AttendanceRecord] = ()) -> None:
        self._daily: dict[tuple, AttendanceRecord] = {}
        self._shortened: dict[tuple, AttendanceRecord] = {}
        self._lock = threading.Lock()
        for record in records:
            self.upsert(record)

    def _table(self, record: AttendanceRecord) -> dict[tuple, AttendanceRecord]:
        if isinstance(record, ShortenedWorkHourRecord):
            return self._shortened
        return self._daily

    def add(self, record: AttendanceRecord) -> bool:
        with self._lock:
            table = self._table(record)
            if record.key in table:
                return False
            table[record.key] = record.model_copy()
            return True

    def upsert(self, record: AttendanceRecord) -> None:
        with self._lock:
            self._table(record)[record.key] = record.model_copy()

    def delete(self, record: AttendanceRecord) -> bool:
        with self._lock:
            return self._table(record).pop(record.key, None) is not None

    def query_by_period(self, employee_id: str, year: int, month: int) -> list[AttendanceRecord]:
        with self._lock:
            daily = [
                r.model_copy()
                for r in self._daily.values()
                if r.unique_id == employee_id and (r.date.year, r.date.month) == (year, month)
            ]
            shortened = [
                r.model_copy()
                for r in self._shortened.values()
                if r.unique_id == employee_id
                and _overlaps_month(r, year, month)
            ]
        return daily + shortened

    def list_records(self, employee_id: str | None = None) -> list[AttendanceRecord]:
        with self._lock:
            records = list(self._daily.values()) + list(self._shortened.values())
        return [
            r.model_copy() for r in records if employee_id is None or r.unique_id == employee_id
        ]


class StaticGradingScaleStore(GradingScaleStore):
    """A fixed grading scale, the default one unless given."""

    def __init__(self, grading_scale: GradingScale | None = None) -> None:
        self._scale = dict(grading_scale or DEFAULT_GRADING_SCALE)

    def get(self) -> GradingScale:
        return dict(self._scale)


class StaticStandardsStore(AttendanceStandardsStore):
    """Fixed attendance types and holidays."""

    def __init__(
        self,
        attendance_types: Iterable[AttendanceType] | None = None,
        holidays: Iterable[Holiday] = (),
    ) -> None:
        types = DEFAULT_ATTENDANCE_TYPES if attendance_types is None else attendance_types
        self._attendance_types = list(types)
        self._holidays = list(holidays)

    def attendance_types(self) -> list[AttendanceType]:
        return list(self._attendance_types)

    def holidays(self) -> list[Holiday]:
        return list(self._holidays)


class InMemoryApprovalRepository(ApprovalRepository):
    """
    Approval requests in a dictionary.

    ``lock`` hands out one re-entrant lock per request so that a whole
    transition (read, validate, commit, save) runs alone.
    """

    def __init__(self) -> None:
        self._requests: dict[str, ApprovalRequest] = {}
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = defaultdict(threading.RLock)

    @contextmanager
    def lock(self, request_id: str) -> Iterator[None]:
        with self._guard:
            request_lock = self._locks[request_id]
        with request_lock:
            yield

    def add(self, request: ApprovalRequest) -> ApprovalRequest:
        with self._guard:
            self._requests[request.id] = request.model_copy(deep=True)
        return request

    def get(self, request_id: str) -> ApprovalRequest:
        with self._guard:
            request = self._requests.get(request_id)
        if request is None:
            raise RequestNotFoundError(request_id)
        return request.model_copy(deep=True)

    def save(self, request: ApprovalRequest, expected_version: int) -> ApprovalRequest:
        with self._guard:
            current = self._requests.get(request.id)
            if current is None:
                raise RequestNotFoundError(request.id)
            if current.version != expected_version:
                raise ConcurrentModificationError(request.id, expected_version)
            saved = request.model_copy(update={"version": expected_version + 1}, deep=True)
            self._requests[request.id] = saved
        return saved.model_copy(deep=True)

    def delete(self, request_id: str) -> None:
        with self._guard:
            if self._requests.pop(request_id, None) is None:
                raise RequestNotFoundError(request_id)
            self._locks.pop(request_id, None)

    def list_requests(self, requester_id: str | None = None) -> list[ApprovalRequest]:
        with self._guard:
            requests = list(self._requests.values())
        return sorted(
            (
                r.model_copy(deep=True)
                for r in requests
                if requester_id is None or r.requester_id == requester_id
            ),
            key=lambda r: r.date,
            reverse=True,
        )


class InMemoryEvaluationResultStore(EvaluationResultStore):
    """Evaluation results keyed by (employee_id, year, month)."""

    def __init__(self) -> None:
        self._results: dict[tuple[str, int, int], EvaluationResult] = {}
        self._lock = threading.Lock()

    def get(self, employee_id: str, year: int, month: int) -> EvaluationResult | None:
        with self._lock:
            result = self._results.get((employee_id, year, month))
        return result.model_copy() if result else None

    def save(self, result: EvaluationResult) -> None:
        with self._lock:
            self._results[(result.employee_id, result.year, result.month)] = result.model_copy()

    def list_results(self, year: int, month: int, group_key: str | None = None) -> list[EvaluationResult]:
        with self._lock:
            results = list(self._results.values())
        return [
            r.model_copy()
            for r in results
            if (r.year, r.month) == (year, month)
            and (group_key is None or r.group_key == group_key)
        ]
