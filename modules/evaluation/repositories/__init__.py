"""
Evaluation Module Repositories.

Persistence ports and their in-memory and SQLAlchemy implementations.
"""

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

__all__ = [
    # Ports
    "ApprovalRepository",
    "AttendanceStandardsStore",
    "EvaluationResultStore",
    "GradingScaleStore",
    "RecordStore",
    # In-memory
    "InMemoryApprovalRepository",
    "InMemoryEvaluationResultStore",
    "InMemoryRecordStore",
    "StaticGradingScaleStore",
    "StaticStandardsStore",
]
