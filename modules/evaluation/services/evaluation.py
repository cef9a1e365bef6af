"""
Evaluation Service.

Keeps per-period evaluation results in step with grades and work rates:

- ``enroll`` creates an employee's result for a period
- ``assign_grade`` / ``reset_grade`` change the grade and recompute payout
- ``refresh_work_rate`` re-derives the work rate from the record store,
  typically from ``handle_commit`` after an approval commits a record

Results are never deleted; a reset only clears the grade.
"""

import logging

from modules.evaluation.core.config import EvaluationSettings, get_evaluation_settings
from modules.evaluation.exceptions import ValidationError
from modules.evaluation.repositories.base import EvaluationResultStore, GradingScaleStore
from modules.evaluation.schemas.evaluation import (
    CommittedChange,
    EvaluationResult,
    GradeAssignment,
    GroupScoreOverage,
)
from modules.evaluation.services.notification import (
    NotificationSink,
    safe_notify,
    work_rate_applied_event,
)
from modules.evaluation.services.payout import PayoutCalculator
from modules.evaluation.services.work_rate import WorkRateCalculator

logger = logging.getLogger(__name__)


class EvaluationService:
    """Service for grading employees and recomputing their payouts."""

    def __init__(
        self,
        results: EvaluationResultStore,
        work_rates: WorkRateCalculator,
        grading_scales: GradingScaleStore,
        notifier: NotificationSink | None = None,
        settings: EvaluationSettings | None = None,
    ) -> None:
        """
        Initialize evaluation service with dependencies.

        Args:
            results: Store of per-period evaluation results.
            work_rates: Work-rate calculator over the record store.
            grading_scales: Source of the current grading scale.
            notifier: Receives work-rate change notices. Optional.
            settings: Evaluation settings. Uses singleton if not provided.
        """
        self._results = results
        self._work_rates = work_rates
        self._grading_scales = grading_scales
        self._notifier = notifier
        self._settings = settings or get_evaluation_settings()
        self._payout = PayoutCalculator(self._settings)

    # =========================================================================
    # Results
    # =========================================================================

    def enroll(
        self,
        employee_id: str,
        year: int,
        month: int,
        base_amount: int = 0,
        group_key: str = "",
        name: str = "",
    ) -> EvaluationResult:
        """
        Create the employee's result for a period, with the current work rate.

        Enrolling twice returns the existing result unchanged.
        """
        existing = self._results.get(employee_id, year, month)
        if existing is not None:
            return existing

        summary = self._work_rates.summarize(employee_id, year, month)
        result = EvaluationResult(
            employee_id=employee_id,
            year=year,
            month=month,
            name=name,
            group_key=group_key,
            base_amount=base_amount,
            work_rate=summary.monthly_work_rate,
        )
        result = self._payout.recompute(result, self._grading_scales.get())
        self._results.save(result)
        logger.info(
            f"Enrolled {employee_id} for {year}-{month:02d} "
            f"(work rate {summary.monthly_work_rate:.3f})"
        )
        return result

    def get_result(self, employee_id: str, year: int, month: int) -> EvaluationResult | None:
        return self._results.get(employee_id, year, month)

    def results_for_period(
        self, year: int, month: int, group_key: str | None = None
    ) -> list[EvaluationResult]:
        return self._results.list_results(year, month, group_key)

    def _require_result(self, employee_id: str, year: int, month: int) -> EvaluationResult:
        result = self._results.get(employee_id, year, month)
        if result is None:
            raise ValidationError(
                f"{employee_id} is not enrolled for {year}-{month:02d}", field="employee_id"
            )
        return result

    # =========================================================================
    # Grades
    # =========================================================================

    def assign_grade(
        self, employee_id: str, year: int, month: int, grade: str | None
    ) -> GradeAssignment:
        """
        Set an employee's grade and recompute score and amounts.

        Raises:
            ValidationError: Not enrolled, unknown grade, or a work rate
                below the ungradeable threshold.
        """
        result = self._require_result(employee_id, year, month)
        grading_scale = self._grading_scales.get()

        if grade is not None:
            if grade not in grading_scale:
                raise ValidationError(
                    f"Unknown grade '{grade}'. Valid grades: {', '.join(grading_scale)}",
                    field="grade",
                )
            if not self._payout.is_gradeable(result.work_rate):
                raise ValidationError(
                    f"{employee_id} cannot be graded for {year}-{month:02d}: "
                    f"work rate {result.work_rate * 100:.1f}% is below "
                    f"{self._settings.ungradeable_work_rate * 100:.0f}%",
                    field="grade",
                )

        updated = self._payout.recompute(result.model_copy(update={"grade": grade}), grading_scale)
        self._results.save(updated)
        logger.info(f"Grade of {employee_id} for {year}-{month:02d} set to {grade}")

        warnings = []
        if updated.group_key:
            overage = self._payout.group_overage(
                updated.group_key, self._results.list_results(year, month, updated.group_key)
            )
            if overage is not None:
                warnings.append(overage)
        return GradeAssignment(result=updated, warnings=warnings)

    def reset_grade(self, employee_id: str, year: int, month: int) -> EvaluationResult:
        return self.assign_grade(employee_id, year, month, None).result

    def group_overages(self, year: int, month: int) -> list[GroupScoreOverage]:
        """Score-budget warnings for every group of the period."""
        groups: dict[str, list[EvaluationResult]] = {}
        for result in self._results.list_results(year, month):
            if result.group_key:
                groups.setdefault(result.group_key, []).append(result)
        overages = []
        for group_key, members in sorted(groups.items()):
            overage = self._payout.group_overage(group_key, members)
            if overage is not None:
                overages.append(overage)
        return overages

    # =========================================================================
    # Work Rate
    # =========================================================================

    def refresh_work_rate(self, employee_id: str, year: int, month: int) -> EvaluationResult | None:
        """
        Re-derive the work rate from the record store and recompute payout.

        A grade is cleared if the new rate makes the employee ungradeable.
        The employee is notified when the rate changes.

        Returns:
            The updated result, or None if the employee is not enrolled.
        """
        result = self._results.get(employee_id, year, month)
        if result is None:
            logger.debug(f"{employee_id} not enrolled for {year}-{month:02d}; skipping refresh")
            return None

        summary = self._work_rates.summarize(employee_id, year, month)
        updated = self._payout.recompute(
            result.model_copy(update={"work_rate": summary.monthly_work_rate}),
            self._grading_scales.get(),
        )
        self._results.save(updated)

        if updated.work_rate != result.work_rate:
            logger.info(
                f"Work rate of {employee_id} for {year}-{month:02d}: "
                f"{result.work_rate:.3f} -> {updated.work_rate:.3f}"
            )
            safe_notify(
                self._notifier,
                work_rate_applied_event(employee_id, year, month, updated.work_rate),
            )
        return updated

    def handle_commit(self, change: CommittedChange) -> list[EvaluationResult]:
        """Refresh every period the committed record touches."""
        refreshed = []
        for year, month in change.affected_months():
            result = self.refresh_work_rate(change.employee_id, year, month)
            if result is not None:
                refreshed.append(result)
        return refreshed
