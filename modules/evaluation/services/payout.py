"""
Payout Calculator.

Maps a grade to its score and payout rate, then prorates the grade amount
by the work rate:

    grade_amount = base_amount x payout_rate_percent / 100
    final_amount = round_half_up(grade_amount x work_rate, rounding_unit)

An employee whose work rate is below the ungradeable threshold (25%) has
no grade and a score of 0, whatever grade was stored before.
"""

import logging
import math
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from modules.evaluation.core.config import EvaluationSettings, get_evaluation_settings
from modules.evaluation.exceptions import ValidationError
from modules.evaluation.schemas.evaluation import EvaluationResult, GroupScoreOverage
from modules.evaluation.schemas.records import GradingScale

logger = logging.getLogger(__name__)

BAND_REGULAR = "A. 정규평가"
BAND_SEPARATE = "B. 별도평가"
BAND_UNGRADED = "C. 미평가"


def _to_decimal(value: float | int | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps 0.9 as 0.9 instead of its binary expansion
    return Decimal(str(value))


def score_and_payout_rate(grade: str | None, grading_scale: GradingScale) -> tuple[float, float]:
    """
    Look up (score, payout_rate_percent) of a grade. ``None`` is (0, 0).

    Raises:
        ValidationError: If the grade is not in the grading scale.
    """
    if grade is None:
        return 0, 0
    info = grading_scale.get(grade)
    if info is None:
        raise ValidationError(
            f"Unknown grade '{grade}'. Valid grades: {', '.join(grading_scale)}",
            field="grade",
        )
    return info.score, info.payout_rate_percent


def grade_amount(base_amount: int | Decimal, payout_rate_percent: float) -> Decimal:
    return _to_decimal(base_amount) * _to_decimal(payout_rate_percent) / 100


def final_amount(
    grade_amount_value: Decimal | float,
    work_rate: float,
    rounding_unit: int = 1,
) -> int:
    """Grade amount prorated by work rate, rounded half up to ``rounding_unit`` won."""
    raw = _to_decimal(grade_amount_value) * _to_decimal(work_rate)
    unit = Decimal(rounding_unit)
    return int((raw / unit).quantize(Decimal(1), rounding=ROUND_HALF_UP) * unit)


def is_gradeable(work_rate: float, threshold: float = 0.25) -> bool:
    return work_rate >= threshold


def work_rate_band(work_rate: float, regular: float = 0.7, ungradeable: float = 0.25) -> str:
    """Evaluation band: regular, separate, or not evaluated."""
    if work_rate >= regular:
        return BAND_REGULAR
    if work_rate >= ungradeable:
        return BAND_SEPARATE
    return BAND_UNGRADED


def detailed_group(work_rate: float) -> str:
    """Five-point work-rate bracket label, e.g. '65 ~ 69%'."""
    if work_rate >= 0.7:
        return "70% 이상"
    if work_rate < 0.25:
        return "25% 미만"
    # absorb float noise before bucketing
    percent = round(work_rate * 100, 6)
    lower = math.floor(percent / 5) * 5
    return f"{lower} ~ {lower + 4}%"


def group_score_overage(
    group_key: str,
    scores: Iterable[float],
    score_per_member: float = 100,
) -> GroupScoreOverage | None:
    """
    Check a group's total score against ``members x score_per_member``.

    Returns:
        A warning if the total exceeds the budget, otherwise None.
    """
    scores = list(scores)
    total = sum(scores)
    budget = len(scores) * score_per_member
    if total > budget:
        return GroupScoreOverage(group_key=group_key, total_score=total, max_score=budget)
    return None


class PayoutCalculator:
    """Recomputes the derived fields of evaluation results."""

    def __init__(self, settings: EvaluationSettings | None = None) -> None:
        self._settings = settings or get_evaluation_settings()

    def is_gradeable(self, work_rate: float) -> bool:
        return is_gradeable(work_rate, self._settings.ungradeable_work_rate)

    def recompute(self, result: EvaluationResult, grading_scale: GradingScale) -> EvaluationResult:
        """
        Return a copy of ``result`` with score, amounts and bands derived from
        its grade, base amount and work rate.

        A stored grade is dropped when the work rate is ungradeable or when
        the grade no longer exists in the grading scale.
        """
        grade = result.grade
        if grade is not None and not self.is_gradeable(result.work_rate):
            logger.info(
                f"Clearing grade {grade} of {result.employee_id}: "
                f"work rate {result.work_rate:.3f} is below "
                f"{self._settings.ungradeable_work_rate}"
            )
            grade = None
        if grade is not None and grade not in grading_scale:
            logger.warning(
                f"Grade {grade} of {result.employee_id} is not in the grading scale; clearing it"
            )
            grade = None

        score, payout_rate = score_and_payout_rate(grade, grading_scale)
        amount = grade_amount(result.base_amount, payout_rate)
        return result.model_copy(
            update={
                "grade": grade,
                "score": score,
                "payout_rate_percent": payout_rate,
                "grade_amount": amount,
                "final_amount": final_amount(
                    amount, result.work_rate, self._settings.payout_rounding_unit
                ),
                "work_rate_band": work_rate_band(
                    result.work_rate,
                    self._settings.regular_band_work_rate,
                    self._settings.ungradeable_work_rate,
                ),
                "detailed_group": detailed_group(result.work_rate),
            }
        )

    def group_overage(self, group_key: str, results: Iterable[EvaluationResult]) -> GroupScoreOverage | None:
        overage = group_score_overage(
            group_key,
            (r.score for r in results),
            self._settings.group_score_per_member,
        )
        if overage is not None:
            logger.warning(str(overage))
        return overage
