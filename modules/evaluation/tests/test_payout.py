"""
Unit Tests for the Payout Calculator.
"""

from decimal import Decimal

import pytest

from modules.evaluation.core.config import EvaluationSettings
from modules.evaluation.exceptions import ValidationError
from modules.evaluation.schemas.evaluation import EvaluationResult
from modules.evaluation.schemas.records import DEFAULT_GRADING_SCALE
from modules.evaluation.services.payout import (
    BAND_REGULAR,
    BAND_SEPARATE,
    BAND_UNGRADED,
    PayoutCalculator,
    detailed_group,
    final_amount,
    grade_amount,
    group_score_overage,
    is_gradeable,
    score_and_payout_rate,
    work_rate_band,
)


class TestScoreAndPayoutRate:
    """Tests for score_and_payout_rate()."""

    def test_known_grade(self):
        assert score_and_payout_rate("A+", DEFAULT_GRADING_SCALE) == (130, 130)

    def test_no_grade(self):
        assert score_and_payout_rate(None, DEFAULT_GRADING_SCALE) == (0, 0)

    def test_unknown_grade_raises(self):
        with pytest.raises(ValidationError) as exc_info:
            score_and_payout_rate("Z", DEFAULT_GRADING_SCALE)

        assert exc_info.value.field == "grade"


class TestAmounts:
    """Tests for grade_amount() and final_amount()."""

    def test_grade_b_at_ninety_percent(self):
        """B, base 1,000,000, rate 0.9 -> 1,000,000 and 900,000."""
        amount = grade_amount(1_000_000, 100)

        assert amount == Decimal(1_000_000)
        assert final_amount(amount, 0.9) == 900_000

    def test_grade_s_amount(self):
        assert grade_amount(2_000_000, 150) == Decimal(3_000_000)

    def test_full_rate_keeps_grade_amount(self):
        assert final_amount(Decimal("1234567"), 1.0) == 1_234_567

    def test_zero_rate(self):
        assert final_amount(Decimal(1_000_000), 0) == 0

    def test_rounds_half_up(self):
        """1,000,001 x 0.5 = 500,000.5 rounds up."""
        assert final_amount(Decimal(1_000_001), 0.5) == 500_001

    def test_rounding_unit(self):
        assert final_amount(Decimal(1_000_000), 0.95454, rounding_unit=10) == 954_540
        assert final_amount(Decimal(1_000_000), 0.954545, rounding_unit=10) == 954_550

    def test_final_amount_monotone_in_rate(self):
        amount = grade_amount(3_150_000, 105)
        rates = [0, 0.25, 0.5, 0.7, 0.875, 1]
        finals = [final_amount(amount, r) for r in rates]

        assert finals == sorted(finals)
        assert finals[-1] == int(amount)


class TestBands:
    """Tests for gradeability and work-rate bands."""

    @pytest.mark.parametrize(
        "rate,expected",
        [(1.0, BAND_REGULAR), (0.7, BAND_REGULAR), (0.69, BAND_SEPARATE), (0.25, BAND_SEPARATE), (0.24, BAND_UNGRADED)],
    )
    def test_work_rate_band(self, rate, expected):
        assert work_rate_band(rate) == expected

    def test_is_gradeable_boundary(self):
        assert is_gradeable(0.25)
        assert not is_gradeable(0.2499)

    @pytest.mark.parametrize(
        "rate,expected",
        [
            (0.95, "70% 이상"),
            (0.70, "70% 이상"),
            (0.68, "65 ~ 69%"),
            (0.25, "25 ~ 29%"),
            (0.10, "25% 미만"),
        ],
    )
    def test_detailed_group(self, rate, expected):
        assert detailed_group(rate) == expected


class TestGroupScoreOverage:
    """Tests for group_score_overage()."""

    def test_within_budget(self):
        assert group_score_overage("영업1팀", [100, 100, 95]) is None

    def test_exactly_budget(self):
        assert group_score_overage("영업1팀", [150, 50]) is None

    def test_over_budget(self):
        overage = group_score_overage("영업1팀", [150, 130, 100])

        assert overage.total_score == 380
        assert overage.max_score == 300
        assert overage.overage == 80
        assert str(overage) == "<영업1팀> 그룹의 점수가 <80>점 초과하였습니다."


class TestPayoutCalculator:
    """Tests for PayoutCalculator.recompute()."""

    @pytest.fixture
    def calculator(self, settings):
        return PayoutCalculator(settings)

    def _result(self, **kwargs) -> EvaluationResult:
        values = {"employee_id": "E001", "year": 2024, "month": 1, "base_amount": 1_000_000}
        values.update(kwargs)
        return EvaluationResult(**values)

    def test_recompute_graded(self, calculator):
        result = calculator.recompute(self._result(grade="B", work_rate=0.9), DEFAULT_GRADING_SCALE)

        assert result.score == 100
        assert result.payout_rate_percent == 100
        assert result.grade_amount == Decimal(1_000_000)
        assert result.final_amount == 900_000
        assert result.work_rate_band == BAND_REGULAR
        assert result.detailed_group == "70% 이상"

    def test_recompute_ungradeable_clears_grade(self, calculator):
        """Below 25% the grade is dropped and the score is 0."""
        result = calculator.recompute(self._result(grade="S", work_rate=0.2), DEFAULT_GRADING_SCALE)

        assert result.grade is None
        assert result.score == 0
        assert result.final_amount == 0
        assert result.work_rate_band == BAND_UNGRADED

    def test_recompute_grade_missing_from_scale(self, calculator):
        scale = {"B": DEFAULT_GRADING_SCALE["B"]}

        result = calculator.recompute(self._result(grade="S", work_rate=1.0), scale)

        assert result.grade is None
        assert result.score == 0

    def test_recompute_does_not_mutate_input(self, calculator):
        original = self._result(grade="A", work_rate=1.0)

        calculator.recompute(original, DEFAULT_GRADING_SCALE)

        assert original.score == 0

    def test_rounding_unit_from_settings(self):
        settings = EvaluationSettings(_env_file=None, EVAL_PAYOUT_ROUNDING_UNIT=1000)
        calculator = PayoutCalculator(settings)

        result = calculator.recompute(
            self._result(grade="B", work_rate=0.9996, base_amount=1_000_000),
            DEFAULT_GRADING_SCALE,
        )

        assert result.final_amount == 1_000_000
