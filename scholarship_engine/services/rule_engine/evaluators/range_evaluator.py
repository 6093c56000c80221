"""Numeric range criteria evaluator (GWA, income, units, household size)."""

import math
from typing import Optional

from scholarship_engine.core.enums import CheckKind, CriterionCategory, EvaluationStage
from scholarship_engine.services.rule_engine.base import (
    CheckResult,
    CriterionEvaluator,
    EvaluationContext,
)

GWA_BEST = 1.0
GWA_WORST = 5.0


def _describe_bounds(low: Optional[float], high: Optional[float], fmt: str) -> str:
    if low is not None and high is not None:
        return f"{low:{fmt}} - {high:{fmt}}"
    if high is not None:
        return f"<= {high:{fmt}}"
    return f">= {low:{fmt}}"


class RangeEvaluator(CriterionEvaluator):
    """
    Evaluator for inclusive numeric bounds.

    Handles:
    - GWA: floor defaults to 1.0 when only a ceiling is given
    - Annual family income: floor defaults to 0 when only a ceiling is given
    - Units enrolled and units passed: minimums
    - Household size: minimum and/or maximum

    A bound that is not set leaves the dimension unconstrained. A set bound
    with no applicant value fails.
    """

    stage = EvaluationStage.HARD_CONSTRAINTS
    kind = CheckKind.RANGE
    category = CriterionCategory.ACADEMIC

    def evaluate(self, context: EvaluationContext) -> list[CheckResult]:
        """
        Evaluate all range criteria that have at least one bound set.

        Args:
            context: EvaluationContext containing profile and criteria

        Returns:
            List of CheckResults in GWA, income, units, household order
        """
        checks = [
            self._evaluate_gwa(context),
            self._evaluate_income(context),
            self._evaluate_units_enrolled(context),
            self._evaluate_units_passed(context),
            self._evaluate_household_size(context),
        ]
        return [c for c in checks if c is not None]

    def _evaluate_bounds(
        self,
        criterion: str,
        category: CriterionCategory,
        value: Optional[float],
        low: Optional[float],
        high: Optional[float],
        required: str,
        fmt: str,
        missing_note: str,
    ) -> CheckResult:
        """Shared inclusive [low, high] comparison."""
        if value is None:
            return self._result(
                criterion,
                False,
                category,
                applicant_value=None,
                required_value=required,
                notes=missing_note,
            )

        floor = low if low is not None else -math.inf
        ceiling = high if high is not None else math.inf

        if value < floor:
            passed = False
            notes = f"{value:{fmt}} is below the minimum of {floor:{fmt}}"
        elif value > ceiling:
            passed = False
            notes = f"{value:{fmt}} exceeds the maximum of {ceiling:{fmt}}"
        else:
            passed = True
            notes = "Within the required range"

        return self._result(
            criterion,
            passed,
            category,
            applicant_value=value,
            required_value=required,
            notes=notes,
        )

    def _evaluate_gwa(self, context: EvaluationContext) -> Optional[CheckResult]:
        """
        Evaluate the GWA window on the inverted scale (1.0 best, 5.0 worst).

        Criteria format: min_gwa and/or max_gwa
        """
        criteria = context.criteria
        if criteria.min_gwa is None and criteria.max_gwa is None:
            return None

        low = criteria.min_gwa if criteria.min_gwa is not None else GWA_BEST
        high = criteria.max_gwa if criteria.max_gwa is not None else GWA_WORST

        return self._evaluate_bounds(
            "GWA Requirement",
            CriterionCategory.ACADEMIC,
            context.profile.gwa,
            low,
            high,
            required=_describe_bounds(criteria.min_gwa, high, ".2f"),
            fmt=".2f",
            missing_note="GWA not provided in profile",
        )

    def _evaluate_income(self, context: EvaluationContext) -> Optional[CheckResult]:
        """
        Evaluate annual family income bounds.

        Criteria format: min_annual_family_income and/or max_annual_family_income
        """
        criteria = context.criteria
        low = criteria.min_annual_family_income
        high = criteria.max_annual_family_income
        if low is None and high is None:
            return None

        return self._evaluate_bounds(
            "Annual Family Income",
            CriterionCategory.FINANCIAL,
            context.profile.annual_family_income,
            low if low is not None else 0.0,
            high,
            required=_describe_bounds(low, high, ",.2f"),
            fmt=",.2f",
            missing_note="Annual family income not provided in profile",
        )

    def _evaluate_units_enrolled(self, context: EvaluationContext) -> Optional[CheckResult]:
        """Criteria format: min_units_enrolled"""
        minimum = context.criteria.min_units_enrolled
        if minimum is None:
            return None

        return self._evaluate_bounds(
            "Units Enrolled",
            CriterionCategory.ACADEMIC,
            context.profile.units_enrolled,
            minimum,
            None,
            required=f">= {minimum}",
            fmt="",
            missing_note="Units enrolled not provided in profile",
        )

    def _evaluate_units_passed(self, context: EvaluationContext) -> Optional[CheckResult]:
        """Criteria format: min_units_passed"""
        minimum = context.criteria.min_units_passed
        if minimum is None:
            return None

        return self._evaluate_bounds(
            "Units Passed",
            CriterionCategory.ACADEMIC,
            context.profile.units_passed,
            minimum,
            None,
            required=f">= {minimum}",
            fmt="",
            missing_note="Units passed not provided in profile",
        )

    def _evaluate_household_size(self, context: EvaluationContext) -> Optional[CheckResult]:
        """Criteria format: min_household_size and/or max_household_size"""
        criteria = context.criteria
        low = criteria.min_household_size
        high = criteria.max_household_size
        if low is None and high is None:
            return None

        return self._evaluate_bounds(
            "Household Size",
            CriterionCategory.FINANCIAL,
            context.profile.household_size,
            low,
            high,
            required=_describe_bounds(low, high, ""),
            fmt="",
            missing_note="Household size not provided in profile",
        )
