"""Set-membership criteria evaluator (year level, affiliation, bracket, origin)."""

from typing import Callable, Optional

from scholarship_engine.core.enums import CheckKind, CriterionCategory, EvaluationStage
from scholarship_engine.services.rule_engine.base import (
    CheckResult,
    CriterionEvaluator,
    EvaluationContext,
)
from scholarship_engine.services.rule_engine.normalizers import (
    matches_any,
    normalize_college,
    normalize_st_bracket,
    normalize_text,
    normalize_year_level,
)


YEAR_LEVEL_CRITERION = "Year Level"
COLLEGE_CRITERION = "College"
COURSE_CRITERION = "Course"


class ListEvaluator(CriterionEvaluator):
    """
    Evaluator for allow-list criteria.

    Handles:
    - eligible_classifications: year level aliases ("1st Year" = "Freshman")
    - eligible_colleges: college codes or full names
    - eligible_courses, eligible_majors: substring matching
    - eligible_st_brackets: bracket codes or full names ("FDS")
    - eligible_provinces, eligible_citizenship: case-insensitive

    An empty list is a wildcard and produces no check. A non-empty list with
    no applicant value fails.
    """

    stage = EvaluationStage.HARD_CONSTRAINTS
    kind = CheckKind.LIST
    category = CriterionCategory.ACADEMIC

    def evaluate(self, context: EvaluationContext) -> list[CheckResult]:
        """
        Evaluate every non-empty allow-list.

        Args:
            context: EvaluationContext containing profile and criteria

        Returns:
            List of CheckResults in a fixed criterion order
        """
        checks = [
            self._evaluate_classification(context),
            self._evaluate_college(context),
            self._evaluate_course(context),
            self._evaluate_major(context),
            self._evaluate_st_bracket(context),
            self._evaluate_province(context),
            self._evaluate_citizenship(context),
        ]
        return [c for c in checks if c is not None]

    def _evaluate_membership(
        self,
        criterion: str,
        category: CriterionCategory,
        value: Optional[str],
        allowed: tuple[str, ...],
        canonical: Callable[[Optional[str]], Optional[str]] = normalize_text,
        fuzzy: bool = False,
        label: str = "Value",
    ) -> Optional[CheckResult]:
        """Shared allow-list comparison with the wildcard and absent-field rules."""
        if not allowed:
            return None

        if value is None:
            return self._result(
                criterion,
                False,
                category,
                applicant_value=None,
                required_value=list(allowed),
                notes=f"{label} not provided in profile",
            )

        passed = matches_any(value, allowed, canonical=canonical, fuzzy=fuzzy)
        notes = (
            f"{label} is eligible for this scholarship"
            if passed
            else f"{label} '{value}' is not in the eligible list"
        )
        return self._result(
            criterion,
            passed,
            category,
            applicant_value=value,
            required_value=list(allowed),
            notes=notes,
        )

    def _evaluate_classification(self, context: EvaluationContext) -> Optional[CheckResult]:
        return self._evaluate_membership(
            YEAR_LEVEL_CRITERION,
            CriterionCategory.ACADEMIC,
            context.profile.classification,
            context.criteria.eligible_classifications,
            canonical=normalize_year_level,
            label="Year level",
        )

    def _evaluate_college(self, context: EvaluationContext) -> Optional[CheckResult]:
        return self._evaluate_membership(
            COLLEGE_CRITERION,
            CriterionCategory.ACADEMIC,
            context.profile.college,
            context.criteria.eligible_colleges,
            canonical=normalize_college,
            label="College",
        )

    def _evaluate_course(self, context: EvaluationContext) -> Optional[CheckResult]:
        return self._evaluate_membership(
            COURSE_CRITERION,
            CriterionCategory.ACADEMIC,
            context.profile.course,
            context.criteria.eligible_courses,
            fuzzy=True,
            label="Course",
        )

    def _evaluate_major(self, context: EvaluationContext) -> Optional[CheckResult]:
        return self._evaluate_membership(
            "Major",
            CriterionCategory.ACADEMIC,
            context.profile.major,
            context.criteria.eligible_majors,
            fuzzy=True,
            label="Major",
        )

    def _evaluate_st_bracket(self, context: EvaluationContext) -> Optional[CheckResult]:
        return self._evaluate_membership(
            "ST Bracket",
            CriterionCategory.FINANCIAL,
            context.profile.st_bracket,
            context.criteria.eligible_st_brackets,
            canonical=normalize_st_bracket,
            label="ST bracket",
        )

    def _evaluate_province(self, context: EvaluationContext) -> Optional[CheckResult]:
        return self._evaluate_membership(
            "Province of Origin",
            CriterionCategory.LOCATION,
            context.profile.province_of_origin,
            context.criteria.eligible_provinces,
            label="Province",
        )

    def _evaluate_citizenship(self, context: EvaluationContext) -> Optional[CheckResult]:
        return self._evaluate_membership(
            "Citizenship",
            CriterionCategory.PERSONAL,
            context.profile.citizenship,
            context.criteria.eligible_citizenship,
            label="Citizenship",
        )
