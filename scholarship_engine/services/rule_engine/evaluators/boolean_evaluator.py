"""Boolean requirement and exclusion evaluator."""

from typing import Optional

from scholarship_engine.core.enums import CheckKind, CriterionCategory, EvaluationStage
from scholarship_engine.services.rule_engine.base import (
    CheckResult,
    CriterionEvaluator,
    EvaluationContext,
)

# (criteria flag, profile flag, criterion name, triggered note)
EXCLUSIONS: tuple[tuple[str, str, str, str], ...] = (
    (
        "must_not_have_other_scholarship",
        "has_existing_scholarship",
        "No Other Scholarship",
        "Already holds another scholarship",
    ),
    (
        "must_not_have_thesis_grant",
        "has_thesis_grant",
        "No Existing Thesis Grant",
        "Already holds a thesis grant",
    ),
    (
        "must_not_have_disciplinary_action",
        "has_disciplinary_action",
        "No Disciplinary Action",
        "Has a disciplinary record",
    ),
    (
        "must_not_have_failing_grade",
        "has_failing_grade",
        "No Failing Grade",
        "Has a failing grade on record",
    ),
    (
        "must_not_have_grade_of_4",
        "has_grade_of_4",
        "No Grade of 4",
        "Has a conditional grade of 4 on record",
    ),
    (
        "must_not_have_incomplete_grade",
        "has_incomplete_grade",
        "No Incomplete Grade",
        "Has an incomplete grade on record",
    ),
)

# (criteria flag, profile flag, criterion name, unmet note)
REQUIREMENTS: tuple[tuple[str, str, str, str], ...] = (
    (
        "requires_approved_thesis_outline",
        "has_approved_thesis_outline",
        "Approved Thesis Outline",
        "Thesis outline has not been approved",
    ),
    (
        "must_be_graduating",
        "is_graduating",
        "Graduating Student",
        "Must be a graduating student",
    ),
)

FILIPINO = "filipino"


class BooleanEvaluator(CriterionEvaluator):
    """
    Evaluator for status flags.

    Handles:
    - "must not have X" exclusions: fail only when the applicant flag is True
    - requirements (approved thesis outline, graduating): pass only when True
    - filipino_only: citizenship must be Filipino
    """

    stage = EvaluationStage.BOOLEAN_EXCLUSIONS
    kind = CheckKind.BOOLEAN
    category = CriterionCategory.STATUS

    def evaluate(self, context: EvaluationContext) -> list[CheckResult]:
        """
        Evaluate every flag switched on in the criteria.

        Args:
            context: EvaluationContext containing profile and criteria

        Returns:
            List of CheckResults: requirements, exclusions, then citizenship
        """
        checks: list[Optional[CheckResult]] = []
        for rule in REQUIREMENTS:
            checks.append(self._evaluate_requirement(context, *rule))
        for rule in EXCLUSIONS:
            checks.append(self._evaluate_exclusion(context, *rule))
        checks.append(self._evaluate_filipino_only(context))
        return [c for c in checks if c is not None]

    def _evaluate_exclusion(
        self,
        context: EvaluationContext,
        criteria_flag: str,
        profile_flag: str,
        criterion: str,
        triggered_note: str,
    ) -> Optional[CheckResult]:
        if not getattr(context.criteria, criteria_flag):
            return None

        value = getattr(context.profile, profile_flag)
        triggered = value is True
        return self._result(
            criterion,
            not triggered,
            CriterionCategory.STATUS,
            applicant_value=value,
            required_value=False,
            notes=triggered_note if triggered else "Requirement met",
        )

    def _evaluate_requirement(
        self,
        context: EvaluationContext,
        criteria_flag: str,
        profile_flag: str,
        criterion: str,
        unmet_note: str,
    ) -> Optional[CheckResult]:
        if not getattr(context.criteria, criteria_flag):
            return None

        value = getattr(context.profile, profile_flag)
        passed = value is True
        return self._result(
            criterion,
            passed,
            CriterionCategory.STATUS,
            applicant_value=value,
            required_value=True,
            notes="Requirement met" if passed else unmet_note,
        )

    def _evaluate_filipino_only(self, context: EvaluationContext) -> Optional[CheckResult]:
        if not context.criteria.filipino_only:
            return None

        citizenship = context.profile.citizenship
        passed = citizenship is not None and citizenship.strip().casefold() == FILIPINO
        return self._result(
            "Filipino Citizenship",
            passed,
            CriterionCategory.PERSONAL,
            applicant_value=citizenship,
            required_value="Filipino",
            notes="Is a Filipino citizen" if passed else "Must be a Filipino citizen",
        )
