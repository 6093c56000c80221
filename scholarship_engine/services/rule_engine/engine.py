"""Criteria evaluator orchestrating the three evaluation stages."""

import logging
from typing import Dict, List

from scholarship_engine.core.enums import (
    CheckKind,
    CriterionCategory,
    EvaluationStage,
    ImportanceLevel,
)
from scholarship_engine.models.domain.applicant import ApplicantProfile
from scholarship_engine.models.domain.criteria import EligibilityCriteria, RangeBounds
from scholarship_engine.models.schemas.eligibility import (
    CriterionCheck,
    EligibilityResult,
    StageSummary,
)
from scholarship_engine.services.rule_engine.base import (
    CheckResult,
    CriterionEvaluator,
    EvaluationContext,
)
from scholarship_engine.services.rule_engine.custom_conditions import (
    CustomConditionEvaluator,
)
from scholarship_engine.services.rule_engine.evaluators import (
    BooleanEvaluator,
    ListEvaluator,
    RangeEvaluator,
)

logger = logging.getLogger(__name__)


class CriteriaEvaluator:
    """
    Evaluates one applicant profile against one criteria set.

    This class:
    - Maintains a registry of built-in criterion evaluators
    - Runs every stage exhaustively, never short-circuiting
    - Delegates custom conditions to CustomConditionEvaluator
    - Aggregates the eligibility gate and the passed-check percentage

    The gate is the AND of every range, list and boolean check plus every
    active required custom condition. Preferred and optional conditions are
    reported without affecting it.
    """

    def __init__(self, custom_evaluator: CustomConditionEvaluator | None = None):
        """Initialize the evaluator with its default registry."""
        self._evaluators: Dict[CheckKind, CriterionEvaluator] = {}
        self._custom_evaluator = custom_evaluator or CustomConditionEvaluator()
        self._register_default_evaluators()

    def _register_default_evaluators(self):
        """Register built-in evaluators in evaluation order."""
        self._evaluators[CheckKind.RANGE] = RangeEvaluator()
        self._evaluators[CheckKind.LIST] = ListEvaluator()
        self._evaluators[CheckKind.BOOLEAN] = BooleanEvaluator()

    def register_evaluator(self, kind: CheckKind, evaluator: CriterionEvaluator) -> None:
        """
        Replace the evaluator for a built-in criterion family.

        Args:
            kind: The check kind to handle
            evaluator: The evaluator instance
        """
        self._evaluators[kind] = evaluator

    def evaluate(
        self, profile: ApplicantProfile, criteria: EligibilityCriteria
    ) -> EligibilityResult:
        """
        Evaluate every criterion and build the eligibility report.

        Args:
            profile: Applicant snapshot
            criteria: Offering criteria set

        Returns:
            EligibilityResult with per-check detail and stage breakdown
        """
        context = EvaluationContext(profile=profile, criteria=criteria)
        checks: List[CheckResult] = []
        diagnostics: List[str] = []

        for kind, evaluator in self._evaluators.items():
            try:
                checks.extend(evaluator.evaluate(context))
            except Exception as e:
                # A broken evaluator fails its own family, not the whole evaluation
                logger.exception("Evaluator for %s criteria raised", kind.value)
                diagnostics.append(f"{kind.value}: evaluation error: {e}")
                checks.append(
                    CheckResult(
                        criterion=f"{kind.value.title()} Criteria",
                        passed=False,
                        kind=kind,
                        stage=evaluator.stage,
                        category=evaluator.category,
                        notes=f"Evaluation error: {e}",
                        diagnostic=str(e),
                    )
                )

        checks.extend(self._evaluate_custom_conditions(context, diagnostics))

        is_eligible = all(c.passed for c in checks if c.is_gating)
        counted = [
            c
            for c in checks
            if c.kind != CheckKind.CUSTOM or c.importance == ImportanceLevel.REQUIRED
        ]
        if counted:
            percentage = sum(1 for c in counted if c.passed) / len(counted)
        else:
            percentage = 1.0

        logger.debug(
            "Evaluated offering %s: eligible=%s, %d checks, %.2f passed",
            criteria.offering_id,
            is_eligible,
            len(checks),
            percentage,
        )

        return EligibilityResult(
            offering_id=criteria.offering_id,
            is_eligible=is_eligible,
            checks=tuple(self._to_schema(c) for c in checks),
            hard_constraints=self._summarize(EvaluationStage.HARD_CONSTRAINTS, checks),
            boolean_exclusions=self._summarize(EvaluationStage.BOOLEAN_EXCLUSIONS, checks),
            custom_conditions=self._summarize(EvaluationStage.CUSTOM_CONDITIONS, checks),
            eligibility_percentage=percentage,
            diagnostics=tuple(diagnostics),
        )

    def _evaluate_custom_conditions(
        self, context: EvaluationContext, diagnostics: List[str]
    ) -> List[CheckResult]:
        """Evaluate active custom conditions in authored order."""
        results: List[CheckResult] = []
        for condition in context.criteria.custom_conditions:
            if not condition.is_active:
                continue

            outcome = self._custom_evaluator.evaluate(condition, context.profile)
            if outcome.diagnostic:
                diagnostics.append(outcome.diagnostic)

            results.append(
                CheckResult(
                    criterion=condition.display_name,
                    passed=outcome.passed,
                    kind=CheckKind.CUSTOM,
                    stage=EvaluationStage.CUSTOM_CONDITIONS,
                    category=CriterionCategory.CUSTOM,
                    applicant_value=outcome.applicant_value,
                    required_value=self._describe_condition(condition),
                    notes="Condition met" if outcome.passed else "Condition not met",
                    importance=condition.importance,
                    diagnostic=outcome.diagnostic,
                )
            )
        return results

    @staticmethod
    def _describe_condition(condition) -> str:
        value = condition.value
        if isinstance(value, RangeBounds):
            value = f"{value.min} - {value.max}"
        elif isinstance(value, tuple):
            value = ", ".join(str(v) for v in value)
        return f"{condition.student_field} {condition.operator} {value}"

    @staticmethod
    def _summarize(stage: EvaluationStage, checks: List[CheckResult]) -> StageSummary:
        in_stage = [c for c in checks if c.stage == stage]
        return StageSummary(
            stage=stage,
            passed=all(c.passed for c in in_stage if c.is_gating),
            total=len(in_stage),
            passed_count=sum(1 for c in in_stage if c.passed),
            failed_criteria=tuple(c.criterion for c in in_stage if not c.passed),
        )

    @staticmethod
    def _to_schema(check: CheckResult) -> CriterionCheck:
        return CriterionCheck(
            criterion=check.criterion,
            passed=check.passed,
            applicant_value=check.applicant_value,
            required_value=check.required_value,
            notes=check.notes,
            stage=check.stage,
            kind=check.kind,
            category=check.category,
            importance=check.importance,
            diagnostic=check.diagnostic,
        )
