"""Rule engine foundation with evaluation context, check results, and base evaluator."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from scholarship_engine.core.enums import (
    CheckKind,
    CriterionCategory,
    EvaluationStage,
    ImportanceLevel,
)
from scholarship_engine.models.domain.applicant import ApplicantProfile
from scholarship_engine.models.domain.criteria import EligibilityCriteria


@dataclass
class EvaluationContext:
    """
    Evaluation context passed to every criterion evaluator.

    Attributes:
        profile: The applicant snapshot being evaluated
        criteria: The offering's criteria set
    """

    profile: ApplicantProfile
    criteria: EligibilityCriteria


@dataclass
class CheckResult:
    """
    Result of evaluating a single criterion against a profile.

    Attributes:
        criterion: Display name of the criterion
        passed: Whether the criterion is satisfied
        kind: Shape of the check (range, list, boolean, custom)
        stage: Evaluation stage the check belongs to
        category: Display grouping
        applicant_value: Value read from the profile (None when absent)
        required_value: Human-readable requirement
        notes: Human-readable explanation of the result
        importance: Whether failure blocks eligibility
        diagnostic: Fail-closed reason, if the check could not be evaluated
    """

    criterion: str
    passed: bool
    kind: CheckKind
    stage: EvaluationStage
    category: CriterionCategory
    applicant_value: Any = None
    required_value: Any = None
    notes: Optional[str] = None
    importance: ImportanceLevel = ImportanceLevel.REQUIRED
    diagnostic: Optional[str] = None

    @property
    def is_gating(self) -> bool:
        return self.importance == ImportanceLevel.REQUIRED


class CriterionEvaluator(ABC):
    """
    Abstract base class for criterion evaluators using the Strategy pattern.

    Each concrete evaluator owns one family of built-in criteria and returns
    a CheckResult for every criterion that is active in the criteria set.
    Inactive criteria (unset bounds, empty allow-lists, False flags) produce
    no check at all.
    """

    stage: EvaluationStage
    kind: CheckKind
    # Grouping for the failed check reported when the evaluator itself raises
    category: CriterionCategory = CriterionCategory.STATUS

    @abstractmethod
    def evaluate(self, context: EvaluationContext) -> list[CheckResult]:
        """
        Evaluate every active criterion of this family.

        Args:
            context: EvaluationContext containing profile and criteria

        Returns:
            One CheckResult per active criterion, in a fixed order
        """
        pass

    def _result(
        self,
        criterion: str,
        passed: bool,
        category: CriterionCategory,
        applicant_value: Any = None,
        required_value: Any = None,
        notes: Optional[str] = None,
        diagnostic: Optional[str] = None,
    ) -> CheckResult:
        """Build a CheckResult stamped with this evaluator's stage and kind."""
        return CheckResult(
            criterion=criterion,
            passed=passed,
            kind=self.kind,
            stage=self.stage,
            category=category,
            applicant_value=applicant_value,
            required_value=required_value,
            notes=notes,
            diagnostic=diagnostic,
        )
