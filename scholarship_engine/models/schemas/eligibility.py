"""Pydantic schemas for eligibility evaluation results."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from scholarship_engine.core.enums import (
    CheckKind,
    CriterionCategory,
    EvaluationStage,
    ImportanceLevel,
)


# ==================== Check Schemas ====================


class CriterionCheck(BaseModel):
    """Outcome of a single eligibility criterion."""

    model_config = ConfigDict(frozen=True)

    criterion: str
    passed: bool
    applicant_value: Any = None
    required_value: Any = None
    notes: Optional[str] = None
    stage: EvaluationStage
    kind: CheckKind
    category: CriterionCategory
    importance: ImportanceLevel = ImportanceLevel.REQUIRED
    diagnostic: Optional[str] = None

    @property
    def is_gating(self) -> bool:
        """Whether a failure of this check blocks eligibility."""
        return self.importance == ImportanceLevel.REQUIRED


class StageSummary(BaseModel):
    """Per-stage roll-up of checks."""

    model_config = ConfigDict(frozen=True)

    stage: EvaluationStage
    passed: bool
    total: int = Field(0, ge=0)
    passed_count: int = Field(0, ge=0)
    failed_criteria: tuple[str, ...] = ()


# ==================== Result Schemas ====================


class EligibilityResult(BaseModel):
    """
    Structured report of a profile evaluated against one criteria set.

    `checks` holds every evaluated criterion in evaluation order. Inactive
    custom conditions never appear.
    """

    model_config = ConfigDict(frozen=True)

    offering_id: Optional[str] = None
    is_eligible: bool
    checks: tuple[CriterionCheck, ...] = ()
    hard_constraints: StageSummary
    boolean_exclusions: StageSummary
    custom_conditions: StageSummary
    eligibility_percentage: float = Field(1.0, ge=0.0, le=1.0)
    diagnostics: tuple[str, ...] = ()

    @property
    def failed_checks(self) -> tuple[CriterionCheck, ...]:
        return tuple(c for c in self.checks if not c.passed)

    def stage(self, stage: EvaluationStage) -> StageSummary:
        """Return the summary for one evaluation stage."""
        return {
            EvaluationStage.HARD_CONSTRAINTS: self.hard_constraints,
            EvaluationStage.BOOLEAN_EXCLUSIONS: self.boolean_exclusions,
            EvaluationStage.CUSTOM_CONDITIONS: self.custom_conditions,
        }[stage]

    def check(self, criterion: str) -> Optional[CriterionCheck]:
        """Look up a check by criterion name."""
        for c in self.checks:
            if c.criterion == criterion:
                return c
        return None
