"""Pydantic schemas for approval predictions and their explanation."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from scholarship_engine.core.enums import (
    ConfidenceLevel,
    ContributionDirection,
    FactorGroup,
    ModelScope,
)


class SubFactor(BaseModel):
    """Contribution of a single feature to the z-score."""

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    value: float
    weight: float
    contribution: float
    direction: ContributionDirection


class PredictionFactor(BaseModel):
    """A display group of features with its net contribution."""

    model_config = ConfigDict(frozen=True)

    group: FactorGroup
    contribution: float
    direction: ContributionDirection
    sub_factors: tuple[SubFactor, ...] = ()


class PredictionResult(BaseModel):
    """
    Approval probability with a transparent breakdown.

    `intercept + sum(factor.contribution for factor in factors)` equals
    `z_score` up to floating point error.
    """

    model_config = ConfigDict(frozen=True)

    probability: float = Field(..., ge=0.0, le=1.0)
    z_score: float
    intercept: float
    factors: tuple[PredictionFactor, ...] = ()
    confidence: ConfidenceLevel
    recommendation: str
    predicted_outcome: str
    match_level: str
    model_scope: ModelScope
    model_version: int
    model_build: str = ""
    offering_id: Optional[str] = None
    features: dict[str, float] = Field(default_factory=dict)
    is_eligible: Optional[bool] = None
