"""Pydantic schemas for engine results."""

from scholarship_engine.models.schemas.eligibility import (
    CriterionCheck,
    EligibilityResult,
    StageSummary,
)
from scholarship_engine.models.schemas.model_weights import (
    ConfusionMatrix,
    CrossValidationMetrics,
    ModelMetrics,
    ModelWeights,
)
from scholarship_engine.models.schemas.prediction import (
    PredictionFactor,
    PredictionResult,
    SubFactor,
)

__all__ = [
    "ConfusionMatrix",
    "CrossValidationMetrics",
    "CriterionCheck",
    "EligibilityResult",
    "ModelMetrics",
    "ModelWeights",
    "PredictionFactor",
    "PredictionResult",
    "StageSummary",
    "SubFactor",
]
