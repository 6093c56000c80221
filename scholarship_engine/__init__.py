"""Scholarship eligibility evaluation and approval prediction."""

from scholarship_engine.models.domain import (
    ApplicantProfile,
    BooleanCondition,
    EligibilityCriteria,
    HistoricalDecision,
    ListCondition,
    RangeCondition,
    TrainingSample,
    UnsupportedCondition,
)
from scholarship_engine.service import (
    ScholarshipEngine,
    build_training_samples,
    evaluate_eligibility,
    predict,
    train_all,
    train_model,
)

__version__ = "1.0.0"

__all__ = [
    "ApplicantProfile",
    "BooleanCondition",
    "EligibilityCriteria",
    "HistoricalDecision",
    "ListCondition",
    "RangeCondition",
    "ScholarshipEngine",
    "TrainingSample",
    "UnsupportedCondition",
    "build_training_samples",
    "evaluate_eligibility",
    "predict",
    "train_all",
    "train_model",
]
