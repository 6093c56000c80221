"""Domain records supplied by collaborators."""

from scholarship_engine.models.domain.applicant import ApplicantProfile
from scholarship_engine.models.domain.criteria import (
    BooleanCondition,
    CustomCondition,
    EligibilityCriteria,
    ListCondition,
    RangeBounds,
    RangeCondition,
    UnsupportedCondition,
)
from scholarship_engine.models.domain.training import HistoricalDecision, TrainingSample

__all__ = [
    "ApplicantProfile",
    "BooleanCondition",
    "CustomCondition",
    "EligibilityCriteria",
    "HistoricalDecision",
    "ListCondition",
    "RangeBounds",
    "RangeCondition",
    "TrainingSample",
    "UnsupportedCondition",
]
