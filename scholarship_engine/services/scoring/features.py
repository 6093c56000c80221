"""Feature engineering for the approval model."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict

import numpy as np

from scholarship_engine.core.enums import FactorGroup
from scholarship_engine.core.exceptions import FeatureSchemaMismatchError
from scholarship_engine.models.domain.applicant import ApplicantProfile
from scholarship_engine.models.domain.criteria import EligibilityCriteria
from scholarship_engine.models.schemas.eligibility import EligibilityResult
from scholarship_engine.services.rule_engine.evaluators.list_evaluator import (
    COLLEGE_CRITERION,
    COURSE_CRITERION,
    YEAR_LEVEL_CRITERION,
)

logger = logging.getLogger(__name__)

# Bump whenever FEATURE_NAMES changes; models trained on another list are rejected
FEATURE_SCHEMA_VERSION = 1

FEATURE_NAMES: tuple[str, ...] = (
    "gwa_score",
    "income_score",
    "year_level_match",
    "affiliation_match",
    "completeness_score",
    "eligibility_percentage",
)

FEATURE_LABELS: Dict[str, str] = {
    "gwa_score": "Academic Performance (GWA)",
    "income_score": "Financial Need",
    "year_level_match": "Year Level",
    "affiliation_match": "College and Course",
    "completeness_score": "Profile Completeness",
    "eligibility_percentage": "Overall Eligibility",
}

FEATURE_GROUPS: Dict[FactorGroup, tuple[str, ...]] = {
    FactorGroup.ACADEMIC: ("gwa_score", "year_level_match"),
    FactorGroup.FINANCIAL: ("income_score",),
    FactorGroup.PROGRAM_FIT: ("affiliation_match",),
    FactorGroup.APPLICATION_QUALITY: ("completeness_score",),
    FactorGroup.ELIGIBILITY: ("eligibility_percentage",),
}

GWA_BEST = 1.0
GWA_WORST = 5.0

# Profile fields standing in for documents when an offering lists none
CORE_PROFILE_FIELDS: tuple[str, ...] = (
    "gwa",
    "classification",
    "college",
    "course",
    "annual_family_income",
    "st_bracket",
    "citizenship",
)


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class FeatureVector:
    """
    Named, fixed-order feature values.

    Attributes:
        names: Feature names, in model order
        values: Feature values aligned with names
        diagnostics: Features that could not be computed and were zeroed
    """

    names: tuple[str, ...]
    values: tuple[float, ...]
    diagnostics: tuple[str, ...] = field(default=())

    def __post_init__(self):
        if len(self.names) != len(self.values):
            raise ValueError(
                f"Feature vector has {len(self.names)} names but {len(self.values)} values"
            )

    def as_dict(self) -> Dict[str, float]:
        return dict(zip(self.names, self.values))

    def as_array(self) -> np.ndarray:
        return np.asarray(self.values, dtype=float)

    def __getitem__(self, name: str) -> float:
        return self.as_dict()[name]

    def ensure_schema(self, expected: tuple[str, ...]) -> None:
        """
        Check that this vector was built for the given feature list.

        Raises:
            FeatureSchemaMismatchError: If names or order differ
        """
        if tuple(self.names) != tuple(expected):
            raise FeatureSchemaMismatchError(tuple(expected), tuple(self.names))


class FeatureExtractor:
    """
    Maps (profile, criteria, eligibility result) to a FeatureVector.

    Each feature is computed independently. A feature that raises is set
    to 0.0 and recorded in the vector's diagnostics; the rest of the vector
    is still produced.
    """

    def __init__(self):
        self._features: Dict[str, Callable[..., float]] = {
            "gwa_score": self._gwa_score,
            "income_score": self._income_score,
            "year_level_match": self._year_level_match,
            "affiliation_match": self._affiliation_match,
            "completeness_score": self._completeness_score,
            "eligibility_percentage": self._eligibility_percentage,
        }

    def extract(
        self,
        profile: ApplicantProfile,
        criteria: EligibilityCriteria,
        eligibility_result: EligibilityResult,
    ) -> FeatureVector:
        """
        Compute all features in FEATURE_NAMES order.

        Args:
            profile: Applicant snapshot
            criteria: Offering criteria set
            eligibility_result: Result of evaluating the profile against criteria

        Returns:
            FeatureVector with every value in [0, 1]
        """
        values = []
        diagnostics = []
        for name in FEATURE_NAMES:
            try:
                value = float(self._features[name](profile, criteria, eligibility_result))
            except Exception as e:
                logger.warning("Feature %s could not be computed: %s", name, e)
                diagnostics.append(f"{name}: {e}")
                value = 0.0
            values.append(value)

        return FeatureVector(
            names=FEATURE_NAMES,
            values=tuple(values),
            diagnostics=tuple(diagnostics),
        )

    # ==================== Features ====================

    @staticmethod
    def _gwa_score(
        profile: ApplicantProfile,
        criteria: EligibilityCriteria,
        result: EligibilityResult,
    ) -> float:
        """(ceiling - gwa) / (ceiling - 1.0); lower GWA scores higher."""
        if profile.gwa is None:
            return 0.0
        ceiling = criteria.max_gwa if criteria.max_gwa is not None else GWA_WORST
        if ceiling <= GWA_BEST:
            return 1.0 if profile.gwa <= GWA_BEST else 0.0
        return _clamp((ceiling - profile.gwa) / (ceiling - GWA_BEST))

    @staticmethod
    def _income_score(
        profile: ApplicantProfile,
        criteria: EligibilityCriteria,
        result: EligibilityResult,
    ) -> float:
        """1 - income / ceiling; 1 when the offering has no income ceiling."""
        ceiling = criteria.max_annual_family_income
        if ceiling is None:
            return 1.0
        if profile.annual_family_income is None:
            return 0.0
        if ceiling <= 0:
            return 1.0 if profile.annual_family_income <= 0 else 0.0
        return _clamp(1.0 - profile.annual_family_income / ceiling)

    @staticmethod
    def _year_level_match(
        profile: ApplicantProfile,
        criteria: EligibilityCriteria,
        result: EligibilityResult,
    ) -> float:
        return _check_passed(result, YEAR_LEVEL_CRITERION)

    @staticmethod
    def _affiliation_match(
        profile: ApplicantProfile,
        criteria: EligibilityCriteria,
        result: EligibilityResult,
    ) -> float:
        """Both college and course allow-lists satisfied."""
        return min(
            _check_passed(result, COLLEGE_CRITERION),
            _check_passed(result, COURSE_CRITERION),
        )

    @staticmethod
    def _completeness_score(
        profile: ApplicantProfile,
        criteria: EligibilityCriteria,
        result: EligibilityResult,
    ) -> float:
        """Share of required documents on file, or of core profile fields."""
        if criteria.required_documents:
            required = set(criteria.required_documents)
            return len(required & profile.documents_submitted) / len(required)

        provided = sum(
            1 for name in CORE_PROFILE_FIELDS if getattr(profile, name) is not None
        )
        return provided / len(CORE_PROFILE_FIELDS)

    @staticmethod
    def _eligibility_percentage(
        profile: ApplicantProfile,
        criteria: EligibilityCriteria,
        result: EligibilityResult,
    ) -> float:
        return _clamp(result.eligibility_percentage)


def _check_passed(result: EligibilityResult, criterion: str) -> float:
    """1.0 when the check passed or was never evaluated (wildcard)."""
    check = result.check(criterion)
    if check is None:
        return 1.0
    return 1.0 if check.passed else 0.0


def feature_label(name: str) -> str:
    return FEATURE_LABELS.get(name, name.replace("_", " ").title())
