"""Approval probability with a per-factor explanation."""

import logging
from typing import Dict, Optional

from scholarship_engine.config import Settings, settings as default_settings
from scholarship_engine.core.enums import ConfidenceLevel, ContributionDirection
from scholarship_engine.models.domain.applicant import ApplicantProfile
from scholarship_engine.models.domain.criteria import EligibilityCriteria
from scholarship_engine.models.schemas.eligibility import EligibilityResult
from scholarship_engine.models.schemas.model_weights import ModelWeights
from scholarship_engine.models.schemas.prediction import (
    PredictionFactor,
    PredictionResult,
    SubFactor,
)
from scholarship_engine.services.rule_engine.engine import CriteriaEvaluator
from scholarship_engine.services.scoring.features import (
    FEATURE_GROUPS,
    FeatureExtractor,
    FeatureVector,
    feature_label,
)
from scholarship_engine.services.scoring.numerics import sigmoid

logger = logging.getLogger(__name__)

LIKELY_APPROVED = "likely_approved"
NEEDS_IMPROVEMENT = "needs_improvement"

# (minimum probability, label), checked top down
MATCH_LEVELS: tuple[tuple[float, str], ...] = (
    (0.75, "Strong Match"),
    (0.60, "Good Match"),
    (0.45, "Moderate Match"),
    (0.0, "Weak Match"),
)

RECOMMENDATIONS: Dict[str, str] = {
    "gwa_score": (
        "Your GWA is the main factor holding this application back. "
        "Raising your grades would improve your chances the most."
    ),
    "income_score": (
        "Your family income is close to or above this scholarship's ceiling. "
        "Consider offerings aimed at your income bracket."
    ),
    "year_level_match": (
        "Your year level is not among those this scholarship targets. "
        "Check whether you will qualify in a later term."
    ),
    "affiliation_match": (
        "Your college or course is outside this scholarship's focus. "
        "Look for offerings open to your program."
    ),
    "completeness_score": (
        "Your application is missing required documents or profile details. "
        "Completing them is the quickest way to improve your chances."
    ),
    "eligibility_percentage": (
        "You do not meet several of this scholarship's criteria. "
        "Review the failed checks before applying."
    ),
}

# (minimum probability, message) when no factor pulls the score down
ENCOURAGEMENTS: tuple[tuple[float, str], ...] = (
    (0.75, "Strong profile for this scholarship. Submit a complete application."),
    (0.50, "Good chances. Double-check your documents before submitting."),
    (0.0, "No single factor stands out as a weakness. Strengthen your overall profile."),
)


def confidence_for(probability: float) -> ConfidenceLevel:
    """
    Confidence band for a probability.

    high:   p >= 0.7 or p <= 0.3
    medium: 0.4 <= p < 0.7 or 0.3 < p <= 0.4
    low:    anything else (no probability falls here with these bands)
    """
    if probability >= 0.7 or probability <= 0.3:
        return ConfidenceLevel.HIGH
    if 0.4 <= probability < 0.7 or 0.3 < probability <= 0.4:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def match_level_for(probability: float) -> str:
    for minimum, label in MATCH_LEVELS:
        if probability >= minimum:
            return label
    return MATCH_LEVELS[-1][1]


class PredictionEngine:
    """
    Applies model weights to a feature vector.

    z = intercept + sum(feature_i * weight_i), p = sigmoid(z). Every
    feature's contribution is reported, so the intercept plus the sum of
    group contributions reproduces z.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        evaluator: Optional[CriteriaEvaluator] = None,
        extractor: Optional[FeatureExtractor] = None,
    ):
        self.config = config or default_settings
        self.evaluator = evaluator or CriteriaEvaluator()
        self.extractor = extractor or FeatureExtractor()

    def predict(
        self,
        profile: ApplicantProfile,
        criteria: EligibilityCriteria,
        weights: ModelWeights,
        eligibility_result: Optional[EligibilityResult] = None,
    ) -> PredictionResult:
        """
        Predict approval for a profile against an offering.

        Args:
            profile: Applicant snapshot
            criteria: Offering criteria set
            weights: Model to apply
            eligibility_result: Precomputed evaluation, if the caller has one

        Returns:
            PredictionResult

        Raises:
            FeatureSchemaMismatchError: If the model's feature list differs
                from the extractor's
        """
        if eligibility_result is None:
            eligibility_result = self.evaluator.evaluate(profile, criteria)
        features = self.extractor.extract(profile, criteria, eligibility_result)
        return self.score(
            features,
            weights,
            offering_id=criteria.offering_id,
            is_eligible=eligibility_result.is_eligible,
        )

    def score(
        self,
        features: FeatureVector,
        weights: ModelWeights,
        offering_id: Optional[str] = None,
        is_eligible: Optional[bool] = None,
    ) -> PredictionResult:
        """
        Score an already extracted feature vector.

        Raises:
            FeatureSchemaMismatchError: If the vector and model disagree on features
        """
        features.ensure_schema(weights.feature_names)

        values = features.as_dict()
        epsilon = self.config.NEUTRAL_EPSILON

        contributions = {
            name: values[name] * weights.weights[name] for name in weights.feature_names
        }
        z_score = weights.intercept + sum(contributions.values())
        probability = sigmoid(z_score)

        factors = []
        for group, names in FEATURE_GROUPS.items():
            sub_factors = [
                SubFactor(
                    name=name,
                    label=feature_label(name),
                    value=values[name],
                    weight=weights.weights[name],
                    contribution=contributions[name],
                    direction=self._direction(contributions[name], epsilon),
                )
                for name in names
                if name in contributions
            ]
            if not sub_factors:
                continue
            sub_factors.sort(key=lambda s: abs(s.contribution), reverse=True)
            net = sum(s.contribution for s in sub_factors)
            factors.append(
                PredictionFactor(
                    group=group,
                    contribution=net,
                    direction=self._direction(net, epsilon),
                    sub_factors=tuple(sub_factors),
                )
            )
        factors.sort(key=lambda f: abs(f.contribution), reverse=True)

        result = PredictionResult(
            probability=probability,
            z_score=z_score,
            intercept=weights.intercept,
            factors=tuple(factors),
            confidence=confidence_for(probability),
            recommendation=self._recommend(contributions, probability, epsilon),
            predicted_outcome=(
                LIKELY_APPROVED
                if probability >= self.config.DECISION_THRESHOLD
                else NEEDS_IMPROVEMENT
            ),
            match_level=match_level_for(probability),
            model_scope=weights.scope,
            model_version=weights.version,
            model_build=weights.build,
            offering_id=offering_id,
            features=values,
            is_eligible=is_eligible,
        )

        logger.debug(
            "Predicted offering %s with %s model %s: z=%.4f p=%.4f",
            offering_id,
            weights.scope.value,
            weights.label,
            z_score,
            probability,
        )
        return result

    @staticmethod
    def _direction(contribution: float, epsilon: float) -> ContributionDirection:
        if contribution > epsilon:
            return ContributionDirection.POSITIVE
        if contribution < -epsilon:
            return ContributionDirection.NEGATIVE
        return ContributionDirection.NEUTRAL

    @staticmethod
    def _recommend(
        contributions: Dict[str, float], probability: float, epsilon: float
    ) -> str:
        """Advice keyed by the most negative contribution, else by probability."""
        negative = {k: v for k, v in contributions.items() if v < -epsilon}
        if negative:
            worst = min(negative, key=lambda k: (negative[k], k))
            return RECOMMENDATIONS.get(worst, RECOMMENDATIONS["eligibility_percentage"])

        for minimum, message in ENCOURAGEMENTS:
            if probability >= minimum:
                return message
        return ENCOURAGEMENTS[-1][1]
