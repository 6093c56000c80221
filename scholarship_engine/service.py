"""Public entry points for eligibility evaluation, training and prediction."""

import logging
from typing import Iterable, List, Optional, Sequence

from scholarship_engine.config import Settings, settings as default_settings
from scholarship_engine.core.enums import ModelScope
from scholarship_engine.core.exceptions import ModelNotFoundError
from scholarship_engine.models.domain.applicant import ApplicantProfile
from scholarship_engine.models.domain.criteria import EligibilityCriteria
from scholarship_engine.models.domain.training import HistoricalDecision, TrainingSample
from scholarship_engine.models.schemas.eligibility import EligibilityResult
from scholarship_engine.models.schemas.model_weights import ModelWeights
from scholarship_engine.models.schemas.prediction import PredictionResult
from scholarship_engine.services.rule_engine.engine import CriteriaEvaluator
from scholarship_engine.services.scoring.features import FeatureExtractor
from scholarship_engine.services.scoring.model_store import InMemoryModelStore, ModelStore
from scholarship_engine.services.scoring.predictor import PredictionEngine
from scholarship_engine.services.scoring.trainer import (
    DOMAIN_KNOWLEDGE_WEIGHTS,
    ModelTrainer,
    TrainingReport,
    build_training_samples as _build_training_samples,
)

logger = logging.getLogger(__name__)


class ScholarshipEngine:
    """
    Facade over the criteria evaluator, trainer, model store and predictor.

    Models trained through this object are published to its store.
    Prediction resolves the offering model, then the global model, then
    falls back to DOMAIN_KNOWLEDGE_WEIGHTS.
    """

    def __init__(
        self,
        store: Optional[ModelStore] = None,
        config: Optional[Settings] = None,
    ):
        self.config = config or default_settings
        self.store = store if store is not None else InMemoryModelStore()
        self.evaluator = CriteriaEvaluator()
        self.extractor = FeatureExtractor()
        self.trainer = ModelTrainer(self.config)
        self.predictor = PredictionEngine(
            self.config, evaluator=self.evaluator, extractor=self.extractor
        )

    def evaluate_eligibility(
        self, profile: ApplicantProfile, criteria: EligibilityCriteria
    ) -> EligibilityResult:
        return self.evaluator.evaluate(profile, criteria)

    def build_training_samples(
        self, decisions: Iterable[HistoricalDecision]
    ) -> List[TrainingSample]:
        return _build_training_samples(decisions, self.evaluator, self.extractor)

    def train_model(
        self,
        scope: ModelScope,
        samples: Sequence[TrainingSample],
        offering_id: Optional[str] = None,
    ) -> ModelWeights:
        """
        Train one model and publish it.

        Raises:
            InsufficientDataError: If there are fewer than MIN_SAMPLES samples;
                the store is left untouched
        """
        weights = self.trainer.train(samples, scope, offering_id)
        self.store.publish(weights)
        return weights

    def train_all(self, decisions: Iterable[HistoricalDecision]) -> TrainingReport:
        """Build samples from decisions and train offering and global models."""
        samples = self.build_training_samples(decisions)
        return self.trainer.train_all(samples, store=self.store)

    def resolve_model(self, offering_id: Optional[str] = None) -> ModelWeights:
        try:
            return self.store.resolve(offering_id)
        except ModelNotFoundError:
            logger.info(
                "No trained model for offering %s; using domain-knowledge weights",
                offering_id,
            )
            return DOMAIN_KNOWLEDGE_WEIGHTS

    def predict(
        self,
        profile: ApplicantProfile,
        criteria: EligibilityCriteria,
        offering_id: Optional[str] = None,
    ) -> PredictionResult:
        """
        Predict approval probability using the best available model.

        Args:
            profile: Applicant snapshot
            criteria: Offering criteria set
            offering_id: Offering to resolve a model for; defaults to
                criteria.offering_id

        Returns:
            PredictionResult
        """
        offering_id = offering_id or criteria.offering_id
        weights = self.resolve_model(offering_id)
        return self.predictor.predict(profile, criteria, weights)


# Global engine instance used by the module-level functions
_engine: Optional[ScholarshipEngine] = None


def get_engine() -> ScholarshipEngine:
    """Get the shared engine, creating it on first use."""
    global _engine
    if _engine is None:
        _engine = ScholarshipEngine()
    return _engine


def reset_engine() -> None:
    """Drop the shared engine and its models. Useful for testing."""
    global _engine
    _engine = None


def evaluate_eligibility(
    profile: ApplicantProfile, criteria: EligibilityCriteria
) -> EligibilityResult:
    return get_engine().evaluate_eligibility(profile, criteria)


def train_model(
    scope: ModelScope,
    samples: Sequence[TrainingSample],
    offering_id: Optional[str] = None,
) -> ModelWeights:
    return get_engine().train_model(scope, samples, offering_id)


def predict(
    profile: ApplicantProfile,
    criteria: EligibilityCriteria,
    offering_id: Optional[str] = None,
) -> PredictionResult:
    return get_engine().predict(profile, criteria, offering_id)


def train_all(decisions: Iterable[HistoricalDecision]) -> TrainingReport:
    return get_engine().train_all(decisions)


def build_training_samples(decisions: Iterable[HistoricalDecision]) -> List[TrainingSample]:
    return get_engine().build_training_samples(decisions)
