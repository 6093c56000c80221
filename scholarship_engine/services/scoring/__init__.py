"""Approval scoring: features, training, model storage and prediction."""

from scholarship_engine.services.scoring.features import (
    FEATURE_NAMES,
    FEATURE_SCHEMA_VERSION,
    FeatureExtractor,
    FeatureVector,
)
from scholarship_engine.services.scoring.model_store import InMemoryModelStore, ModelStore
from scholarship_engine.services.scoring.predictor import PredictionEngine
from scholarship_engine.services.scoring.trainer import (
    DOMAIN_KNOWLEDGE_WEIGHTS,
    ModelTrainer,
    TrainingReport,
    build_training_samples,
)

__all__ = [
    "DOMAIN_KNOWLEDGE_WEIGHTS",
    "FEATURE_NAMES",
    "FEATURE_SCHEMA_VERSION",
    "FeatureExtractor",
    "FeatureVector",
    "InMemoryModelStore",
    "ModelStore",
    "ModelTrainer",
    "PredictionEngine",
    "TrainingReport",
    "build_training_samples",
]
