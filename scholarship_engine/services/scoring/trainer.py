"""Logistic-regression training with offering and global model scopes."""

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

from scholarship_engine.config import Settings, settings as default_settings
from scholarship_engine.core.enums import ModelScope
from scholarship_engine.core.exceptions import (
    FeatureSchemaMismatchError,
    InsufficientDataError,
)
from scholarship_engine.models.domain.training import HistoricalDecision, TrainingSample
from scholarship_engine.models.schemas.model_weights import (
    CrossValidationMetrics,
    ModelWeights,
)
from scholarship_engine.services.rule_engine.engine import CriteriaEvaluator
from scholarship_engine.services.scoring.features import (
    FEATURE_NAMES,
    FEATURE_SCHEMA_VERSION,
    FeatureExtractor,
)
from scholarship_engine.services.scoring.metrics import (
    classification_metrics,
    cross_validation_summary,
)
from scholarship_engine.services.scoring.model_store import ModelStore
from scholarship_engine.services.scoring.numerics import log_loss, sigmoid_array

logger = logging.getLogger(__name__)


# Used when no model has been trained yet: strong weight on grades and
# overall eligibility, moderate weight on financial need and completeness.
DOMAIN_KNOWLEDGE_WEIGHTS = ModelWeights(
    intercept=-4.0,
    weights={
        "gwa_score": 3.0,
        "income_score": 1.5,
        "year_level_match": 0.5,
        "affiliation_match": 0.5,
        "completeness_score": 1.0,
        "eligibility_percentage": 2.0,
    },
    feature_names=FEATURE_NAMES,
    training_size=0,
    trained_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    scope=ModelScope.GLOBAL,
    version=FEATURE_SCHEMA_VERSION,
    build="domain",
)


@dataclass
class FitResult:
    """Raw output of gradient descent."""

    weights: np.ndarray
    intercept: float
    iterations: int
    converged: bool
    final_loss: float


@dataclass
class TrainingReport:
    """
    Outcome of a train_all run.

    Attributes:
        global_model: Global weights, or None if there were too few samples
        offering_models: Offering id to trained weights
        skipped_offerings: Offering id to sample count, for offerings below MIN_SAMPLES
        failed_offerings: Offering id to error message
        total_samples: Samples in the global snapshot
    """

    global_model: Optional[ModelWeights] = None
    offering_models: Dict[str, ModelWeights] = field(default_factory=dict)
    skipped_offerings: Dict[str, int] = field(default_factory=dict)
    failed_offerings: Dict[str, str] = field(default_factory=dict)
    total_samples: int = 0

    @property
    def used_fallback(self) -> bool:
        """True when predictions without an offering model will use domain weights."""
        return self.global_model is None


def build_training_samples(
    decisions: Iterable[HistoricalDecision],
    evaluator: Optional[CriteriaEvaluator] = None,
    extractor: Optional[FeatureExtractor] = None,
) -> List[TrainingSample]:
    """
    Convert historical decisions into labeled feature vectors.

    Only approved (label 1) and rejected (label 0) decisions are kept; every
    other status, known or not, is skipped.

    Args:
        decisions: Historical decision records
        evaluator: Criteria evaluator (default instance if omitted)
        extractor: Feature extractor (default instance if omitted)

    Returns:
        One TrainingSample per approved or rejected decision, in input order
    """
    evaluator = evaluator or CriteriaEvaluator()
    extractor = extractor or FeatureExtractor()

    samples = []
    skipped = 0
    for decision in decisions:
        label = decision.label
        if label is None:
            skipped += 1
            continue

        result = evaluator.evaluate(decision.profile, decision.criteria)
        vector = extractor.extract(decision.profile, decision.criteria, result)
        samples.append(
            TrainingSample(
                features=vector.values,
                label=label,
                offering_id=decision.offering_id,
            )
        )

    if skipped:
        logger.debug("Skipped %d decisions without an approved/rejected outcome", skipped)
    return samples


class ModelTrainer:
    """
    Fits logistic-regression weights by full-batch gradient descent.

    Settings (learning rate, iteration cap, convergence threshold, L2
    strength, split, seed, decision threshold, minimum samples, folds and
    class weighting) come from the Settings object passed in, or the
    module-level settings.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings

    def train(
        self,
        samples: Sequence[TrainingSample],
        scope: ModelScope = ModelScope.GLOBAL,
        offering_id: Optional[str] = None,
    ) -> ModelWeights:
        """
        Train a model on labeled samples.

        Samples are shuffled with a fixed seed and split into train and test
        sets. Weights are fitted on the train split; metrics are computed on
        the test split, or on the train split when the test split is empty.
        With CV_FOLDS of 2 or more, k-fold metrics over all samples are
        attached as metrics.cross_validation.

        Args:
            samples: Labeled feature vectors in FEATURE_NAMES order
            scope: Offering or global
            offering_id: Required for offering scope

        Returns:
            Immutable ModelWeights

        Raises:
            InsufficientDataError: If fewer than MIN_SAMPLES samples are given
            FeatureSchemaMismatchError: If a sample has the wrong feature count
        """
        scope = ModelScope(scope)
        samples = tuple(samples)
        label = f"{scope.value}:{offering_id}" if offering_id else scope.value

        if len(samples) < self.config.MIN_SAMPLES:
            raise InsufficientDataError(len(samples), self.config.MIN_SAMPLES, scope=label)

        for sample in samples:
            if len(sample.features) != len(FEATURE_NAMES):
                raise FeatureSchemaMismatchError(
                    FEATURE_NAMES, tuple(f"feature_{i}" for i in range(len(sample.features)))
                )

        X = np.array([s.features for s in samples], dtype=float)
        y = np.array([s.label for s in samples], dtype=float)

        train_idx, test_idx = self._split(len(samples))
        X_train, y_train = X[train_idx], y[train_idx]

        logger.info(
            "Training %s model on %d samples (%d train / %d test)",
            label,
            len(samples),
            len(train_idx),
            len(test_idx),
        )

        fit = self._fit(X_train, y_train)

        if len(test_idx) > 0:
            X_eval, y_eval, evaluated_on = X[test_idx], y[test_idx], "test"
        else:
            X_eval, y_eval, evaluated_on = X_train, y_train, "train"

        probabilities = sigmoid_array(X_eval @ fit.weights + fit.intercept)
        metrics = classification_metrics(
            y_eval,
            probabilities,
            threshold=self.config.DECISION_THRESHOLD,
            evaluated_on=evaluated_on,
        )
        cross_validation = self._cross_validate(X, y)
        if cross_validation is not None:
            metrics = metrics.model_copy(update={"cross_validation": cross_validation})

        approved = int(y.sum())
        trained_at = datetime.now(timezone.utc)
        weights = ModelWeights(
            intercept=fit.intercept,
            weights={name: float(w) for name, w in zip(FEATURE_NAMES, fit.weights)},
            feature_names=FEATURE_NAMES,
            training_size=len(train_idx),
            approved_count=approved,
            rejected_count=len(samples) - approved,
            metrics=metrics,
            trained_at=trained_at,
            scope=scope,
            offering_id=offering_id if scope == ModelScope.OFFERING else None,
            version=FEATURE_SCHEMA_VERSION,
            build=f"{trained_at:%Y%m%d%H%M%S%f}",
            iterations=fit.iterations,
            converged=fit.converged,
            final_loss=fit.final_loss,
            class_weighted=self.config.CLASS_WEIGHTING,
            feature_importance=self._feature_importance(fit.weights),
        )

        logger.info(
            "Trained %s model: accuracy=%.3f f1=%.3f iterations=%d converged=%s",
            label,
            metrics.accuracy,
            metrics.f1,
            fit.iterations,
            fit.converged,
        )
        return weights

    def train_all(
        self,
        samples: Iterable[TrainingSample],
        store: Optional[ModelStore] = None,
    ) -> TrainingReport:
        """
        Train offering models where data allows, plus a global model.

        Offerings with at least MIN_SAMPLES samples get their own model,
        trained in a thread pool. The global model is trained on a snapshot
        of every sample. Each trained model is published to the store, if
        one is given, as soon as it is ready.

        Args:
            samples: Labeled samples across all offerings
            store: Optional store to publish models to

        Returns:
            TrainingReport
        """
        snapshot = tuple(samples)
        report = TrainingReport(total_samples=len(snapshot))

        by_offering: Dict[str, List[TrainingSample]] = defaultdict(list)
        for sample in snapshot:
            if sample.offering_id:
                by_offering[sample.offering_id].append(sample)

        eligible = {}
        for offering_id, offering_samples in by_offering.items():
            if len(offering_samples) >= self.config.MIN_SAMPLES:
                eligible[offering_id] = tuple(offering_samples)
            else:
                report.skipped_offerings[offering_id] = len(offering_samples)

        if report.skipped_offerings:
            logger.info(
                "%d offerings below %d samples will use the global model",
                len(report.skipped_offerings),
                self.config.MIN_SAMPLES,
            )

        if eligible:
            workers = max(1, min(self.config.MAX_TRAINING_WORKERS, len(eligible)))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = {
                    offering_id: pool.submit(
                        self.train, offering_samples, ModelScope.OFFERING, offering_id
                    )
                    for offering_id, offering_samples in eligible.items()
                }
                for offering_id, future in futures.items():
                    try:
                        weights = future.result()
                    except (InsufficientDataError, FeatureSchemaMismatchError) as e:
                        logger.warning("Offering %s not trained: %s", offering_id, e)
                        report.failed_offerings[offering_id] = str(e)
                        continue
                    report.offering_models[offering_id] = weights
                    if store is not None:
                        store.publish(weights)

        try:
            report.global_model = self.train(snapshot, ModelScope.GLOBAL)
        except InsufficientDataError as e:
            logger.warning("%s; predictions will use domain-knowledge weights", e)
        else:
            if store is not None:
                store.publish(report.global_model)

        return report

    # ==================== Internals ====================

    def _split(self, n: int) -> tuple[np.ndarray, np.ndarray]:
        """Seeded shuffle, then TRAIN_TEST_SPLIT of the samples for training."""
        rng = np.random.default_rng(self.config.RANDOM_SEED)
        order = rng.permutation(n)
        cut = int(n * self.config.TRAIN_TEST_SPLIT)
        cut = max(1, min(n, cut))
        return order[:cut], order[cut:]

    def _fit(self, X: np.ndarray, y: np.ndarray) -> FitResult:
        """
        Gradient descent on mean negative log-likelihood.

        The L2 penalty applies to feature weights only, never the intercept.
        With CLASS_WEIGHTING each sample's error is scaled by its class
        weight. Stops early when the L2 norm of the full gradient drops below
        CONVERGENCE_THRESHOLD.
        """
        m, n_features = X.shape
        w = np.zeros(n_features)
        b = 0.0
        lr = self.config.LEARNING_RATE
        l2 = self.config.L2_PENALTY
        sample_weight = self._class_weights(y) if self.config.CLASS_WEIGHTING else np.ones(m)

        converged = False
        iterations = 0
        for iterations in range(1, self.config.MAX_ITERATIONS + 1):
            error = (sigmoid_array(X @ w + b) - y) * sample_weight
            grad_w = X.T @ error / m + l2 * w
            grad_b = float(np.mean(error))

            grad_norm = float(np.sqrt(np.dot(grad_w, grad_w) + grad_b * grad_b))
            if grad_norm < self.config.CONVERGENCE_THRESHOLD:
                converged = True
                break

            w -= lr * grad_w
            b -= lr * grad_b

        loss = log_loss(y, sigmoid_array(X @ w + b), sample_weight)
        final_loss = loss + 0.5 * l2 * float(np.dot(w, w))
        return FitResult(
            weights=w,
            intercept=float(b),
            iterations=iterations,
            converged=converged,
            final_loss=final_loss,
        )

    @staticmethod
    def _class_weights(y: np.ndarray) -> np.ndarray:
        """n / (2 * class count) per sample, so the minority class weighs more."""
        m = len(y)
        positives = int(np.sum(y == 1))
        negatives = m - positives
        positive_weight = m / (2 * max(1, positives))
        negative_weight = m / (2 * max(1, negatives))
        return np.where(y == 1, positive_weight, negative_weight)

    def _cross_validate(
        self, X: np.ndarray, y: np.ndarray
    ) -> Optional[CrossValidationMetrics]:
        """
        K-fold cross-validation over every sample.

        Folds come from the same seeded shuffle as the holdout split and
        differ in size by at most one. Returns None when CV_FOLDS is below 2
        or there are fewer samples than folds.
        """
        k = self.config.CV_FOLDS
        n = len(y)
        if k < 2:
            return None
        if n < k:
            logger.debug("Skipping %d-fold cross-validation with %d samples", k, n)
            return None

        rng = np.random.default_rng(self.config.RANDOM_SEED)
        folds = np.array_split(rng.permutation(n), k)

        fold_metrics = []
        for i, held_out in enumerate(folds):
            train_idx = np.concatenate([fold for j, fold in enumerate(folds) if j != i])
            fit = self._fit(X[train_idx], y[train_idx])
            probabilities = sigmoid_array(X[held_out] @ fit.weights + fit.intercept)
            fold_metrics.append(
                classification_metrics(
                    y[held_out],
                    probabilities,
                    threshold=self.config.DECISION_THRESHOLD,
                    evaluated_on=f"fold {i + 1}",
                )
            )

        summary = cross_validation_summary(fold_metrics)
        logger.info(
            "%d-fold cross-validation: accuracy=%.3f (std %.3f)",
            k,
            summary.accuracy,
            summary.accuracy_std,
        )
        return summary

    @staticmethod
    def _feature_importance(weights: np.ndarray) -> Dict[str, float]:
        """|w| normalized to sum to 1 (all zeros when every weight is 0)."""
        magnitudes = np.abs(weights)
        total = float(magnitudes.sum())
        if total == 0:
            return {name: 0.0 for name in FEATURE_NAMES}
        return {name: float(v / total) for name, v in zip(FEATURE_NAMES, magnitudes)}
