"""Tests for model training and scope selection."""

import numpy as np
import pytest

from conftest import make_decisions, make_samples
from scholarship_engine.config import Settings
from scholarship_engine.core.enums import DecisionStatus, ModelScope
from scholarship_engine.core.exceptions import (
    FeatureSchemaMismatchError,
    InsufficientDataError,
)
from scholarship_engine.models.domain.training import HistoricalDecision, TrainingSample
from scholarship_engine.services.scoring.features import FEATURE_NAMES, FEATURE_SCHEMA_VERSION
from scholarship_engine.services.scoring.model_store import InMemoryModelStore
from scholarship_engine.services.scoring.trainer import (
    DOMAIN_KNOWLEDGE_WEIGHTS,
    ModelTrainer,
    build_training_samples,
)

pytestmark = pytest.mark.training


class TestInsufficientData:
    def test_below_minimum_raises(self, test_settings):
        trainer = ModelTrainer(test_settings)
        with pytest.raises(InsufficientDataError) as exc_info:
            trainer.train(make_samples(9))
        assert exc_info.value.available == 9
        assert exc_info.value.required == 10

    def test_empty_raises(self, test_settings):
        with pytest.raises(InsufficientDataError):
            ModelTrainer(test_settings).train([])

    def test_domain_weights_cover_every_feature(self):
        assert DOMAIN_KNOWLEDGE_WEIGHTS.feature_names == FEATURE_NAMES
        assert DOMAIN_KNOWLEDGE_WEIGHTS.scope == ModelScope.GLOBAL


class TestTrain:
    def test_learns_positive_gwa_weight(self, test_settings):
        weights = ModelTrainer(test_settings).train(make_samples(40))
        assert weights.weights["gwa_score"] > 0
        assert weights.feature_names == FEATURE_NAMES
        assert weights.scope == ModelScope.GLOBAL
        assert weights.offering_id is None

    def test_split_sizes(self, test_settings):
        weights = ModelTrainer(test_settings).train(make_samples(40))
        assert weights.training_size == 32
        assert weights.metrics.confusion_matrix.total == 8
        assert weights.metrics.evaluated_on == "test"

    def test_deterministic(self, test_settings):
        trainer = ModelTrainer(test_settings)
        first = trainer.train(make_samples(30))
        second = trainer.train(make_samples(30))
        assert dict(first.weights) == dict(second.weights)
        assert first.intercept == second.intercept

    def test_feature_importance_normalized(self, test_settings):
        weights = ModelTrainer(test_settings).train(make_samples(30))
        assert sum(weights.feature_importance.values()) == pytest.approx(1.0)
        assert all(v >= 0 for v in weights.feature_importance.values())

    def test_offering_scope(self, test_settings):
        weights = ModelTrainer(test_settings).train(
            make_samples(20, "A"), ModelScope.OFFERING, "A"
        )
        assert weights.scope == ModelScope.OFFERING
        assert weights.offering_id == "A"

    def test_l2_shrinks_weights(self, test_settings):
        plain = ModelTrainer(test_settings).train(make_samples(40))
        penalized = ModelTrainer(
            test_settings.model_copy(update={"L2_PENALTY": 0.1})
        ).train(make_samples(40))
        plain_norm = np.linalg.norm(plain.coefficient_vector())
        penalized_norm = np.linalg.norm(penalized.coefficient_vector())
        assert penalized_norm < plain_norm

    def test_converges_immediately_at_optimum(self, test_settings):
        samples = [
            TrainingSample(features=(0.0,) * len(FEATURE_NAMES), label=i % 2)
            for i in range(10)
        ]
        settings = test_settings.model_copy(update={"TRAIN_TEST_SPLIT": 1.0})
        weights = ModelTrainer(settings).train(samples)
        assert weights.converged is True
        assert weights.iterations == 1
        assert weights.intercept == 0.0

    def test_empty_test_split_evaluates_on_train(self):
        settings = Settings(MIN_SAMPLES=1, TRAIN_TEST_SPLIT=1.0, MAX_ITERATIONS=50)
        weights = ModelTrainer(settings).train(make_samples(5))
        assert weights.metrics.evaluated_on == "train"
        assert weights.metrics.confusion_matrix.total == 5

    def test_wrong_feature_count(self, test_settings):
        samples = [TrainingSample(features=(0.5, 0.5), label=i % 2) for i in range(10)]
        with pytest.raises(FeatureSchemaMismatchError):
            ModelTrainer(test_settings).train(samples)


class TestTrainAll:
    def test_scope_selection(self, test_settings):
        samples = make_samples(12, "A") + make_samples(5, "B")
        store = InMemoryModelStore()
        report = ModelTrainer(test_settings).train_all(samples, store=store)

        assert set(report.offering_models) == {"A"}
        assert report.skipped_offerings == {"B": 5}
        assert report.global_model is not None
        assert report.total_samples == 17
        assert store.get("A") is report.offering_models["A"]
        assert store.get("B") is None
        assert store.resolve("B") is report.global_model

    def test_too_little_data_for_global(self, test_settings):
        store = InMemoryModelStore()
        report = ModelTrainer(test_settings).train_all(make_samples(4, "A"), store=store)
        assert report.global_model is None
        assert report.used_fallback is True
        assert store.get_global() is None

    def test_parallel_offerings(self, test_settings):
        samples = []
        for offering_id in ("A", "B", "C"):
            samples.extend(make_samples(15, offering_id))
        report = ModelTrainer(test_settings).train_all(samples)
        assert set(report.offering_models) == {"A", "B", "C"}
        for offering_id, weights in report.offering_models.items():
            assert weights.offering_id == offering_id


class TestBuildTrainingSamples:
    def test_only_terminal_decisions(self):
        decisions = make_decisions(10, "A")
        pending = decisions[0].model_copy(update={"status": DecisionStatus.SUBMITTED})
        samples = build_training_samples(decisions + [pending])
        assert len(samples) == 10
        assert all(s.offering_id == "A" for s in samples)

    def test_labels_follow_status(self):
        decisions = make_decisions(10, "A")
        samples = build_training_samples(decisions)
        expected = [1 if d.status == DecisionStatus.APPROVED else 0 for d in decisions]
        assert [s.label for s in samples] == expected
        assert all(len(s.features) == len(FEATURE_NAMES) for s in samples)

    @pytest.mark.parametrize(
        "status",
        ["waitlisted", "shortlisted", "interview_scheduled", "documents_required", "draft"],
    )
    def test_workflow_statuses_are_skipped(self, status):
        decisions = make_decisions(10, "A")
        in_progress = HistoricalDecision(
            offering_id="A",
            profile=decisions[0].profile,
            criteria=decisions[0].criteria,
            status=status,
        )
        assert in_progress.status == DecisionStatus(status)
        assert in_progress.label is None
        assert len(build_training_samples(decisions + [in_progress])) == 10

    def test_unrecognized_status_is_kept_and_skipped(self):
        decisions = make_decisions(10, "A")
        archived = HistoricalDecision(
            offering_id="A",
            profile=decisions[0].profile,
            criteria=decisions[0].criteria,
            status="archived_by_registrar",
        )
        assert archived.status == "archived_by_registrar"
        assert len(build_training_samples(decisions + [archived])) == 10


class TestCrossValidation:
    def test_fold_metrics_attached(self, test_settings):
        weights = ModelTrainer(test_settings).train(make_samples(40))
        cv = weights.metrics.cross_validation
        assert cv is not None
        assert cv.folds == 5
        assert len(cv.fold_accuracies) == 5
        assert cv.accuracy == pytest.approx(np.mean(cv.fold_accuracies))
        assert cv.accuracy_std == pytest.approx(np.std(cv.fold_accuracies))
        assert cv.confusion_matrix.total == 40

    def test_disabled(self, test_settings):
        settings = test_settings.model_copy(update={"CV_FOLDS": 0})
        weights = ModelTrainer(settings).train(make_samples(40))
        assert weights.metrics.cross_validation is None

    def test_skipped_with_fewer_samples_than_folds(self, test_settings):
        settings = test_settings.model_copy(update={"CV_FOLDS": 20})
        weights = ModelTrainer(settings).train(make_samples(12))
        assert weights.metrics.cross_validation is None

    def test_holdout_metrics_unchanged(self, test_settings):
        with_cv = ModelTrainer(test_settings).train(make_samples(40))
        without_cv = ModelTrainer(
            test_settings.model_copy(update={"CV_FOLDS": 0})
        ).train(make_samples(40))
        assert dict(with_cv.weights) == dict(without_cv.weights)
        assert with_cv.metrics.accuracy == without_cv.metrics.accuracy


class TestClassWeighting:
    @staticmethod
    def imbalanced(n=40, positives=6):
        samples = []
        for i in range(n):
            features = [0.0] * len(FEATURE_NAMES)
            features[FEATURE_NAMES.index("gwa_score")] = (i % 10) / 10
            samples.append(TrainingSample(features=tuple(features), label=1 if i < positives else 0))
        return samples

    def test_class_counts_recorded(self, test_settings):
        weights = ModelTrainer(test_settings).train(self.imbalanced())
        assert weights.approved_count == 6
        assert weights.rejected_count == 34
        assert weights.class_weighted is False

    def test_weighting_raises_minority_intercept(self, test_settings):
        plain = ModelTrainer(test_settings).train(self.imbalanced())
        weighted = ModelTrainer(
            test_settings.model_copy(update={"CLASS_WEIGHTING": True})
        ).train(self.imbalanced())
        assert weighted.class_weighted is True
        assert weighted.intercept > plain.intercept

    def test_balanced_weights_are_neutral(self):
        y = np.array([1.0, 0.0, 1.0, 0.0])
        assert np.allclose(ModelTrainer._class_weights(y), 1.0)

    def test_minority_weighs_more(self):
        y = np.array([1.0, 0.0, 0.0, 0.0])
        sample_weight = ModelTrainer._class_weights(y)
        assert sample_weight[0] == pytest.approx(2.0)
        assert sample_weight[1] == pytest.approx(4 / 6)


class TestVersioning:
    def test_version_is_feature_schema_version(self, test_settings):
        weights = ModelTrainer(test_settings).train(make_samples(20))
        assert weights.version == FEATURE_SCHEMA_VERSION
        assert isinstance(weights.version, int)
        assert len(weights.build) == 20
        assert weights.label == f"v{FEATURE_SCHEMA_VERSION}.{weights.build}"

    def test_domain_weights_build(self):
        assert DOMAIN_KNOWLEDGE_WEIGHTS.version == FEATURE_SCHEMA_VERSION
        assert DOMAIN_KNOWLEDGE_WEIGHTS.build == "domain"
