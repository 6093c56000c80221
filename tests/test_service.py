"""Tests for the public facade."""

import pytest

from conftest import make_decisions, make_samples
from scholarship_engine import service
from scholarship_engine.core.enums import ModelScope
from scholarship_engine.core.exceptions import InsufficientDataError
from scholarship_engine.models.domain.applicant import ApplicantProfile
from scholarship_engine.models.domain.criteria import EligibilityCriteria
from scholarship_engine.service import ScholarshipEngine
from scholarship_engine.services.scoring.trainer import DOMAIN_KNOWLEDGE_WEIGHTS


@pytest.fixture
def engine(test_settings):
    return ScholarshipEngine(config=test_settings)


@pytest.fixture(autouse=True)
def fresh_shared_engine():
    service.reset_engine()
    yield
    service.reset_engine()


class TestScholarshipEngine:
    def test_predict_without_models_uses_domain_weights(self, engine, full_profile):
        result = engine.predict(full_profile, EligibilityCriteria(offering_id="A"))
        assert result.model_version == DOMAIN_KNOWLEDGE_WEIGHTS.version
        assert result.model_scope == ModelScope.GLOBAL

    def test_insufficient_training_leaves_store_untouched(self, engine):
        with pytest.raises(InsufficientDataError):
            engine.train_model(ModelScope.GLOBAL, make_samples(3))
        assert engine.store.get_global() is None

    def test_train_model_publishes(self, engine, full_profile):
        weights = engine.train_model(ModelScope.OFFERING, make_samples(20, "A"), "A")
        result = engine.predict(full_profile, EligibilityCriteria(offering_id="A"))
        assert engine.store.get("A") is weights
        assert result.model_scope == ModelScope.OFFERING
        assert result.model_version == weights.version

    @pytest.mark.training
    def test_train_all_then_predict(self, engine):
        decisions = make_decisions(20, "A") + make_decisions(5, "B")
        report = engine.train_all(decisions)
        assert set(report.offering_models) == {"A"}
        assert report.global_model is not None

        criteria_b = EligibilityCriteria(offering_id="B", max_gwa=3.0)
        result_b = engine.predict(ApplicantProfile(gwa=1.5), criteria_b)
        assert result_b.model_scope == ModelScope.GLOBAL

        criteria_a = EligibilityCriteria(offering_id="A", max_gwa=3.0)
        better = engine.predict(ApplicantProfile(gwa=1.2), criteria_a)
        worse = engine.predict(ApplicantProfile(gwa=2.8), criteria_a)
        assert better.model_scope == ModelScope.OFFERING
        assert better.probability > worse.probability

    def test_explicit_offering_overrides_criteria(self, engine, full_profile):
        weights = engine.train_model(ModelScope.OFFERING, make_samples(20, "X"), "X")
        result = engine.predict(full_profile, EligibilityCriteria(offering_id="A"), "X")
        assert result.model_version == weights.version


class TestModuleFunctions:
    def test_evaluate_eligibility(self):
        result = service.evaluate_eligibility(
            ApplicantProfile(gwa=1.75), EligibilityCriteria(max_gwa=2.0)
        )
        assert result.is_eligible is True

    def test_predict_uses_shared_engine(self, full_profile):
        result = service.predict(full_profile, EligibilityCriteria())
        assert 0.0 < result.probability < 1.0

    def test_build_training_samples(self):
        samples = service.build_training_samples(make_decisions(10, "A"))
        assert len(samples) == 10
