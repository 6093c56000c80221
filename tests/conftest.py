"""Shared fixtures and pytest markers."""

import pytest

from scholarship_engine.config import Settings
from scholarship_engine.core.enums import DecisionStatus
from scholarship_engine.models.domain.applicant import ApplicantProfile
from scholarship_engine.models.domain.criteria import EligibilityCriteria
from scholarship_engine.models.domain.training import HistoricalDecision, TrainingSample
from scholarship_engine.services.scoring.features import FEATURE_NAMES


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "training: runs gradient descent (slower than the rule tests)"
    )


@pytest.fixture
def test_settings():
    """Small, fast training settings."""
    return Settings(
        MIN_SAMPLES=10,
        LEARNING_RATE=0.5,
        MAX_ITERATIONS=2000,
        CONVERGENCE_THRESHOLD=1e-6,
        L2_PENALTY=0.0,
        TRAIN_TEST_SPLIT=0.8,
        RANDOM_SEED=42,
        MAX_TRAINING_WORKERS=2,
    )


@pytest.fixture
def full_profile():
    return ApplicantProfile(
        gwa=1.75,
        classification="Junior",
        units_enrolled=18,
        units_passed=90,
        college="College of Arts and Sciences",
        course="BS Computer Science",
        major="Software Engineering",
        annual_family_income=150000,
        st_bracket="PD80",
        household_size=5,
        province_of_origin="Laguna",
        citizenship="Filipino",
        has_existing_scholarship=False,
        has_disciplinary_action=False,
        documents_submitted=["transcript", "income_certificate"],
    )


@pytest.fixture
def open_criteria():
    """Criteria with no restrictions at all."""
    return EligibilityCriteria(offering_id="open")


def make_samples(n, offering_id=None, seed_offset=0):
    """
    Deterministic samples where approval follows gwa_score.

    Labels alternate around 0.5 so both classes are always present.
    """
    samples = []
    for i in range(n):
        gwa_score = ((i * 7 + seed_offset) % n) / max(n - 1, 1)
        features = [0.0] * len(FEATURE_NAMES)
        features[FEATURE_NAMES.index("gwa_score")] = gwa_score
        features[FEATURE_NAMES.index("income_score")] = 0.5
        features[FEATURE_NAMES.index("eligibility_percentage")] = 1.0
        samples.append(
            TrainingSample(
                features=tuple(features),
                label=1 if gwa_score >= 0.5 else 0,
                offering_id=offering_id,
            )
        )
    return samples


def make_decisions(n, offering_id, max_gwa=3.0):
    """Historical decisions approved when GWA is 2.0 or better."""
    criteria = EligibilityCriteria(offering_id=offering_id, max_gwa=max_gwa)
    decisions = []
    for i in range(n):
        gwa = round(1.0 + (i % 10) * 0.3, 2)
        status = DecisionStatus.APPROVED if gwa <= 2.0 else DecisionStatus.REJECTED
        decisions.append(
            HistoricalDecision(
                offering_id=offering_id,
                profile=ApplicantProfile(gwa=gwa, citizenship="Filipino"),
                criteria=criteria,
                status=status,
            )
        )
    return decisions
