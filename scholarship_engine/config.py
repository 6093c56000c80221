"""Engine configuration using pydantic-settings."""

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings with environment variable support."""

    # Logging
    LOG_LEVEL: str = "INFO"

    # Training policy
    MIN_SAMPLES: int = 10
    LEARNING_RATE: float = 0.5
    MAX_ITERATIONS: int = 5000
    CONVERGENCE_THRESHOLD: float = 1e-6
    L2_PENALTY: float = 0.0
    TRAIN_TEST_SPLIT: float = 0.8
    RANDOM_SEED: int = 42
    DECISION_THRESHOLD: float = 0.5
    MAX_TRAINING_WORKERS: int = 4
    CV_FOLDS: int = 5  # 0 or 1 disables cross-validation
    CLASS_WEIGHTING: bool = False

    # Explainability
    NEUTRAL_EPSILON: float = 0.01

    model_config = SettingsConfigDict(
        env_prefix="SCHOLARSHIP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


def configure_logging(level: str | None = None) -> None:
    """Apply LOG_LEVEL to the package logger."""
    logging.getLogger("scholarship_engine").setLevel(
        (level or settings.LOG_LEVEL).upper()
    )


# Global settings instance
settings = Settings()
