"""Pydantic schemas for trained model weights and validation metrics."""

from datetime import datetime, timezone
from types import MappingProxyType
from typing import Mapping, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from scholarship_engine.core.enums import ModelScope


class ConfusionMatrix(BaseModel):
    """Binary confusion matrix counts."""

    model_config = ConfigDict(frozen=True)

    tp: int = Field(0, ge=0)
    tn: int = Field(0, ge=0)
    fp: int = Field(0, ge=0)
    fn: int = Field(0, ge=0)

    @property
    def total(self) -> int:
        return self.tp + self.tn + self.fp + self.fn


class CrossValidationMetrics(BaseModel):
    """
    K-fold cross-validation summary.

    Attributes:
        folds: Number of folds
        accuracy: Mean accuracy across folds
        precision: Mean precision across folds
        recall: Mean recall across folds
        f1: Mean F1 across folds
        accuracy_std: Population standard deviation of fold accuracies
        fold_accuracies: Accuracy of each fold, in fold order
        confusion_matrix: Confusion counts summed over every fold
    """

    model_config = ConfigDict(frozen=True)

    folds: int = Field(..., ge=2)
    accuracy: float = Field(0.0, ge=0.0, le=1.0)
    precision: float = Field(0.0, ge=0.0, le=1.0)
    recall: float = Field(0.0, ge=0.0, le=1.0)
    f1: float = Field(0.0, ge=0.0, le=1.0)
    accuracy_std: float = Field(0.0, ge=0.0)
    fold_accuracies: tuple[float, ...] = ()
    confusion_matrix: ConfusionMatrix = Field(default_factory=ConfusionMatrix)


class ModelMetrics(BaseModel):
    """Validation metrics computed at the decision threshold."""

    model_config = ConfigDict(frozen=True)

    accuracy: float = Field(0.0, ge=0.0, le=1.0)
    precision: float = Field(0.0, ge=0.0, le=1.0)
    recall: float = Field(0.0, ge=0.0, le=1.0)
    f1: float = Field(0.0, ge=0.0, le=1.0)
    confusion_matrix: ConfusionMatrix = Field(default_factory=ConfusionMatrix)
    evaluated_on: str = "test"
    cross_validation: Optional[CrossValidationMetrics] = None


class ModelWeights(BaseModel):
    """
    Immutable logistic-regression parameters.

    The weight and importance maps are read-only views, so a model held by
    a reader cannot be changed in place after it is published.

    Attributes:
        intercept: Bias term
        weights: Feature name to coefficient, in feature order
        feature_names: Feature order the model was trained on
        training_size: Number of samples the weights were fitted on
        approved_count: Approved (label 1) samples in the training corpus
        rejected_count: Rejected (label 0) samples in the training corpus
        metrics: Validation metrics
        trained_at: Training timestamp (UTC)
        scope: Offering-specific or global model
        offering_id: Offering the model belongs to (None for global)
        version: Feature schema version the weights were trained against
        build: Identifies one training run within a version
        iterations: Gradient descent iterations run
        converged: Whether early stopping triggered
        final_loss: Training loss at the last iteration
        class_weighted: Whether the loss was reweighted for class imbalance
        feature_importance: |weight| normalized to sum to 1
    """

    model_config = ConfigDict(frozen=True)

    intercept: float
    weights: Mapping[str, float]
    feature_names: tuple[str, ...]
    training_size: int = Field(0, ge=0)
    approved_count: int = Field(0, ge=0)
    rejected_count: int = Field(0, ge=0)
    metrics: ModelMetrics = Field(default_factory=ModelMetrics)
    trained_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    scope: ModelScope = ModelScope.GLOBAL
    offering_id: Optional[str] = None
    version: int = Field(1, ge=1)
    build: str = ""
    iterations: int = Field(0, ge=0)
    converged: bool = False
    final_loss: Optional[float] = None
    class_weighted: bool = False
    feature_importance: Mapping[str, float] = Field(default_factory=dict, validate_default=True)

    @field_validator("weights", "feature_importance")
    @classmethod
    def freeze_mapping(cls, v: Mapping[str, float]) -> Mapping[str, float]:
        return MappingProxyType(dict(v))

    @field_serializer("weights", "feature_importance")
    def dump_mapping(self, v: Mapping[str, float]) -> dict[str, float]:
        return dict(v)

    @model_validator(mode="after")
    def validate_feature_alignment(self) -> "ModelWeights":
        """Every weight must belong to a listed feature and vice versa."""
        if set(self.weights) != set(self.feature_names):
            raise ValueError(
                f"Weight keys {sorted(self.weights)} do not match "
                f"feature_names {list(self.feature_names)}"
            )
        if self.scope == ModelScope.OFFERING and not self.offering_id:
            raise ValueError("Offering-scoped weights require an offering_id")
        return self

    @property
    def label(self) -> str:
        """Version and build, for logs and prediction results."""
        return f"v{self.version}.{self.build}" if self.build else f"v{self.version}"

    def coefficient_vector(self) -> list[float]:
        """Weights in feature_names order."""
        return [self.weights[name] for name in self.feature_names]
