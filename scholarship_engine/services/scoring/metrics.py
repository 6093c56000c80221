"""Binary classification metrics for model validation."""

from typing import Sequence

import numpy as np

from scholarship_engine.models.schemas.model_weights import (
    ConfusionMatrix,
    CrossValidationMetrics,
    ModelMetrics,
)


def _safe_ratio(numerator: int, denominator: int) -> float:
    return numerator / denominator if denominator else 0.0


def classification_metrics(
    y_true: np.ndarray,
    y_prob: np.ndarray,
    threshold: float = 0.5,
    evaluated_on: str = "test",
) -> ModelMetrics:
    """
    Compute accuracy, precision, recall, F1 and the confusion matrix.

    Predictions are positive when the probability is at or above the
    threshold. Any ratio with a zero denominator is reported as 0.

    Args:
        y_true: Labels in {0, 1}
        y_prob: Predicted probabilities
        threshold: Decision threshold
        evaluated_on: Which split the metrics describe ("test" or "train")

    Returns:
        ModelMetrics
    """
    y_true = np.asarray(y_true, dtype=int)
    y_pred = (np.asarray(y_prob, dtype=float) >= threshold).astype(int)

    tp = int(np.sum((y_pred == 1) & (y_true == 1)))
    tn = int(np.sum((y_pred == 0) & (y_true == 0)))
    fp = int(np.sum((y_pred == 1) & (y_true == 0)))
    fn = int(np.sum((y_pred == 0) & (y_true == 1)))

    precision = _safe_ratio(tp, tp + fp)
    recall = _safe_ratio(tp, tp + fn)
    f1 = (
        2 * precision * recall / (precision + recall)
        if (precision + recall) > 0
        else 0.0
    )

    return ModelMetrics(
        accuracy=_safe_ratio(tp + tn, tp + tn + fp + fn),
        precision=precision,
        recall=recall,
        f1=f1,
        confusion_matrix=ConfusionMatrix(tp=tp, tn=tn, fp=fp, fn=fn),
        evaluated_on=evaluated_on,
    )


def cross_validation_summary(fold_metrics: Sequence[ModelMetrics]) -> CrossValidationMetrics:
    """
    Average per-fold metrics and sum their confusion counts.

    Args:
        fold_metrics: Held-out metrics of each fold, in fold order

    Returns:
        CrossValidationMetrics with mean scores and the accuracy spread
    """
    accuracies = np.array([m.accuracy for m in fold_metrics], dtype=float)
    return CrossValidationMetrics(
        folds=len(fold_metrics),
        accuracy=float(accuracies.mean()),
        precision=float(np.mean([m.precision for m in fold_metrics])),
        recall=float(np.mean([m.recall for m in fold_metrics])),
        f1=float(np.mean([m.f1 for m in fold_metrics])),
        accuracy_std=float(accuracies.std()),
        fold_accuracies=tuple(float(a) for a in accuracies),
        confusion_matrix=ConfusionMatrix(
            tp=sum(m.confusion_matrix.tp for m in fold_metrics),
            tn=sum(m.confusion_matrix.tn for m in fold_metrics),
            fp=sum(m.confusion_matrix.fp for m in fold_metrics),
            fn=sum(m.confusion_matrix.fn for m in fold_metrics),
        ),
    )
