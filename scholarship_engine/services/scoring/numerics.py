"""Numerically stable logistic functions."""

import math
from typing import Optional

import numpy as np

# exp(500) is still finite in float64; beyond it the sigmoid is 0 or 1 anyway
Z_CLAMP = 500.0

# Keeps probabilities strictly inside (0, 1) once float64 rounds to an endpoint
PROBABILITY_EPS = 1e-15


def clamp_z(z: float) -> float:
    """Clamp a z-score to [-Z_CLAMP, Z_CLAMP] before exponentiation."""
    return max(-Z_CLAMP, min(Z_CLAMP, z))


def sigmoid(z: float) -> float:
    """
    Logistic sigmoid for a scalar.

    Branches on the sign of z so that exp() is only ever called on a
    non-positive argument.

    Args:
        z: Pre-sigmoid linear combination

    Returns:
        1 / (1 + e^-z), strictly between 0 and 1; exactly 0.5 at z == 0
    """
    z = clamp_z(float(z))
    if z >= 0:
        p = 1.0 / (1.0 + math.exp(-z))
    else:
        e = math.exp(z)
        p = e / (1.0 + e)
    return min(max(p, PROBABILITY_EPS), 1.0 - PROBABILITY_EPS)


def sigmoid_array(z: np.ndarray) -> np.ndarray:
    """Vectorized sigmoid with the same clamp and sign branch."""
    z = np.clip(np.asarray(z, dtype=float), -Z_CLAMP, Z_CLAMP)
    out = np.empty_like(z)
    positive = z >= 0
    out[positive] = 1.0 / (1.0 + np.exp(-z[positive]))
    e = np.exp(z[~positive])
    out[~positive] = e / (1.0 + e)
    return np.clip(out, PROBABILITY_EPS, 1.0 - PROBABILITY_EPS)


def log_loss(
    y_true: np.ndarray, y_prob: np.ndarray, sample_weight: Optional[np.ndarray] = None
) -> float:
    """Mean binary cross-entropy, optionally weighted per sample."""
    y_true = np.asarray(y_true, dtype=float)
    if y_true.size == 0:
        return 0.0
    p = np.clip(np.asarray(y_prob, dtype=float), PROBABILITY_EPS, 1.0 - PROBABILITY_EPS)
    losses = -(y_true * np.log(p) + (1.0 - y_true) * np.log(1.0 - p))
    if sample_weight is not None:
        losses = losses * np.asarray(sample_weight, dtype=float)
    return float(np.mean(losses))
