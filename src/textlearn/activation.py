"""Stateless activation functions and sparse vector arithmetic."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from scipy.special import expit

from .types import SparseVector


def sigmoid(x: float) -> float:
    """Logistic function 1 / (1 + e^-x)."""

    return float(expit(x))


def identity(x: float) -> float:
    return float(x)


def signum(x: float) -> float:
    """Bipolar step: 1.0 for positive input, -1.0 otherwise."""

    return 1.0 if x > 0 else -1.0


def softmax(scores: Sequence[float] | np.ndarray) -> np.ndarray:
    """Plain softmax; overflows for large inputs, use :func:`stable_softmax` instead."""

    exponents = np.exp(np.asarray(scores, dtype=np.float64))
    return exponents / exponents.sum()


def stable_softmax(scores: Sequence[float] | np.ndarray) -> np.ndarray:
    """Softmax computed on scores shifted by their maximum.

    Shifting leaves the distribution unchanged but keeps every exponent at
    or below zero, so no component overflows. The input is not modified.
    """

    values = np.asarray(scores, dtype=np.float64)
    if values.size == 0:
        raise ValueError("scores must not be empty")
    return softmax(values - values.max())


def sparse_dot(features: SparseVector, coefficients: np.ndarray) -> float:
    """Dot product over the present terms only; the bias slot is ignored."""

    if len(features) == 0:
        return 0.0
    return float(np.dot(features.values, coefficients[features.term_ids]))


__all__ = ["identity", "sigmoid", "signum", "softmax", "sparse_dot", "stable_softmax"]
