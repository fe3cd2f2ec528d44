"""Classifier and optimiser protocol definitions."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol, runtime_checkable

import numpy as np
from sklearn.utils import check_random_state

from ..types import ClassificationResult, ConvergenceReport, Document, TextSample

DEFAULT_THRESHOLD = 0.5


@runtime_checkable
class TextModel(Protocol):
    """Common interface shared by all text classifiers."""

    def classify(self, words: Document) -> float:
        """Return the class label predicted for a tokenised document."""


@runtime_checkable
class ProbabilisticTextModel(TextModel, Protocol):
    """Text classifier that also reports class scores."""

    def classify_with_probability(self, words: Document) -> ClassificationResult:
        """Return the predicted class together with the score of every class."""


@runtime_checkable
class Model(Protocol):
    """Classifier over dense feature vectors."""

    def predict(self, features: Sequence[float] | np.ndarray) -> float:
        """Return the class label predicted for a dense feature vector."""


class TextOptimizer(Protocol):
    def optimize(self, samples: Sequence[TextSample], coefficients: np.ndarray) -> ConvergenceReport:
        """Fit a single coefficient vector (bias last) in place."""


class MultiClassTextOptimizer(Protocol):
    def optimize(
        self,
        samples: Sequence[TextSample],
        coefficients: Mapping[float, np.ndarray],
    ) -> ConvergenceReport:
        """Fit one coefficient vector per class in place."""


class VectorOptimizer(Protocol):
    def optimize(
        self,
        features: np.ndarray,
        expected: np.ndarray,
        coefficients: np.ndarray,
    ) -> ConvergenceReport:
        """Fit a coefficient vector over dense features in place."""


class MultiClassVectorOptimizer(Protocol):
    def optimize(
        self,
        data: Mapping[float, Sequence[Sequence[float] | np.ndarray]],
        coefficients: Mapping[float, np.ndarray],
    ) -> ConvergenceReport:
        """Fit one coefficient vector per class over dense features in place."""


def initial_coefficients(
    size: int,
    random_state: int | np.random.RandomState | None = None,
) -> np.ndarray:
    """Random starting point drawn uniformly from [-0.5, 0.5)."""

    return check_random_state(random_state).random_sample(size) - 0.5


def require_words(words: Document | None) -> Document:
    if words is None or len(words) == 0:
        raise ValueError("words must not be None or empty")
    if isinstance(words, str):
        raise ValueError("words must be a sequence of tokens, not a string")
    return words


def require_features(features: Sequence[float] | np.ndarray | None, size: int) -> np.ndarray:
    if features is None:
        raise ValueError("features must not be None or empty")
    vector = np.asarray(features, dtype=np.float64)
    if vector.ndim != 1 or vector.shape[0] == 0:
        raise ValueError("features must not be None or empty")
    if vector.shape[0] != size:
        raise ValueError(f"Expected {size} features, got {vector.shape[0]}")
    return vector


def require_binary_labels(labels: Sequence[float] | np.ndarray) -> None:
    unexpected = set(np.unique(np.asarray(labels, dtype=np.float64)).tolist()) - {0.0, 1.0}
    if unexpected:
        raise ValueError(f"binary classifiers expect labels 0.0 and 1.0, got {sorted(unexpected)}")


def require_threshold(threshold: float) -> float:
    if not 0.0 < threshold < 1.0:
        raise ValueError(f"threshold must be between 0 and 1, exclusive but was: {threshold}")
    return threshold


__all__ = [
    "DEFAULT_THRESHOLD",
    "Model",
    "MultiClassTextOptimizer",
    "MultiClassVectorOptimizer",
    "ProbabilisticTextModel",
    "TextModel",
    "TextOptimizer",
    "VectorOptimizer",
    "initial_coefficients",
    "require_binary_labels",
    "require_features",
    "require_threshold",
    "require_words",
]
