"""Binary logistic regression over TF-IDF text or dense feature vectors."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

import numpy as np

from ..activation import sigmoid, sparse_dot
from ..types import ClassificationResult, ConvergenceReport, Document, TrainingSet
from ..vocabulary import Vocabulary, extract_samples
from .base import (
    DEFAULT_THRESHOLD,
    TextOptimizer,
    VectorOptimizer,
    initial_coefficients,
    require_binary_labels,
    require_features,
    require_threshold,
    require_words,
)

LOGGER = logging.getLogger(__name__)

POSITIVE = 1.0
NEGATIVE = 0.0


class LogisticRegression:
    """Sigmoid of a linear score; the bias is the last coefficient.

    ``classify`` and ``predict`` return 1.0 when the probability is strictly
    above ``threshold`` and 0.0 otherwise.
    """

    def __init__(
        self,
        coefficients: np.ndarray,
        *,
        vocabulary: Vocabulary | None = None,
        threshold: float = DEFAULT_THRESHOLD,
        report: ConvergenceReport | None = None,
    ) -> None:
        theta = np.asarray(coefficients, dtype=np.float64)
        if theta.ndim != 1 or theta.shape[0] < 2:
            raise ValueError("coefficients must hold at least one weight and the bias")
        if vocabulary is not None and len(vocabulary) + 1 != theta.shape[0]:
            raise ValueError(
                f"Expected {len(vocabulary) + 1} coefficients for the vocabulary, got {theta.shape[0]}"
            )
        self._theta = theta
        self._vocabulary = vocabulary
        self._threshold = require_threshold(threshold)
        self.report = report

    @classmethod
    def from_text(
        cls,
        vocabulary: Vocabulary,
        training_set: TrainingSet,
        optimizer: TextOptimizer,
        *,
        threshold: float = DEFAULT_THRESHOLD,
        random_state: int | np.random.RandomState | None = None,
    ) -> LogisticRegression:
        """Train on ``{1.0: [documents], 0.0: [documents]}``."""

        if vocabulary is None or len(vocabulary) == 0:
            raise ValueError("vocabulary must not be None or empty")
        if not training_set:
            raise ValueError("training set must not be None or empty")
        require_binary_labels(list(training_set))
        samples = extract_samples(training_set, vocabulary)
        theta = initial_coefficients(len(vocabulary) + 1, random_state)
        started = time.perf_counter()
        report = optimizer.optimize(samples, theta)
        LOGGER.info("training time: %.3fs", time.perf_counter() - started)
        return cls(theta, vocabulary=vocabulary, threshold=threshold, report=report)

    @classmethod
    def from_vectors(
        cls,
        features: np.ndarray | Sequence[Sequence[float]],
        labels: np.ndarray | Sequence[float],
        optimizer: VectorOptimizer,
        *,
        threshold: float = DEFAULT_THRESHOLD,
        random_state: int | np.random.RandomState | None = None,
    ) -> LogisticRegression:
        """Train on a dense ``(samples, features)`` matrix with 0/1 labels."""

        matrix = np.asarray(features, dtype=np.float64)
        if matrix.ndim != 2 or matrix.shape[0] == 0 or matrix.shape[1] == 0:
            raise ValueError("features must be a non-empty two dimensional matrix")
        targets = np.asarray(labels, dtype=np.float64)
        if targets.shape != (matrix.shape[0],):
            raise ValueError(f"Expected {matrix.shape[0]} labels, got {targets.size}")
        require_binary_labels(targets)
        theta = initial_coefficients(matrix.shape[1] + 1, random_state)
        started = time.perf_counter()
        report = optimizer.optimize(matrix, targets, theta)
        LOGGER.info("training time: %.3fs", time.perf_counter() - started)
        return cls(theta, threshold=threshold, report=report)

    @property
    def coefficients(self) -> np.ndarray:
        """Feature weights without the bias."""

        return self._theta[:-1]

    @property
    def bias(self) -> float:
        return float(self._theta[-1])

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def vocabulary(self) -> Vocabulary | None:
        return self._vocabulary

    def probability(self, words: Document) -> float:
        """Probability that ``words`` belong to the positive class."""

        require_words(words)
        if self._vocabulary is None:
            raise ValueError("model was trained on vectors and cannot classify text")
        features = self._vocabulary.tf_idf(words)
        return sigmoid(self._theta[-1] + sparse_dot(features, self._theta))

    def classify(self, words: Document) -> float:
        return POSITIVE if self.probability(words) > self._threshold else NEGATIVE

    def classify_with_probability(self, words: Document) -> ClassificationResult:
        positive = self.probability(words)
        label = POSITIVE if positive > self._threshold else NEGATIVE
        probabilities = {NEGATIVE: 1.0 - positive, POSITIVE: positive}
        return ClassificationResult(
            class_id=label,
            probability=probabilities[label],
            probabilities=probabilities,
        )

    def predict_probability(self, features: Sequence[float] | np.ndarray) -> float:
        vector = require_features(features, self._theta.shape[0] - 1)
        return sigmoid(self._theta[-1] + float(np.dot(vector, self._theta[:-1])))

    def predict(self, features: Sequence[float] | np.ndarray) -> float:
        return POSITIVE if self.predict_probability(features) > self._threshold else NEGATIVE


__all__ = ["LogisticRegression", "NEGATIVE", "POSITIVE"]
