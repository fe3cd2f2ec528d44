"""Multinomial logistic (softmax) regression."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence

import numpy as np
from sklearn.utils import check_random_state

from ..activation import stable_softmax
from ..types import ClassificationResult, ConvergenceReport, Document, TrainingSet
from ..vocabulary import Vocabulary, extract_samples
from .base import (
    MultiClassTextOptimizer,
    MultiClassVectorOptimizer,
    initial_coefficients,
    require_features,
    require_words,
)

LOGGER = logging.getLogger(__name__)


class SoftMaxRegression:
    """One coefficient vector per class, normalised with a stable softmax.

    Rows of the coefficient matrix follow ascending class id and end with the
    class bias. The highest probability wins; ties go to the lowest class id.
    """

    def __init__(
        self,
        classes: Sequence[float],
        coefficients: np.ndarray,
        *,
        vocabulary: Vocabulary | None = None,
        report: ConvergenceReport | None = None,
    ) -> None:
        theta = np.asarray(coefficients, dtype=np.float64)
        labels = np.asarray(classes, dtype=np.float64)
        if labels.ndim != 1 or labels.shape[0] < 2:
            raise ValueError("softmax regression requires at least two classes")
        if theta.ndim != 2 or theta.shape[0] != labels.shape[0] or theta.shape[1] < 2:
            raise ValueError(
                f"Expected a ({labels.shape[0]}, features + 1) coefficient matrix, got {theta.shape}"
            )
        if vocabulary is not None and len(vocabulary) + 1 != theta.shape[1]:
            raise ValueError(
                f"Expected {len(vocabulary) + 1} coefficients per class, got {theta.shape[1]}"
            )
        order = np.argsort(labels, kind="stable")
        self._classes = labels[order]
        self._theta = theta[order]
        self._vocabulary = vocabulary
        self.report = report

    @classmethod
    def from_text(
        cls,
        vocabulary: Vocabulary,
        training_set: TrainingSet,
        optimizer: MultiClassTextOptimizer,
        *,
        random_state: int | np.random.RandomState | None = None,
    ) -> SoftMaxRegression:
        if vocabulary is None or len(vocabulary) == 0:
            raise ValueError("vocabulary must not be None or empty")
        if not training_set or len(training_set) < 2:
            raise ValueError("training set must contain at least two classes")
        samples = extract_samples(training_set, vocabulary)
        classes = sorted(float(label) for label in training_set)
        coefficients = _initial_class_coefficients(classes, len(vocabulary) + 1, random_state)
        started = time.perf_counter()
        report = optimizer.optimize(samples, coefficients)
        LOGGER.info("training time: %.3fs", time.perf_counter() - started)
        return cls(
            classes,
            np.vstack([coefficients[label] for label in classes]),
            vocabulary=vocabulary,
            report=report,
        )

    @classmethod
    def from_vectors(
        cls,
        data: Mapping[float, Sequence[Sequence[float] | np.ndarray]],
        optimizer: MultiClassVectorOptimizer,
        *,
        random_state: int | np.random.RandomState | None = None,
    ) -> SoftMaxRegression:
        """Train on ``{class: [feature vectors]}`` with a dense softmax optimiser."""

        if not data or len(data) < 2:
            raise ValueError("data must contain at least two classes")
        dimension = _dimension(data)
        classes = sorted(float(label) for label in data)
        coefficients = _initial_class_coefficients(classes, dimension + 1, random_state)
        started = time.perf_counter()
        report = optimizer.optimize(data, coefficients)
        LOGGER.info("training time: %.3fs", time.perf_counter() - started)
        return cls(classes, np.vstack([coefficients[label] for label in classes]), report=report)

    @property
    def classes(self) -> tuple[float, ...]:
        return tuple(float(label) for label in self._classes)

    @property
    def coefficients(self) -> np.ndarray:
        """``(classes, features + 1)`` matrix; the last column holds the biases."""

        return self._theta

    @property
    def vocabulary(self) -> Vocabulary | None:
        return self._vocabulary

    def probabilities(self, words: Document) -> dict[float, float]:
        activations = self._text_activations(words)
        return {float(label): float(value) for label, value in zip(self._classes, activations)}

    def classify(self, words: Document) -> float:
        activations = self._text_activations(words)
        return float(self._classes[int(np.argmax(activations))])

    def classify_with_probability(self, words: Document) -> ClassificationResult:
        activations = self._text_activations(words)
        best = int(np.argmax(activations))
        return ClassificationResult(
            class_id=float(self._classes[best]),
            probability=float(activations[best]),
            probabilities={
                float(label): float(value) for label, value in zip(self._classes, activations)
            },
        )

    def predict_probabilities(self, features: Sequence[float] | np.ndarray) -> dict[float, float]:
        activations = self._vector_activations(features)
        return {float(label): float(value) for label, value in zip(self._classes, activations)}

    def predict(self, features: Sequence[float] | np.ndarray) -> float:
        activations = self._vector_activations(features)
        return float(self._classes[int(np.argmax(activations))])

    def _text_activations(self, words: Document) -> np.ndarray:
        require_words(words)
        if self._vocabulary is None:
            raise ValueError("model was trained on vectors and cannot classify text")
        features = self._vocabulary.tf_idf(words)
        weighted = self._theta[:, -1] + self._theta[:, features.term_ids] @ features.values
        return stable_softmax(weighted)

    def _vector_activations(self, features: Sequence[float] | np.ndarray) -> np.ndarray:
        vector = require_features(features, self._theta.shape[1] - 1)
        return stable_softmax(self._theta[:, -1] + self._theta[:, :-1] @ vector)


def _initial_class_coefficients(
    classes: Sequence[float],
    size: int,
    random_state: int | np.random.RandomState | None,
) -> dict[float, np.ndarray]:
    rng = check_random_state(random_state)
    return {label: initial_coefficients(size, rng) for label in classes}


def _dimension(data: Mapping[float, Sequence[Sequence[float] | np.ndarray]]) -> int:
    for vectors in data.values():
        for vector in vectors:
            size = len(vector)
            if size == 0:
                raise ValueError("feature vectors must not be empty")
            return size
    raise ValueError("data must not be empty")


__all__ = ["SoftMaxRegression"]
