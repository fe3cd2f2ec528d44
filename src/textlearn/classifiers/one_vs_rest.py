"""One-against-rest multi-class classification built from logistic models."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

import numpy as np
from sklearn.utils import check_random_state

from ..types import ClassificationResult, Document, TrainingSet
from ..vocabulary import Vocabulary
from .base import TextOptimizer, VectorOptimizer, require_features, require_words
from .logistic import NEGATIVE, POSITIVE, LogisticRegression

LOGGER = logging.getLogger(__name__)


class OneAgainstRest:
    """One logistic model per class, each trained to tell its class from all others.

    The class whose model reports the highest probability wins. Models are
    consulted in ascending class-id order and only a strictly greater
    probability replaces the current best, so ties go to the lowest id.
    """

    def __init__(self, predictors: Mapping[float, LogisticRegression]) -> None:
        if len(predictors) < 2:
            raise ValueError("one-against-rest requires at least two classes")
        self._predictors = {float(label): predictors[label] for label in sorted(predictors)}

    @classmethod
    def from_text(
        cls,
        vocabulary: Vocabulary,
        training_set: TrainingSet,
        optimizer: TextOptimizer,
        *,
        random_state: int | np.random.RandomState | None = None,
    ) -> OneAgainstRest:
        if not training_set or len(training_set) < 2:
            raise ValueError("training set must contain at least two classes")
        rng = check_random_state(random_state)
        predictors: dict[float, LogisticRegression] = {}
        for target in sorted(training_set):
            others = [
                document
                for label, documents in training_set.items()
                if label != target
                for document in documents
            ]
            LOGGER.debug("training class %s against %d other document(s)", target, len(others))
            local_set = {POSITIVE: training_set[target], NEGATIVE: others}
            predictors[float(target)] = LogisticRegression.from_text(
                vocabulary, local_set, optimizer, random_state=rng
            )
        return cls(predictors)

    @classmethod
    def from_vectors(
        cls,
        features: np.ndarray | Sequence[Sequence[float]],
        labels: np.ndarray | Sequence[float],
        optimizer: VectorOptimizer,
        *,
        random_state: int | np.random.RandomState | None = None,
    ) -> OneAgainstRest:
        targets = np.asarray(labels, dtype=np.float64)
        classes = np.unique(targets)
        if classes.shape[0] < 2:
            raise ValueError("labels must contain at least two classes")
        rng = check_random_state(random_state)
        predictors = {
            float(target): LogisticRegression.from_vectors(
                features,
                (targets == target).astype(np.float64),
                optimizer,
                random_state=rng,
            )
            for target in classes
        }
        return cls(predictors)

    @property
    def classes(self) -> tuple[float, ...]:
        return tuple(self._predictors)

    @property
    def predictors(self) -> Mapping[float, LogisticRegression]:
        return dict(self._predictors)

    def classify(self, words: Document) -> float:
        return self.classify_with_probability(words).class_id

    def classify_with_probability(self, words: Document) -> ClassificationResult:
        """Best class plus the raw output of every per-class model.

        The outputs are independent sigmoid probabilities and do not sum to 1.
        """

        require_words(words)
        outputs = {label: model.probability(words) for label, model in self._predictors.items()}
        return _best(outputs)

    def predict(self, features: Sequence[float] | np.ndarray) -> float:
        first = next(iter(self._predictors.values()))
        vector = require_features(features, first.coefficients.shape[0])
        outputs = {
            label: model.predict_probability(vector) for label, model in self._predictors.items()
        }
        return _best(outputs).class_id


def _best(outputs: Mapping[float, float]) -> ClassificationResult:
    best_class = float("nan")
    best_probability = -1.0
    for label, probability in outputs.items():
        if probability > best_probability:
            best_class = label
            best_probability = probability
    return ClassificationResult(
        class_id=best_class,
        probability=best_probability,
        probabilities=dict(outputs),
    )


__all__ = ["OneAgainstRest"]
