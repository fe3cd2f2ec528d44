"""One-against-one multi-class classification by pairwise majority vote.

A thresholded logistic model is trained for every unordered pair of
classes, ``n * (n - 1) / 2`` models in total. Each model votes for one of
its two classes and the class with the most votes wins.
"""

from __future__ import annotations

import itertools
import logging
from collections import Counter
from collections.abc import Mapping, Sequence

import numpy as np
from sklearn.utils import check_random_state

from ..types import Document, TrainingSet
from ..vocabulary import Vocabulary
from .base import (
    DEFAULT_THRESHOLD,
    TextOptimizer,
    VectorOptimizer,
    require_features,
    require_words,
)
from .logistic import NEGATIVE, POSITIVE, LogisticRegression

LOGGER = logging.getLogger(__name__)

Pair = tuple[float, float]


class OneAgainstOne:
    """Pairwise logistic models keyed by ``(target, other)`` with ``target < other``.

    A model voting 1.0 elects ``target``, otherwise ``other``. Equal vote
    counts resolve to the lowest class id.
    """

    def __init__(self, predictors: Mapping[Pair, LogisticRegression]) -> None:
        if not predictors:
            raise ValueError("one-against-one requires at least one class pair")
        for target, other in predictors:
            if not target < other:
                raise ValueError(f"class pair must be ordered, got ({target}, {other})")
        self._predictors = {pair: predictors[pair] for pair in sorted(predictors)}

    @classmethod
    def from_text(
        cls,
        vocabulary: Vocabulary,
        training_set: TrainingSet,
        optimizer: TextOptimizer,
        *,
        threshold: float = DEFAULT_THRESHOLD,
        random_state: int | np.random.RandomState | None = None,
    ) -> OneAgainstOne:
        if not training_set or len(training_set) < 2:
            raise ValueError("training set must contain at least two classes")
        rng = check_random_state(random_state)
        predictors: dict[Pair, LogisticRegression] = {}
        for target, other in itertools.combinations(sorted(training_set), 2):
            LOGGER.debug("training pair %s / %s", target, other)
            local_set = {POSITIVE: training_set[target], NEGATIVE: training_set[other]}
            predictors[(float(target), float(other))] = LogisticRegression.from_text(
                vocabulary, local_set, optimizer, threshold=threshold, random_state=rng
            )
        return cls(predictors)

    @classmethod
    def from_vectors(
        cls,
        features: np.ndarray | Sequence[Sequence[float]],
        labels: np.ndarray | Sequence[float],
        optimizer: VectorOptimizer,
        *,
        threshold: float = DEFAULT_THRESHOLD,
        random_state: int | np.random.RandomState | None = None,
    ) -> OneAgainstOne:
        matrix = np.asarray(features, dtype=np.float64)
        targets = np.asarray(labels, dtype=np.float64)
        if matrix.ndim != 2 or targets.shape != (matrix.shape[0],):
            raise ValueError("features must be a matrix with one label per row")
        classes = np.unique(targets)
        if classes.shape[0] < 2:
            raise ValueError("labels must contain at least two classes")
        rng = check_random_state(random_state)
        predictors: dict[Pair, LogisticRegression] = {}
        for target, other in itertools.combinations(classes.tolist(), 2):
            rows = (targets == target) | (targets == other)
            predictors[(target, other)] = LogisticRegression.from_vectors(
                matrix[rows],
                (targets[rows] == target).astype(np.float64),
                optimizer,
                threshold=threshold,
                random_state=rng,
            )
        return cls(predictors)

    @property
    def pairs(self) -> tuple[Pair, ...]:
        return tuple(self._predictors)

    @property
    def predictors(self) -> Mapping[Pair, LogisticRegression]:
        return dict(self._predictors)

    def votes(self, words: Document) -> Counter[float]:
        require_words(words)
        return Counter(
            target if model.classify(words) == POSITIVE else other
            for (target, other), model in self._predictors.items()
        )

    def classify(self, words: Document) -> float:
        return _majority(self.votes(words))

    def predict(self, features: Sequence[float] | np.ndarray) -> float:
        first = next(iter(self._predictors.values()))
        vector = require_features(features, first.coefficients.shape[0])
        votes = Counter(
            target if model.predict(vector) == POSITIVE else other
            for (target, other), model in self._predictors.items()
        )
        return _majority(votes)


def _majority(votes: Counter[float]) -> float:
    return min(votes, key=lambda label: (-votes[label], label))


__all__ = ["OneAgainstOne"]
