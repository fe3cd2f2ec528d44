"""Multinomial Naive Bayes over tokenised documents.

Word probabilities are Laplace smoothed and kept in log space::

    log P(word | class) = log((count(word, class) + 1) / (words_in_class + unique_words))

so an unseen word scores ``log(1 / (words_in_class + unique_words))`` and a
document is classified by summing log-likelihoods instead of multiplying
probabilities, which would underflow on long documents.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass

import numpy as np

from ..activation import stable_softmax
from ..types import ClassificationResult, Document, TrainingSet
from ..vocabulary import NO_PRUNING, find_rare_words
from .base import require_words

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassDistribution:
    """Smoothed word distribution learned for a single class."""

    class_id: float
    log_probabilities: Mapping[str, float]
    prior: float
    word_count: int
    unseen_log_probability: float

    def log_likelihood(self, words: Document) -> float:
        """Prior plus the log-probability of every word, seen or not."""

        table = self.log_probabilities
        unseen = self.unseen_log_probability
        return self.prior + math.fsum(table.get(word, unseen) for word in words)


class MultinomialNaiveBayes:
    """Naive Bayes text classifier with Laplace smoothing.

    Classes are evaluated in ascending class-id order and only a strictly
    greater score replaces the current best, so ties go to the lowest id.
    """

    def __init__(self, training_set: TrainingSet, *, min_count: int = NO_PRUNING) -> None:
        if not training_set:
            raise ValueError("training set must not be None or empty")
        if min_count < 1:
            raise ValueError(f"min_count must be positive, got {min_count}")
        self._min_count = min_count
        self._distributions, self._unique_words = _train(training_set, min_count)
        LOGGER.debug(
            "Naive Bayes trained on %d class(es) with %d unique word(s)",
            len(self._distributions),
            self._unique_words,
        )

    @property
    def class_distributions(self) -> tuple[ClassDistribution, ...]:
        return self._distributions

    @property
    def classes(self) -> tuple[float, ...]:
        return tuple(distribution.class_id for distribution in self._distributions)

    @property
    def unique_words(self) -> int:
        return self._unique_words

    def distribution(self, class_id: float) -> ClassDistribution:
        for distribution in self._distributions:
            if distribution.class_id == class_id:
                return distribution
        raise KeyError(f"Unknown class {class_id}")

    def classify(self, words: Document | str) -> float:
        """Return the class with the highest log posterior."""

        tokens = _tokens(words)
        best_class = self._distributions[0].class_id
        best_score = -math.inf
        for distribution in self._distributions:
            score = distribution.log_likelihood(tokens)
            if score > best_score:
                best_score = score
                best_class = distribution.class_id
        return best_class

    def log_scores(self, words: Document | str) -> dict[float, float]:
        """Unnormalised log posterior of every class."""

        tokens = _tokens(words)
        return {
            distribution.class_id: distribution.log_likelihood(tokens)
            for distribution in self._distributions
        }

    def classify_with_probability(self, words: Document | str) -> ClassificationResult:
        """Return the best class with posteriors normalised across classes."""

        scores = self.log_scores(words)
        classes = list(scores)
        posteriors = stable_softmax(list(scores.values()))
        best = int(np.argmax(posteriors))
        return ClassificationResult(
            class_id=classes[best],
            probability=float(posteriors[best]),
            probabilities={label: float(value) for label, value in zip(classes, posteriors)},
        )


def _train(
    training_set: TrainingSet,
    min_count: int,
) -> tuple[tuple[ClassDistribution, ...], int]:
    document_counts: dict[float, int] = {}
    for class_id, documents in training_set.items():
        if not documents:
            raise ValueError(f"class {class_id} has no documents")
        document_counts[float(class_id)] = len(documents)
    total_documents = sum(document_counts.values())

    rare: set[str] = set()
    if min_count > NO_PRUNING:
        every_document = [document for docs in training_set.values() for document in docs]
        rare = find_rare_words(every_document, min_count)

    frequencies: dict[float, Counter[str]] = {}
    for class_id, documents in training_set.items():
        table: Counter[str] = Counter()
        for words in documents:
            table.update(word for word in words if word not in rare)
        frequencies[float(class_id)] = table

    unique_words = len(set().union(*(table.keys() for table in frequencies.values())))
    if unique_words == 0:
        raise ValueError("training set contains no words after pruning")

    distributions: list[ClassDistribution] = []
    for class_id in sorted(frequencies):
        table = frequencies[class_id]
        word_count = sum(table.values())
        denominator = word_count + unique_words
        distributions.append(
            ClassDistribution(
                class_id=class_id,
                log_probabilities={
                    word: math.log((count + 1) / denominator) for word, count in table.items()
                },
                prior=math.log(document_counts[class_id] / total_documents),
                word_count=word_count,
                unseen_log_probability=math.log(1 / denominator),
            )
        )
    return tuple(distributions), unique_words


def _tokens(words: Document | str | None) -> Document:
    if isinstance(words, str):
        if not words.strip():
            raise ValueError("text must not be None or empty")
        return words.split()
    return require_words(words)


__all__ = ["ClassDistribution", "MultinomialNaiveBayes"]
