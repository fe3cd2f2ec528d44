"""Core immutable data structures used throughout textlearn."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import numpy as np

Document = Sequence[str]
TrainingSet = Mapping[float, Sequence[Document]]


@dataclass(frozen=True)
class Term:
    """Vocabulary entry: stable feature index and inverse document frequency."""

    id: int
    idf: float


@dataclass(frozen=True, eq=False)
class SparseVector:
    """TF-IDF weights of the terms present in a single document."""

    term_ids: np.ndarray
    values: np.ndarray

    def __post_init__(self) -> None:
        if self.term_ids.shape != self.values.shape:
            raise ValueError(
                f"term_ids and values differ in shape: {self.term_ids.shape} != {self.values.shape}"
            )
        if np.unique(self.term_ids).size != self.term_ids.size:
            raise ValueError("term_ids must not contain duplicates")

    def __len__(self) -> int:
        return int(self.term_ids.shape[0])

    @classmethod
    def empty(cls) -> SparseVector:
        return cls(np.empty(0, dtype=np.int64), np.empty(0, dtype=np.float64))


@dataclass(frozen=True, eq=False)
class TextSample:
    """Expected class paired with the sparse features of one document."""

    class_id: float
    features: SparseVector


@dataclass(frozen=True)
class ConvergenceReport:
    """Outcome of an optimisation run."""

    epochs: int
    squared_error: float


@dataclass(frozen=True)
class ClassificationResult:
    """Predicted class with its score and the scores of every class."""

    class_id: float
    probability: float
    probabilities: Mapping[float, float] = field(default_factory=dict)


__all__ = [
    "ClassificationResult",
    "ConvergenceReport",
    "Document",
    "SparseVector",
    "Term",
    "TextSample",
    "TrainingSet",
]
