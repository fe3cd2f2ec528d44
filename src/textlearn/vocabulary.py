"""Vocabulary indexing and TF-IDF encoding of tokenised documents."""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable, Iterator, Sequence

import numpy as np
from scipy import sparse

from .types import Document, SparseVector, Term, TextSample, TrainingSet

NO_PRUNING = 1


class Vocabulary:
    """Maps words to stable feature indices and inverse document frequencies."""

    def __init__(self, documents: Sequence[Document], min_count: int = NO_PRUNING) -> None:
        if not documents:
            raise ValueError("documents must not be empty")
        if min_count < 1:
            raise ValueError(f"min_count must be positive, got {min_count}")
        self._min_count = min_count
        self._document_count = len(documents)
        self._terms = _index_terms(documents, min_count)

    @classmethod
    def from_training_set(
        cls,
        training_set: TrainingSet,
        min_count: int = NO_PRUNING,
    ) -> Vocabulary:
        """Build a vocabulary from every document of every class."""

        documents = [document for docs in training_set.values() for document in docs]
        return cls(documents, min_count)

    @property
    def size(self) -> int:
        return len(self._terms)

    @property
    def document_count(self) -> int:
        return self._document_count

    def __len__(self) -> int:
        return len(self._terms)

    def __contains__(self, word: object) -> bool:
        return word in self._terms

    def __iter__(self) -> Iterator[str]:
        return iter(self._terms)

    def get(self, word: str) -> Term | None:
        return self._terms.get(word)

    def terms(self) -> list[Term]:
        return list(self._terms.values())

    def term_frequencies(self, words: Document) -> dict[Term, float]:
        """Return the relative frequency of each known word in ``words``."""

        if not words:
            return {}
        total = len(words)
        frequencies: dict[Term, float] = {}
        for word, count in Counter(words).items():
            term = self._terms.get(word)
            if term is not None:
                frequencies[term] = count / total
        return frequencies

    def tf_idf(self, words: Document) -> SparseVector:
        """Encode ``words`` as sparse TF-IDF terms ordered by first occurrence."""

        frequencies = self.term_frequencies(words)
        if not frequencies:
            return SparseVector.empty()
        ordered: dict[Term, float] = {}
        for word in words:
            term = self._terms.get(word)
            if term is not None and term not in ordered:
                ordered[term] = frequencies[term] * term.idf
        term_ids = np.fromiter((term.id for term in ordered), dtype=np.int64, count=len(ordered))
        values = np.fromiter(ordered.values(), dtype=np.float64, count=len(ordered))
        return SparseVector(term_ids, values)

    def transform(self, documents: Iterable[Document]) -> sparse.csr_matrix:
        """Return the documents as a TF-IDF matrix with one row per document."""

        indptr = [0]
        indices: list[np.ndarray] = []
        data: list[np.ndarray] = []
        for words in documents:
            encoded = self.tf_idf(words)
            indices.append(encoded.term_ids)
            data.append(encoded.values)
            indptr.append(indptr[-1] + len(encoded))
        rows = len(indptr) - 1
        return sparse.csr_matrix(
            (
                np.concatenate(data) if data else np.empty(0, dtype=np.float64),
                np.concatenate(indices) if indices else np.empty(0, dtype=np.int64),
                np.asarray(indptr, dtype=np.int64),
            ),
            shape=(rows, len(self._terms)),
        )

    def dense(self, words: Document) -> np.ndarray:
        """Return ``words`` as a dense TF-IDF vector of vocabulary length."""

        vector = np.zeros(len(self._terms), dtype=np.float64)
        encoded = self.tf_idf(words)
        vector[encoded.term_ids] = encoded.values
        return vector


def count_documents(documents: Iterable[Document]) -> Counter[str]:
    """Count, for every word, the number of documents it appears in."""

    counts: Counter[str] = Counter()
    for words in documents:
        counts.update(set(words))
    return counts


def find_rare_words(documents: Iterable[Document], min_count: int) -> set[str]:
    return {word for word, count in count_documents(documents).items() if count < min_count}


def extract_samples(training_set: TrainingSet, vocabulary: Vocabulary) -> list[TextSample]:
    """Encode every labelled document of ``training_set`` into a TextSample."""

    if not training_set:
        raise ValueError("training set must not be empty")
    samples: list[TextSample] = []
    for class_id, documents in training_set.items():
        label = float(class_id)
        for words in documents:
            samples.append(TextSample(label, vocabulary.tf_idf(words)))
    if not samples:
        raise ValueError("training set contains no documents")
    return samples


def _index_terms(documents: Sequence[Document], min_count: int) -> dict[str, Term]:
    counts = count_documents(documents)
    total = len(documents)
    terms: dict[str, Term] = {}
    for words in documents:
        for word in words:
            if word in terms:
                continue
            frequency = counts[word]
            if frequency < min_count:
                continue
            terms[word] = Term(id=len(terms), idf=1.0 + math.log(total / frequency))
    return terms


__all__ = [
    "NO_PRUNING",
    "Vocabulary",
    "count_documents",
    "extract_samples",
    "find_rare_words",
]
