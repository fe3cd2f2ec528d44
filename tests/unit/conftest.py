from __future__ import annotations

import pytest

from textlearn.types import TextSample
from textlearn.vocabulary import Vocabulary, extract_samples

POSITIVE_WORDS = ["great", "excellent", "wonderful", "superb", "lovely"]
NEGATIVE_WORDS = ["awful", "terrible", "horrible", "dreadful", "poor"]
TOPIC_WORDS = {
    0.0: ["goal", "match", "striker", "league", "referee"],
    1.0: ["vote", "senate", "election", "minister", "policy"],
    2.0: ["recipe", "oven", "flour", "butter", "dough"],
}


def _documents(words: list[str], count: int) -> list[list[str]]:
    size = len(words)
    return [[words[i % size], words[(i + 1) % size], words[(i + 3) % size]] for i in range(count)]


@pytest.fixture
def binary_training_set() -> dict[float, list[list[str]]]:
    """Twenty documents in two classes with disjoint vocabularies."""

    return {
        1.0: _documents(POSITIVE_WORDS, 10),
        0.0: _documents(NEGATIVE_WORDS, 10),
    }


@pytest.fixture
def topic_training_set() -> dict[float, list[list[str]]]:
    return {label: _documents(words, 8) for label, words in TOPIC_WORDS.items()}


@pytest.fixture
def binary_vocabulary(binary_training_set) -> Vocabulary:
    return Vocabulary.from_training_set(binary_training_set)


@pytest.fixture
def binary_samples(binary_training_set, binary_vocabulary) -> list[TextSample]:
    return extract_samples(binary_training_set, binary_vocabulary)
