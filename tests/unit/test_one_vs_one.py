from __future__ import annotations

import numpy as np
import pytest

from textlearn.classifiers.logistic import LogisticRegression
from textlearn.classifiers.one_vs_one import OneAgainstOne
from textlearn.optimization import GradientDescent, SparseTextGradientDescent
from textlearn.vocabulary import Vocabulary

VOTES_TARGET = np.array([10.0, 0.0])
VOTES_OTHER = np.array([-10.0, 0.0])


def test_builds_one_model_per_class_pair(topic_training_set) -> None:
    vocabulary = Vocabulary.from_training_set(topic_training_set)
    optimizer = SparseTextGradientDescent(0.5, 200, random_state=0)

    model = OneAgainstOne.from_text(vocabulary, topic_training_set, optimizer, random_state=0)

    assert model.pairs == ((0.0, 1.0), (0.0, 2.0), (1.0, 2.0))
    for label, documents in topic_training_set.items():
        for document in documents:
            assert model.classify(document) == label
            assert model.votes(document)[label] == 2


def test_majority_vote_over_vectors() -> None:
    model = OneAgainstOne(
        {
            (0.0, 1.0): LogisticRegression(VOTES_OTHER),
            (0.0, 2.0): LogisticRegression(VOTES_OTHER),
            (1.0, 2.0): LogisticRegression(VOTES_OTHER),
        }
    )

    assert model.predict([1.0]) == 2.0


def test_ties_go_to_the_lowest_class_id() -> None:
    model = OneAgainstOne(
        {
            (0.0, 1.0): LogisticRegression(VOTES_TARGET),
            (0.0, 2.0): LogisticRegression(VOTES_OTHER),
            (1.0, 2.0): LogisticRegression(VOTES_TARGET),
        }
    )

    assert model.predict([1.0]) == 0.0


def test_from_vectors_learns_clusters() -> None:
    features = np.array([[0.0, 4.0], [0.2, 4.1], [4.0, 0.0], [4.1, 0.2], [-4.0, -4.0], [-4.2, -4.1]])
    labels = np.array([0.0, 0.0, 1.0, 1.0, 2.0, 2.0])

    model = OneAgainstOne.from_vectors(
        features, labels, GradientDescent(0.5, 300, random_state=0), random_state=0
    )

    assert len(model.pairs) == 3
    assert [model.predict(row) for row in features] == labels.tolist()


def test_invalid_input_is_rejected(topic_training_set) -> None:
    vocabulary = Vocabulary.from_training_set(topic_training_set)
    optimizer = SparseTextGradientDescent(0.1, 5)

    with pytest.raises(ValueError):
        OneAgainstOne({})
    with pytest.raises(ValueError):
        OneAgainstOne({(2.0, 1.0): LogisticRegression(VOTES_TARGET)})
    with pytest.raises(ValueError):
        OneAgainstOne.from_text(vocabulary, {1.0: topic_training_set[1.0]}, optimizer)

    model = OneAgainstOne.from_text(vocabulary, topic_training_set, optimizer)
    with pytest.raises(ValueError):
        model.classify([])
    with pytest.raises(ValueError):
        model.predict([1.0])
