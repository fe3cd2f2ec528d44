from __future__ import annotations

import numpy as np
import pytest

from textlearn.classifiers.softmax import SoftMaxRegression
from textlearn.optimization import SoftMaxOptimizer, SoftMaxVectorOptimizer
from textlearn.vocabulary import Vocabulary


@pytest.fixture
def model(topic_training_set) -> SoftMaxRegression:
    vocabulary = Vocabulary.from_training_set(topic_training_set)
    optimizer = SoftMaxOptimizer(0.5, 150, random_state=3)
    return SoftMaxRegression.from_text(vocabulary, topic_training_set, optimizer, random_state=3)


def test_classifies_every_training_document(model, topic_training_set) -> None:
    for label, documents in topic_training_set.items():
        for document in documents:
            assert model.classify(document) == label


def test_probabilities_form_a_distribution(model) -> None:
    probabilities = model.probabilities(["oven", "flour", "goal"])

    assert set(probabilities) == {0.0, 1.0, 2.0}
    assert sum(probabilities.values()) == pytest.approx(1.0)

    result = model.classify_with_probability(["vote", "senate"])
    assert result.class_id == 1.0
    assert result.probability == pytest.approx(max(result.probabilities.values()))


def test_unknown_words_fall_back_to_biases(model) -> None:
    probabilities = model.probabilities(["zeppelin"])
    biases = model.coefficients[:, -1]
    expected = np.exp(biases - biases.max())
    expected /= expected.sum()

    assert list(probabilities.values()) == pytest.approx(expected.tolist())


def test_coefficient_rows_follow_class_order() -> None:
    theta = np.array([[0.0, 2.0], [0.0, 1.0], [0.0, 3.0]])

    model = SoftMaxRegression([5.0, 1.0, 3.0], theta)

    assert model.classes == (1.0, 3.0, 5.0)
    assert model.coefficients[:, -1].tolist() == [1.0, 3.0, 2.0]
    assert model.predict([0.0]) == 3.0


def test_ties_go_to_the_lowest_class_id() -> None:
    model = SoftMaxRegression([2.0, 7.0, 4.0], np.zeros((3, 2)))

    assert model.predict([1.5]) == 2.0


def test_from_vectors_learns_clusters() -> None:
    data = {
        0.0: [[0.0, 4.0], [0.2, 3.9]],
        1.0: [[4.0, 0.0], [3.8, 0.1]],
        2.0: [[-4.0, -4.0], [-3.9, -4.1]],
    }

    model = SoftMaxRegression.from_vectors(
        data, SoftMaxVectorOptimizer(0.2, 300, random_state=0), random_state=0
    )

    for label, vectors in data.items():
        for vector in vectors:
            assert model.predict(vector) == label
    assert sum(model.predict_probabilities([0.0, 4.0]).values()) == pytest.approx(1.0)


def test_invalid_input_is_rejected(model, topic_training_set) -> None:
    vocabulary = Vocabulary.from_training_set(topic_training_set)
    optimizer = SoftMaxOptimizer(0.1, 5)

    with pytest.raises(ValueError):
        SoftMaxRegression.from_text(vocabulary, {0.0: topic_training_set[0.0]}, optimizer)
    with pytest.raises(ValueError):
        SoftMaxRegression([1.0], np.zeros((1, 2)))
    with pytest.raises(ValueError):
        SoftMaxRegression([1.0, 2.0], np.zeros((3, 2)))
    with pytest.raises(ValueError):
        model.classify([])
    with pytest.raises(ValueError):
        model.predict([1.0])
