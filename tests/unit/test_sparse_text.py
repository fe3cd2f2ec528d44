from __future__ import annotations

import numpy as np
import pytest

from textlearn.activation import sigmoid, sparse_dot
from textlearn.classifiers.base import initial_coefficients
from textlearn.optimization import SparseTextGradientDescent, squared_error_below
from textlearn.types import SparseVector, TextSample


def _accuracy(samples: list[TextSample], coefficients: np.ndarray) -> float:
    correct = 0
    for sample in samples:
        probability = sigmoid(coefficients[-1] + sparse_dot(sample.features, coefficients))
        correct += (1.0 if probability > 0.5 else 0.0) == sample.class_id
    return correct / len(samples)


def test_stochastic_separates_disjoint_vocabularies(binary_samples, binary_vocabulary) -> None:
    coefficients = initial_coefficients(len(binary_vocabulary) + 1, random_state=3)
    optimizer = SparseTextGradientDescent(0.5, 200, random_state=7)

    report = optimizer.stochastic(binary_samples, coefficients)

    assert report.epochs == 200
    assert _accuracy(binary_samples, coefficients) == 1.0


def test_epoch_error_shrinks_with_training(binary_samples, binary_vocabulary) -> None:
    short = initial_coefficients(len(binary_vocabulary) + 1, random_state=0)
    long = short.copy()

    first = SparseTextGradientDescent(0.5, 1, random_state=1).stochastic(binary_samples, short)
    last = SparseTextGradientDescent(0.5, 100, random_state=1).stochastic(binary_samples, long)

    assert last.squared_error < first.squared_error


def test_absent_terms_are_never_touched(binary_samples, binary_vocabulary) -> None:
    # two trailing feature slots that no sample references, followed by the bias
    coefficients = initial_coefficients(len(binary_vocabulary) + 3, random_state=5)
    unused = coefficients[-3:-1].copy()
    optimizer = SparseTextGradientDescent(0.3, 20, l2_lambda=0.5, random_state=2)

    optimizer.stochastic(binary_samples, coefficients)

    assert coefficients[-3:-1].tolist() == unused.tolist()


def test_absent_terms_are_never_touched_by_mini_batch(binary_samples, binary_vocabulary) -> None:
    coefficients = initial_coefficients(len(binary_vocabulary) + 3, random_state=5)
    unused = coefficients[-3:-1].copy()
    optimizer = SparseTextGradientDescent(0.3, 20, l2_lambda=0.5, random_state=2)

    optimizer.mini_batch(binary_samples, coefficients, 4)

    assert coefficients[-3:-1].tolist() == unused.tolist()


def test_bias_is_not_regularised() -> None:
    samples = [TextSample(1.0, SparseVector.empty())]
    coefficients = np.array([0.0, 1.0])
    optimizer = SparseTextGradientDescent(0.1, 1, l2_lambda=10.0, random_state=0)

    optimizer.stochastic(samples, coefficients)

    assert coefficients[0] == 0.0
    assert coefficients[1] == pytest.approx(1.0 + 0.1 * (1.0 - sigmoid(1.0)))


def test_mini_batch_of_one_matches_stochastic(binary_samples, binary_vocabulary) -> None:
    stochastic = initial_coefficients(len(binary_vocabulary) + 1, random_state=11)
    mini_batch = stochastic.copy()

    SparseTextGradientDescent(0.2, 15, l2_lambda=0.01, random_state=4).stochastic(
        binary_samples, stochastic
    )
    SparseTextGradientDescent(0.2, 15, l2_lambda=0.01, random_state=4).mini_batch(
        binary_samples, mini_batch, 1
    )

    assert np.allclose(stochastic, mini_batch)


def test_mini_batch_separates_disjoint_vocabularies(binary_samples, binary_vocabulary) -> None:
    coefficients = initial_coefficients(len(binary_vocabulary) + 1, random_state=3)
    optimizer = SparseTextGradientDescent(1.0, 300, batch_size=5, random_state=7)

    report = optimizer.optimize(binary_samples, coefficients)

    assert report.epochs == 300
    assert _accuracy(binary_samples, coefficients) == 1.0


@pytest.mark.parametrize("batch_size", [0, 21])
def test_mini_batch_rejects_invalid_batch_size(
    binary_samples, binary_vocabulary, batch_size
) -> None:
    coefficients = np.zeros(len(binary_vocabulary) + 1)
    optimizer = SparseTextGradientDescent(0.1, 5)

    with pytest.raises(ValueError):
        optimizer.mini_batch(binary_samples, coefficients, batch_size)


def test_always_true_stopping_criteria_halts_after_one_epoch(binary_samples, binary_vocabulary):
    optimizer = SparseTextGradientDescent(0.1, 1000, lambda _error: True, random_state=0)

    report = optimizer.stochastic(binary_samples, np.zeros(len(binary_vocabulary) + 1))
    batched = optimizer.mini_batch(binary_samples, np.zeros(len(binary_vocabulary) + 1), 3)

    assert report.epochs == 1
    assert batched.epochs == 1


def test_tolerance_stops_early(binary_samples, binary_vocabulary) -> None:
    optimizer = SparseTextGradientDescent(1.0, 5000, squared_error_below(0.05), random_state=0)

    report = optimizer.stochastic(binary_samples, np.zeros(len(binary_vocabulary) + 1))

    assert report.epochs < 5000
    assert report.squared_error < 0.05


def test_invalid_arguments_are_rejected(binary_samples, binary_vocabulary) -> None:
    with pytest.raises(ValueError):
        SparseTextGradientDescent(0.0, 10)
    with pytest.raises(ValueError):
        SparseTextGradientDescent(0.1, 0)
    with pytest.raises(ValueError):
        SparseTextGradientDescent(0.1, 10, l2_lambda=-1.0)
    with pytest.raises(ValueError):
        SparseTextGradientDescent(0.1, 10, batch_size=0)

    optimizer = SparseTextGradientDescent(0.1, 10)
    with pytest.raises(ValueError):
        optimizer.stochastic([], np.zeros(3))
    with pytest.raises(ValueError):
        # term ids would address the bias slot
        optimizer.stochastic(binary_samples, np.zeros(len(binary_vocabulary)))
