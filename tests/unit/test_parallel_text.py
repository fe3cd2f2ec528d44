from __future__ import annotations

import numpy as np
import pytest

from textlearn.activation import sigmoid, sparse_dot
from textlearn.classifiers.base import initial_coefficients
from textlearn.optimization import ParallelTextGradientDescent


def test_hogwild_separates_disjoint_vocabularies(binary_samples, binary_vocabulary) -> None:
    coefficients = initial_coefficients(len(binary_vocabulary) + 1, random_state=3)
    optimizer = ParallelTextGradientDescent(0.5, 200, workers=4, random_state=7)

    report = optimizer.stochastic(binary_samples, coefficients)

    assert report.epochs == 200
    for sample in binary_samples:
        probability = sigmoid(coefficients[-1] + sparse_dot(sample.features, coefficients))
        assert (1.0 if probability > 0.5 else 0.0) == sample.class_id


def test_result_is_written_back_into_caller_array(binary_samples, binary_vocabulary) -> None:
    coefficients = np.zeros(len(binary_vocabulary) + 1)
    optimizer = ParallelTextGradientDescent(0.1, 3, workers=2, random_state=0)

    optimizer.optimize(binary_samples, coefficients)

    assert np.any(coefficients != 0.0)


def test_always_true_stopping_criteria_halts_after_one_epoch(binary_samples, binary_vocabulary):
    optimizer = ParallelTextGradientDescent(
        0.1, 1000, lambda _error: True, workers=3, random_state=0
    )

    report = optimizer.stochastic(binary_samples, np.zeros(len(binary_vocabulary) + 1))

    assert report.epochs == 1


def test_epoch_error_accounts_for_every_sample(binary_samples, binary_vocabulary) -> None:
    # zero coefficients give every sample an error of exactly 0.5
    optimizer = ParallelTextGradientDescent(
        1e-9, 1, workers=4, reshuffle_probability=0.0, random_state=0
    )

    report = optimizer.stochastic(binary_samples, np.zeros(len(binary_vocabulary) + 1))

    assert report.squared_error == pytest.approx(len(binary_samples) * 0.25, rel=1e-6)


def test_more_workers_than_samples(binary_samples, binary_vocabulary) -> None:
    optimizer = ParallelTextGradientDescent(0.1, 2, workers=64, random_state=0)

    report = optimizer.stochastic(binary_samples[:3], np.zeros(len(binary_vocabulary) + 1))

    assert report.epochs == 2


def test_invalid_arguments_are_rejected(binary_samples) -> None:
    with pytest.raises(ValueError):
        ParallelTextGradientDescent(0.1, 10, workers=0)
    with pytest.raises(ValueError):
        ParallelTextGradientDescent(0.1, 10, reshuffle_probability=1.5)
    with pytest.raises(ValueError):
        ParallelTextGradientDescent(0.1, 10).stochastic([], np.zeros(3))
    with pytest.raises(ValueError):
        ParallelTextGradientDescent(0.1, 10).stochastic(binary_samples, np.zeros(2))


def test_absent_terms_are_never_touched(binary_samples, binary_vocabulary) -> None:
    # two trailing feature slots that no sample references, followed by the bias
    coefficients = initial_coefficients(len(binary_vocabulary) + 3, random_state=5)
    unused = coefficients[-3:-1].copy()
    optimizer = ParallelTextGradientDescent(0.3, 20, l2_lambda=0.5, workers=4, random_state=2)

    optimizer.stochastic(binary_samples, coefficients)

    assert coefficients[-3:-1].tolist() == unused.tolist()
