from __future__ import annotations

import numpy as np
import pytest
from scipy.special import expit

from textlearn.optimization import GradientDescent

FEATURES = np.array([[-2.0, 0.5], [-1.0, -0.5], [-1.5, 0.0], [1.0, 0.5], [2.0, -0.5], [1.5, 0.0]])
TARGETS = np.array([0.0, 0.0, 0.0, 1.0, 1.0, 1.0])


def _predictions(coefficients: np.ndarray) -> np.ndarray:
    return (expit(FEATURES @ coefficients[:-1] + coefficients[-1]) > 0.5).astype(float)


@pytest.mark.parametrize("batch_size", [None, 2])
def test_optimize_learns_separable_data(batch_size) -> None:
    coefficients = np.zeros(3)
    optimizer = GradientDescent(0.5, 300, batch_size=batch_size, random_state=0)

    report = optimizer.optimize(FEATURES, TARGETS, coefficients)

    assert report.epochs == 300
    assert _predictions(coefficients).tolist() == TARGETS.tolist()


def test_full_batch_learns_separable_data() -> None:
    coefficients = np.zeros(3)

    GradientDescent(1.0, 500).batch(FEATURES, TARGETS, coefficients)

    assert _predictions(coefficients).tolist() == TARGETS.tolist()


def test_mini_batch_of_one_matches_stochastic() -> None:
    stochastic = np.array([0.1, -0.2, 0.05])
    mini_batch = stochastic.copy()

    GradientDescent(0.3, 10, l2_lambda=0.05, random_state=9).stochastic(
        FEATURES, TARGETS, stochastic
    )
    GradientDescent(0.3, 10, l2_lambda=0.05, random_state=9).mini_batch(
        FEATURES, TARGETS, mini_batch, 1
    )

    assert np.allclose(stochastic, mini_batch)


def test_always_true_stopping_criteria_halts_after_one_epoch() -> None:
    optimizer = GradientDescent(0.1, 100, lambda _error: True)

    assert optimizer.stochastic(FEATURES, TARGETS, np.zeros(3)).epochs == 1
    assert optimizer.batch(FEATURES, TARGETS, np.zeros(3)).epochs == 1


def test_dimension_mismatches_are_rejected() -> None:
    optimizer = GradientDescent(0.1, 5)

    with pytest.raises(ValueError):
        optimizer.stochastic(FEATURES, TARGETS, np.zeros(2))
    with pytest.raises(ValueError):
        optimizer.stochastic(FEATURES, TARGETS[:-1], np.zeros(3))
    with pytest.raises(ValueError):
        optimizer.stochastic(np.empty((0, 2)), np.empty(0), np.zeros(3))
    with pytest.raises(ValueError):
        optimizer.mini_batch(FEATURES, TARGETS, np.zeros(3), 7)
