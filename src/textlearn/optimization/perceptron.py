"""Learning rules that train a single :class:`~textlearn.neuron.Neuron`.

Every rule receives the sample matrix, the expected outputs, the neuron's
weights (bias last, updated in place) and the neuron's activation function.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

import numpy as np

from ..activation import sigmoid
from ..types import ConvergenceReport
from .base import DescentSettings, EpochLoop
from .dense import GradientDescent, validate_dense

LOGGER = logging.getLogger(__name__)

Activation = Callable[[float], float]
BIPOLAR = (-1.0, 1.0)


def _separated(squared_error: float) -> bool:
    return squared_error == 0.0


class Perceptron:
    """Perceptron rule for bipolar targets.

    A misclassified sample moves the weights by ``target * learning_rate * x``
    and a correct one leaves them alone. Training ends with the first epoch
    that has no mistakes, which always happens for linearly separable data;
    otherwise it runs for ``epochs`` epochs.
    """

    def __init__(self, learning_rate: float = 0.2, epochs: int = 1000, *, verbose: bool = False) -> None:
        self._settings = DescentSettings(
            learning_rate=learning_rate,
            epochs=epochs,
            stopping_criteria=_separated,
            verbose=verbose,
        )

    @property
    def settings(self) -> DescentSettings:
        return self._settings

    def train(
        self,
        features: np.ndarray | Sequence[Sequence[float]],
        expected: np.ndarray | Sequence[float],
        weights: np.ndarray,
        activation: Activation,
    ) -> ConvergenceReport:
        matrix, targets = validate_dense(features, expected, weights)
        if not np.isin(targets, BIPOLAR).all():
            raise ValueError("perceptron targets must be -1 or 1")
        learning_rate = self._settings.learning_rate
        loop = EpochLoop(self._settings, "perceptron")

        while loop.completed < self._settings.epochs:
            squared_error = 0.0
            for row, target in zip(matrix, targets):
                output = activation(weights[-1] + float(np.dot(row, weights[:-1])))
                if output != target:
                    delta = target * learning_rate
                    weights[:-1] += row * delta
                    weights[-1] += delta
                    squared_error += (target - output) ** 2
            if loop.finish_epoch(squared_error):
                break

        if loop.squared_error > 0:
            LOGGER.warning(
                "perceptron stopped after %d epochs with misclassified samples", loop.completed
            )
        return loop.report()


class DeltaRule:
    """Online delta rule, ``w += learning_rate * (target - output) * x`` per sample.

    Use it with identity activation for least squares or with sigmoid
    activation for cross-entropy. Training stops once every sample in an
    epoch is within ``tolerance`` of its target.
    """

    def __init__(
        self,
        learning_rate: float = 0.002,
        epochs: int = 100_000,
        tolerance: float = 9e-6,
        *,
        verbose: bool = False,
    ) -> None:
        self._settings = DescentSettings(learning_rate=learning_rate, epochs=epochs, verbose=verbose)
        if tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {tolerance}")
        self._tolerance = tolerance

    @property
    def settings(self) -> DescentSettings:
        return self._settings

    @property
    def tolerance(self) -> float:
        return self._tolerance

    def train(
        self,
        features: np.ndarray | Sequence[Sequence[float]],
        expected: np.ndarray | Sequence[float],
        weights: np.ndarray,
        activation: Activation,
    ) -> ConvergenceReport:
        matrix, targets = validate_dense(features, expected, weights)
        learning_rate = self._settings.learning_rate
        loop = EpochLoop(self._settings, "delta rule")

        while loop.completed < self._settings.epochs:
            squared_error = 0.0
            worst = 0.0
            for row, target in zip(matrix, targets):
                error = target - activation(weights[-1] + float(np.dot(row, weights[:-1])))
                update = learning_rate * error
                weights[:-1] += row * update
                weights[-1] += update
                squared_error += error * error
                worst = max(worst, abs(error))
            if loop.finish_epoch(squared_error) or worst < self._tolerance:
                break
        return loop.report()


class DeltaRuleGradientDescent:
    """Delta rule delegated to :class:`GradientDescent`, for sigmoid neurons only."""

    def __init__(self, optimizer: GradientDescent) -> None:
        self._optimizer = optimizer

    def train(
        self,
        features: np.ndarray | Sequence[Sequence[float]],
        expected: np.ndarray | Sequence[float],
        weights: np.ndarray,
        activation: Activation,
    ) -> ConvergenceReport:
        if activation is not sigmoid:
            raise ValueError("gradient descent training requires sigmoid activation")
        return self._optimizer.optimize(features, expected, weights)


__all__ = ["Activation", "DeltaRule", "DeltaRuleGradientDescent", "Perceptron"]
