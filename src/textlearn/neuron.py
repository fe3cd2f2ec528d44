"""A single artificial neuron for linear regression or binary classification.

The neuron computes ``quantization(activation(w . x + bias))``; its weights
are learned by a supervisor such as :class:`~textlearn.optimization.Perceptron`
or :class:`~textlearn.optimization.DeltaRule`. As everywhere in textlearn the
bias is stored as the last weight.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import numpy as np

from .classifiers.base import initial_coefficients
from .optimization.perceptron import Activation
from .types import ConvergenceReport


class Supervisor(Protocol):
    """Learning rule that adjusts a neuron's weights in place."""

    def train(
        self,
        features: np.ndarray | Sequence[Sequence[float]],
        expected: np.ndarray | Sequence[float],
        weights: np.ndarray,
        activation: Activation,
    ) -> ConvergenceReport:
        ...


class Neuron:
    def __init__(
        self,
        weights: np.ndarray | Sequence[float],
        activation: Activation,
        supervisor: Supervisor,
        *,
        quantization: Activation | None = None,
    ) -> None:
        values = np.array(weights, dtype=np.float64)
        if values.ndim != 1 or values.shape[0] < 2:
            raise ValueError("weights must hold at least one feature weight and the bias")
        self._weights = values
        self._activation = activation
        self._supervisor = supervisor
        self._quantization = quantization
        self.report: ConvergenceReport | None = None

    @classmethod
    def with_features(
        cls,
        features: int,
        activation: Activation,
        supervisor: Supervisor,
        *,
        quantization: Activation | None = None,
        random_state: int | np.random.RandomState | None = None,
    ) -> Neuron:
        """Neuron for ``features`` inputs with random weights in [-0.5, 0.5)."""

        if features < 1:
            raise ValueError(f"features must be positive, got {features}")
        weights = initial_coefficients(features + 1, random_state)
        return cls(weights, activation, supervisor, quantization=quantization)

    @property
    def weights(self) -> np.ndarray:
        return self._weights.copy()

    @property
    def features(self) -> int:
        return self._weights.shape[0] - 1

    def output(self, features: np.ndarray | Sequence[float]) -> float:
        vector = np.asarray(features, dtype=np.float64)
        if vector.shape != (self.features,):
            raise ValueError(f"Expected {self.features} features, got {vector.shape}")
        value = self._activation(self._weights[-1] + float(np.dot(vector, self._weights[:-1])))
        if self._quantization is not None:
            return self._quantization(value)
        return value

    def train(
        self,
        features: np.ndarray | Sequence[Sequence[float]],
        expected: np.ndarray | Sequence[float],
    ) -> ConvergenceReport:
        """Let the supervisor fit the weights to ``features`` and ``expected``."""

        self.report = self._supervisor.train(features, expected, self._weights, self._activation)
        return self.report


__all__ = ["Neuron", "Supervisor"]
