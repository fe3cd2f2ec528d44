"""Gradient descent for logistic models over dense feature vectors."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from scipy.special import expit

from ..activation import sigmoid
from ..types import ConvergenceReport
from .base import DescentSettings, EpochLoop, resolve_rng
from .regularization import l2_update_dense
from .stopping import StoppingCriteria, never_stop


class GradientDescent:
    """Stochastic, mini-batch and full-batch descent; the bias is the last coefficient."""

    def __init__(
        self,
        learning_rate: float,
        epochs: int,
        stopping_criteria: StoppingCriteria = never_stop,
        *,
        l2_lambda: float = 0.0,
        batch_size: int | None = None,
        verbose: bool = False,
        random_state: int | np.random.RandomState | None = None,
    ) -> None:
        self._settings = DescentSettings(
            learning_rate=learning_rate,
            epochs=epochs,
            stopping_criteria=stopping_criteria,
            l2_lambda=l2_lambda,
            verbose=verbose,
        )
        if batch_size is not None and batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self._batch_size = batch_size
        self._rng = resolve_rng(random_state)

    @property
    def settings(self) -> DescentSettings:
        return self._settings

    def optimize(
        self,
        features: np.ndarray | Sequence[Sequence[float]],
        expected: np.ndarray | Sequence[float],
        coefficients: np.ndarray,
    ) -> ConvergenceReport:
        if self._batch_size is None:
            return self.stochastic(features, expected, coefficients)
        return self.mini_batch(features, expected, coefficients, self._batch_size)

    def stochastic(
        self,
        features: np.ndarray | Sequence[Sequence[float]],
        expected: np.ndarray | Sequence[float],
        coefficients: np.ndarray,
    ) -> ConvergenceReport:
        matrix, targets = validate_dense(features, expected, coefficients)
        settings = self._settings
        learning_rate = settings.learning_rate
        loop = EpochLoop(settings, "dense stochastic")

        while loop.completed < settings.epochs:
            squared_error = 0.0
            for row in self._rng.permutation(matrix.shape[0]):
                error = targets[row] - _estimate(matrix[row], coefficients)
                update = error * learning_rate
                l2_update_dense(matrix[row], coefficients, update, settings.l2_lambda, learning_rate)
                coefficients[-1] += update
                squared_error += error * error
            if loop.finish_epoch(squared_error):
                break
        return loop.report()

    def mini_batch(
        self,
        features: np.ndarray | Sequence[Sequence[float]],
        expected: np.ndarray | Sequence[float],
        coefficients: np.ndarray,
        batch_size: int,
    ) -> ConvergenceReport:
        matrix, targets = validate_dense(features, expected, coefficients)
        samples = matrix.shape[0]
        if batch_size < 1 or batch_size > samples:
            raise ValueError(f"batch size: {batch_size} must be between 1 and {samples} samples")
        settings = self._settings
        update_factor = settings.learning_rate / batch_size
        loop = EpochLoop(settings, "dense mini-batch")

        while loop.completed < settings.epochs:
            squared_error = 0.0
            order = self._rng.permutation(samples)
            for start in range(0, samples, batch_size):
                rows = order[start : start + batch_size]
                errors = targets[rows] - _estimates(matrix[rows], coefficients)
                squared_error += float(np.dot(errors, errors))
                gradient = errors @ matrix[rows]
                penalty = settings.l2_lambda * update_factor * coefficients[:-1]
                coefficients[:-1] += gradient * update_factor - penalty
                coefficients[-1] += float(errors.sum()) * update_factor
            if loop.finish_epoch(squared_error):
                break
        return loop.report()

    def batch(
        self,
        features: np.ndarray | Sequence[Sequence[float]],
        expected: np.ndarray | Sequence[float],
        coefficients: np.ndarray,
    ) -> ConvergenceReport:
        """Full-batch descent: one averaged update per epoch."""

        samples = len(expected)
        return self.mini_batch(features, expected, coefficients, samples)


def _estimate(features: np.ndarray, coefficients: np.ndarray) -> float:
    return sigmoid(coefficients[-1] + float(np.dot(features, coefficients[:-1])))


def _estimates(matrix: np.ndarray, coefficients: np.ndarray) -> np.ndarray:
    return expit(matrix @ coefficients[:-1] + coefficients[-1])


def validate_dense(
    features: np.ndarray | Sequence[Sequence[float]],
    expected: np.ndarray | Sequence[float],
    coefficients: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    matrix = np.asarray(features, dtype=np.float64)
    targets = np.asarray(expected, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[0] == 0:
        raise ValueError("features must be a non-empty two dimensional matrix")
    if targets.shape != (matrix.shape[0],):
        raise ValueError(
            f"Expected {matrix.shape[0]} target values, got {targets.shape[0] if targets.ndim else 0}"
        )
    if coefficients.shape != (matrix.shape[1] + 1,):
        raise ValueError(
            f"Expected {matrix.shape[1] + 1} coefficients (features + bias), got {coefficients.shape}"
        )
    return matrix, targets


__all__ = ["GradientDescent", "validate_dense"]
