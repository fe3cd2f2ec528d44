"""Sequential gradient descent over sparse TF-IDF samples.

Update rule (delta rule for sigmoid activation with cross-entropy loss)::

    w_j += (y - h(x)) * x_j * learning_rate - lambda * learning_rate * w_j

Only the coefficients of terms present in a sample are touched, so the cost
of an update is proportional to the document length rather than the size
of the vocabulary. The bias is stored in the last slot and is never
regularised.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from ..activation import sigmoid, sparse_dot
from ..types import ConvergenceReport, TextSample
from .base import (
    DescentSettings,
    EpochLoop,
    require_coefficients,
    require_samples,
    require_term_range,
    resolve_rng,
)
from .regularization import l2_update
from .stopping import StoppingCriteria, never_stop


class SparseTextGradientDescent:
    """Stochastic and mini-batch descent for binary logistic models."""

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

    @property
    def batch_size(self) -> int | None:
        return self._batch_size

    def optimize(self, samples: Sequence[TextSample], coefficients: np.ndarray) -> ConvergenceReport:
        """Run mini-batch descent when a batch size was configured, else stochastic."""

        if self._batch_size is None:
            return self.stochastic(samples, coefficients)
        return self.mini_batch(samples, coefficients, self._batch_size)

    def stochastic(self, samples: Sequence[TextSample], coefficients: np.ndarray) -> ConvergenceReport:
        """Update ``coefficients`` in place after every sample."""

        _validate(samples, coefficients)
        settings = self._settings
        learning_rate = settings.learning_rate
        bias = coefficients.shape[0] - 1
        loop = EpochLoop(settings, "stochastic")

        while loop.completed < settings.epochs:
            squared_error = 0.0
            for index in self._rng.permutation(len(samples)):
                sample = samples[index]
                error = _error(sample, coefficients, bias)
                update = error * learning_rate
                l2_update(sample.features, coefficients, update, settings.l2_lambda, learning_rate)
                coefficients[bias] += update
                squared_error += error * error
            if loop.finish_epoch(squared_error):
                break
        return loop.report()

    def mini_batch(
        self,
        samples: Sequence[TextSample],
        coefficients: np.ndarray,
        batch_size: int,
    ) -> ConvergenceReport:
        """Accumulate gradients and apply their average every ``batch_size`` samples."""

        _validate(samples, coefficients)
        total = len(samples)
        if batch_size < 1 or batch_size > total:
            raise ValueError(f"batch size: {batch_size} must be between 1 and {total} samples")

        settings = self._settings
        bias = coefficients.shape[0] - 1
        update_factor = settings.learning_rate / batch_size
        gradient = np.zeros_like(coefficients)
        loop = EpochLoop(settings, "mini-batch")

        while loop.completed < settings.epochs:
            squared_error = 0.0
            touched: list[np.ndarray] = []
            for position, index in enumerate(self._rng.permutation(total)):
                sample = samples[index]
                error = _error(sample, coefficients, bias)
                squared_error += error * error
                features = sample.features
                gradient[features.term_ids] += features.values * error
                gradient[bias] += error
                touched.append(features.term_ids)
                if len(touched) == batch_size or position == total - 1:
                    _apply_batch(gradient, coefficients, touched, update_factor, settings.l2_lambda)
                    touched = []
            if loop.finish_epoch(squared_error):
                break
        return loop.report()


def _apply_batch(
    gradient: np.ndarray,
    coefficients: np.ndarray,
    touched: list[np.ndarray],
    update_factor: float,
    l2_lambda: float,
) -> None:
    bias = coefficients.shape[0] - 1
    ids = np.unique(np.concatenate(touched))
    if ids.size:
        penalty = l2_lambda * update_factor * coefficients[ids]
        coefficients[ids] += gradient[ids] * update_factor - penalty
        gradient[ids] = 0.0
    coefficients[bias] += gradient[bias] * update_factor
    gradient[bias] = 0.0


def _error(sample: TextSample, coefficients: np.ndarray, bias: int) -> float:
    estimate = sigmoid(coefficients[bias] + sparse_dot(sample.features, coefficients))
    return sample.class_id - estimate


def _validate(samples: Sequence[TextSample], coefficients: np.ndarray) -> None:
    require_samples(samples)
    require_coefficients(coefficients)
    require_term_range(samples, coefficients)


__all__ = ["SparseTextGradientDescent"]
