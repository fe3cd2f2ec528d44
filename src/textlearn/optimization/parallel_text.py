"""Hogwild-style parallel stochastic gradient descent over sparse samples.

Each epoch the shuffled samples are split across a thread pool and every
worker applies the sequential update rule directly to one shared
``AtomicDoubleArray``. Different indices are never locked against each
other, so concurrent updates of the same coefficient may be lost. Samples
are short compared to the vocabulary, which keeps such collisions rare,
and they are tolerated as approximation noise.

The epoch's squared error is summed in a ``DoubleAdder`` and read only
after every worker future of the epoch has completed, so the stopping
criteria always sees the contribution of all samples and the next epoch
starts from a drained pool.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor

import numpy as np

from ..activation import sigmoid
from ..types import ConvergenceReport, TextSample
from .base import (
    DescentSettings,
    EpochLoop,
    require_coefficients,
    require_samples,
    require_term_range,
    resolve_rng,
)
from .concurrent import AtomicDoubleArray, DoubleAdder
from .stopping import StoppingCriteria, never_stop


def default_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


class ParallelTextGradientDescent:
    """Lock-free parallel descent for binary logistic models."""

    def __init__(
        self,
        learning_rate: float,
        epochs: int,
        stopping_criteria: StoppingCriteria = never_stop,
        *,
        l2_lambda: float = 0.0,
        workers: int | None = None,
        reshuffle_probability: float = 1.0,
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
        if workers is not None and workers < 1:
            raise ValueError(f"workers must be positive, got {workers}")
        if not 0.0 <= reshuffle_probability <= 1.0:
            raise ValueError(
                f"reshuffle_probability must be within [0, 1], got {reshuffle_probability}"
            )
        self._workers = workers or default_workers()
        self._reshuffle_probability = reshuffle_probability
        self._rng = resolve_rng(random_state)

    @property
    def settings(self) -> DescentSettings:
        return self._settings

    @property
    def workers(self) -> int:
        return self._workers

    def optimize(self, samples: Sequence[TextSample], coefficients: np.ndarray) -> ConvergenceReport:
        return self.stochastic(samples, coefficients)

    def stochastic(self, samples: Sequence[TextSample], coefficients: np.ndarray) -> ConvergenceReport:
        """Train ``coefficients`` in parallel and write the result back in place."""

        require_samples(samples)
        require_coefficients(coefficients)
        require_term_range(samples, coefficients)

        settings = self._settings
        shared = AtomicDoubleArray(coefficients)
        errors = DoubleAdder()
        loop = EpochLoop(settings, "hogwild")
        order = self._rng.permutation(len(samples))
        chunks = min(self._workers, len(samples))

        with ThreadPoolExecutor(max_workers=chunks, thread_name_prefix="hogwild") as pool:
            while loop.completed < settings.epochs:
                if loop.completed and self._rng.random_sample() < self._reshuffle_probability:
                    order = self._rng.permutation(len(samples))
                futures: list[Future[None]] = [
                    pool.submit(self._run_chunk, samples, part, shared, errors)
                    for part in np.array_split(order, chunks)
                ]
                for future in futures:
                    future.result()
                if loop.finish_epoch(errors.sum_then_reset()):
                    break

        shared.write_back(coefficients)
        return loop.report()

    def _run_chunk(
        self,
        samples: Sequence[TextSample],
        indices: np.ndarray,
        shared: AtomicDoubleArray,
        errors: DoubleAdder,
    ) -> None:
        settings = self._settings
        learning_rate = settings.learning_rate
        bias = len(shared) - 1
        squared_error = 0.0
        for index in indices:
            sample = samples[index]
            estimate = sigmoid(shared.get(bias) + shared.dot(sample.features))
            error = sample.class_id - estimate
            update = error * learning_rate
            shared.l2_update(sample.features, update, settings.l2_lambda, learning_rate)
            shared.add_and_get(bias, update)
            squared_error += error * error
        errors.add(squared_error)


__all__ = ["ParallelTextGradientDescent", "default_workers"]
