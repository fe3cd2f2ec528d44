"""Multi-class (softmax) gradient descent with one coefficient vector per class.

For every sample the weighted input ``bias_k + x . w_k`` of each class is
passed through a numerically stable softmax. The true class is trained
towards an activation of 1 and every other class towards 0, each class
using the same sparse delta rule as the binary optimisers. The epoch error
handed to the stopping criteria is the sum of ``error_k ** 2`` over all
samples and classes.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from concurrent.futures import Future, ThreadPoolExecutor

import numpy as np

from ..activation import sparse_dot, stable_softmax
from ..types import ConvergenceReport, TextSample
from .base import DescentSettings, EpochLoop, require_samples, require_term_range, resolve_rng
from .concurrent import AtomicDoubleArray, DoubleAdder
from .parallel_text import default_workers
from .regularization import l2_update, l2_update_dense
from .stopping import StoppingCriteria, never_stop

LOGGER = logging.getLogger(__name__)

TARGET = 1.0
OTHER = 0.0


class SoftMaxOptimizer:
    """Sequential stochastic softmax descent over sparse TF-IDF samples."""

    def __init__(
        self,
        learning_rate: float,
        epochs: int,
        stopping_criteria: StoppingCriteria = never_stop,
        *,
        l2_lambda: float = 0.0,
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
        self._rng = resolve_rng(random_state)

    @property
    def settings(self) -> DescentSettings:
        return self._settings

    def optimize(
        self,
        samples: Sequence[TextSample],
        coefficients: Mapping[float, np.ndarray],
    ) -> ConvergenceReport:
        return self.stochastic(samples, coefficients)

    def stochastic(
        self,
        samples: Sequence[TextSample],
        coefficients: Mapping[float, np.ndarray],
    ) -> ConvergenceReport:
        """Update every class vector of ``coefficients`` in place."""

        classes = validate_class_coefficients(samples, coefficients)
        vectors = [coefficients[label] for label in classes]
        require_term_range(samples, vectors[0])
        settings = self._settings
        learning_rate = settings.learning_rate
        loop = EpochLoop(settings, "softmax")

        while loop.completed < settings.epochs:
            class_errors = np.zeros(len(classes))
            for index in self._rng.permutation(len(samples)):
                sample = samples[index]
                weighted = [vector[-1] + sparse_dot(sample.features, vector) for vector in vectors]
                activations = stable_softmax(weighted)
                for position, (label, vector) in enumerate(zip(classes, vectors)):
                    expected = TARGET if sample.class_id == label else OTHER
                    error = expected - activations[position]
                    update = error * learning_rate
                    l2_update(sample.features, vector, update, settings.l2_lambda, learning_rate)
                    vector[-1] += update
                    class_errors[position] += error * error
            _log_average(settings, loop.completed, class_errors, len(samples))
            if loop.finish_epoch(float(class_errors.sum())):
                break
        return loop.report()


class ParallelSoftMaxOptimizer:
    """Hogwild variant of :class:`SoftMaxOptimizer`.

    Samples are fanned out across a thread pool; every class vector lives in
    its own ``AtomicDoubleArray`` and receives unsynchronised concurrent
    updates. The final state is copied back into the caller's arrays.
    """

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

    def optimize(
        self,
        samples: Sequence[TextSample],
        coefficients: Mapping[float, np.ndarray],
    ) -> ConvergenceReport:
        return self.stochastic(samples, coefficients)

    def stochastic(
        self,
        samples: Sequence[TextSample],
        coefficients: Mapping[float, np.ndarray],
    ) -> ConvergenceReport:
        classes = validate_class_coefficients(samples, coefficients)
        require_term_range(samples, coefficients[classes[0]])
        settings = self._settings
        shared = [AtomicDoubleArray(coefficients[label]) for label in classes]
        errors = [DoubleAdder() for _ in classes]
        loop = EpochLoop(settings, "parallel softmax")
        order = self._rng.permutation(len(samples))
        chunks = min(self._workers, len(samples))

        with ThreadPoolExecutor(max_workers=chunks, thread_name_prefix="softmax") as pool:
            while loop.completed < settings.epochs:
                if loop.completed and self._rng.random_sample() < self._reshuffle_probability:
                    order = self._rng.permutation(len(samples))
                futures: list[Future[None]] = [
                    pool.submit(self._run_chunk, samples, part, classes, shared, errors)
                    for part in np.array_split(order, chunks)
                ]
                for future in futures:
                    future.result()
                class_errors = np.array([adder.sum_then_reset() for adder in errors])
                _log_average(settings, loop.completed, class_errors, len(samples))
                if loop.finish_epoch(float(class_errors.sum())):
                    break

        for label, vector in zip(classes, shared):
            vector.write_back(coefficients[label])
        return loop.report()

    def _run_chunk(
        self,
        samples: Sequence[TextSample],
        indices: np.ndarray,
        classes: list[float],
        shared: list[AtomicDoubleArray],
        errors: list[DoubleAdder],
    ) -> None:
        settings = self._settings
        learning_rate = settings.learning_rate
        local_errors = np.zeros(len(classes))
        for index in indices:
            sample = samples[index]
            weighted = [
                vector.get(len(vector) - 1) + vector.dot(sample.features) for vector in shared
            ]
            activations = stable_softmax(weighted)
            for position, (label, vector) in enumerate(zip(classes, shared)):
                expected = TARGET if sample.class_id == label else OTHER
                error = expected - activations[position]
                update = error * learning_rate
                vector.l2_update(sample.features, update, settings.l2_lambda, learning_rate)
                vector.add_and_get(len(vector) - 1, update)
                local_errors[position] += error * error
        for adder, value in zip(errors, local_errors):
            adder.add(float(value))


class SoftMaxVectorOptimizer:
    """Sequential softmax descent over dense feature vectors."""

    def __init__(
        self,
        learning_rate: float,
        epochs: int,
        stopping_criteria: StoppingCriteria = never_stop,
        *,
        l2_lambda: float = 0.0,
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
        self._rng = resolve_rng(random_state)

    @property
    def settings(self) -> DescentSettings:
        return self._settings

    def optimize(
        self,
        data: Mapping[float, Sequence[Sequence[float] | np.ndarray]],
        coefficients: Mapping[float, np.ndarray],
    ) -> ConvergenceReport:
        return self.stochastic(data, coefficients)

    def stochastic(
        self,
        data: Mapping[float, Sequence[Sequence[float] | np.ndarray]],
        coefficients: Mapping[float, np.ndarray],
    ) -> ConvergenceReport:
        """Train on ``{class: [feature vectors]}``; each coefficient vector ends with its bias."""

        labels, matrix = _stack(data)
        classes = _sorted_classes(coefficients)
        vectors = [coefficients[label] for label in classes]
        for label in set(labels.tolist()):
            if label not in coefficients:
                raise ValueError(f"No coefficients for class {label}")
        if any(vector.shape[0] != matrix.shape[1] + 1 for vector in vectors):
            raise ValueError(
                f"Expected {matrix.shape[1] + 1} coefficients per class (features + bias)"
            )
        settings = self._settings
        learning_rate = settings.learning_rate
        loop = EpochLoop(settings, "softmax vectors")

        while loop.completed < settings.epochs:
            class_errors = np.zeros(len(classes))
            for index in self._rng.permutation(matrix.shape[0]):
                features = matrix[index]
                weighted = [vector[-1] + float(np.dot(features, vector[:-1])) for vector in vectors]
                activations = stable_softmax(weighted)
                for position, (label, vector) in enumerate(zip(classes, vectors)):
                    expected = TARGET if labels[index] == label else OTHER
                    error = expected - activations[position]
                    update = error * learning_rate
                    l2_update_dense(features, vector, update, settings.l2_lambda, learning_rate)
                    vector[-1] += update
                    class_errors[position] += error * error
            _log_average(settings, loop.completed, class_errors, matrix.shape[0])
            if loop.finish_epoch(float(class_errors.sum())):
                break
        return loop.report()


def validate_class_coefficients(
    samples: Sequence[TextSample],
    coefficients: Mapping[float, np.ndarray],
) -> list[float]:
    """Return the class order shared by training and inference."""

    require_samples(samples)
    classes = _sorted_classes(coefficients)
    sizes = {coefficients[label].shape for label in classes}
    if len(sizes) != 1:
        raise ValueError(f"Class coefficient vectors differ in shape: {sorted(sizes)}")
    for sample in samples:
        if sample.class_id not in coefficients:
            raise ValueError(f"No coefficients for class {sample.class_id}")
    return classes


def _sorted_classes(coefficients: Mapping[float, np.ndarray]) -> list[float]:
    if len(coefficients) < 2:
        raise ValueError("softmax requires coefficients for at least two classes")
    return sorted(coefficients)


def _stack(
    data: Mapping[float, Sequence[Sequence[float] | np.ndarray]],
) -> tuple[np.ndarray, np.ndarray]:
    labels: list[float] = []
    rows: list[np.ndarray] = []
    for label, vectors in data.items():
        for vector in vectors:
            labels.append(float(label))
            rows.append(np.asarray(vector, dtype=np.float64))
    if not rows:
        raise ValueError("data must not be empty")
    if len({row.shape for row in rows}) != 1:
        raise ValueError("feature vectors must all have the same length")
    return np.asarray(labels), np.vstack(rows)


def _log_average(
    settings: DescentSettings,
    epoch: int,
    class_errors: np.ndarray,
    samples: int,
) -> None:
    if settings.verbose:
        LOGGER.info(
            "epoch: %d, average error: %.6f",
            epoch + 1,
            float(class_errors.sum()) / len(class_errors) / samples,
        )


__all__ = [
    "ParallelSoftMaxOptimizer",
    "SoftMaxOptimizer",
    "SoftMaxVectorOptimizer",
    "validate_class_coefficients",
]
