"""Lock-striped primitives backing the Hogwild optimisers.

``AtomicDoubleArray`` makes every individual read-modify-write of a cell
atomic without serialising writers of different cells: an index is guarded
by one of a fixed number of stripe locks, and reads take no lock at all.
Nothing makes a whole sample's update atomic, so two workers updating the
same index may interleave their read and write of the coefficient. That
race is accepted by the Hogwild scheme; use the sequential optimisers when
reproducible results are required.
"""

from __future__ import annotations

import threading

import numpy as np

from ..types import SparseVector

DEFAULT_STRIPES = 64


class AtomicDoubleArray:
    """Fixed-size float array whose cells support atomic add."""

    def __init__(self, values: np.ndarray, stripes: int = DEFAULT_STRIPES) -> None:
        if stripes < 1:
            raise ValueError(f"stripes must be positive, got {stripes}")
        self._values = np.array(values, dtype=np.float64, copy=True)
        self._locks = tuple(threading.Lock() for _ in range(stripes))

    def __len__(self) -> int:
        return int(self._values.shape[0])

    def get(self, index: int) -> float:
        return float(self._values[index])

    def add_and_get(self, index: int, delta: float) -> float:
        with self._lock_for(index):
            self._values[index] += delta
            return float(self._values[index])

    def dot(self, features: SparseVector) -> float:
        if len(features) == 0:
            return 0.0
        return float(np.dot(features.values, self._values[features.term_ids]))

    def l2_update(
        self,
        features: SparseVector,
        update: float,
        l2_lambda: float,
        learning_rate: float,
    ) -> None:
        """Per-cell atomic counterpart of :func:`regularization.l2_update`."""

        for index, value in zip(features.term_ids.tolist(), features.values.tolist()):
            with self._lock_for(index):
                penalty = l2_lambda * learning_rate * self._values[index]
                self._values[index] += value * update - penalty

    def snapshot(self) -> np.ndarray:
        return self._values.copy()

    def write_back(self, target: np.ndarray) -> None:
        """Copy the current state into the caller-visible array."""

        if target.shape != self._values.shape:
            raise ValueError(
                f"Expected array of shape {self._values.shape}, got {target.shape}"
            )
        target[:] = self._values

    def _lock_for(self, index: int) -> threading.Lock:
        return self._locks[index % len(self._locks)]


class DoubleAdder:
    """Thread-safe running sum read once all contributors are done."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total = 0.0

    def add(self, value: float) -> None:
        with self._lock:
            self._total += value

    def sum(self) -> float:
        with self._lock:
            return self._total

    def sum_then_reset(self) -> float:
        with self._lock:
            total = self._total
            self._total = 0.0
            return total


__all__ = ["AtomicDoubleArray", "DoubleAdder", "DEFAULT_STRIPES"]
