from __future__ import annotations

import threading

import numpy as np
import pytest

from textlearn.optimization import AtomicDoubleArray, DoubleAdder
from textlearn.optimization.regularization import l2_update
from textlearn.types import SparseVector


def test_atomic_array_copies_its_input() -> None:
    source = np.zeros(3)
    shared = AtomicDoubleArray(source)

    shared.add_and_get(1, 2.5)

    assert source.tolist() == [0.0, 0.0, 0.0]
    assert shared.get(1) == 2.5
    assert len(shared) == 3


def test_concurrent_adds_are_not_lost() -> None:
    shared = AtomicDoubleArray(np.zeros(4), stripes=2)

    def worker() -> None:
        for step in range(1000):
            shared.add_and_get(step % 4, 1.0)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert shared.snapshot().tolist() == [2000.0, 2000.0, 2000.0, 2000.0]


def test_l2_update_matches_sequential_rule() -> None:
    features = SparseVector(np.array([0, 3]), np.array([0.5, 2.0]))
    expected = np.array([1.0, -1.0, 0.25, 4.0, 9.0])
    shared = AtomicDoubleArray(expected)

    shared.l2_update(features, 0.2, 0.1, 0.05)
    l2_update(features, expected, 0.2, 0.1, 0.05)

    assert np.allclose(shared.snapshot(), expected)
    assert shared.get(1) == -1.0
    assert shared.get(4) == 9.0


def test_write_back_requires_matching_shape() -> None:
    shared = AtomicDoubleArray(np.arange(3, dtype=float))
    target = np.zeros(3)

    shared.write_back(target)

    assert target.tolist() == [0.0, 1.0, 2.0]
    with pytest.raises(ValueError):
        shared.write_back(np.zeros(4))


def test_double_adder_sums_across_threads() -> None:
    adder = DoubleAdder()

    threads = [
        threading.Thread(target=lambda: [adder.add(0.5) for _ in range(200)]) for _ in range(4)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert adder.sum() == pytest.approx(400.0)
    assert adder.sum_then_reset() == pytest.approx(400.0)
    assert adder.sum() == 0.0
