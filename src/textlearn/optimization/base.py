"""Shared hyperparameters and bookkeeping for the gradient descent optimisers."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from sklearn.utils import check_random_state

from ..types import ConvergenceReport, TextSample
from .stopping import StoppingCriteria, never_stop

LOGGER = logging.getLogger(__name__)


@dataclass
class DescentSettings:
    """Hyperparameters common to every optimiser."""

    learning_rate: float
    epochs: int
    stopping_criteria: StoppingCriteria = never_stop
    l2_lambda: float = 0.0
    verbose: bool = False

    def __post_init__(self) -> None:
        if not self.learning_rate > 0:
            raise ValueError(f"learning_rate must be positive, got {self.learning_rate}")
        if self.epochs < 1:
            raise ValueError(f"epochs must be at least 1, got {self.epochs}")
        if self.l2_lambda < 0:
            raise ValueError(f"l2_lambda must not be negative, got {self.l2_lambda}")


class EpochLoop:
    """Tracks epochs, logs progress and evaluates the stopping criteria."""

    def __init__(self, settings: DescentSettings, name: str) -> None:
        self._settings = settings
        self._name = name
        self.completed = 0
        self.squared_error = float("nan")

    def finish_epoch(self, squared_error: float) -> bool:
        """Record an epoch and return True when training should stop."""

        self.completed += 1
        self.squared_error = squared_error
        if self._settings.verbose:
            LOGGER.info(
                "%s epoch: %d, squared error: %.6f", self._name, self.completed, squared_error
            )
        return bool(self._settings.stopping_criteria(squared_error))

    def report(self) -> ConvergenceReport:
        LOGGER.info(
            "%s converged in %d epochs, epoch error: %.6f",
            self._name,
            self.completed,
            self.squared_error,
        )
        return ConvergenceReport(epochs=self.completed, squared_error=self.squared_error)


def resolve_rng(random_state: int | np.random.RandomState | None) -> np.random.RandomState:
    return check_random_state(random_state)


def require_samples(samples: Sequence[TextSample]) -> None:
    if not samples:
        raise ValueError("samples must not be empty")


def require_coefficients(coefficients: np.ndarray, size: int | None = None) -> None:
    if coefficients.ndim != 1 or coefficients.shape[0] < 1:
        raise ValueError("coefficients must be a non-empty one dimensional array")
    if size is not None and coefficients.shape[0] != size:
        raise ValueError(f"Expected {size} coefficients, got {coefficients.shape[0]}")


def require_term_range(samples: Sequence[TextSample], coefficients: np.ndarray) -> None:
    """Every term id must address a feature slot, never the trailing bias."""

    limit = coefficients.shape[0] - 1
    for sample in samples:
        ids = sample.features.term_ids
        if ids.size and (int(ids.max()) >= limit or int(ids.min()) < 0):
            raise ValueError(
                f"term id out of range for {limit} feature coefficients"
            )


__all__ = [
    "DescentSettings",
    "EpochLoop",
    "require_coefficients",
    "require_samples",
    "require_term_range",
    "resolve_rng",
]
