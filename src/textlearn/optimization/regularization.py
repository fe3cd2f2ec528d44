"""Coefficient updates with optional L2 penalty.

The update rule is ``w_j += x_j * update - lambda * learning_rate * w_j``
where ``update`` is the product of the error and the learning rate. The
bias slot (the last coefficient) is never passed through these helpers.
"""

from __future__ import annotations

import numpy as np

from ..types import SparseVector


def l2_update(
    features: SparseVector,
    coefficients: np.ndarray,
    update: float,
    l2_lambda: float,
    learning_rate: float,
) -> None:
    """Apply the update to the coefficients of the present terms only."""

    if len(features) == 0:
        return
    ids = features.term_ids
    penalty = l2_lambda * learning_rate * coefficients[ids]
    coefficients[ids] += features.values * update - penalty


def l2_update_dense(
    features: np.ndarray,
    coefficients: np.ndarray,
    update: float,
    l2_lambda: float,
    learning_rate: float,
) -> None:
    """Apply the update to the leading ``len(features)`` coefficients."""

    size = features.shape[0]
    penalty = l2_lambda * learning_rate * coefficients[:size]
    coefficients[:size] += features * update - penalty


__all__ = ["l2_update", "l2_update_dense"]
