"""Early termination predicates evaluated once per epoch."""

from __future__ import annotations

from collections.abc import Callable

StoppingCriteria = Callable[[float], bool]


def never_stop(squared_error: float) -> bool:
    """Run every configured epoch."""

    return False


def squared_error_below(tolerance: float) -> StoppingCriteria:
    """Stop once the epoch's aggregate squared error drops under ``tolerance``."""

    if tolerance < 0:
        raise ValueError(f"tolerance must not be negative, got {tolerance}")

    def _below(squared_error: float) -> bool:
        return squared_error < tolerance

    return _below


__all__ = ["StoppingCriteria", "never_stop", "squared_error_below"]
