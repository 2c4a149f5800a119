"""Length-based progress estimate for streams without a known total."""
from __future__ import annotations

from ...config.defaults import PROGRESS_ASSUMED_TARGET_LENGTH, PROGRESS_IN_FLIGHT_CAP


def estimate_progress(
    current_length: int,
    assumed_target: int = PROGRESS_ASSUMED_TARGET_LENGTH,
    cap: float = PROGRESS_IN_FLIGHT_CAP,
) -> float:
    """Return ``min(cap, current_length / assumed_target * 100)``, never negative."""
    if current_length <= 0 or assumed_target <= 0:
        return 0.0
    return min(cap, current_length / assumed_target * 100.0)


class ProgressEstimator:
    """Running estimate that never moves backwards.

    Snapshots may shrink (a producer can rewrite earlier text), but a progress
    bar that jumps back is worse than one that briefly stalls, so the estimator
    keeps the maximum seen so far. It never reports 100; completion is set by
    the session when the ``complete`` frame arrives.
    """

    def __init__(self, assumed_target: int = PROGRESS_ASSUMED_TARGET_LENGTH, cap: float = PROGRESS_IN_FLIGHT_CAP) -> None:
        self.assumed_target = assumed_target
        self.cap = cap
        self._value = 0.0

    @property
    def value(self) -> float:
        return self._value

    def update(self, current_length: int) -> float:
        self._value = max(self._value, estimate_progress(current_length, self.assumed_target, self.cap))
        return self._value


__all__ = ["estimate_progress", "ProgressEstimator"]
