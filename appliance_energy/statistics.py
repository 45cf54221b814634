"""
Statistical Reducer - Collapses energy values into one estimate.

No outlier trimming or weighting. Empty input yields the 0.0 no-data
sentinel.
"""

from typing import Sequence

from appliance_energy.models import Strategy


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for empty input."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def median(values: Sequence[float]) -> float:
    """Median of a sorted copy, 0.0 for empty input."""
    if not values:
        return 0.0

    ordered = sorted(values)
    mid = len(ordered) // 2

    if len(ordered) % 2 == 1:
        return float(ordered[mid])

    return (ordered[mid - 1] + ordered[mid]) / 2.0


def reduce_values(
    values: Sequence[float],
    strategy: Strategy = Strategy.MEDIAN,
) -> float:
    """Reduce values with the requested strategy."""
    if strategy == Strategy.MEDIAN:
        return median(values)
    if strategy == Strategy.MEAN:
        return mean(values)
    raise ValueError(f"Unsupported strategy: {strategy}")
