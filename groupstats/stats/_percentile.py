"""
Order-statistic summaries of a sorted sample.

One interpolation rule is used everywhere (statistics table, boxplot
quartiles): for p in [0, 100] the rank is p/100 * (N - 1) on 0-based
order statistics, and the value is the linear interpolation between the
two neighbouring order statistics. This is Hyndman & Fan type 7, R's
default and numpy's 'linear' method.

median() is written separately so callers need no percentile machinery,
and it agrees with percentile(x, 50) bit for bit: both reduce to
x[k] + 0.5 * (x[k + 1] - x[k]) or to x[k] alone.
"""

from __future__ import annotations

import math
from typing import Any, Sequence
import numpy as np
from numpy.typing import NDArray


def percentile(sorted_values: NDArray[np.floating[Any]], p: float) -> float:
    """
    Type-7 percentile of an ascending, NaN-free, non-empty sample.

    Parameters
    ----------
    sorted_values : NDArray
        1D ascending sample. Not checked; callers validate.
    p : float
        Percent in [0, 100].
    """
    n = sorted_values.shape[0]
    if n == 1:
        return float(sorted_values[0])
    rank = p / 100.0 * (n - 1)
    lo = int(math.floor(rank))
    h = rank - lo
    if h == 0.0 or lo >= n - 1:
        return float(sorted_values[min(lo, n - 1)])
    x_lo = float(sorted_values[lo])
    x_hi = float(sorted_values[lo + 1])
    return x_lo + h * (x_hi - x_lo)


def percentiles(
    sorted_values: NDArray[np.floating[Any]],
    ps: Sequence[float],
) -> dict[float, float]:
    """Several percentiles of one sample, keyed by p."""
    return {p: percentile(sorted_values, p) for p in ps}


def median(sorted_values: NDArray[np.floating[Any]]) -> float:
    """Median of an ascending, NaN-free, non-empty sample."""
    n = sorted_values.shape[0]
    k, odd = divmod(n - 1, 2)
    if not odd:
        return float(sorted_values[k])
    x_lo = float(sorted_values[k])
    x_hi = float(sorted_values[k + 1])
    return x_lo + 0.5 * (x_hi - x_lo)
