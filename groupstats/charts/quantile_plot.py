"""
Normal quantile plot.

Each of the N sorted values is paired with the standard-normal quantile of
its plotting position (i - 0.5) / N, i = 1..N. Points of a normal sample
fall on a straight line.
"""

from __future__ import annotations

from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats


def plotting_positions(n: int) -> NDArray[np.floating[Any]]:
    """(i - 0.5) / n for i = 1..n; strictly inside (0, 1)."""
    return (np.arange(1, n + 1, dtype=np.float64) - 0.5) / n


def quantile_pairs(
    sorted_values: NDArray[np.floating[Any]],
) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]]]:
    """
    Plotting positions and the (theoretical, empirical) pairs.

    Returns:
        (positions, pairs): positions of shape (N,), pairs of shape (N, 2)
    """
    positions = plotting_positions(sorted_values.shape[0])
    pairs = np.column_stack((sp_stats.norm.ppf(positions), sorted_values))
    return positions, pairs
