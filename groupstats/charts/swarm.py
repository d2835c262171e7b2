"""Beeswarm offsets for the scatter overlay of a boxplot."""

from __future__ import annotations

from typing import Any
import numpy as np
from numpy.typing import NDArray

SWARM_WIDTH = 0.35

# Values equal after rounding to this many decimals share a row of the swarm.
SWARM_DECIMALS = 6


def beeswarm_offsets(
    values: NDArray[np.floating[Any]],
    width: float = SWARM_WIDTH,
) -> NDArray[np.floating[Any]]:
    """
    Horizontal offsets that spread duplicate values side by side.

    A value that occurs once stays at offset 0. The k copies of a repeated
    value are spaced evenly across [-width/2, width/2], in the order they
    appear in `values`.
    """
    n = values.shape[0]
    offsets = np.zeros(n, dtype=np.float64)
    if n < 2:
        return offsets
    _, inverse, counts = np.unique(
        np.round(values, SWARM_DECIMALS), return_inverse=True, return_counts=True
    )
    inverse = inverse.reshape(-1)
    order = np.argsort(inverse, kind='stable')
    slot = inverse[order]
    starts = np.concatenate(([0], np.cumsum(counts)[:-1]))
    rank = np.arange(n) - starts[slot]
    size = counts[slot]
    spread = -width / 2.0 + width * rank / np.maximum(size - 1, 1)
    offsets[order] = np.where(size > 1, spread, 0.0)
    return offsets
