"""
Boxplot landmarks.

Quartiles use the same type-7 interpolation as the statistics table, so
the box of a group always matches its Q1/median/Q3 percentiles. Whiskers
reach the most extreme values inside the 1.5 IQR fences; everything
outside is an outlier.
"""

from __future__ import annotations

from typing import Any
import numpy as np
from numpy.typing import NDArray

from groupstats.charts.geometry import BoxplotLandmarks
from groupstats.stats._percentile import median, percentile

WHISKER_IQR = 1.5


def boxplot_landmarks(
    sorted_values: NDArray[np.floating[Any]],
) -> tuple[BoxplotLandmarks, tuple[float, ...]]:
    """
    Box, whiskers and outliers of an ascending sample of at least 2 values.

    Two values cannot separate quartiles from the median: the box collapses
    to the median and the whiskers reach both values, with no outliers.
    """
    n = sorted_values.shape[0]
    lo_value = float(sorted_values[0])
    hi_value = float(sorted_values[-1])
    mid = median(sorted_values)

    if n == 2:
        return BoxplotLandmarks(lo_value, mid, mid, mid, hi_value), ()

    q1 = percentile(sorted_values, 25.0)
    q3 = percentile(sorted_values, 75.0)
    iqr = q3 - q1
    low_fence = q1 - WHISKER_IQR * iqr
    high_fence = q3 + WHISKER_IQR * iqr

    # Searchsorted on the sorted sample: [first, last) is inside the fences
    first = int(np.searchsorted(sorted_values, low_fence, side='left'))
    last = int(np.searchsorted(sorted_values, high_fence, side='right'))
    inside = sorted_values[first:last]
    lower_whisker = float(inside[0]) if inside.size else mid
    upper_whisker = float(inside[-1]) if inside.size else mid

    outliers = tuple(
        float(v) for v in np.concatenate((sorted_values[:first], sorted_values[last:]))
    )
    return BoxplotLandmarks(lower_whisker, q1, mid, q3, upper_whisker), outliers
