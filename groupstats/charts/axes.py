"""
Axis ranges and tick marks.

The value axis pads the data range by 15% on each side and rounds the ends
out to whole numbers; ticks fall on a "nice" 1-2-5 step. The quantile axis
spans the normal quantiles of 0.5% and 99.5%, widened to every plotted
point, and carries the fixed probability markers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable
import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats


VALUE_PADDING = 0.15
VALUE_TARGET_TICKS = 8

# Range shown when there is nothing to plot.
EMPTY_VALUE_RANGE = (0.0, 100.0)

QUANTILE_COVERAGE = (0.005, 0.995)

# Probabilities marked on the quantile axis.
PROBABILITY_MARKERS = (0.01, 0.05, 0.20, 0.25, 0.50, 0.75, 0.80, 0.95, 0.99)


def nice_step(span: float, target_steps: int = VALUE_TARGET_TICKS) -> float:
    """
    Tick step of the form {1, 2, 5} x 10^k giving about `target_steps` ticks.

    >>> nice_step(10.0, 5)
    2.0
    """
    if not span > 0.0 or not math.isfinite(span):
        return 1.0
    raw = span / target_steps
    magnitude = 10.0 ** math.floor(math.log10(raw))
    normalized = raw / magnitude
    if normalized <= 1.0:
        nice = 1.0
    elif normalized <= 2.0:
        nice = 2.0
    elif normalized <= 5.0:
        nice = 5.0
    else:
        nice = 10.0
    return nice * magnitude


def _ticks(lower: float, upper: float, step: float) -> tuple[float, ...]:
    first = math.ceil(lower / step - 1e-9)
    last = math.floor(upper / step + 1e-9)
    # Rounding keeps 0.1 * 3 from printing as 0.30000000000000004
    decimals = max(0, -int(math.floor(math.log10(step)))) + 1
    return tuple(round(k * step, decimals) for k in range(first, last + 1))


@dataclass(frozen=True)
class ValueAxis:
    """Value (y) axis shared by the boxplot and the quantile plot."""
    lower: float
    upper: float
    step: float
    ticks: tuple[float, ...]

    def scale(self, values: Any) -> Any:
        """Map values to [0, 1]; lower -> 0, upper -> 1."""
        return (np.asarray(values, dtype=np.float64) - self.lower) / (self.upper - self.lower)


def value_axis(samples: Iterable[NDArray[np.floating[Any]]]) -> ValueAxis:
    """
    Padded value range over every value of every sample.

    No values at all give the (0, 100) range. A single distinct value is
    widened by 1 on each side so the axis never collapses.
    """
    lo = math.inf
    hi = -math.inf
    for sample in samples:
        if sample.shape[0]:
            lo = min(lo, float(sample.min()))
            hi = max(hi, float(sample.max()))
    if not math.isfinite(lo):
        lower, upper = EMPTY_VALUE_RANGE
    else:
        pad = (hi - lo) * VALUE_PADDING
        lower = float(math.floor(lo - pad))
        upper = float(math.ceil(hi + pad))
        if lower == upper:
            lower, upper = lower - 1.0, upper + 1.0
    step = nice_step(upper - lower)
    return ValueAxis(lower, upper, step, _ticks(lower, upper, step))


@dataclass(frozen=True)
class AxisMarker:
    """A labelled probability on the quantile axis."""
    probability: float
    position: float
    label: str


def probability_markers() -> tuple[AxisMarker, ...]:
    """The fixed markers, placed at their standard-normal quantiles."""
    positions = sp_stats.norm.ppf(PROBABILITY_MARKERS)
    return tuple(
        AxisMarker(p, float(x), f"{round(p * 100, 6):g}%")
        for p, x in zip(PROBABILITY_MARKERS, positions)
    )


@dataclass(frozen=True)
class QuantileAxis:
    """Theoretical-quantile (x) axis of the quantile plot."""
    lower: float
    upper: float
    markers: tuple[AxisMarker, ...]

    def scale(self, values: Any) -> Any:
        """Map theoretical quantiles to [0, 1]."""
        return (np.asarray(values, dtype=np.float64) - self.lower) / (self.upper - self.lower)


def quantile_axis(theoretical: Iterable[NDArray[np.floating[Any]]]) -> QuantileAxis:
    """Quantile range covering 0.5%-99.5% and every plotted point."""
    lower, upper = (float(v) for v in sp_stats.norm.ppf(QUANTILE_COVERAGE))
    for points in theoretical:
        if points.shape[0]:
            lower = min(lower, float(points.min()))
            upper = max(upper, float(points.max()))
    return QuantileAxis(lower, upper, probability_markers())
