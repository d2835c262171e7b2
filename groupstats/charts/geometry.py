"""
Render-ready chart geometry.

ChartGeometry holds everything a renderer needs to draw one group of one
column: the boxplot landmarks and outliers, the normal-quantile pairs and
the beeswarm offsets of the scatter overlay. ColumnChart assembles the
geometries of all groups of a column into one frame with shared axes.

All coordinates are in data units; ColumnChart.scale_x / scale_y map them
to the unit square for renderers that draw in pixels.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping
import numpy as np
from numpy.typing import NDArray

from groupstats.charts.axes import QuantileAxis, ValueAxis


def _frozen(values: NDArray) -> NDArray:
    values.setflags(write=False)
    return values


def _empty(shape: tuple[int, ...] = (0,)) -> NDArray[np.floating[Any]]:
    return _frozen(np.empty(shape, dtype=np.float64))


@dataclass(frozen=True)
class BoxplotLandmarks:
    """
    Five-number box of one group.

    Invariant: min <= lower_whisker, upper_whisker <= max and
    q1 <= median <= q3.
    """
    lower_whisker: float
    q1: float
    median: float
    q3: float
    upper_whisker: float

    @property
    def iqr(self) -> float:
        return self.q3 - self.q1

    def as_tuple(self) -> tuple[float, float, float, float, float]:
        return (self.lower_whisker, self.q1, self.median, self.q3, self.upper_whisker)


@dataclass(frozen=True, eq=False)
class ChartGeometry:
    """
    Geometry of one (group, column) cell.

    Attributes:
        group: Group key
        column: Data column
        plottable: False when the group has fewer than 2 values; landmarks
            is then None and the pair/scatter arrays are empty
        values: Ascending non-missing values of the group
        landmarks: Boxplot box and whiskers
        outliers: Values beyond the 1.5 IQR fences, ascending
        positions: Plotting positions (i - 0.5) / N, all in (0, 1)
        quantile_pairs: (N, 2) array of (theoretical, empirical) quantiles
        mean: Group mean, None if undefined
        scatter_offsets: Beeswarm x-offsets aligned with `values`, relative
            to the group's x-position
    """
    group: str
    column: str
    plottable: bool
    values: NDArray[np.floating[Any]]
    landmarks: BoxplotLandmarks | None = None
    outliers: tuple[float, ...] = ()
    positions: NDArray[np.floating[Any]] = field(default_factory=_empty)
    quantile_pairs: NDArray[np.floating[Any]] = field(default_factory=lambda: _empty((0, 2)))
    mean: float | None = None
    scatter_offsets: NDArray[np.floating[Any]] = field(default_factory=_empty)

    @property
    def n(self) -> int:
        return int(self.values.shape[0])

    @property
    def theoretical(self) -> NDArray[np.floating[Any]]:
        return self.quantile_pairs[:, 0]

    @property
    def empirical(self) -> NDArray[np.floating[Any]]:
        return self.quantile_pairs[:, 1]

    def __repr__(self) -> str:
        return (
            f"ChartGeometry(group={self.group!r}, column={self.column!r}, "
            f"n={self.n}, plottable={self.plottable})"
        )


@dataclass(frozen=True)
class GroupSlot:
    """Where a group sits on the x axis of a column chart."""
    key: str
    x: float
    is_control: bool
    # Index into a renderer's palette; the control group has its own colour.
    palette_index: int | None


@dataclass(frozen=True, eq=False)
class ColumnChart:
    """
    Boxplot and quantile-plot frame of one column, all groups.

    Attributes:
        column: Data column
        control_key: Control group
        slots: Groups in display order (control first, then first-seen)
            with their x-positions 0, 1, 2, ...
        geometries: Group key -> ChartGeometry, first-seen order
        value_axis: Shared y axis of both plots
        quantile_axis: x axis of the quantile plot
        mean_line: (x, mean) vertices through the plottable groups, in
            display order; empty unless more than one group is plottable
        scatter: Group key -> (N, 2) array of (x, value) overlay points
    """
    column: str
    control_key: str
    slots: tuple[GroupSlot, ...]
    geometries: Mapping[str, ChartGeometry]
    value_axis: ValueAxis
    quantile_axis: QuantileAxis
    mean_line: tuple[tuple[float, float], ...]
    scatter: Mapping[str, NDArray[np.floating[Any]]]

    @property
    def display_order(self) -> tuple[str, ...]:
        return tuple(slot.key for slot in self.slots)

    @property
    def x_range(self) -> tuple[float, float]:
        """Group axis range with half a slot of margin on each side."""
        return (-0.5, len(self.slots) - 0.5)

    def scale_x(self, x: Any) -> Any:
        """Map group-axis coordinates to [0, 1]."""
        lo, hi = self.x_range
        return (np.asarray(x, dtype=np.float64) - lo) / (hi - lo)

    def scale_y(self, y: Any) -> Any:
        """Map values to [0, 1] along the value axis."""
        return self.value_axis.scale(y)

    def scale_quantile(self, q: Any) -> Any:
        """Map theoretical quantiles to [0, 1] along the quantile axis."""
        return self.quantile_axis.scale(q)
