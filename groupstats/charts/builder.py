"""
ChartGeometryBuilder: StatsRecord + sorted sample -> ChartGeometry.

    builder = ChartGeometryBuilder()
    geometry = builder.build(sorted_values, record)
    chart = build_column_chart(geometries, control_key='Control')

Geometry is derived from the same sorted sample the statistics were
computed from, so the boxplot quartiles and the table percentiles agree.
"""

from __future__ import annotations

from typing import Any, Mapping
import numpy as np
from numpy.typing import ArrayLike, NDArray

from groupstats.charts.axes import quantile_axis, value_axis
from groupstats.charts.boxplot import boxplot_landmarks
from groupstats.charts.geometry import ChartGeometry, ColumnChart, GroupSlot
from groupstats.charts.quantile_plot import quantile_pairs
from groupstats.charts.swarm import SWARM_WIDTH, beeswarm_offsets
from groupstats.core.exceptions import ValidationError
from groupstats.core.validation import check_1d, check_array, check_no_nan, check_sorted
from groupstats.stats._common import MIN_GROUP_SIZE, StatsRecord


class ChartGeometryBuilder:
    """Builds the per-group geometry of the boxplot and quantile plot."""

    def __init__(self, swarm_width: float = SWARM_WIDTH):
        if not 0.0 < swarm_width < 1.0:
            raise ValidationError(f"swarm_width: must be in (0, 1), got {swarm_width!r}")
        self.swarm_width = swarm_width

    def build(self, sorted_values: ArrayLike, record: StatsRecord) -> ChartGeometry:
        """
        Geometry of one (group, column) cell.

        Parameters
        ----------
        sorted_values : array-like
            The group's non-missing values, ascending.
        record : StatsRecord
            Statistics of the same cell; its n must match the sample.

        Raises
        ------
        ValidationError
            Values unsorted, containing NaN, or not matching record.n.
        """
        values = _sample(sorted_values)
        if values.shape[0] != record.n:
            raise ValidationError(
                f"sorted_values: {values.shape[0]} values for group {record.group!r} "
                f"of column {record.column!r}, but its record has n={record.n}"
            )

        if record.n < MIN_GROUP_SIZE:
            return ChartGeometry(
                group=record.group,
                column=record.column,
                plottable=False,
                values=values,
                mean=record.mean,
            )

        landmarks, outliers = boxplot_landmarks(values)
        positions, pairs = quantile_pairs(values)
        offsets = beeswarm_offsets(values, self.swarm_width)
        for array in (positions, pairs, offsets):
            array.setflags(write=False)
        return ChartGeometry(
            group=record.group,
            column=record.column,
            plottable=True,
            values=values,
            landmarks=landmarks,
            outliers=outliers,
            positions=positions,
            quantile_pairs=pairs,
            mean=record.mean,
            scatter_offsets=offsets,
        )


def build_column_chart(
    geometries: Mapping[str, ChartGeometry],
    control_key: str,
) -> ColumnChart:
    """
    Assemble the shared frame of one column from its group geometries.

    Groups are placed at x = 0, 1, 2, ... with the control first and the
    others in first-seen order (the iteration order of `geometries`).

    Raises:
        ValidationError: If control_key has no geometry or the geometries
            span more than one column
    """
    if control_key not in geometries:
        raise ValidationError(
            f"control_key: {control_key!r} is not among the groups {list(geometries)}"
        )
    columns = {g.column for g in geometries.values()}
    if len(columns) != 1:
        raise ValidationError(f"geometries: expected one column, got {sorted(columns)}")

    order = [control_key] + [k for k in geometries if k != control_key]
    slots = []
    palette_index = 0
    for x, key in enumerate(order):
        is_control = key == control_key
        slots.append(GroupSlot(key, float(x), is_control, None if is_control else palette_index))
        if not is_control:
            palette_index += 1

    scatter: dict[str, NDArray[np.floating[Any]]] = {}
    mean_line: list[tuple[float, float]] = []
    for slot in slots:
        geometry = geometries[slot.key]
        if not geometry.plottable:
            continue
        points = np.column_stack((slot.x + geometry.scatter_offsets, geometry.values))
        points.setflags(write=False)
        scatter[slot.key] = points
        mean_line.append((slot.x, geometry.mean))

    return ColumnChart(
        column=columns.pop(),
        control_key=control_key,
        slots=tuple(slots),
        geometries=dict(geometries),
        value_axis=value_axis(g.values for g in geometries.values()),
        quantile_axis=quantile_axis(g.theoretical for g in geometries.values()),
        mean_line=tuple(mean_line) if len(mean_line) > 1 else (),
        scatter=scatter,
    )


def _sample(sorted_values: ArrayLike) -> NDArray[np.floating[Any]]:
    values = check_array(sorted_values, "sorted_values")
    check_1d(values, "sorted_values")
    check_no_nan(values, "sorted_values")
    check_sorted(values, "sorted_values")
    if values.flags.writeable:
        values = values.copy()
        values.setflags(write=False)
    return values
