"""
Chart geometry module.

Render-ready coordinates for the boxplot (with beeswarm scatter overlay)
and the normal quantile plot. Drawing is left to the caller.

Public API:
    ChartGeometryBuilder().build(sorted_values, record) - Geometry of one group
    build_column_chart(geometries, control_key)         - Shared frame of a column
"""

from groupstats.charts.axes import (
    PROBABILITY_MARKERS,
    AxisMarker,
    QuantileAxis,
    ValueAxis,
    nice_step,
    probability_markers,
)
from groupstats.charts.builder import ChartGeometryBuilder, build_column_chart
from groupstats.charts.geometry import (
    BoxplotLandmarks,
    ChartGeometry,
    ColumnChart,
    GroupSlot,
)

__all__ = [
    "ChartGeometryBuilder",
    "build_column_chart",
    "ChartGeometry",
    "ColumnChart",
    "BoxplotLandmarks",
    "GroupSlot",
    "ValueAxis",
    "QuantileAxis",
    "AxisMarker",
    "PROBABILITY_MARKERS",
    "probability_markers",
    "nice_step",
]
