"""
Group statistics module.

Descriptive statistics per group and a Welch t-test of every group against
a control group.

Public API:
    compute(table, index, control, columns) - StatsSolution for all columns
    StatsEngine                             - Per-column solver
    ColumnDesign                            - Sorted samples of one column
    StatsRecord                             - Statistics of one (group, column)
"""

from groupstats.stats.solvers import StatsEngine, compute
from groupstats.stats.design import ColumnDesign
from groupstats.stats._common import (
    PERCENTILES,
    SIGNIFICANCE_LEVEL,
    StatsRecord,
)
from groupstats.stats._percentile import median, percentile
from groupstats.stats.solution import StatsSolution

__all__ = [
    "compute",
    "StatsEngine",
    "ColumnDesign",
    "StatsRecord",
    "StatsSolution",
    "PERCENTILES",
    "SIGNIFICANCE_LEVEL",
    "median",
    "percentile",
]
