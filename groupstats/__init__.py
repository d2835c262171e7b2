"""
groupstats: grouped-table statistics and chart geometry.

Loads a delimited table grouped by a categorical key, computes per-group
descriptive statistics and Welch t-tests against a control group, and
derives render-ready boxplot and normal-quantile-plot geometry.

Submodules:
    table: Typed tables and the streaming loader
    grouping: Group key -> row index partition
    stats: Per-group statistics and comparisons
    charts: Boxplot / quantile plot geometry
    pipeline: Coordinator with cancellation and atomic publication
"""

__version__ = "0.1.0"

from groupstats import table
from groupstats import grouping
from groupstats import stats
from groupstats import charts
from groupstats import pipeline

from groupstats.table import LoaderConfig, Table, load_table
from groupstats.grouping import GroupIndex
from groupstats.stats import compute
from groupstats.pipeline import AnalysisRequest, PipelineCoordinator, RunOutcome

__all__ = [
    "__version__",
    "table",
    "grouping",
    "stats",
    "charts",
    "pipeline",
    "LoaderConfig",
    "Table",
    "load_table",
    "GroupIndex",
    "compute",
    "AnalysisRequest",
    "PipelineCoordinator",
    "RunOutcome",
]
