"""
Pipeline output types.

    AnalysisResult   column -> ColumnResult, request order
    ColumnResult     group key -> GroupResult, first-seen order, plus the
                     column's ColumnChart
    GroupResult      (StatsRecord, ChartGeometry) of one cell

All of them are immutable and are published together as one snapshot.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterator

from groupstats.charts.geometry import ChartGeometry, ColumnChart
from groupstats.core.result import Result
from groupstats.pipeline.request import AnalysisRequest
from groupstats.stats._common import StatsRecord
from groupstats.stats.solution import StatsSolution
from groupstats.table.table import Table


class RunOutcome(enum.Enum):
    """Terminal state of a coordinator call. Failures raise instead."""
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


@dataclass(frozen=True)
class GroupResult:
    record: StatsRecord
    geometry: ChartGeometry


class ColumnResult(Mapping[str, GroupResult]):
    """Statistics and chart geometry of every group of one column."""

    __slots__ = ('_stats', '_chart', '_groups')

    def __init__(
        self,
        stats: Result[tuple[StatsRecord, ...]],
        chart: ColumnChart,
    ):
        self._stats = stats
        self._chart = chart
        self._groups = {
            record.group: GroupResult(record, chart.geometries[record.group])
            for record in stats.params
        }

    def __getitem__(self, key: str) -> GroupResult:
        return self._groups[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    @property
    def column(self) -> str:
        return self._chart.column

    @property
    def control_key(self) -> str:
        return self._chart.control_key

    @property
    def chart(self) -> ColumnChart:
        return self._chart

    @property
    def records(self) -> tuple[StatsRecord, ...]:
        return self._stats.params

    @property
    def stats(self) -> Result[tuple[StatsRecord, ...]]:
        return self._stats

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._stats.warnings

    @property
    def timing(self) -> dict[str, float] | None:
        return self._stats.timing

    def has_significant_results(self) -> bool:
        return any(record.significant for record in self._stats.params)

    def summary(self) -> str:
        """Statistics table of this column, control first."""
        return _solution({self.column: self}, self.control_key).summary()

    def __repr__(self) -> str:
        return f"ColumnResult({self.column!r}, groups={list(self._groups)})"


@dataclass(frozen=True, eq=False)
class AnalysisResult(Mapping[str, ColumnResult]):
    """
    Everything computed for one request on one table.

    Attributes:
        request: The request that produced this result
        columns: Column label -> ColumnResult, request order
        group_sizes: Group key -> row count in the table (missing values
            included), first-seen order
        timing: Section timings of the analysis
    """
    request: AnalysisRequest
    columns: Mapping[str, ColumnResult]
    group_sizes: Mapping[str, int]
    timing: dict[str, float] | None = field(default=None, compare=False)

    def __getitem__(self, column: str) -> ColumnResult:
        return self.columns[column]

    def __iter__(self) -> Iterator[str]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    @property
    def control_key(self) -> str:
        return self.request.control_group

    @property
    def warnings(self) -> tuple[str, ...]:
        return tuple(w for c in self.columns.values() for w in c.warnings)

    @property
    def stats(self) -> StatsSolution:
        """All records as one StatsSolution (lookup, summary, DataFrame)."""
        return _solution(self.columns, self.control_key)

    def summary(self) -> str:
        return self.stats.summary()

    def __repr__(self) -> str:
        return (
            f"AnalysisResult(columns={list(self.columns)}, "
            f"groups={list(self.group_sizes)}, control={self.control_key!r})"
        )


@dataclass(frozen=True)
class PipelineState:
    """
    Published snapshot of a coordinator.

    `result`, when present, was computed from `table`. `generation`
    increases by one with every publication.
    """
    table: Table | None = None
    result: AnalysisResult | None = None
    generation: int = 0


def _solution(columns: Mapping[str, ColumnResult], control_key: str) -> StatsSolution:
    params = {label: column.records for label, column in columns.items()}
    info: dict[str, Any] = {'control': control_key, 'columns': list(columns)}
    return StatsSolution(_result=Result(
        params=params,
        info=info,
        timing=None,
        backend_name=next(
            (c.stats.backend_name for c in columns.values()), 'cpu_stats'
        ),
        warnings=tuple(w for c in columns.values() for w in c.warnings),
    ))
