"""
Solver dispatch for group statistics.

    compute(table, group_index, control_key, data_columns)  -> StatsSolution
    StatsEngine(backend).solve_column(design)               -> Result per column

compute() validates every argument before computing anything, so a bad
control key or data column fails the whole call with no partial output.
"""

from __future__ import annotations

from typing import Literal, Sequence

from groupstats.core.compute.timing import Timer
from groupstats.core.exceptions import ValidationError
from groupstats.core.result import Result
from groupstats.core.validation import check_names
from groupstats.grouping.index import GroupIndex
from groupstats.stats._common import StatsRecord
from groupstats.stats.backends.cpu import CPUStatsBackend
from groupstats.stats.design import ColumnDesign, check_control
from groupstats.stats.solution import StatsSolution
from groupstats.table.table import Table
from groupstats.utils.logging import get_logger

logger = get_logger(__name__)

BackendChoice = Literal['cpu']


def _get_backend(backend: str = 'cpu'):
    """Select the statistics backend."""
    if backend in ('cpu', 'auto'):
        return CPUStatsBackend()
    raise ValidationError(f"Unknown backend: {backend!r}. Use 'cpu'.")


class StatsEngine:
    """
    Per-column statistics computation.

    Stateless apart from the backend choice; safe to share between
    worker threads.
    """

    def __init__(self, backend: BackendChoice = 'cpu'):
        self._backend = _get_backend(backend)

    @property
    def backend_name(self) -> str:
        return self._backend.name

    def solve_column(self, design: ColumnDesign) -> Result[tuple[StatsRecord, ...]]:
        """Records of every group of one column."""
        return self._backend.solve(design)

    def compute(
        self,
        table: Table,
        group_index: GroupIndex,
        control_key: str,
        data_columns: Sequence[str],
    ) -> StatsSolution:
        """See compute()."""
        check_names(data_columns, "data_columns")
        check_control(group_index, control_key)
        for column in data_columns:
            table.numeric(column)

        timer = Timer()
        timer.start()
        params: dict[str, tuple[StatsRecord, ...]] = {}
        warnings_list: list[str] = []
        for column in data_columns:
            with timer.section(f"stats:{column}"):
                design = ColumnDesign.build(table, group_index, control_key, column)
                result = self.solve_column(design)
            params[column] = result.params
            warnings_list.extend(result.warnings)
        timer.stop()

        logger.debug(
            "Computed statistics for %d columns x %d groups",
            len(params), len(group_index),
        )
        return StatsSolution(_result=Result(
            params=params,
            info={
                'control': control_key,
                'group_column': group_index.group_column,
                'columns': list(data_columns),
                'groups': list(group_index),
            },
            timing=timer.result(),
            backend_name=self.backend_name,
            warnings=tuple(warnings_list),
        ))


def compute(
    table: Table,
    group_index: GroupIndex,
    control_key: str,
    data_columns: Sequence[str],
    *,
    backend: BackendChoice = 'cpu',
) -> StatsSolution:
    """
    Per-group statistics of each data column, compared to a control group.

    Parameters
    ----------
    table : Table
        Source table.
    group_index : GroupIndex
        Index of `table` by its group column.
    control_key : str
        Group every other group is compared against.
    data_columns : sequence of str
        Numeric columns to summarise, distinct.
    backend : str
        'cpu' (default).

    Returns
    -------
    StatsSolution
        One StatsRecord per (group, column).

    Raises
    ------
    ControlGroupNotFoundError
        control_key is not one of the groups.
    ColumnNotFoundError
        A data column is absent or not numeric.
    ValidationError
        data_columns is empty or has duplicates.
    """
    return StatsEngine(backend).compute(table, group_index, control_key, data_columns)
