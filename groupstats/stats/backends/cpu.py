"""
CPU reference backend for group statistics.

Computes one StatsRecord per group of a ColumnDesign: descriptive
statistics of the group, then the comparison against the control group.
"""

from __future__ import annotations

from typing import Any
import numpy as np
from numpy.typing import NDArray

from groupstats.core.compute.timing import Timer
from groupstats.core.exceptions import InsufficientDataError
from groupstats.core.result import Result
from groupstats.stats._common import MIN_GROUP_SIZE, PERCENTILES, StatsRecord
from groupstats.stats._percentile import median, percentiles
from groupstats.stats._welch import sample_mean, sample_variance, welch_t_test
from groupstats.stats.design import ColumnDesign


class CPUStatsBackend:
    """CPU reference backend for group statistics."""

    @property
    def name(self) -> str:
        return 'cpu_stats'

    def solve(self, design: ColumnDesign) -> Result[tuple[StatsRecord, ...]]:
        """Compute the records of every group of one column, first-seen order."""
        timer = Timer()
        timer.start()
        warnings_list: list[str] = []

        with timer.section('describe'):
            control = design.control
            control_mean, control_sd = _moments(control)

        with timer.section('compare'):
            records = tuple(
                _group_record(design, key, values, control_mean, control_sd, warnings_list)
                for key, values in design
            )

        timer.stop()

        return Result(
            params=records,
            info={
                'column': design.column,
                'source_column': design.source_column,
                'control': design.control_key,
                'groups': design.keys,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )


def _moments(values: NDArray[np.floating[Any]]) -> tuple[float | None, float | None]:
    n = values.shape[0]
    mean = sample_mean(values) if n else None
    sd = float(np.sqrt(sample_variance(values, mean))) if n >= MIN_GROUP_SIZE else None
    return mean, sd


def _group_record(
    design: ColumnDesign,
    key: str,
    values: NDArray[np.floating[Any]],
    control_mean: float | None,
    control_sd: float | None,
    warnings_list: list[str],
) -> StatsRecord:
    column = design.column
    is_control = key == design.control_key
    n = values.shape[0]
    mean, sd = _moments(values)
    undefined: set[str] = set()
    issue = None

    if n < MIN_GROUP_SIZE:
        issue = InsufficientDataError(
            f"Group {key!r} of column {column!r} has {n} non-missing "
            f"value(s); at least {MIN_GROUP_SIZE} are needed",
            group=key,
            column=column,
            n=n,
            required=MIN_GROUP_SIZE,
        )
        warnings_list.append(
            f"{column}/{key}: only {n} value(s), statistics undefined"
        )
        undefined.update(('median', 'sd', 'percentiles', 'effect_size', 'p_value',
                          'statistic', 'df'))
        if n == 0:
            undefined.add('mean')
        return StatsRecord(
            group=key, column=column, n=n, mean=mean,
            median=None, sd=None, percentiles=None,
            effect_size=None, p_value=None,
            is_control=is_control,
            undefined=frozenset(undefined),
            issue=issue,
        )

    med = median(values)
    pcts = percentiles(values, PERCENTILES)
    effect_size: float | None = None
    p_value: float | None = None
    statistic: float | None = None
    df: float | None = None

    if control_sd is None:
        # Control has fewer than 2 values: nothing to compare against
        undefined.update(('effect_size', 'p_value', 'statistic', 'df'))
    elif is_control:
        effect_size = 0.0
        p_value = 1.0
        statistic = 0.0
        undefined.add('df')
    else:
        if control_sd > 0.0:
            effect_size = (mean - control_mean) / control_sd
        else:
            undefined.add('effect_size')
            warnings_list.append(
                f"{column}/{key}: control standard deviation is 0, effect size undefined"
            )
        welch = welch_t_test(values, design.control)
        p_value, statistic, df = welch.p_value, welch.statistic, welch.df
        for name, value in (('p_value', p_value), ('statistic', statistic), ('df', df)):
            if value is None:
                undefined.add(name)
        if welch.warning:
            warnings_list.append(f"{column}/{key}: {welch.warning}, p-value undefined")

    return StatsRecord(
        group=key, column=column, n=n, mean=mean,
        median=med, sd=sd, percentiles=pcts,
        effect_size=effect_size, p_value=p_value,
        statistic=statistic, df=df,
        is_control=is_control,
        undefined=frozenset(undefined),
    )
