"""
Common types for group statistics.

Defines StatsRecord, the per-(group, column) payload, and the fixed
constants of the comparison.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from groupstats.core.exceptions import InsufficientDataError


# Percentiles reported for every group (percent, 0-100).
PERCENTILES = (1.0, 5.0, 20.0, 25.0, 50.0, 75.0, 80.0, 95.0, 99.0)

SIGNIFICANCE_LEVEL = 0.05

# Fewest values for which median, sd, percentiles and the test are defined.
MIN_GROUP_SIZE = 2

# Fields that can be undefined. An undefined field holds None.
OPTIONAL_FIELDS = (
    'mean', 'median', 'sd', 'percentiles',
    'effect_size', 'p_value', 'statistic', 'df',
)


@dataclass(frozen=True)
class StatsRecord:
    """
    Statistics of one (group, column) cell.

    Attributes
    ----------
    group : str
        Group key.
    column : str
        Data column (or data type, for long-format tables).
    n : int
        Number of non-missing values.
    mean : float or None
        Arithmetic mean. None when n == 0.
    median : float or None
        50th percentile. None when n < 2.
    sd : float or None
        Sample standard deviation (N - 1 denominator). None when n < 2.
    percentiles : dict or None
        Percent -> value for PERCENTILES. None when n < 2.
    effect_size : float or None
        (mean - control mean) / control sd. 0 for the control group.
    p_value : float or None
        Two-sided Welch t-test against the control. 1 for the control group.
    statistic : float or None
        Welch t statistic, signed as mean - control mean.
    df : float or None
        Welch-Satterthwaite degrees of freedom.
    is_control : bool
        True for the control group's own record.
    undefined : frozenset of str
        Names of fields that are explicitly undefined (value None).
    issue : InsufficientDataError or None
        Attached when n < 2. Non-fatal.
    """
    group: str
    column: str
    n: int
    mean: float | None
    median: float | None
    sd: float | None
    percentiles: dict[float, float] | None
    effect_size: float | None
    p_value: float | None
    statistic: float | None = None
    df: float | None = None
    is_control: bool = False
    undefined: frozenset[str] = field(default_factory=frozenset)
    issue: InsufficientDataError | None = field(default=None, compare=False)

    @property
    def significant(self) -> bool:
        """p < 0.05. Never true for the control group or an undefined p."""
        return (
            not self.is_control
            and self.p_value is not None
            and self.p_value < SIGNIFICANCE_LEVEL
        )

    def is_defined(self, name: str) -> bool:
        return name not in self.undefined

    def percentile(self, p: float) -> float | None:
        """One of the reported percentiles, or None when undefined."""
        if self.percentiles is None:
            return None
        return self.percentiles[float(p)]

    @property
    def p05(self) -> float | None:
        return self.percentile(5)

    @property
    def p95(self) -> float | None:
        return self.percentile(95)

    def as_dict(self) -> dict[str, Any]:
        """Flat row for tabular export; percentiles become pNN keys."""
        row: dict[str, Any] = {
            'group': self.group,
            'column': self.column,
            'n': self.n,
            'mean': self.mean,
            'median': self.median,
            'sd': self.sd,
        }
        for p in PERCENTILES:
            row[f"p{p:02.0f}"] = self.percentile(p)
        row.update(
            effect_size=self.effect_size,
            p_value=self.p_value,
            statistic=self.statistic,
            df=self.df,
            is_control=self.is_control,
            significant=self.significant,
        )
        return row
