"""
Group statistics solution types.

StatsSolution wraps Result[dict[column, tuple[StatsRecord, ...]]] and
provides lookup by (group, column), a text summary and a DataFrame export.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, TYPE_CHECKING

from groupstats.core.result import Result
from groupstats.stats._common import StatsRecord

if TYPE_CHECKING:
    import pandas as pd


# Columns of the summary table, with the record field each shows.
SUMMARY_COLUMNS = (
    ('Group', None),
    ('N', 'n'),
    ('Mean', 'mean'),
    ('Median', 'median'),
    ('Std', 'sd'),
    ('P95', 'p95'),
    ('P05', 'p05'),
    ('(M-C)/σ', 'effect_size'),
    ('P-value', 'p_value'),
)

UNDEFINED_MARK = '-'


@dataclass
class StatsSolution:
    """
    User-facing group statistics.

    Records are kept per column in first-seen group order; display
    helpers (summary) put the control group first.
    """
    _result: Result[dict[str, tuple[StatsRecord, ...]]]

    # --- Lookup ---

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(self._result.params)

    @property
    def control_key(self) -> str:
        return self._result.info['control']

    @property
    def records(self) -> tuple[StatsRecord, ...]:
        """Every record, column by column."""
        return tuple(r for recs in self._result.params.values() for r in recs)

    def by_column(self, column: str) -> dict[str, StatsRecord]:
        """Group key -> record for one column, first-seen order."""
        return {r.group: r for r in self._result.params[column]}

    def for_group(self, group: str) -> dict[str, StatsRecord]:
        """Column -> record for one group."""
        return {
            column: r
            for column, recs in self._result.params.items()
            for r in recs
            if r.group == group
        }

    def __getitem__(self, key: tuple[str, str]) -> StatsRecord:
        group, column = key
        try:
            return self.by_column(column)[group]
        except KeyError:
            raise KeyError(key) from None

    def __iter__(self) -> Iterator[StatsRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return sum(len(recs) for recs in self._result.params.values())

    def has_significant_results(self, column: str | None = None) -> bool:
        """True if any non-control group (of `column`, or any column) has p < 0.05."""
        if column is None:
            return any(r.significant for r in self.records)
        return any(r.significant for r in self._result.params[column])

    def display_order(self, column: str) -> list[str]:
        """Group keys of a column with the control first, then first-seen."""
        keys = [r.group for r in self._result.params[column]]
        control = self.control_key
        return [control] + [k for k in keys if k != control] if control in keys else keys

    # --- Metadata ---

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Formatting ---

    def summary(self, column: str | None = None) -> str:
        """
        Format the statistics table, one block per column.

        Produces output like:
            height (control: Control)
            Group     N   Mean  Median    Std    P95    P05  (M-C)/σ  P-value
            Control   2  1.250   1.250  0.071  1.295  1.205    0.000   1.0000
            Test_A *  2  1.550   1.550  0.071  1.595  1.505    4.243   0.0513

        Undefined values are shown as '-'; significant groups carry '*'.
        """
        columns = [column] if column is not None else list(self._result.params)
        blocks = [self._column_summary(c) for c in columns]
        return "\n\n".join(blocks) + "\n"

    def _column_summary(self, column: str) -> str:
        by_group = self.by_column(column)
        rows = []
        for key in self.display_order(column):
            record = by_group[key]
            label = f"{key} *" if record.significant else key
            cells = [label]
            for _, field_name in SUMMARY_COLUMNS[1:]:
                cells.append(_format_cell(field_name, getattr(record, field_name)))
            rows.append(cells)

        header = [title for title, _ in SUMMARY_COLUMNS]
        widths = [
            max(len(header[j]), *(len(r[j]) for r in rows)) if rows else len(header[j])
            for j in range(len(header))
        ]
        lines = [f"{column} (control: {self.control_key})"]
        for cells in [header] + rows:
            first = cells[0].ljust(widths[0])
            rest = "  ".join(c.rjust(w) for c, w in zip(cells[1:], widths[1:]))
            lines.append(f"{first}  {rest}")
        return "\n".join(lines)

    def to_dataframe(self) -> 'pd.DataFrame':
        """One row per (column, group), first-seen order."""
        import pandas as pd

        return pd.DataFrame([r.as_dict() for r in self.records])

    def __repr__(self) -> str:
        n_groups = len({r.group for r in self.records})
        return (
            f"StatsSolution(columns={list(self.columns)}, groups={n_groups}, "
            f"control={self.control_key!r})"
        )


def _format_cell(field_name: str, value: Any) -> str:
    if value is None:
        return UNDEFINED_MARK
    if field_name == 'n':
        return str(value)
    if field_name == 'p_value':
        return f"{value:.4f}"
    return f"{value:.3f}"
