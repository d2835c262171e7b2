"""
ColumnDesign: the per-group samples of one data column, ready to compute.

Extraction is the only step that touches the Table: for each group the
non-missing values of the column are gathered and sorted ascending. The
design is immutable after construction, so one design can be shared by
the statistics backend and the chart geometry builder from any thread.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Mapping
import numpy as np
from numpy.typing import NDArray

from groupstats.core.exceptions import ControlGroupNotFoundError
from groupstats.grouping.index import GroupIndex
from groupstats.table.table import Table


@dataclass(frozen=True)
class ColumnDesign:
    """
    Sorted, NaN-free samples of one data column, keyed by group.

    Do not construct directly; use ColumnDesign.build().

    Attributes:
        column: Label results are reported under (the data column name, or
            the data type in a long-format table)
        source_column: Numeric table column the values were read from
        control_key: Group every other group is compared against
        samples: Group key -> ascending read-only values, first-seen order
    """
    column: str
    source_column: str
    control_key: str
    samples: Mapping[str, NDArray[np.floating[Any]]]

    @classmethod
    def build(
        cls,
        table: Table,
        group_index: GroupIndex,
        control_key: str,
        column: str,
        *,
        label: str | None = None,
    ) -> ColumnDesign:
        """
        Gather and sort the values of `column` for every group.

        Raises:
            ControlGroupNotFoundError: If control_key is not a group
            ColumnNotFoundError: If column is absent or not numeric
        """
        check_control(group_index, control_key)
        values = table.numeric(column).values
        samples: dict[str, NDArray[np.floating[Any]]] = {}
        for key, rows in group_index.items():
            selected = values[rows]
            selected = np.sort(selected[~np.isnan(selected)])
            selected.setflags(write=False)
            samples[key] = selected
        return cls(
            column=label if label is not None else column,
            source_column=column,
            control_key=control_key,
            samples=samples,
        )

    @property
    def control(self) -> NDArray[np.floating[Any]]:
        return self.samples[self.control_key]

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(self.samples)

    def __iter__(self) -> Iterator[tuple[str, NDArray[np.floating[Any]]]]:
        return iter(self.samples.items())


def check_control(group_index: GroupIndex, control_key: str) -> None:
    """Raise ControlGroupNotFoundError unless control_key is a group."""
    if control_key not in group_index:
        available = list(group_index)
        raise ControlGroupNotFoundError(
            f"Control group {control_key!r} not found in column "
            f"{group_index.group_column!r}. Available groups: {available}",
            control_key=control_key,
            available=available,
        )
