"""
GroupIndex: group key -> row indices, built once per (table, group column).

The index is a partition of the table's rows: every row belongs to exactly
one group, and the row arrays are ascending and read-only. Keys iterate in
first-occurrence order, which is the order results are reported in.

Construction is one linear pass over the dictionary codes of the group
column: a stable sort of the codes (radix sort for up to 65 536 groups)
followed by a split at the per-code counts. No per-group scan of the
table is ever made.

Usage:
    index = GroupIndex.build(table, 'group')
    index['Control']          # array([0, 3, 7, ...])
    index.sizes()             # {'Control': 120, 'Test_A': 118, ...}
    index.restrict(rows)      # same keys, rows intersected with a subset
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterator
import numpy as np
from numpy.typing import ArrayLike, NDArray

from groupstats.core.exceptions import ValidationError
from groupstats.table.table import Table
from groupstats.utils.logging import get_logger

logger = get_logger(__name__)

# Largest group count whose codes fit the 16-bit radix sort path.
_RADIX_MAX_GROUPS = 1 << 16


class GroupIndex(Mapping[str, NDArray[np.intp]]):
    """
    Immutable mapping from group key to the ascending rows of that group.

    Do not construct directly; use GroupIndex.build().
    """

    __slots__ = ('_group_column', '_rows', '_n_rows')

    def __init__(self, group_column: str, rows: dict[str, NDArray[np.intp]], n_rows: int):
        self._group_column = group_column
        self._rows = rows
        self._n_rows = n_rows

    @classmethod
    def build(cls, table: Table, group_column: str) -> GroupIndex:
        """
        Index the rows of `table` by the values of `group_column`.

        Raises:
            ColumnNotFoundError: If the column is absent or not categorical
        """
        column = table.categorical(group_column)
        codes = column.codes
        n_groups = len(column.categories)

        if n_groups <= _RADIX_MAX_GROUPS:
            order = np.argsort(codes.astype(np.uint16), kind='stable')
        else:
            order = np.argsort(codes, kind='stable')
        order.setflags(write=False)

        counts = np.bincount(codes, minlength=n_groups)
        starts = np.concatenate(([0], np.cumsum(counts)[:-1]))
        present = np.flatnonzero(counts)
        # Stable sort: the first row of each block is where that code first
        # occurs. Sorting on it gives first-seen order even when the
        # categories tuple was built in some other order.
        present = present[np.argsort(order[starts[present]], kind='stable')]

        rows = {
            column.categories[code]: order[starts[code]:starts[code] + counts[code]]
            for code in present
        }
        logger.debug(
            "Indexed %d rows of %r into %d groups", table.n_rows, group_column, len(rows)
        )
        return cls(group_column, rows, table.n_rows)

    # === Mapping protocol ===

    def __getitem__(self, key: str) -> NDArray[np.intp]:
        return self._rows[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, key: object) -> bool:
        return key in self._rows

    # === Derived views ===

    def sizes(self) -> dict[str, int]:
        """Row count per group, first-seen order."""
        return {key: int(rows.shape[0]) for key, rows in self._rows.items()}

    def restrict(self, rows: ArrayLike) -> GroupIndex:
        """
        Intersect every group with a subset of the table's rows.

        Keys are kept even when their intersection is empty, so every
        restriction of one index reports the same groups in the same
        order. The result partitions the subset.

        Raises:
            ValidationError: If a row index is outside the table
        """
        subset = np.asarray(rows, dtype=np.intp)
        if subset.ndim != 1:
            raise ValidationError(f"rows: expected 1D row indices, got shape {subset.shape}")
        if subset.size and (subset.min() < 0 or subset.max() >= self._n_rows):
            raise ValidationError(
                f"rows: indices must be in [0, {self._n_rows}), "
                f"got range [{subset.min()}, {subset.max()}]"
            )
        mask = np.zeros(self._n_rows, dtype=bool)
        mask[subset] = True
        restricted: dict[str, NDArray[np.intp]] = {}
        for key, group_rows in self._rows.items():
            kept = group_rows[mask[group_rows]]
            kept.setflags(write=False)
            restricted[key] = kept
        return GroupIndex(self._group_column, restricted, self._n_rows)

    # === Properties ===

    @property
    def group_column(self) -> str:
        return self._group_column

    @property
    def n_rows(self) -> int:
        """Row count of the indexed table."""
        return self._n_rows

    def __repr__(self) -> str:
        shown: Any = list(self._rows)[:5]
        more = f", ... +{len(self._rows) - 5}" if len(self._rows) > 5 else ""
        return f"GroupIndex({self._group_column!r}, groups={shown}{more})"
