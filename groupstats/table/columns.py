"""
Column variants of a Table.

A column is either categorical or numeric, decided once at load time and
carried as a tagged variant (the `kind` attribute) so no use site has to
inspect values to find out what it is holding.

    NumericColumn      float64 values, NaN marks a missing cell
    CategoricalColumn  dictionary-encoded strings: int32 codes into a tuple of
                       categories ordered by first occurrence

Both are immutable: their arrays are flagged read-only in place on
construction, so pass a copy of anything you still mean to write to.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Iterable, Union
import numpy as np
from numpy.typing import ArrayLike, NDArray

from groupstats.core.exceptions import ValidationError


NUMERIC = 'numeric'
CATEGORICAL = 'categorical'


def _readonly(array: NDArray) -> NDArray:
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class NumericColumn:
    """
    Numeric column with NaN as the missing marker.

    Missing cells keep their row position, so row i of every column still
    describes the same source row.
    """
    name: str
    values: NDArray[np.floating[Any]]
    kind: ClassVar[str] = NUMERIC

    def __post_init__(self):
        values = np.asarray(self.values, dtype=np.float64)
        if values.ndim != 1:
            raise ValidationError(
                f"column {self.name!r}: expected 1D values, got shape {values.shape}"
            )
        object.__setattr__(self, 'values', _readonly(values))

    def __len__(self) -> int:
        return self.values.shape[0]

    @property
    def missing_mask(self) -> NDArray[np.bool_]:
        """True where the cell is missing."""
        return np.isnan(self.values)

    @property
    def n_missing(self) -> int:
        return int(np.count_nonzero(np.isnan(self.values)))

    def take(self, rows: ArrayLike | None = None) -> NDArray[np.floating[Any]]:
        """Non-missing values at `rows` (all rows if None), row order kept."""
        selected = self.values if rows is None else self.values[np.asarray(rows, dtype=np.intp)]
        return selected[~np.isnan(selected)]

    def __repr__(self) -> str:
        missing = f", missing={self.n_missing}" if self.n_missing else ""
        return f"NumericColumn({self.name!r}, n={len(self)}{missing})"


@dataclass(frozen=True, eq=False)
class CategoricalColumn:
    """
    Dictionary-encoded string column.

    `categories[codes[i]]` is the value of row i. Categories appear in the
    order their first occurrence was seen, which is the order GroupIndex
    preserves for display.
    """
    name: str
    codes: NDArray[np.integer[Any]]
    categories: tuple[str, ...]
    kind: ClassVar[str] = CATEGORICAL

    def __post_init__(self):
        codes = np.asarray(self.codes)
        if codes.ndim != 1:
            raise ValidationError(
                f"column {self.name!r}: expected 1D codes, got shape {codes.shape}"
            )
        if codes.size and not np.issubdtype(codes.dtype, np.integer):
            raise ValidationError(
                f"column {self.name!r}: codes must be integers, got {codes.dtype}"
            )
        codes = codes.astype(np.int32, copy=False)
        categories = tuple(self.categories)
        if codes.size and (codes.min() < 0 or codes.max() >= len(categories)):
            raise ValidationError(
                f"column {self.name!r}: codes out of range for {len(categories)} categories"
            )
        object.__setattr__(self, 'codes', _readonly(codes))
        object.__setattr__(self, 'categories', categories)

    @classmethod
    def from_values(cls, name: str, values: Iterable[Any]) -> CategoricalColumn:
        """Encode values (converted with str()) in first-seen order."""
        lookup: dict[str, int] = {}
        codes = []
        for value in values:
            key = str(value)
            code = lookup.get(key)
            if code is None:
                code = len(lookup)
                lookup[key] = code
            codes.append(code)
        return cls(name, np.asarray(codes, dtype=np.int32), tuple(lookup))

    def __len__(self) -> int:
        return self.codes.shape[0]

    def __getitem__(self, row: int) -> str:
        return self.categories[self.codes[row]]

    def to_list(self) -> list[str]:
        """Decoded values, one per row."""
        cats = np.asarray(self.categories, dtype=object)
        return cats[self.codes].tolist() if self.categories else []

    def __repr__(self) -> str:
        return (
            f"CategoricalColumn({self.name!r}, n={len(self)}, "
            f"categories={len(self.categories)})"
        )


Column = Union[NumericColumn, CategoricalColumn]


def column_from_values(name: str, values: ArrayLike) -> Column:
    """
    Build a column from in-memory values, choosing the variant.

    Numbers (with None/NaN as missing) give a NumericColumn; anything else,
    including numeric-looking strings, gives a CategoricalColumn.
    """
    array = np.asarray(values, dtype=object) if isinstance(values, (list, tuple)) else np.asarray(values)
    if array.ndim != 1:
        raise ValidationError(f"column {name!r}: expected 1D values, got shape {array.shape}")
    if array.dtype != object:
        if np.issubdtype(array.dtype, np.number):
            return NumericColumn(name, array.astype(np.float64))
        return CategoricalColumn.from_values(name, array.tolist())

    items = array.tolist()
    if all(_is_number_or_missing(v) for v in items) and any(v is not None for v in items):
        return NumericColumn(
            name, np.asarray([np.nan if v is None else v for v in items], dtype=np.float64)
        )
    return CategoricalColumn.from_values(name, items)


def _is_number_or_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating))
