"""
Table: ordered, named, typed columns sharing one row count.

Construct via load_table() for files, or the factory classmethods for
in-memory data:

    table = Table.from_columns({'group': ['a', 'b'], 'height': [1.0, 2.0]})
    table = Table.from_dataframe(df)

    table['height']                  # NumericColumn
    table.categorical('group')       # CategoricalColumn, or ColumnNotFoundError
    table.to_dataframe()             # pandas, for exporters
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping, Sequence, TYPE_CHECKING
import numpy as np
from numpy.typing import ArrayLike

from groupstats.core.exceptions import ColumnNotFoundError, ValidationError
from groupstats.table.columns import (
    CATEGORICAL,
    NUMERIC,
    CategoricalColumn,
    Column,
    NumericColumn,
    column_from_values,
)

if TYPE_CHECKING:
    import pandas as pd


class Table:
    """
    Immutable columnar table.

    Invariant: every column has `n_rows` entries; row i of any column
    describes source row i.
    """

    __slots__ = ('_columns', '_n_rows', '_metadata')

    def __init__(self, columns: Sequence[Column], *, metadata: Mapping[str, Any] | None = None):
        if not columns:
            raise ValidationError("Table needs at least one column")
        by_name: dict[str, Column] = {}
        for column in columns:
            if column.name in by_name:
                raise ValidationError(f"Duplicate column name {column.name!r}")
            by_name[column.name] = column
        lengths = {len(c) for c in columns}
        if len(lengths) > 1:
            details = ", ".join(f"{c.name}={len(c)}" for c in columns)
            raise ValidationError(f"Inconsistent column lengths: {details}")
        self._columns = by_name
        self._n_rows = lengths.pop()
        self._metadata = dict(metadata or {})

    # === Factory Methods ===

    @classmethod
    def from_columns(cls, data: Mapping[str, ArrayLike]) -> Table:
        """Construct from a mapping of column name to values."""
        return cls(
            [column_from_values(name, values) for name, values in data.items()],
            metadata={'source': 'columns'},
        )

    @classmethod
    def from_dataframe(cls, df: 'pd.DataFrame') -> Table:
        """
        Construct from a pandas DataFrame.

        Numeric dtypes become NumericColumn (NA -> NaN); everything else is
        stringified into a CategoricalColumn.
        """
        import pandas as pd

        columns: list[Column] = []
        for name in df.columns:
            series = df[name]
            if pd.api.types.is_numeric_dtype(series) and not pd.api.types.is_bool_dtype(series):
                columns.append(
                    NumericColumn(
                        str(name),
                        series.to_numpy(dtype=np.float64, na_value=np.nan, copy=True),
                    )
                )
            else:
                columns.append(CategoricalColumn.from_values(str(name), series.astype(str)))
        return cls(columns, metadata={'source': 'dataframe'})

    def to_dataframe(self) -> 'pd.DataFrame':
        """Export as a pandas DataFrame (categoricals as pandas Categorical)."""
        import pandas as pd

        data: dict[str, Any] = {}
        for column in self._columns.values():
            if column.kind == NUMERIC:
                data[column.name] = column.values
            else:
                data[column.name] = pd.Categorical.from_codes(
                    column.codes, categories=list(column.categories)
                )
        return pd.DataFrame(data)

    # === Column Access ===

    def __getitem__(self, name: str) -> Column:
        try:
            return self._columns[name]
        except KeyError:
            raise ColumnNotFoundError(
                f"Table has no column {name!r}. Available: {list(self._columns)}",
                column=name,
                available=list(self._columns),
            ) from None

    def __contains__(self, name: object) -> bool:
        return name in self._columns

    def __iter__(self) -> Iterator[Column]:
        return iter(self._columns.values())

    def categorical(self, name: str) -> CategoricalColumn:
        """The named column, which must be categorical."""
        return self._typed(name, CATEGORICAL)

    def numeric(self, name: str) -> NumericColumn:
        """The named column, which must be numeric."""
        return self._typed(name, NUMERIC)

    def _typed(self, name: str, kind: str) -> Any:
        allowed = [c.name for c in self._columns.values() if c.kind == kind]
        column = self._columns.get(name)
        if column is None:
            raise ColumnNotFoundError(
                f"Table has no column {name!r}. {kind.capitalize()} columns: {allowed}",
                column=name,
                available=allowed,
                expected_kind=kind,
            )
        if column.kind != kind:
            raise ColumnNotFoundError(
                f"Column {name!r} is {column.kind}, expected {kind}. "
                f"{kind.capitalize()} columns: {allowed}",
                column=name,
                available=allowed,
                expected_kind=kind,
            )
        return column

    # === Properties ===

    @property
    def n_rows(self) -> int:
        return self._n_rows

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(self._columns)

    @property
    def numeric_columns(self) -> tuple[str, ...]:
        return tuple(c.name for c in self._columns.values() if c.kind == NUMERIC)

    @property
    def categorical_columns(self) -> tuple[str, ...]:
        return tuple(c.name for c in self._columns.values() if c.kind == CATEGORICAL)

    @property
    def metadata(self) -> dict[str, Any]:
        """Source metadata (path, skipped rows, ...)."""
        return self._metadata.copy()

    def __len__(self) -> int:
        return self._n_rows

    def __repr__(self) -> str:
        kinds = ", ".join(f"{c.name}:{c.kind[0]}" for c in self._columns.values())
        return f"Table(n_rows={self._n_rows}, columns=[{kinds}])"
