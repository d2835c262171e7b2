"""
AnalysisRequest: what to compute on a loaded table.

Two table layouts are supported:

    wide   one numeric column per data type; `data_columns` names them
    long   a categorical type column plus one numeric value column; every
           distinct type (or the subset in `data_columns`) is analysed as
           its own data column

    AnalysisRequest.wide('group', 'Control', ['height', 'weight'])
    AnalysisRequest.long('group', 'Control', type_column='measure',
                         value_column='value')
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from groupstats.core.exceptions import ValidationError
from groupstats.core.validation import check_names

WIDE = 'wide'
LONG = 'long'
LAYOUTS = (WIDE, LONG)


@dataclass(frozen=True)
class AnalysisRequest:
    """
    Validated analysis parameters.

    Attributes:
        group_column: Categorical column holding the group keys
        control_group: Group every other group is compared against
        data_columns: Wide layout: numeric columns to analyse (required).
            Long layout: types to analyse, in this order; empty means
            every type in first-seen order.
        layout: 'wide' or 'long'
        type_column: Long layout: categorical column naming the data type
        value_column: Long layout: numeric column holding the values
    """
    group_column: str
    control_group: str
    data_columns: tuple[str, ...] = ()
    layout: str = WIDE
    type_column: str | None = None
    value_column: str | None = None

    def __post_init__(self):
        if self.layout not in LAYOUTS:
            raise ValidationError(f"layout: must be one of {LAYOUTS}, got {self.layout!r}")
        if not isinstance(self.group_column, str) or not self.group_column:
            raise ValidationError(f"group_column: must be a non-empty string, got {self.group_column!r}")
        if not isinstance(self.control_group, str):
            raise ValidationError(f"control_group: must be a string, got {self.control_group!r}")
        if isinstance(self.data_columns, str):
            raise ValidationError(
                f"data_columns: expected a sequence of names, got a single string {self.data_columns!r}"
            )
        object.__setattr__(self, 'data_columns', tuple(self.data_columns))

        if self.layout == WIDE:
            check_names(self.data_columns, "data_columns")
            if self.type_column is not None or self.value_column is not None:
                raise ValidationError(
                    "type_column/value_column: only used with layout='long'"
                )
            if self.group_column in self.data_columns:
                raise ValidationError(
                    f"data_columns: group column {self.group_column!r} cannot be a data column"
                )
        else:
            if not self.type_column or not self.value_column:
                raise ValidationError(
                    "layout='long' requires type_column and value_column, got "
                    f"type_column={self.type_column!r}, value_column={self.value_column!r}"
                )
            if len({self.group_column, self.type_column, self.value_column}) != 3:
                raise ValidationError(
                    "group_column, type_column and value_column must be distinct, got "
                    f"{self.group_column!r}, {self.type_column!r}, {self.value_column!r}"
                )
            if self.data_columns:
                check_names(self.data_columns, "data_columns")

    @classmethod
    def wide(
        cls,
        group_column: str,
        control_group: str,
        data_columns: Sequence[str],
    ) -> AnalysisRequest:
        return cls(group_column, control_group, tuple(data_columns), WIDE)

    @classmethod
    def long(
        cls,
        group_column: str,
        control_group: str,
        *,
        type_column: str,
        value_column: str,
        data_types: Sequence[str] = (),
    ) -> AnalysisRequest:
        return cls(
            group_column, control_group, tuple(data_types), LONG,
            type_column=type_column, value_column=value_column,
        )
