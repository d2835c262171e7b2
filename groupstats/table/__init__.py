"""
Table module.

Typed columnar tables and the streaming loader that builds them from
delimited text.

Public API:
    load_table(source, config)   - Load a delimited file or stream
    TableLoader(config)          - Reusable loader
    Table                        - Immutable named, typed columns
"""

from groupstats.core.config import LoaderConfig
from groupstats.table.columns import (
    CATEGORICAL,
    NUMERIC,
    CategoricalColumn,
    Column,
    NumericColumn,
)
from groupstats.table.table import Table
from groupstats.table.loader import LoadReport, TableLoader, load_table

__all__ = [
    "load_table",
    "TableLoader",
    "LoadReport",
    "LoaderConfig",
    "Table",
    "Column",
    "NumericColumn",
    "CategoricalColumn",
    "NUMERIC",
    "CATEGORICAL",
]
