"""
Grouping module.

Public API:
    GroupIndex.build(table, group_column)  - Partition rows by group key
"""

from groupstats.grouping.index import GroupIndex

__all__ = [
    "GroupIndex",
]
