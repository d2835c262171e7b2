"""
Tests for GroupIndex.

The index must partition the rows: every row appears in exactly one group,
row arrays are ascending, and keys keep first-seen order.
"""

import numpy as np
import pytest

from groupstats.core.exceptions import ColumnNotFoundError, ValidationError
from groupstats.grouping import GroupIndex
from groupstats.table import CategoricalColumn, NumericColumn, Table


def _table(groups):
    return Table.from_columns({
        'group': groups,
        'value': np.arange(len(groups), dtype=np.float64),
    })


class TestBuild:

    def test_first_seen_keys(self):
        index = GroupIndex.build(_table(['b', 'a', 'b', 'c', 'a']), 'group')
        assert list(index) == ['b', 'a', 'c']
        assert index['b'].tolist() == [0, 2]
        assert index['a'].tolist() == [1, 4]
        assert index['c'].tolist() == [3]

    def test_partition_property(self, rng):
        groups = rng.choice(['x', 'y', 'z', ''], size=1000).tolist()
        index = GroupIndex.build(_table(groups), 'group')
        rows = np.concatenate(list(index.values()))
        assert np.array_equal(np.sort(rows), np.arange(1000))
        for key, group_rows in index.items():
            assert np.all(np.diff(group_rows) > 0)
            assert all(groups[i] == key for i in group_rows)

    def test_sizes(self):
        index = GroupIndex.build(_table(['a', 'b', 'a']), 'group')
        assert index.sizes() == {'a': 2, 'b': 1}
        assert len(index) == 2
        assert 'a' in index and 'z' not in index

    def test_rows_read_only(self):
        index = GroupIndex.build(_table(['a', 'b']), 'group')
        with pytest.raises(ValueError):
            index['a'][0] = 1

    def test_category_order_not_first_seen(self):
        column = CategoricalColumn('group', np.array([1, 0, 1]), ('late', 'early'))
        table = Table([column, NumericColumn('value', np.zeros(3))])
        index = GroupIndex.build(table, 'group')
        assert list(index) == ['early', 'late']

    def test_unused_categories_dropped(self):
        column = CategoricalColumn('group', np.array([0, 0]), ('a', 'unused'))
        table = Table([column, NumericColumn('value', np.zeros(2))])
        assert list(GroupIndex.build(table, 'group')) == ['a']

    def test_many_groups(self):
        groups = [f"g{i % 70000}" for i in range(140000)]
        index = GroupIndex.build(_table(groups), 'group')
        assert len(index) == 70000
        assert index['g69999'].tolist() == [69999, 139999]


class TestErrors:

    def test_missing_column(self):
        with pytest.raises(ColumnNotFoundError):
            GroupIndex.build(_table(['a']), 'nope')

    def test_numeric_column(self):
        with pytest.raises(ColumnNotFoundError) as exc_info:
            GroupIndex.build(_table(['a']), 'value')
        assert exc_info.value.expected_kind == 'categorical'


class TestRestrict:

    def test_intersection_keeps_keys(self):
        index = GroupIndex.build(_table(['a', 'b', 'a', 'b', 'c']), 'group')
        restricted = index.restrict([0, 1, 2])
        assert list(restricted) == ['a', 'b', 'c']
        assert restricted['a'].tolist() == [0, 2]
        assert restricted['b'].tolist() == [1]
        assert restricted['c'].tolist() == []

    def test_out_of_range(self):
        index = GroupIndex.build(_table(['a', 'b']), 'group')
        with pytest.raises(ValidationError, match="rows"):
            index.restrict([0, 5])
