"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from groupstats.table import Table


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def write_csv(tmp_path):
    """Write text to a CSV file under tmp_path and return its path."""
    def _write(text, name="data.csv", encoding="utf-8"):
        path = tmp_path / name
        path.write_bytes(text.encode(encoding) if isinstance(text, str) else text)
        return path
    return _write


@pytest.fixture
def two_group_table():
    """The Control / Test_A example: two values per group."""
    return Table.from_columns({
        'group': ['Control', 'Control', 'Test_A', 'Test_A'],
        'value': [1.2, 1.3, 1.5, 1.6],
    })


@pytest.fixture
def grouped_table(rng):
    """Three groups of 50 normal values, interleaved, with a few missing cells."""
    n = 150
    groups = np.array(['Control', 'Test_A', 'Test_B'])[np.arange(n) % 3]
    shift = np.where(groups == 'Test_B', 2.0, 0.0)
    height = rng.normal(10.0, 1.0, n) + shift
    weight = rng.normal(70.0, 5.0, n)
    weight[[4, 40, 99]] = np.nan
    return Table.from_columns({
        'group': groups.tolist(),
        'height': height,
        'weight': weight,
    })
