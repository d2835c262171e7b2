"""
Tests for numeric cell parsing and column type inference.
"""

import numpy as np
import pandas as pd

from groupstats.table._inference import ColumnTypeTracker, parse_numeric
from groupstats.table.columns import CATEGORICAL, NUMERIC

TOKENS = frozenset(("", "NA", "NaN"))


def _chunk(rows):
    return pd.DataFrame(rows, dtype=object)


class TestParseNumeric:

    def test_numbers_and_missing(self):
        values, bad = parse_numeric([" 1.5", "NA", "", "-2e3", "NaN"], TOKENS)
        assert bad == -1
        assert values[0] == 1.5
        assert values[3] == -2000.0
        assert np.isnan(values[[1, 2, 4]]).all()

    def test_non_finite_is_missing(self):
        values, bad = parse_numeric(["inf", "-inf", "nan", "-NaN", "1"], TOKENS)
        assert bad == -1
        assert np.isnan(values[:4]).all()
        assert values[4] == 1.0

    def test_first_bad_cell(self):
        _, bad = parse_numeric(["1", "2", "abc", "x"], TOKENS)
        assert bad == 2

    def test_digit_separators_are_not_numbers(self):
        _, bad = parse_numeric(["1", "1_000", "2_5"], TOKENS)
        assert bad == 1

    def test_accepts_series(self):
        cells = pd.Series(["3", " 4 "], index=[10, 11], dtype=object)
        values, bad = parse_numeric(cells, TOKENS)
        assert bad == -1
        assert values.tolist() == [3.0, 4.0]


class TestColumnTypeTracker:

    def test_sample_decides(self):
        tracker = ColumnTypeTracker(["g", "v"], TOKENS)
        tracker.observe(_chunk([["a", "1"], ["b", "2"]]), 0)
        assert tracker.kinds == {"g": CATEGORICAL, "v": NUMERIC}
        assert tracker.demoted == []
        assert tracker.first_failure == {"g": 0}

    def test_verification_demotes(self):
        tracker = ColumnTypeTracker(["v"], TOKENS)
        tracker.observe(_chunk([["1"], ["2"]]), 0)
        tracker.observe(_chunk([["3"], ["oops"]]), 2)
        assert tracker.kinds == {"v": CATEGORICAL}
        assert tracker.demoted == ["v"]
        assert tracker.first_failure == {"v": 3}

    def test_all_missing_stays_numeric(self):
        tracker = ColumnTypeTracker(["v"], TOKENS)
        tracker.observe(_chunk([["NA"], [""]]), 0)
        assert tracker.kinds == {"v": NUMERIC}
