"""
Tests for input validators.

Each validator raises ValidationError with the parameter name in the
message and returns/accepts silently on valid input.
"""

import numpy as np
import pytest

from groupstats.core.exceptions import ValidationError
from groupstats.core.validation import (
    check_1d,
    check_array,
    check_fraction,
    check_names,
    check_no_nan,
    check_percentiles,
    check_positive_int,
    check_sorted,
)


class TestCheckArray:

    def test_converts_to_float64(self):
        arr = check_array([1, 2, 3], "x")
        assert arr.dtype == np.float64

    def test_rejects_strings(self):
        with pytest.raises(ValidationError, match="x"):
            check_array(["a", "b"], "x")

    def test_rejects_mixed(self):
        with pytest.raises(ValidationError, match="object dtype"):
            check_array([1, "a", None], "x")


class TestShapeAndValues:

    def test_check_1d(self):
        check_1d(np.zeros(3), "x")
        with pytest.raises(ValidationError, match="expected 1D"):
            check_1d(np.zeros((2, 2)), "x")

    def test_check_no_nan(self):
        check_no_nan(np.array([1.0, 2.0]), "x")
        with pytest.raises(ValidationError, match="1 NaN"):
            check_no_nan(np.array([1.0, np.nan]), "x")

    def test_check_sorted(self):
        check_sorted(np.array([1.0, 1.0, 2.0]), "x")
        with pytest.raises(ValidationError, match="sorted ascending"):
            check_sorted(np.array([1.0, 3.0, 2.0]), "x")

    def test_check_percentiles(self):
        check_percentiles(np.array([0.0, 50.0, 100.0]), "p")
        with pytest.raises(ValidationError, match=r"\[0, 100\]"):
            check_percentiles(np.array([-1.0, 50.0]), "p")


class TestScalars:

    @pytest.mark.parametrize("value", [0.0, 0.1, 1.0])
    def test_fraction_ok(self, value):
        check_fraction(value, "f")

    @pytest.mark.parametrize("value", [-0.01, 1.01, float('nan')])
    def test_fraction_bad(self, value):
        with pytest.raises(ValidationError, match="f"):
            check_fraction(value, "f")

    def test_positive_int(self):
        check_positive_int(1, "n")
        for bad in (0, -3, 1.5, True):
            with pytest.raises(ValidationError):
                check_positive_int(bad, "n")


class TestNames:

    def test_ok(self):
        check_names(["a", "b"], "cols")

    def test_single_string(self):
        with pytest.raises(ValidationError, match="single string"):
            check_names("height", "cols")

    def test_empty(self):
        with pytest.raises(ValidationError, match="at least one"):
            check_names([], "cols")

    def test_duplicate(self):
        with pytest.raises(ValidationError, match="duplicate"):
            check_names(["a", "a"], "cols")

    def test_blank(self):
        with pytest.raises(ValidationError, match="non-empty"):
            check_names(["a", ""], "cols")
