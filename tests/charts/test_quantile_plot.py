"""Tests for normal quantile plot pairs."""

import numpy as np
import pytest
from scipy import stats as sp_stats

from groupstats.charts.quantile_plot import plotting_positions, quantile_pairs


class TestQuantilePlot:

    def test_positions(self):
        np.testing.assert_allclose(plotting_positions(4), [0.125, 0.375, 0.625, 0.875])

    @pytest.mark.parametrize("n", [2, 5, 1000])
    def test_positions_inside_unit_interval(self, n):
        positions = plotting_positions(n)
        assert positions.shape == (n,)
        assert np.all((positions > 0.0) & (positions < 1.0))
        assert np.all(np.diff(positions) > 0)

    def test_pairs(self, rng):
        x = np.sort(rng.normal(size=20))
        positions, pairs = quantile_pairs(x)
        assert pairs.shape == (20, 2)
        np.testing.assert_array_equal(pairs[:, 1], x)
        np.testing.assert_allclose(pairs[:, 0], sp_stats.norm.ppf(positions))
        assert pairs[:, 0].sum() == pytest.approx(0.0, abs=1e-9)
