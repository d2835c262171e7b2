"""Tests for beeswarm offsets."""

import numpy as np
import pytest

from groupstats.charts.swarm import SWARM_WIDTH, beeswarm_offsets


class TestBeeswarm:

    def test_unique_values_centred(self):
        assert beeswarm_offsets(np.array([1.0, 2.0, 3.0])).tolist() == [0.0, 0.0, 0.0]

    def test_single_value(self):
        assert beeswarm_offsets(np.array([1.0])).tolist() == [0.0]

    def test_pair_spread(self):
        offsets = beeswarm_offsets(np.array([1.0, 2.0, 2.0, 3.0]))
        np.testing.assert_allclose(offsets, [0.0, -SWARM_WIDTH / 2, SWARM_WIDTH / 2, 0.0])

    def test_triple_spread(self):
        offsets = beeswarm_offsets(np.array([5.0, 5.0, 5.0]), width=0.4)
        np.testing.assert_allclose(offsets, [-0.2, 0.0, 0.2])

    def test_rounding_merges_near_duplicates(self):
        offsets = beeswarm_offsets(np.array([1.0, 1.0 + 1e-9]))
        assert offsets[0] < 0.0 < offsets[1]

    def test_offsets_bounded(self, rng):
        values = np.sort(rng.integers(0, 5, size=200).astype(float))
        offsets = beeswarm_offsets(values)
        assert np.all(np.abs(offsets) <= SWARM_WIDTH / 2 + 1e-12)
        for value in np.unique(values):
            group = offsets[values == value]
            assert group[0] == pytest.approx(-SWARM_WIDTH / 2)
            assert group[-1] == pytest.approx(SWARM_WIDTH / 2)
            assert np.all(np.diff(group) > 0)
