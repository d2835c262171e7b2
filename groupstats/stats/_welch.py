"""
Welch two-sample t-test (unequal variances, two-sided).

Moments are computed from the ascending-sorted samples with numpy's
pairwise summation, so the outcome depends only on the multiset of values
and never on row order or scheduling.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats


@dataclass(frozen=True)
class WelchResult:
    """
    Outcome of one Welch test.

    statistic/df/p_value are None when undefined; `warning` then says why.
    """
    statistic: float | None
    df: float | None
    p_value: float | None
    warning: str | None = None


def sample_mean(sorted_values: NDArray[np.floating[Any]]) -> float:
    """Mean via pairwise summation over the sorted sample."""
    return float(np.sum(sorted_values) / sorted_values.shape[0])


def sample_variance(sorted_values: NDArray[np.floating[Any]], mean: float) -> float:
    """Unbiased (N - 1) variance, two-pass around `mean`."""
    dev = sorted_values - mean
    return float(np.sum(dev * dev) / (sorted_values.shape[0] - 1))


def welch_t_test(x: NDArray[np.floating[Any]], y: NDArray[np.floating[Any]]) -> WelchResult:
    """
    Two-sided Welch test of mean(x) == mean(y).

    Both samples must be sorted and hold at least 2 values. The statistic
    is signed as mean(x) - mean(y).

    Two constant samples have zero standard error: equal means give
    p = 1, different means leave the test undefined.
    """
    n1, n2 = x.shape[0], y.shape[0]
    mean1, mean2 = sample_mean(x), sample_mean(y)
    v1 = sample_variance(x, mean1) / n1
    v2 = sample_variance(y, mean2) / n2
    se = np.sqrt(v1 + v2)

    if se == 0.0:
        if mean1 == mean2:
            return WelchResult(statistic=None, df=None, p_value=1.0)
        return WelchResult(
            statistic=None,
            df=None,
            p_value=None,
            warning="both samples are constant with different means",
        )

    t_stat = float((mean1 - mean2) / se)
    # Welch-Satterthwaite degrees of freedom (fractional, not rounded)
    df = float((v1 + v2) ** 2 / (v1 ** 2 / (n1 - 1) + v2 ** 2 / (n2 - 1)))
    p_value = float(min(1.0, 2.0 * sp_stats.t.sf(abs(t_stat), df)))
    return WelchResult(statistic=t_stat, df=df, p_value=p_value)
