"""
Input validation utilities for groupstats.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - No silent type coercion (except np.asarray on array-likes)
    - No default handling of edge cases
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any, Sequence

from groupstats.core.exceptions import ValidationError


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Validate and convert input to a float64 numpy array.

    Accepts any array-like and converts to numpy array. Rejects inputs
    that result in object dtype (indicating mixed types or non-numeric data).

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with float64 dtype

    Raises:
        ValidationError: If input cannot be converted to numeric array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )

    if not np.issubdtype(result.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    return result.astype(np.float64, copy=False)


def check_1d(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array is 1-dimensional.

    Raises:
        ValidationError: If array is not 1D
    """
    if array.ndim != 1:
        raise ValidationError(
            f"{name}: expected 1D array, got {array.ndim}D with shape {array.shape}"
        )


def check_no_nan(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array contains no NaN values.

    Raises:
        ValidationError: If array contains NaN
    """
    n_nan = int(np.count_nonzero(np.isnan(array)))
    if n_nan:
        raise ValidationError(f"{name}: contains {n_nan} NaN values")


def check_sorted(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify a 1D array is sorted ascending.

    Raises:
        ValidationError: If any element is smaller than its predecessor
    """
    if array.size > 1:
        descents = np.flatnonzero(array[1:] < array[:-1])
        if descents.size:
            i = int(descents[0])
            raise ValidationError(
                f"{name}: must be sorted ascending, but element {i + 1} "
                f"({array[i + 1]!r}) < element {i} ({array[i]!r})"
            )


def check_percentiles(percents: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify every percentile lies in [0, 100].

    Raises:
        ValidationError: If any value is outside [0, 100] or NaN
    """
    bad = ~((percents >= 0.0) & (percents <= 100.0))
    if np.any(bad):
        raise ValidationError(
            f"{name}: percentiles must be in [0, 100], got {percents[bad].tolist()}"
        )


def check_fraction(value: float, name: str) -> None:
    """
    Verify a scalar lies in [0, 1].

    Raises:
        ValidationError: If value is outside [0, 1]
    """
    if not (0.0 <= value <= 1.0):
        raise ValidationError(f"{name}: must be in [0, 1], got {value!r}")


def check_positive_int(value: int, name: str) -> None:
    """
    Verify a scalar is a positive integer.

    Raises:
        ValidationError: If value is not an int or is < 1
    """
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError(f"{name}: must be a positive integer, got {value!r}")


def check_names(names: Sequence[str], name: str) -> None:
    """
    Verify a non-empty sequence of distinct, non-blank strings.

    Raises:
        ValidationError: If empty, contains non-strings, blanks or duplicates
    """
    if isinstance(names, str):
        raise ValidationError(f"{name}: expected a sequence of names, got a single string {names!r}")
    if len(names) == 0:
        raise ValidationError(f"{name}: at least one name is required")
    seen: set[str] = set()
    for item in names:
        if not isinstance(item, str) or not item:
            raise ValidationError(f"{name}: names must be non-empty strings, got {item!r}")
        if item in seen:
            raise ValidationError(f"{name}: duplicate name {item!r}")
        seen.add(item)
