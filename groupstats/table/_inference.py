"""
Cell parsing and column type inference.

A column is numeric when every non-missing cell parses as a float. The
decision is made in two steps over a streaming pass: the leading sample
proposes a candidate type for each column, and every later chunk verifies
it. A candidate that fails verification is demoted to categorical; a
categorical column is never promoted back.
"""

from __future__ import annotations

from typing import Any, Sequence
import numpy as np
import pandas as pd
from numpy.typing import NDArray

from groupstats.table.columns import CATEGORICAL, NUMERIC

# Cells pandas coerces to NaN that still count as numbers (read as missing).
NAN_LITERALS = frozenset(('nan', '+nan', '-nan'))


def parse_numeric(
    cells: Sequence[str] | pd.Series,
    missing_tokens: frozenset[str],
) -> tuple[NDArray[np.floating[Any]], int]:
    """
    Parse one column of a chunk as floats.

    Cells are whitespace-stripped. Missing tokens, NaN literals and
    non-finite values become NaN. Anything else pandas cannot parse as a
    number (digit separators, hex, words) makes the cell non-numeric.

    Returns:
        (values, first_bad): float64 values, and the position of the first
        cell that is neither missing nor a number (-1 if every cell parsed).
        When first_bad >= 0 the values are not meaningful.
    """
    stripped = pd.Series(np.asarray(cells, dtype=object), dtype=object).str.strip()
    values = pd.to_numeric(stripped, errors='coerce').to_numpy(
        dtype=np.float64, na_value=np.nan, copy=True
    )

    unparsed = (
        np.isnan(values)
        & ~stripped.isin(missing_tokens).to_numpy()
        & ~stripped.str.lower().isin(NAN_LITERALS).to_numpy()
    )
    bad = np.flatnonzero(unparsed)
    if bad.size:
        return values, int(bad[0])

    values[~np.isfinite(values)] = np.nan
    return values, -1


class ColumnTypeTracker:
    """
    Running type inference for the columns of one source.

    Feed chunks in source order with observe(); read the decision from
    kinds once the pass is complete.
    """

    def __init__(self, names: Sequence[str], missing_tokens: Sequence[str]):
        self._names = tuple(names)
        self._tokens = frozenset(missing_tokens)
        self._numeric = [True] * len(self._names)
        self._sampled = False
        self.demoted: list[str] = []
        self.first_failure: dict[str, int] = {}

    @property
    def kinds(self) -> dict[str, str]:
        return {
            name: NUMERIC if numeric else CATEGORICAL
            for name, numeric in zip(self._names, self._numeric)
        }

    def observe(self, frame: pd.DataFrame, first_row_index: int) -> None:
        """
        Check one chunk of well-formed rows (columns in header order).

        The first call is the leading sample: failures there set the
        candidate type. Failures in later calls are verification
        demotions and are recorded in `demoted`.
        """
        for j, name in enumerate(self._names):
            if not self._numeric[j]:
                continue
            _, first_bad = parse_numeric(frame.iloc[:, j], self._tokens)
            if first_bad >= 0:
                self._numeric[j] = False
                self.first_failure[name] = first_row_index + first_bad
                if self._sampled:
                    self.demoted.append(name)
        self._sampled = True
