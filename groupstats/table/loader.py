"""
TableLoader: streaming parse of a delimited text source into a Table.

The source is read in two bounded-memory passes:

    1. scan   header check, row count, malformed-row detection and column
              type inference (leading sample + full-file verification)
    2. parse  typed fill of column buffers pre-sized from the scan's row
              count; numeric cells become float64 (missing -> NaN),
              categorical cells are dictionary-encoded in first-seen order

Only one chunk of rows is alive at a time, so memory is bounded by the
final columns plus `config.chunk_rows` raw rows. Cancellation is checked
and progress is reported between chunks.

Usage:
    table = load_table("measurements.csv")
    table = TableLoader(LoaderConfig(delimiter=";")).load(path, progress=cb)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
import numpy as np
import pandas as pd

from groupstats.core.compute.timing import Timer
from groupstats.core.config import LoaderConfig
from groupstats.core.exceptions import EmptyInputError, FormatError
from groupstats.core.progress import (
    CancellationToken,
    ProgressCallback,
    ProgressReporter,
)
from groupstats.table._inference import ColumnTypeTracker, parse_numeric
from groupstats.table._reader import (
    Source,
    describe_source,
    iter_chunks,
    open_source,
    read_header,
)
from groupstats.table.columns import NUMERIC, CategoricalColumn, Column, NumericColumn
from groupstats.table.table import Table
from groupstats.utils.logging import get_logger

logger = get_logger(__name__)

# Skipped line numbers kept in the report; the count is always exact.
MAX_REPORTED_SKIPS = 100

PHASE = 'load'


@dataclass(frozen=True)
class LoadReport:
    """
    What happened while loading a source.

    Attributes:
        source: Path or stream name
        n_rows: Data rows loaded
        n_skipped: Malformed rows skipped
        skipped_lines: Line numbers of the first skipped rows
        column_kinds: Column name -> 'numeric' | 'categorical'
        demoted_columns: Columns whose leading sample looked numeric but
            which failed the full-file verification
        timing: Section timings ('scan', 'parse')
    """
    source: str
    n_rows: int
    n_skipped: int
    skipped_lines: tuple[int, ...]
    column_kinds: dict[str, str]
    demoted_columns: tuple[str, ...] = ()
    timing: dict[str, float] | None = field(default=None, compare=False)

    @property
    def skip_fraction(self) -> float:
        total = self.n_rows + self.n_skipped
        return self.n_skipped / total if total else 0.0


@dataclass
class _ScanResult:
    names: list[str]
    n_rows: int
    n_skipped: int
    skipped_lines: list[int]
    kinds: dict[str, str]
    demoted: list[str]


class TableLoader:
    """Loads delimited text sources into Tables according to a LoaderConfig."""

    def __init__(self, config: LoaderConfig | None = None):
        self.config = config or LoaderConfig()

    def load(
        self,
        source: Source,
        *,
        progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> Table:
        """
        Load `source` into a Table.

        Parameters
        ----------
        source : path or seekable stream
            Delimited text with a header line. Streams are read twice and
            rewound, never closed.
        progress : callable, optional
            Receives ProgressEvent('load', fraction, message); fraction is
            monotonic, bytes-based during the scan and rows-based during
            the parse.
        cancel : CancellationToken, optional
            Checked between chunks.

        Raises
        ------
        FormatError
            Undecodable bytes, unusable header, or too many malformed rows.
        EmptyInputError
            No data rows.
        OperationCancelled
            The token fired; nothing is returned.
        """
        cancel = cancel or CancellationToken()
        reporter = ProgressReporter(PHASE, progress)
        name = describe_source(source)
        timer = Timer()
        timer.start()

        reporter.update(0.0, f"Scanning {name}...")
        with timer.section('scan'):
            scan = self._scan(source, reporter, cancel)
        self._check_skips(scan, name)

        with timer.section('parse'):
            columns = self._parse(source, scan, reporter, cancel)
        timer.stop()

        report = LoadReport(
            source=name,
            n_rows=scan.n_rows,
            n_skipped=scan.n_skipped,
            skipped_lines=tuple(scan.skipped_lines),
            column_kinds=scan.kinds,
            demoted_columns=tuple(scan.demoted),
            timing=timer.result(),
        )
        reporter.finish(f"Loaded {scan.n_rows} rows, {len(columns)} columns")
        logger.info(
            "Loaded %s: %d rows, %d columns, %d malformed rows skipped",
            name, scan.n_rows, len(columns), scan.n_skipped,
        )
        return Table(columns, metadata={'source': name, 'load_report': report})

    # --- Pass 1 ---

    def _scan(
        self,
        source: Source,
        reporter: ProgressReporter,
        cancel: CancellationToken,
    ) -> _ScanResult:
        cfg = self.config
        with open_source(source) as (handle, size):
            names = _validate_header(read_header(handle, cfg))
            tracker = ColumnTypeTracker(names, cfg.missing_tokens)
            n_rows = 0
            n_skipped = 0
            skipped_lines: list[int] = []

            chunks = iter_chunks(handle, cfg, len(names), first_chunk_rows=cfg.sample_rows)
            for chunk in chunks:
                cancel.raise_if_cancelled(PHASE)
                if len(chunk.frame):
                    tracker.observe(chunk.frame, n_rows)
                n_rows += len(chunk.frame)
                n_skipped += len(chunk.bad_lines)
                for line in chunk.bad_lines:
                    logger.debug("Skipping malformed row at line %d", line)
                room = MAX_REPORTED_SKIPS - len(skipped_lines)
                if room > 0:
                    skipped_lines.extend(chunk.bad_lines[:room])
                if size and chunk.position is not None:
                    reporter.update(0.5 * min(chunk.position / size, 1.0), "Scanning rows...")

        for column in tracker.demoted:
            logger.warning(
                "Column %r looked numeric in the leading %d rows but has a "
                "non-numeric cell at data row %d; treating it as categorical",
                column, cfg.sample_rows, tracker.first_failure[column],
            )
        reporter.update(0.5, f"Scanned {n_rows} rows")
        return _ScanResult(names, n_rows, n_skipped, skipped_lines, tracker.kinds, tracker.demoted)

    def _check_skips(self, scan: _ScanResult, name: str) -> None:
        total = scan.n_rows + scan.n_skipped
        if total and scan.n_skipped / total > self.config.max_skip_fraction:
            first = scan.skipped_lines[0] if scan.skipped_lines else None
            raise FormatError(
                f"{name}: {scan.n_skipped} of {total} rows "
                f"({scan.n_skipped / total:.1%}) have the wrong number of fields, "
                f"above the allowed {self.config.max_skip_fraction:.1%} "
                f"(first at line {first})",
                row_number=first,
                skipped_rows=scan.n_skipped,
            )
        if scan.n_rows == 0:
            raise EmptyInputError(
                f"{name}: no data rows"
                + (f" ({scan.n_skipped} malformed rows skipped)" if scan.n_skipped else ""),
                skipped_rows=scan.n_skipped,
            )

    # --- Pass 2 ---

    def _parse(
        self,
        source: Source,
        scan: _ScanResult,
        reporter: ProgressReporter,
        cancel: CancellationToken,
    ) -> list[Column]:
        cfg = self.config
        tokens = frozenset(cfg.missing_tokens)
        n = scan.n_rows
        kinds = [scan.kinds[name] for name in scan.names]
        buffers: list[Any] = [
            np.empty(n, dtype=np.float64) if kind == NUMERIC else np.empty(n, dtype=np.int32)
            for kind in kinds
        ]
        lookups: list[dict[str, int]] = [{} for _ in kinds]

        with open_source(source) as (handle, _):
            if _validate_header(read_header(handle, cfg)) != scan.names:
                raise FormatError("Source header changed between passes", row_number=1)
            offset = 0
            for chunk in iter_chunks(handle, cfg, len(scan.names)):
                cancel.raise_if_cancelled(PHASE)
                m = len(chunk.frame)
                if offset + m > n:
                    raise FormatError("Source grew between passes", row_number=None)
                for j, name in enumerate(scan.names):
                    cells = chunk.frame.iloc[:, j].to_numpy(dtype=object)
                    if kinds[j] == NUMERIC:
                        values, bad = parse_numeric(cells, tokens)
                        if bad >= 0:
                            raise FormatError(
                                f"Column {name!r} changed between passes: "
                                f"non-numeric cell {cells[bad]!r}",
                                column=name,
                            )
                        buffers[j][offset:offset + m] = values
                    else:
                        buffers[j][offset:offset + m] = _encode(cells, lookups[j])
                offset += m
                reporter.update(0.5 + 0.5 * offset / n, "Parsing rows...")

        if offset != n:
            raise FormatError(
                f"Source changed between passes: expected {n} rows, read {offset}"
            )

        columns: list[Column] = []
        for name, kind, buffer, lookup in zip(scan.names, kinds, buffers, lookups):
            if kind == NUMERIC:
                columns.append(NumericColumn(name, buffer))
            else:
                columns.append(CategoricalColumn(name, buffer, tuple(lookup)))
        return columns


def load_table(
    source: Source,
    config: LoaderConfig | None = None,
    *,
    progress: ProgressCallback | None = None,
    cancel: CancellationToken | None = None,
) -> Table:
    """
    Load a delimited text table. See TableLoader.load().

    Examples
    --------
    >>> table = load_table("runs.csv")
    >>> table = load_table(io.StringIO("g,x\\na,1\\n"), LoaderConfig(max_skip_fraction=0.0))
    """
    return TableLoader(config).load(source, progress=progress, cancel=cancel)


def _validate_header(header: list[str]) -> list[str]:
    names = [h.lstrip('\ufeff').strip() for h in header]
    seen: set[str] = set()
    for j, name in enumerate(names):
        if not name:
            raise FormatError(
                f"Header field {j + 1} is blank", row_number=1, column=f"#{j + 1}"
            )
        if name in seen:
            raise FormatError(
                f"Duplicate column name {name!r} in header", row_number=1, column=name
            )
        seen.add(name)
    return names


def _encode(cells: np.ndarray, lookup: dict[str, int]) -> np.ndarray:
    """Dictionary-encode one chunk, extending `lookup` in first-seen order."""
    chunk_codes, uniques = pd.factorize(np.asarray(cells, dtype=object))
    remap = np.fromiter(
        (lookup.setdefault(u, len(lookup)) for u in uniques),
        dtype=np.int32,
        count=len(uniques),
    )
    return remap[chunk_codes]
