"""
Chunked row reading for delimited sources.

Wraps pandas.read_csv (python engine, every cell kept as text) for one
streaming pass over a path or a seekable stream. Every physical line
becomes one frame row, so source line numbers stay exact: blank lines are
dropped and rows whose field count differs from the header are reported
per chunk. Nothing beyond one chunk is ever held in memory.
"""

from __future__ import annotations

import codecs
import io
import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Iterator, Union

import numpy as np
import pandas as pd

from groupstats.core.config import LoaderConfig
from groupstats.core.exceptions import EmptyInputError, FormatError, ValidationError


Source = Union[str, "os.PathLike[str]", IO[str], IO[bytes]]

# Fills a row that had too many fields; the row is then counted as malformed.
_MALFORMED = object()


@dataclass
class Chunk:
    """
    Rows of one chunk.

    Attributes:
        frame: Well-formed rows, columns 0..width-1, cells as raw strings
        bad_lines: Source line numbers of malformed rows in this chunk
        position: Bytes consumed so far (for progress), or None for text streams
    """
    frame: pd.DataFrame
    bad_lines: list[int]
    position: int | None


def describe_source(source: Source) -> str:
    """Short name of a source for messages and metadata."""
    if isinstance(source, (str, os.PathLike)):
        return str(Path(source))
    return getattr(source, 'name', None) or type(source).__name__


@contextmanager
def open_source(source: Source) -> Iterator[tuple[IO[Any], int | None]]:
    """
    Open `source` at its beginning for one pass.

    Yields the handle and the total size in bytes (None for text streams).
    Paths are opened in binary mode so consumption is measured in bytes;
    decoding happens inside read_csv. Streams are rewound, never closed.
    """
    if isinstance(source, (str, os.PathLike)):
        path = Path(source)
        size = path.stat().st_size
        with open(path, 'rb') as handle:
            yield handle, size
        return

    if not hasattr(source, 'read') or not hasattr(source, 'seek'):
        raise ValidationError(
            f"source: expected a path or a readable stream, got {type(source).__name__}"
        )
    if not source.seekable():
        raise ValidationError(
            "source: stream must be seekable (tables are read in two passes)"
        )

    source.seek(0)
    if _is_binary(source):
        size = source.seek(0, io.SEEK_END)
        source.seek(0)
        yield source, size
    else:
        yield source, None


def read_header(handle: IO[Any], config: LoaderConfig) -> list[str]:
    """
    Return the raw fields of the first non-blank line and rewind `handle`.

    A leading byte order mark is removed by the parser.

    Raises:
        EmptyInputError: If the source has no header line
        FormatError: On undecodable bytes or unparseable quoting
    """
    start = handle.tell()
    try:
        frame = pd.read_csv(handle, nrows=1, skip_blank_lines=True, **_read_options(config))
    except pd.errors.EmptyDataError:
        raise EmptyInputError("Source is empty: no header line") from None
    except (UnicodeDecodeError, pd.errors.ParserError) as e:
        raise _format_error(e, handle, start, config.encoding, lines_read=0) from e
    finally:
        handle.seek(start)

    if frame.empty:
        raise EmptyInputError("Source is empty: no header line")
    return ['' if pd.isna(cell) else str(cell) for cell in frame.iloc[0]]


def iter_chunks(
    handle: IO[Any],
    config: LoaderConfig,
    width: int,
    *,
    first_chunk_rows: int | None = None,
) -> Iterator[Chunk]:
    """
    Yield the data rows after the header in chunks of `config.chunk_rows`.

    The first chunk holds `first_chunk_rows` data lines when given. Lines
    that are empty or whitespace-only are ignored; any other row whose
    field count differs from `width` is reported in `Chunk.bad_lines`.

    Raises:
        FormatError: On undecodable bytes or unparseable quoting
    """
    start = handle.tell()
    track_bytes = _is_binary(handle)
    size = (first_chunk_rows or config.chunk_rows) + 1
    header_seen = False
    lines_read = 0

    def widen(fields: list[str]) -> list[Any]:
        return [_MALFORMED] * width

    reader = pd.read_csv(
        handle,
        names=list(range(width)),
        skip_blank_lines=False,
        on_bad_lines=widen,
        chunksize=config.chunk_rows,
        **_read_options(config),
    )
    with reader:
        while True:
            try:
                frame = reader.get_chunk(size)
            except StopIteration:
                break
            except (UnicodeDecodeError, pd.errors.ParserError) as e:
                raise _format_error(e, handle, start, config.encoding, lines_read) from e
            if frame.empty:
                break
            size = config.chunk_rows
            lines_read = int(frame.index[-1]) + 1

            blank, malformed = _classify(frame.to_numpy(dtype=object))
            skip = blank
            if not header_seen:
                content = np.flatnonzero(~blank)
                skip = blank.copy()
                if content.size:
                    skip[:content[0] + 1] = True
                    header_seen = True
                else:
                    skip[:] = True

            bad_lines = (frame.index[~skip & malformed] + 1).tolist()
            position = handle.tell() if track_bytes else None
            yield Chunk(frame[~skip & ~malformed], bad_lines, position)


def _read_options(config: LoaderConfig) -> dict[str, Any]:
    return dict(
        sep=config.delimiter,
        quotechar=config.quotechar,
        encoding=config.encoding,
        header=None,
        dtype=object,
        keep_default_na=False,
        engine='python',
    )


def _classify(cells: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Blank and malformed masks for a chunk's rows (padded cells are NA)."""
    missing = pd.isna(cells)
    first = cells[:, 0]
    n = len(first)
    widened = np.fromiter((cell is _MALFORMED for cell in first), dtype=bool, count=n)
    empty_lead = np.fromiter(
        (cell is not _MALFORMED and not (isinstance(cell, str) and cell.strip())
         for cell in first),
        dtype=bool,
        count=n,
    )
    blank = empty_lead & missing[:, 1:].all(axis=1)
    malformed = widened | (~blank & missing.any(axis=1))
    return blank, malformed


def _is_binary(handle: IO[Any]) -> bool:
    return isinstance(handle.read(0), bytes)


def _format_error(
    error: Exception,
    handle: IO[Any],
    start: int,
    encoding: str,
    lines_read: int,
) -> FormatError:
    if isinstance(error, UnicodeDecodeError):
        line = _undecodable_line(handle, start, encoding) or lines_read + 1
        return FormatError(
            f"Cannot decode source at line {line}: {error.reason}", row_number=line
        )
    return FormatError(
        f"Malformed CSV after line {lines_read}: {error}", row_number=lines_read + 1
    )


def _undecodable_line(handle: IO[Any], start: int, encoding: str) -> int | None:
    """Line number of the first undecodable byte, for binary handles."""
    if not _is_binary(handle):
        return None
    handle.seek(start)
    decoder = codecs.getincrementaldecoder(encoding)(errors='strict')
    line = 1
    for raw in handle:
        try:
            text = decoder.decode(raw)
        except UnicodeDecodeError:
            return line
        line += text.count('\n')
    return None
