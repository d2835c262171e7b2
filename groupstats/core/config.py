"""
Loader configuration.

LoaderConfig is an immutable, validated description of how a delimited
source is read. Validation happens at construction so a bad configuration
fails before any byte is read.
"""

from __future__ import annotations

from dataclasses import dataclass

from groupstats.core.exceptions import ValidationError
from groupstats.core.validation import check_fraction, check_positive_int


DEFAULT_MISSING_TOKENS = ("", "NA", "NaN")

# Leading rows used to pick the candidate type of each column.
DEFAULT_SAMPLE_ROWS = 10_000

DEFAULT_CHUNK_ROWS = 65_536


@dataclass(frozen=True)
class LoaderConfig:
    """
    How to read a delimited text table.

    Attributes:
        delimiter: Single-character field separator.
        missing_tokens: Cell values (after whitespace stripping) that mark a
            missing numeric value. The empty cell is always missing.
        max_skip_fraction: Largest tolerated share of malformed rows
            (wrong field count) among all data rows. Exceeding it fails the
            load with FormatError.
        sample_rows: Leading rows used for type inference before the
            full-file verification pass.
        chunk_rows: Rows processed per chunk; bounds working memory and sets
            the granularity of progress and cancellation checks.
        encoding: Text encoding of the source. Undecodable bytes are a
            FormatError.
        quotechar: Quote character for fields containing the delimiter.
    """
    delimiter: str = ","
    missing_tokens: tuple[str, ...] = DEFAULT_MISSING_TOKENS
    max_skip_fraction: float = 0.1
    sample_rows: int = DEFAULT_SAMPLE_ROWS
    chunk_rows: int = DEFAULT_CHUNK_ROWS
    encoding: str = "utf-8"
    quotechar: str = '"'

    def __post_init__(self):
        if not isinstance(self.delimiter, str) or len(self.delimiter) != 1:
            raise ValidationError(
                f"delimiter: must be a single character, got {self.delimiter!r}"
            )
        if self.delimiter in ("\n", "\r"):
            raise ValidationError("delimiter: line terminators cannot be delimiters")
        if not isinstance(self.quotechar, str) or len(self.quotechar) != 1:
            raise ValidationError(
                f"quotechar: must be a single character, got {self.quotechar!r}"
            )
        if self.quotechar == self.delimiter:
            raise ValidationError("quotechar: must differ from delimiter")
        tokens = tuple(self.missing_tokens)
        for token in tokens:
            if not isinstance(token, str):
                raise ValidationError(f"missing_tokens: expected strings, got {token!r}")
        if "" not in tokens:
            tokens = ("",) + tokens
        object.__setattr__(self, "missing_tokens", tuple(t.strip() for t in tokens))
        check_fraction(self.max_skip_fraction, "max_skip_fraction")
        check_positive_int(self.sample_rows, "sample_rows")
        check_positive_int(self.chunk_rows, "chunk_rows")
        try:
            "".encode(self.encoding)
        except LookupError as e:
            raise ValidationError(f"encoding: unknown encoding {self.encoding!r}") from e
