"""
Exception hierarchy for groupstats.

All exceptions inherit from GroupStatsError to allow catching any
library-specific error. Fatal pipeline errors (FormatError, EmptyInputError,
ColumnNotFoundError, ControlGroupNotFoundError) abort a run before anything
is published. InsufficientDataError is non-fatal: it is attached to the
affected StatsRecord rather than raised.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""

from __future__ import annotations

from typing import Sequence


class GroupStatsError(Exception):
    """Base exception for all groupstats errors."""
    pass


class ValidationError(GroupStatsError):
    """
    Input validation failed.

    Raised when user-provided arguments or configuration fail validation
    checks (bad delimiter, threshold out of range, unknown layout, ...).
    """
    pass


class FormatError(GroupStatsError):
    """
    Source is malformed or unreadable.

    Raised for undecodable bytes, an unusable header, or a malformed-row
    rate above the configured threshold.

    Attributes:
        row_number: 1-based line number in the source (header is line 1),
            if the problem is tied to a row
        column: Column name involved, if any
        skipped_rows: Number of malformed rows skipped so far, if relevant
    """

    def __init__(
        self,
        message: str,
        row_number: int | None = None,
        column: str | None = None,
        skipped_rows: int | None = None,
    ):
        super().__init__(message)
        self.row_number = row_number
        self.column = column
        self.skipped_rows = skipped_rows


class EmptyInputError(GroupStatsError):
    """
    Source contains no data rows.

    Attributes:
        skipped_rows: Malformed rows that were skipped (the source may have
            had lines, none of them usable)
    """

    def __init__(self, message: str, skipped_rows: int = 0):
        super().__init__(message)
        self.skipped_rows = skipped_rows


class ColumnNotFoundError(GroupStatsError):
    """
    A requested column is absent or has the wrong kind.

    Attributes:
        column: The requested column name
        available: Column names that would have been accepted
        expected_kind: 'categorical' or 'numeric', if the column exists but
            has the other kind
    """

    def __init__(
        self,
        message: str,
        column: str,
        available: Sequence[str] = (),
        expected_kind: str | None = None,
    ):
        super().__init__(message)
        self.column = column
        self.available = tuple(available)
        self.expected_kind = expected_kind


class ControlGroupNotFoundError(GroupStatsError):
    """
    The designated control group is not among the observed group keys.

    Attributes:
        control_key: The requested control key
        available: Observed group keys, first-seen order
    """

    def __init__(self, message: str, control_key: str, available: Sequence[str] = ()):
        super().__init__(message)
        self.control_key = control_key
        self.available = tuple(available)


class InsufficientDataError(GroupStatsError):
    """
    A (group, column) cell has too few usable values.

    Non-fatal: instances are attached to the StatsRecord of the affected
    cell, whose dependent fields are marked undefined.

    Attributes:
        group: Group key of the cell
        column: Data column of the cell
        n: Number of usable (non-missing) values
        required: Minimum number of values needed
    """

    def __init__(self, message: str, group: str, column: str, n: int, required: int = 2):
        super().__init__(message)
        self.group = group
        self.column = column
        self.n = n
        self.required = required


class PipelineTimeoutError(GroupStatsError):
    """
    A pipeline phase did not finish within the configured timeout.

    Attributes:
        phase: Phase that timed out ('load' or 'compute')
        timeout: The timeout in seconds
    """

    def __init__(self, message: str, phase: str, timeout: float):
        super().__init__(message)
        self.phase = phase
        self.timeout = timeout


class OperationCancelled(Exception):
    """
    A cancellation token fired while a phase was running.

    Not a GroupStatsError: cancellation is a terminal outcome, not a
    failure. The coordinator converts it into RunOutcome.CANCELLED.

    Attributes:
        phase: Phase that observed the cancellation
    """

    def __init__(self, phase: str = ""):
        super().__init__(f"operation cancelled during {phase or 'run'}")
        self.phase = phase
