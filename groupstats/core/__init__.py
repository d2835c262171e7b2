"""
Core infrastructure for groupstats.

This module provides shared abstractions and utilities used by every stage
of the pipeline (table, grouping, stats, charts, pipeline).

Key components:
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    config: LoaderConfig
    progress: Cancellation tokens and progress reporting
    compute: Timing utilities
"""

from groupstats.core.result import Result
from groupstats.core.config import LoaderConfig
from groupstats.core.progress import (
    CancellationToken,
    ProgressCallback,
    ProgressEvent,
    ProgressReporter,
)
from groupstats.core.exceptions import (
    GroupStatsError,
    ValidationError,
    FormatError,
    EmptyInputError,
    ColumnNotFoundError,
    ControlGroupNotFoundError,
    InsufficientDataError,
    PipelineTimeoutError,
    OperationCancelled,
)

__all__ = [
    # Result
    "Result",
    # Configuration
    "LoaderConfig",
    # Progress / cancellation
    "CancellationToken",
    "ProgressCallback",
    "ProgressEvent",
    "ProgressReporter",
    # Exceptions
    "GroupStatsError",
    "ValidationError",
    "FormatError",
    "EmptyInputError",
    "ColumnNotFoundError",
    "ControlGroupNotFoundError",
    "InsufficientDataError",
    "PipelineTimeoutError",
    "OperationCancelled",
]
