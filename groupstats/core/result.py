"""
Generic result container for all groupstats computations.

The Result class provides a standardized envelope that the statistics
engine uses. This enables shared tooling for timing, logging, reproducibility,
and serialization while allowing each stage to define its own payload.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (control key, columns, issues)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) for reproducibility
    - provenance records library versions so runs can be reproduced
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


def _default_provenance() -> dict[str, Any]:
    """Versions of the libraries that produced a result."""
    import numpy
    import scipy
    from groupstats import __version__

    return {
        'groupstats_version': __version__,
        'numpy_version': numpy.__version__,
        'scipy_version': scipy.__version__,
    }


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for statistical computations.

    Type Parameters:
        P: The stage-specific payload type

    Attributes:
        params: Stage-specific payload (statistics records, ...)
        info: Structured metadata (control key, columns, ...)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation
        provenance: Library versions and algorithm identifiers

    Examples:
        >>> Result(
        ...     params=(record_a, record_b),
        ...     info={'control': 'Control', 'columns': ['height']},
        ...     timing={'total_seconds': 0.01},
        ...     backend_name='cpu_stats'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
    provenance: dict[str, Any] = field(default_factory=_default_provenance)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
