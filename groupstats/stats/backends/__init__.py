"""Statistics backends."""

from groupstats.stats.backends.cpu import CPUStatsBackend

__all__ = [
    "CPUStatsBackend",
]
