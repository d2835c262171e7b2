"""Utilities shared across groupstats subpackages."""

from groupstats.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
