"""
Shared compute infrastructure for groupstats.

Stage-specific backends live in {stage}/backends/; this package only holds
what every stage uses.

Submodules:
    timing: Section timing
"""

from groupstats.core.compute.timing import Timer

__all__ = [
    "Timer",
]
