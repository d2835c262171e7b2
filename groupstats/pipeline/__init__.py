"""
Pipeline module.

Public API:
    PipelineCoordinator      - load / analyze / run with atomic publication
    AnalysisRequest          - what to compute (wide or long layout)
    AnalysisResult           - column -> ColumnResult -> GroupResult
    RunOutcome               - COMPLETED or CANCELLED
"""

from groupstats.pipeline.coordinator import PipelineCoordinator
from groupstats.pipeline.request import LAYOUTS, LONG, WIDE, AnalysisRequest
from groupstats.pipeline.result import (
    AnalysisResult,
    ColumnResult,
    GroupResult,
    PipelineState,
    RunOutcome,
)

__all__ = [
    "PipelineCoordinator",
    "AnalysisRequest",
    "AnalysisResult",
    "ColumnResult",
    "GroupResult",
    "PipelineState",
    "RunOutcome",
    "LAYOUTS",
    "WIDE",
    "LONG",
]
