"""Research workflow state machine."""

from cognatus.workflow.engine import SUCCESS, ResearchWorkflow, build_search_queries
from cognatus.workflow.state import (
    PROGRESS_WEIGHTS,
    STAGE_TRANSITIONS,
    Hypothesis,
    ResearchState,
    Stage,
)

__all__ = [
    "SUCCESS",
    "ResearchWorkflow",
    "build_search_queries",
    "PROGRESS_WEIGHTS",
    "STAGE_TRANSITIONS",
    "Hypothesis",
    "ResearchState",
    "Stage",
]
