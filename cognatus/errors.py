"""Error taxonomy for the research workflow and statistics engine."""

from typing import Any, Iterable, Optional


class CognatusError(Exception):
    """Base class for every error the core raises on purpose."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(CognatusError):
    """Missing, too-short or out-of-range input."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message, details={"field": field} if field else None)


class InvalidTransitionError(CognatusError):
    """Attempted stage change that is not in the transition table."""

    def __init__(self, current_stage: str, target_stage: str, allowed: Iterable[str]):
        self.current_stage = current_stage
        self.target_stage = target_stage
        self.allowed = list(allowed)
        allowed_text = ", ".join(self.allowed) if self.allowed else "none (terminal stage)"
        super().__init__(
            f"Invalid transition from {current_stage} to {target_stage}. "
            f"Allowed transitions: {allowed_text}",
            details={
                "current_stage": current_stage,
                "target_stage": target_stage,
                "allowed": self.allowed,
            },
        )


class InsufficientDataError(CognatusError):
    """Too few data points, or no parseable numbers at all."""


class HypothesisNotFoundError(CognatusError):
    """Unknown hypothesis id passed to scoring."""

    def __init__(self, hypothesis_id: str):
        self.hypothesis_id = hypothesis_id
        super().__init__(
            f"Hypothesis with ID {hypothesis_id} not found.",
            details={"hypothesis_id": hypothesis_id},
        )
