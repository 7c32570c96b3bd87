"""Exception types raised by the staging core."""
from typing import Dict, Optional


class StagingError(Exception):
    """Base class for all stagesizer errors."""


class NumericDomainError(StagingError, ValueError):
    """A physics function received an argument outside its domain."""


class InvalidConstraint(StagingError, ValueError):
    """Constraints or problem parameters are out of range."""


class UnsupportedProblem(StagingError):
    """The selected solver cannot handle this problem shape."""


class Infeasible(StagingError):
    """No configuration satisfies the constraints.

    Attributes:
        reason: Human readable description
        best_delta_v: Best delta-v reached by any examined candidate (m/s)
        blocking_constraint: Name of the constraint that rejected most candidates
        stage: Index of the stage that could not be sized, if known
        rejections: Count of rejections per constraint name
        evaluations: Number of candidates evaluated before giving up
    """

    def __init__(self, reason: str, best_delta_v: Optional[float] = None,
                 blocking_constraint: Optional[str] = None,
                 stage: Optional[int] = None,
                 rejections: Optional[Dict[str, int]] = None,
                 evaluations: int = 0):
        super().__init__(reason)
        self.reason = reason
        self.best_delta_v = best_delta_v
        self.blocking_constraint = blocking_constraint
        self.stage = stage
        self.rejections = dict(rejections or {})
        self.evaluations = evaluations

    def __str__(self):
        parts = [self.reason]
        if self.best_delta_v is not None:
            parts.append(f"best delta-v {self.best_delta_v:,.0f} m/s")
        if self.blocking_constraint:
            parts.append(f"blocked by {self.blocking_constraint}")
        return "; ".join(parts)
