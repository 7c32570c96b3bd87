"""Optimization problem definition and constraints."""
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence, Tuple

from ..exceptions import InvalidConstraint
from ..utils.units import Mass, Velocity
from .uncertainty import Uncertainty


@dataclass(frozen=True)
class Constraints:
    """Feasibility bounds applied to every candidate vehicle.

    Attributes:
        min_liftoff_twr: Minimum booster TWR at liftoff (sea-level thrust)
        min_stage_twr: Minimum ignition TWR for upper stages (vacuum thrust)
        max_stages: Largest stage count considered
        structural_ratio: Structural mass as a fraction of propellant mass
        max_units_per_stage: Largest engine count per stage
    """
    min_liftoff_twr: float = 1.2
    min_stage_twr: float = 0.5
    max_stages: int = 3
    structural_ratio: float = 0.08
    max_units_per_stage: int = 9

    def validate(self):
        """Raise InvalidConstraint if any bound is out of range."""
        if not 0.0 < self.structural_ratio < 1.0:
            raise InvalidConstraint(
                f"structural ratio must be in (0, 1), got {self.structural_ratio}")
        if not self.min_liftoff_twr > 0.0:
            raise InvalidConstraint(
                f"minimum liftoff TWR must be positive, got {self.min_liftoff_twr}")
        if not self.min_stage_twr > 0.0:
            raise InvalidConstraint(
                f"minimum stage TWR must be positive, got {self.min_stage_twr}")
        if self.max_stages < 1:
            raise InvalidConstraint(f"max stages must be at least 1, got {self.max_stages}")
        if self.max_units_per_stage < 1:
            raise InvalidConstraint(
                f"max units per stage must be at least 1, got {self.max_units_per_stage}")

    @classmethod
    def from_dict(cls, data):
        defaults = cls()
        return cls(
            min_liftoff_twr=float(data.get('min_liftoff_twr', defaults.min_liftoff_twr)),
            min_stage_twr=float(data.get('min_stage_twr', defaults.min_stage_twr)),
            max_stages=int(data.get('max_stages', defaults.max_stages)),
            structural_ratio=float(data.get('structural_ratio', defaults.structural_ratio)),
            max_units_per_stage=int(data.get('max_units_per_stage', defaults.max_units_per_stage)),
        )

    def to_dict(self):
        return {
            'min_liftoff_twr': self.min_liftoff_twr,
            'min_stage_twr': self.min_stage_twr,
            'max_stages': self.max_stages,
            'structural_ratio': self.structural_ratio,
            'max_units_per_stage': self.max_units_per_stage,
        }


@dataclass(frozen=True)
class Problem:
    """A staging request.

    Attributes:
        payload: Mass delivered by the top stage
        target_delta_v: Required total delta-v
        units: Candidate engines, in catalog order
        constraints: Feasibility bounds
        stage_count: Fixed number of stages, or None to search 1..max_stages
        stage_units: Optional per-stage engine lists (index 0 = booster);
            stages past the end of this list use ``units``
        uncertainty: Perturbation fractions used by Monte Carlo runs
    """
    payload: Mass
    target_delta_v: Velocity
    units: Tuple = ()
    constraints: Constraints = field(default_factory=Constraints)
    stage_count: Optional[int] = None
    stage_units: Optional[Tuple[Tuple, ...]] = None
    uncertainty: Uncertainty = field(default_factory=Uncertainty)

    def __post_init__(self):
        object.__setattr__(self, 'units', tuple(self.units))
        if self.stage_units is not None:
            object.__setattr__(self, 'stage_units', tuple(tuple(u) for u in self.stage_units))

    def validate(self):
        """Raise InvalidConstraint for a malformed problem."""
        if not self.payload.value > 0.0:
            raise InvalidConstraint(f"payload must be positive, got {self.payload}")
        if not self.target_delta_v.value > 0.0:
            raise InvalidConstraint(f"target delta-v must be positive, got {self.target_delta_v}")
        if not self.units:
            raise InvalidConstraint("no propulsion units available")
        if self.stage_units is not None and any(not units for units in self.stage_units):
            raise InvalidConstraint("per-stage engine lists cannot be empty")
        self.constraints.validate()
        if self.stage_count is not None and not 1 <= self.stage_count <= self.constraints.max_stages:
            raise InvalidConstraint(
                f"stage count {self.stage_count} outside 1..{self.constraints.max_stages}")
        self.uncertainty.validate()

    def with_stage_count(self, count: int) -> 'Problem':
        return replace(self, stage_count=count)

    def with_uncertainty(self, uncertainty: Uncertainty) -> 'Problem':
        return replace(self, uncertainty=uncertainty)

    def stage_counts(self) -> Sequence[int]:
        """Stage counts to search, ascending."""
        if self.stage_count is not None:
            return [self.stage_count]
        return list(range(1, self.constraints.max_stages + 1))

    def units_for_stage(self, index: int) -> Tuple:
        if self.stage_units is not None and index < len(self.stage_units):
            return self.stage_units[index]
        return self.units

    @property
    def is_single_unit(self) -> bool:
        """True when exactly one engine type is available and no stage is restricted."""
        return len(self.units) == 1 and self.stage_units is None

    @property
    def single_unit(self):
        return self.units[0] if self.is_single_unit else None
