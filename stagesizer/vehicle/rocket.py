"""Multi-stage vehicle."""
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..optimization import losses
from ..utils.units import Duration, Mass, Ratio, Velocity
from .stage import Stage


@dataclass(frozen=True)
class ConstraintViolation:
    """First constraint a vehicle fails.

    Attributes:
        constraint: 'max_stages', 'liftoff_twr' or 'stage_twr'
        stage: Index of the offending stage (None for stage count)
        actual: Measured value
        required: Limit that was not met
    """
    constraint: str
    stage: Optional[int]
    actual: float
    required: float

    def __str__(self):
        where = f"stage {self.stage + 1}" if self.stage is not None else "vehicle"
        return f"{where}: {self.constraint} {self.actual:.3f} (required {self.required:.3f})"


class Vehicle:
    """Ordered stack of stages (index 0 is the booster) plus payload."""

    def __init__(self, stages: Sequence[Stage], payload: Mass):
        if not stages:
            raise ValueError("a vehicle needs at least one stage")
        if not payload.value >= 0.0:
            raise ValueError(f"payload cannot be negative, got {payload}")
        self.stages: List[Stage] = list(stages)
        self.payload = payload

    def __len__(self):
        return len(self.stages)

    @property
    def stage_count(self) -> int:
        return len(self.stages)

    def mass_above_stage(self, index: int) -> Mass:
        """Payload plus the wet mass of every stage above ``index``."""
        mass = self.payload
        for stage in self.stages[index + 1:]:
            mass = mass + stage.wet_mass
        return mass

    def stage_delta_v(self, index: int) -> Velocity:
        return self.stages[index].delta_v(self.mass_above_stage(index))

    @property
    def total_delta_v(self) -> Velocity:
        total = Velocity(0.0)
        for i in range(len(self.stages)):
            total = total + self.stage_delta_v(i)
        return total

    @property
    def total_mass(self) -> Mass:
        mass = self.payload
        for stage in self.stages:
            mass = mass + stage.wet_mass
        return mass

    @property
    def payload_fraction(self) -> Ratio:
        return self.payload / self.total_mass

    @property
    def total_burn_time(self) -> Duration:
        total = Duration(0.0)
        for stage in self.stages:
            total = total + stage.burn_time
        return total

    def stage_twr(self, index: int) -> Ratio:
        """Ignition TWR: sea-level thrust for the booster, vacuum above it."""
        return self.stages[index].ignition_twr(self.mass_above_stage(index), sea_level=index == 0)

    @property
    def liftoff_twr(self) -> Ratio:
        return self.stage_twr(0)

    def validate(self, constraints) -> Optional[ConstraintViolation]:
        """Return the first violated constraint, or None if all hold."""
        if len(self.stages) > constraints.max_stages:
            return ConstraintViolation('max_stages', None, len(self.stages), constraints.max_stages)
        for i in range(len(self.stages)):
            actual = self.stage_twr(i).value
            if i == 0:
                if actual < constraints.min_liftoff_twr:
                    return ConstraintViolation('liftoff_twr', 0, actual, constraints.min_liftoff_twr)
            elif actual < constraints.min_stage_twr:
                return ConstraintViolation('stage_twr', i, actual, constraints.min_stage_twr)
        return None

    def estimate_losses(self) -> losses.LossEstimate:
        """Empirical ascent losses from the booster burn and liftoff TWR."""
        return losses.total_losses(self.stages[0].burn_time, self.liftoff_twr)

    def to_dict(self):
        stages = []
        for i, stage in enumerate(self.stages):
            entry = stage.to_dict(self.mass_above_stage(i), sea_level=i == 0)
            entry['stage'] = i + 1
            stages.append(entry)
        return {
            'payload': self.payload.kg,
            'total_mass': self.total_mass.kg,
            'total_delta_v': self.total_delta_v.mps,
            'payload_fraction': self.payload_fraction.value,
            'liftoff_twr': self.liftoff_twr.value,
            'total_burn_time': self.total_burn_time.seconds,
            'stages': stages,
        }
