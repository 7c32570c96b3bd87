"""Parameter uncertainty for Monte Carlo robustness runs."""
from dataclasses import dataclass

import numpy as np

from ..exceptions import InvalidConstraint

# Perturbed values never drop below this fraction of nominal.
MIN_FACTOR = 1e-3


@dataclass(frozen=True)
class Uncertainty:
    """One-sigma relative uncertainties (0.01 = 1 %)."""
    isp: float = 0.01
    thrust: float = 0.02
    structural: float = 0.05

    def validate(self):
        for name in ('isp', 'thrust', 'structural'):
            value = getattr(self, name)
            if not (value >= 0.0 and np.isfinite(value)):
                raise InvalidConstraint(f"{name} uncertainty must be a finite non-negative fraction, got {value}")

    @classmethod
    def none(cls) -> 'Uncertainty':
        return cls(0.0, 0.0, 0.0)

    @property
    def is_zero(self) -> bool:
        return self.isp == 0.0 and self.thrust == 0.0 and self.structural == 0.0

    @classmethod
    def from_dict(cls, data):
        defaults = cls()
        return cls(
            isp=float(data.get('isp', defaults.isp)),
            thrust=float(data.get('thrust', defaults.thrust)),
            structural=float(data.get('structural', defaults.structural)),
        )

    def to_dict(self):
        return {'isp': self.isp, 'thrust': self.thrust, 'structural': self.structural}


class ParameterSampler:
    """Draws multiplicative perturbation factors from a numpy Generator.

    For every stage the draws happen in a fixed order: Isp, structural mass,
    thrust. A draw is made even when the matching fraction is zero so the
    stream stays aligned across different uncertainty settings.
    """

    def __init__(self, uncertainty: Uncertainty, rng: np.random.Generator):
        self.uncertainty = uncertainty
        self.rng = rng

    @staticmethod
    def factor(fraction: float, z: float) -> float:
        if fraction == 0.0:
            return 1.0
        return max(1.0 + fraction * z, MIN_FACTOR)

    def stage_factors(self):
        """Return (isp_factor, structural_factor, thrust_factor) for one stage."""
        z_isp, z_structural, z_thrust = self.rng.standard_normal(3)
        return (
            self.factor(self.uncertainty.isp, z_isp),
            self.factor(self.uncertainty.structural, z_structural),
            self.factor(self.uncertainty.thrust, z_thrust),
        )
