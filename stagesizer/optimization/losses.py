"""Empirical ascent loss estimates.

Rule-of-thumb estimates of gravity, drag and steering losses for an Earth
ascent, driven by first-stage burn time and liftoff thrust-to-weight. These
are not a trajectory simulation.
"""
from dataclasses import dataclass

import numpy as np

from .physics import G0

LEO_ORBITAL_VELOCITY = 7800.0
LEO_MARGIN = 150.0
STEERING_LOSS = 100.0


@dataclass(frozen=True)
class LossEstimate:
    """Loss budget in m/s."""
    gravity: float
    drag: float
    steering: float

    @property
    def total(self) -> float:
        return self.gravity + self.drag + self.steering

    def to_dict(self):
        return {
            'gravity_loss': self.gravity,
            'drag_loss': self.drag,
            'steering_loss': self.steering,
            'total_loss': self.total,
        }


def _clamped_twr(twr) -> float:
    return float(np.clip(float(twr), 1.0, 10.0))


def gravity_loss(burn_time, twr) -> float:
    """Gravity loss: higher TWR pitches over sooner and spends less time vertical."""
    avg_sin_pitch = 0.85 / np.sqrt(_clamped_twr(twr))
    return float(G0 * float(burn_time) * avg_sin_pitch)


def drag_loss(twr) -> float:
    """Drag loss: about 150 m/s baseline, rising for slow climbs through max-q."""
    return 150.0 * (1.0 + 0.5 / _clamped_twr(twr))


def steering_loss() -> float:
    return STEERING_LOSS


def total_losses(first_stage_burn, liftoff_twr) -> LossEstimate:
    """Combine the three loss terms for a first stage burn."""
    return LossEstimate(
        gravity=gravity_loss(first_stage_burn, liftoff_twr),
        drag=drag_loss(liftoff_twr),
        steering=steering_loss(),
    )


def leo_delta_v_requirement(first_stage_burn, liftoff_twr) -> float:
    """Approximate delta-v needed to reach low Earth orbit, losses included."""
    losses = total_losses(first_stage_burn, liftoff_twr)
    return LEO_ORBITAL_VELOCITY + losses.total + LEO_MARGIN
