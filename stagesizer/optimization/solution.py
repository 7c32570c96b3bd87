"""Optimization result."""
from ..utils.units import Velocity


class Solution:
    """A sized vehicle and how it was found.

    Args:
        vehicle: The sized vehicle
        target_delta_v: Target the solver was asked to meet
        evaluations: Candidates evaluated to find it
        solver: Name of the solver that produced it
        execution_time: Wall time in seconds
        complete: False when a budget stopped the search early
    """

    def __init__(self, vehicle, target_delta_v: Velocity, evaluations: int = 0,
                 solver: str = "", execution_time: float = 0.0, complete: bool = True):
        self.vehicle = vehicle
        self.target_delta_v = target_delta_v
        self.delta_v = vehicle.total_delta_v
        self.margin = self.delta_v - target_delta_v
        self.evaluations = int(evaluations)
        self.solver = solver
        self.execution_time = float(execution_time)
        self.complete = complete

    @property
    def meets_target(self) -> bool:
        return self.margin.value >= 0.0

    @property
    def total_mass(self):
        return self.vehicle.total_mass

    @property
    def payload_fraction(self):
        return self.vehicle.payload_fraction

    @property
    def payload_fraction_percent(self) -> float:
        return self.vehicle.payload_fraction.percent

    @property
    def margin_percent(self) -> float:
        return self.margin.value / self.target_delta_v.value * 100.0

    def to_dict(self):
        result = {
            'solver': self.solver,
            'success': self.meets_target,
            'complete': self.complete,
            'target_delta_v': self.target_delta_v.mps,
            'achieved_delta_v': self.delta_v.mps,
            'margin': self.margin.mps,
            'margin_percent': self.margin_percent,
            'payload_fraction_percent': self.payload_fraction_percent,
            'execution_metrics': {
                'function_evaluations': self.evaluations,
                'execution_time': self.execution_time,
            },
        }
        result.update(self.vehicle.to_dict())
        return result

    def __repr__(self):
        return (f"Solution(solver={self.solver!r}, stages={self.vehicle.stage_count}, "
                f"total_mass={self.total_mass}, delta_v={self.delta_v})")
