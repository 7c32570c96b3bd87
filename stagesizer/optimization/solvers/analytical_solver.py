"""Closed-form two-stage solver."""
import time

from ...exceptions import Infeasible, UnsupportedProblem
from ...utils.units import Mass, Velocity
from ...vehicle import Stage, Vehicle
from .. import physics
from ..problem import Problem
from .base_solver import BaseSolver

# Extra delta-v fraction aimed for on top of the target
ROBUSTNESS_MARGIN = 0.02


class AnalyticalOptimizer(BaseSolver):
    """Two stages, one engine type, one structural ratio.

    With identical Isp and structural ratio in both stages the mass-optimal
    split of delta-v is an equal split, so each stage only needs the mass
    ratio ``R = exp(dv / 2 / (isp * g0))``. For a stage carrying ``m_above``
    with ``n`` engines of dry mass ``m_e`` and structural ratio ``eps``::

        R = (mp (1 + eps) + n m_e + m_above) / (eps mp + n m_e + m_above)
        mp = (n m_e + m_above) (R - 1) / (1 + eps (1 - R))

    The upper stage is sized first because its wet mass is the load on the
    booster. Engine count starts at one and grows until the stage meets its
    TWR constraint.
    """

    config_key = 'analytical'

    @staticmethod
    def supports(problem: Problem) -> bool:
        stage_count = problem.stage_count if problem.stage_count is not None else 2
        return problem.is_single_unit and stage_count == 2 and problem.constraints.max_stages >= 2

    @staticmethod
    def stage_propellant(mass_ratio: float, fixed_mass: float, structural_ratio: float) -> float:
        """Propellant mass giving ``mass_ratio`` for a stage with ``fixed_mass`` of engines and load."""
        denominator = 1.0 + structural_ratio * (1.0 - mass_ratio)
        if denominator <= 0.0:
            raise Infeasible(
                f"structural ratio {structural_ratio} too high for mass ratio {mass_ratio:.3f}",
                blocking_constraint='structural_ratio',
            )
        return fixed_mass * (mass_ratio - 1.0) / denominator

    def size_stage(self, unit, mass_ratio: float, mass_above: Mass, constraints, booster: bool):
        """Find the smallest engine count whose stage meets its TWR limit.

        Returns:
            tuple: (stage, attempts)
        """
        min_twr = constraints.min_liftoff_twr if booster else constraints.min_stage_twr
        stage_index = 0 if booster else 1
        best_twr = 0.0
        for count in range(1, constraints.max_units_per_stage + 1):
            fixed_mass = unit.dry_mass.kg * count + mass_above.kg
            propellant = self.stage_propellant(mass_ratio, fixed_mass, constraints.structural_ratio)
            stage = Stage.with_structural_ratio(unit, count, Mass(propellant), constraints.structural_ratio)
            stage_twr = stage.ignition_twr(mass_above, sea_level=booster).value
            self.logger.debug(
                f"stage {stage_index + 1}: {count} x {unit.name}, propellant {propellant:,.0f} kg, "
                f"TWR {stage_twr:.3f} (min {min_twr})"
            )
            if stage_twr >= min_twr:
                return stage, count
            best_twr = max(best_twr, stage_twr)

        constraint = 'liftoff_twr' if booster else 'stage_twr'
        raise Infeasible(
            f"stage {stage_index + 1} cannot reach TWR {min_twr} with up to "
            f"{constraints.max_units_per_stage} x {unit.name} (best {best_twr:.3f})",
            blocking_constraint=constraint,
            stage=stage_index,
            rejections={constraint: constraints.max_units_per_stage},
            evaluations=constraints.max_units_per_stage,
        )

    def solve(self, problem: Problem):
        """Size a two-stage vehicle in closed form.

        Raises:
            UnsupportedProblem: Not a single-engine two-stage problem
            InvalidConstraint: Malformed problem
            Infeasible: A stage cannot meet its TWR constraint within the engine cap
        """
        start_time = time.time()
        self.prepare(problem)
        if not self.supports(problem):
            raise UnsupportedProblem(
                "analytical solver needs exactly two stages and a single engine type"
            )

        unit = problem.single_unit
        constraints = problem.constraints
        margin = self.solver_config.get('robustness_margin', ROBUSTNESS_MARGIN)
        per_stage = Velocity(problem.target_delta_v.mps * (1.0 + margin) / 2.0)
        mass_ratio = physics.required_mass_ratio(per_stage, unit.isp_vac).value
        self.logger.debug(f"Delta-v per stage {per_stage}, required mass ratio {mass_ratio:.5f}")

        upper, upper_attempts = self.size_stage(unit, mass_ratio, problem.payload, constraints, booster=False)
        load = upper.wet_mass + problem.payload
        try:
            lower, lower_attempts = self.size_stage(unit, mass_ratio, load, constraints, booster=True)
        except Infeasible as e:
            e.evaluations += upper_attempts
            raise

        vehicle = Vehicle([lower, upper], problem.payload)
        return self.process_results(
            vehicle, problem,
            evaluations=upper_attempts + lower_attempts,
            execution_time=time.time() - start_time,
        )
