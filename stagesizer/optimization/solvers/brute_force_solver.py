"""Pruned grid search over stage count, engine choice, engine count and propellant."""
import time
from collections import Counter
from typing import List, Optional

import numpy as np

from ...exceptions import Infeasible
from ...utils.units import Mass
from ...vehicle import Stage, Vehicle
from ..problem import Problem
from .base_solver import BaseSolver


class _SearchState:
    """Incumbent and diagnostics for one optimizer run."""

    def __init__(self):
        self.best_mass = float('inf')
        self.best_stages: Optional[List[Stage]] = None
        self.best_delta_v = 0.0
        self.rejections = Counter()
        self.evaluations = 0
        self.cancelled = False

    def offer(self, total_mass: float, stages: List[Stage]) -> bool:
        # Strictly lighter only; ties keep the first found
        if total_mass < self.best_mass:
            self.best_mass = total_mass
            self.best_stages = list(stages)
            return True
        return False


class BruteForceOptimizer(BaseSolver):
    """Exhaustive search with pruning and a coarse-to-fine propellant pass.

    Stacks are built top-down: the upper stage is chosen first because its wet
    mass is carried by every stage below it. For each stage the engine and
    engine count fix thrust and engine mass before the propellant loop runs.
    Propellant values are tried in ascending order, which allows three cuts:

    * ignition TWR only falls as propellant grows, so the first value that
      fails the TWR limit ends the loop (failing at the smallest value rejects
      the engine/count outright);
    * partial stack mass only grows, so the loop ends once it reaches the
      incumbent's total mass;
    * at the booster, delta-v only grows, so the first value that meets the
      target is the lightest one for that stack.

    The result is the best candidate on the grid, not a certified optimum.
    The coarse result never gets heavier when the engine cap grows or the
    grid is refined by nesting (``n`` steps to ``2n - 1`` over the same
    bounds keeps every old value). Grids that do not nest carry no such
    guarantee. The refinement pass only ever lowers the coarse result, but
    it refines around each grid's own winner, so refined results need not
    be monotone across grids.

    Args:
        config: Configuration dictionary
        budget: Optional SearchBudget, polled once per top-stage engine choice
        **overrides: Any of propellant_steps, min_propellant_kg,
            max_propellant_kg, refine_steps, refine_window
    """

    config_key = 'brute_force'

    def __init__(self, config=None, budget=None, **overrides):
        super().__init__(config, budget)
        settings = dict(self.solver_config)
        settings.update({k: v for k, v in overrides.items() if v is not None})
        self.propellant_steps = int(settings['propellant_steps'])
        self.min_propellant_kg = float(settings['min_propellant_kg'])
        self.max_propellant_kg = float(settings['max_propellant_kg'])
        self.refine_steps = int(settings['refine_steps'])
        self.refine_window = float(settings['refine_window'])
        if self.propellant_steps < 1:
            raise ValueError("propellant_steps must be at least 1")
        if not 0.0 < self.min_propellant_kg <= self.max_propellant_kg:
            raise ValueError("propellant bounds must satisfy 0 < min <= max")

    def propellant_grid(self) -> List[float]:
        """Geometrically spaced propellant masses, ascending."""
        if self.propellant_steps == 1:
            return [self.min_propellant_kg]
        return [float(x) for x in np.geomspace(self.min_propellant_kg, self.max_propellant_kg,
                                               self.propellant_steps)]

    @property
    def grid_step_factor(self) -> float:
        """Ratio between neighbouring coarse grid values."""
        if self.propellant_steps < 2:
            return 1.0
        return (self.max_propellant_kg / self.min_propellant_kg) ** (1.0 / (self.propellant_steps - 1))

    def refine_grid(self, propellant_kg: float) -> List[float]:
        """Fine grid spanning ``refine_window`` coarse steps either side of a value."""
        span = self.grid_step_factor ** self.refine_window
        low = max(self.min_propellant_kg, propellant_kg / span)
        high = min(self.max_propellant_kg, propellant_kg * span)
        if high <= low:
            return [propellant_kg]
        return [float(x) for x in np.geomspace(low, high, self.refine_steps)]

    def _exhausted(self) -> bool:
        return self.budget is not None and self.budget.exhausted()

    def _search(self, problem: Problem, level: int, options, stages_above: List[Stage],
                mass_above: Mass, delta_v_above: float, state: _SearchState):
        """Size stage ``level`` and everything below it.

        Args:
            options: Callable mapping a stage index to (unit, count, grid) choices
            stages_above: Already sized stages, top-most first
        """
        constraints = problem.constraints
        booster = level == 0
        top = not stages_above
        min_twr = constraints.min_liftoff_twr if booster else constraints.min_stage_twr
        twr_reason = 'liftoff_twr' if booster else 'stage_twr'
        target = problem.target_delta_v.mps
        current_unit = None

        for unit, count, grid in options(level):
            if top and unit is not current_unit:
                current_unit = unit
                if self._exhausted():
                    state.cancelled = True
                    return
            for propellant_kg in grid:
                stage = Stage.with_structural_ratio(unit, count, Mass(propellant_kg),
                                                    constraints.structural_ratio)
                if stage.ignition_twr(mass_above, sea_level=booster).value < min_twr:
                    state.rejections[twr_reason] += 1
                    break
                partial_mass = mass_above + stage.wet_mass
                if partial_mass.kg >= state.best_mass:
                    break
                delta_v = delta_v_above + stage.delta_v(mass_above).mps
                if not booster:
                    self._search(problem, level - 1, options, stages_above + [stage],
                                 partial_mass, delta_v, state)
                    if state.cancelled:
                        return
                    continue

                state.evaluations += 1
                if self.budget is not None:
                    self.budget.charge()
                state.best_delta_v = max(state.best_delta_v, delta_v)
                if delta_v >= target:
                    state.offer(partial_mass.kg, [stage] + stages_above[::-1])
                    break
            else:
                # Grid exhausted without reaching the target
                if booster:
                    state.rejections['delta_v'] += 1

    def _coarse_options(self, problem: Problem):
        grid = self.propellant_grid()
        cap = problem.constraints.max_units_per_stage

        def options(level):
            for unit in problem.units_for_stage(level):
                for count in range(1, cap + 1):
                    yield unit, count, grid
        return options

    def _refine_options(self, stages: List[Stage]):
        grids = [self.refine_grid(stage.propellant_mass.kg) for stage in stages]

        def options(level):
            yield stages[level].unit, stages[level].unit_count, grids[level]
        return options

    def solve(self, problem: Problem):
        """Search for the lightest vehicle meeting the target.

        Raises:
            InvalidConstraint: Malformed problem
            Infeasible: No candidate meets the target and constraints, or the
                budget ran out before any did
        """
        start_time = time.time()
        self.prepare(problem)
        state = _SearchState()
        options = self._coarse_options(problem)

        for stage_count in problem.stage_counts():
            self.logger.debug(f"Searching {stage_count}-stage configurations")
            before = state.evaluations
            self._search(problem, stage_count - 1, options, [], problem.payload, 0.0, state)
            self.logger.debug(
                f"{stage_count} stages: {state.evaluations - before} evaluations, "
                f"best mass {state.best_mass:,.0f} kg"
            )
            if state.cancelled:
                self.logger.warning("Search budget exhausted, stopping coarse search")
                break

        coarse_evaluations = state.evaluations
        if state.best_stages is not None and self.refine_steps > 1 and not state.cancelled:
            coarse_mass = state.best_mass
            stages = state.best_stages
            self._search(problem, len(stages) - 1, self._refine_options(stages), [],
                         problem.payload, 0.0, state)
            if state.best_mass < coarse_mass:
                self.logger.debug(
                    f"Refinement reduced mass from {coarse_mass:,.0f} to {state.best_mass:,.0f} kg")
            self.logger.debug(f"Refinement evaluated {state.evaluations - coarse_evaluations} candidates")

        if state.best_stages is None:
            if state.cancelled:
                raise Infeasible(
                    "search budget exhausted before any feasible configuration was found",
                    best_delta_v=state.best_delta_v,
                    rejections=state.rejections,
                    evaluations=state.evaluations,
                )
            blocking = state.rejections.most_common(1)[0][0] if state.rejections else 'delta_v'
            self.logger.warning(
                f"No feasible configuration: best delta-v {state.best_delta_v:,.0f} m/s, "
                f"rejections {dict(state.rejections)}"
            )
            raise Infeasible(
                f"no configuration reaches {problem.target_delta_v} within constraints",
                best_delta_v=state.best_delta_v,
                blocking_constraint=blocking,
                rejections=state.rejections,
                evaluations=state.evaluations,
            )

        vehicle = Vehicle(state.best_stages, problem.payload)
        return self.process_results(
            vehicle, problem,
            evaluations=state.evaluations,
            execution_time=time.time() - start_time,
            complete=not state.cancelled,
        )
