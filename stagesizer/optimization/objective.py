"""Solver selection and the top-level optimization driver."""
from typing import Dict, Optional

from ..utils.config import logger
from .budget import SearchBudget
from .monte_carlo import MonteCarloRunner
from .problem import Problem
from .solvers.analytical_solver import AnalyticalOptimizer
from .solvers.brute_force_solver import BruteForceOptimizer


def select_solver(problem: Problem):
    """Pick the solver class for a problem shape.

    A fixed two-stage problem with one engine type and no per-stage
    restriction has a closed-form answer; everything else is searched.
    """
    if problem.is_single_unit and problem.stage_count == 2:
        return AnalyticalOptimizer
    return BruteForceOptimizer


class RocketStageOptimizer:
    """Class to manage a staging run: sizing followed by an optional robustness check."""

    def __init__(self, config: Dict, problem: Problem, budget: Optional[SearchBudget] = None):
        self.config = config
        self.problem = problem
        self.budget = budget if budget is not None else SearchBudget.from_config(config)
        self.solver = select_solver(problem)(config, self.budget)

    def solve(self, run_monte_carlo: bool = True, trials: Optional[int] = None) -> Dict:
        """Size the vehicle and, if requested, run Monte Carlo on the result.

        Returns:
            dict: {'solution': Solution, 'monte_carlo': MonteCarloResult or None}

        Raises:
            InvalidConstraint: Malformed problem
            Infeasible: No configuration meets the target
        """
        logger.info(
            f"Sizing for payload {self.problem.payload}, target {self.problem.target_delta_v} "
            f"with {self.solver.name} ({len(self.problem.units)} engine types)"
        )
        solution = self.solver.solve(self.problem)
        if not solution.complete:
            logger.warning("Search stopped by budget; solution is the best found so far")

        monte_carlo = None
        if run_monte_carlo:
            runner = MonteCarloRunner(self.config, budget=self.budget)
            monte_carlo = runner.run(self.problem, solution, trials)

        return {'solution': solution, 'monte_carlo': monte_carlo}
