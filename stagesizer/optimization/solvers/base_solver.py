"""Base solver class for stage sizing."""
from abc import ABC, abstractmethod
from typing import Dict, Optional

from ..budget import SearchBudget
from ..problem import Problem
from ..solution import Solution
from ..solver_config import get_solver_config
from .solver_logging import get_solver_logger


class BaseSolver(ABC):
    """Base class for all staging solvers."""

    # Key of this solver's section under optimization.solvers
    config_key = None

    def __init__(self, config: Optional[Dict] = None, budget: Optional[SearchBudget] = None):
        """Initialize solver.

        Args:
            config: Configuration dictionary (see ``utils.config.CONFIG``)
            budget: Optional cancellation budget shared with the caller
        """
        self.config = config or {}
        self.solver_config = get_solver_config(self.config, self.config_key)
        self.budget = budget
        self.name = self.__class__.__name__
        self.logger = get_solver_logger(self.name, self.solver_config.get('log_dir'))

    def prepare(self, problem: Problem):
        """Validate the problem before any search starts."""
        problem.validate()
        if self.budget is not None:
            self.budget.start()

    def process_results(self, vehicle, problem: Problem, evaluations: int,
                        execution_time: float, complete: bool = True) -> Solution:
        """Wrap a vehicle in a Solution and log a one-line summary."""
        solution = Solution(
            vehicle,
            problem.target_delta_v,
            evaluations=evaluations,
            solver=self.name,
            execution_time=execution_time,
            complete=complete,
        )
        self.logger.info(
            f"{self.name}: {vehicle.stage_count} stages, total mass {solution.total_mass}, "
            f"payload fraction {solution.payload_fraction_percent:.3f}%, "
            f"delta-v {solution.delta_v} (margin {solution.margin}), "
            f"{evaluations} evaluations in {execution_time:.3f}s"
        )
        return solution

    @abstractmethod
    def solve(self, problem: Problem) -> Solution:
        """Size a vehicle for ``problem``.

        Raises:
            InvalidConstraint: Malformed problem
            Infeasible: No configuration meets the target and constraints
        """
