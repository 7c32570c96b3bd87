"""Launch vehicle staging optimizer."""
from .exceptions import (
    Infeasible,
    InvalidConstraint,
    NumericDomainError,
    StagingError,
    UnsupportedProblem,
)
from .utils.units import Duration, Force, Isp, Mass, Ratio, Velocity
from .vehicle import Propellant, PropulsionUnit, Stage, Vehicle
from .optimization.problem import Constraints, Problem
from .optimization.uncertainty import Uncertainty
from .optimization.solution import Solution
from .optimization.budget import SearchBudget
from .optimization.solvers import AnalyticalOptimizer, BruteForceOptimizer
from .optimization.monte_carlo import MonteCarloResult, MonteCarloRunner
from .optimization.objective import RocketStageOptimizer, select_solver

__version__ = "0.1.0"
