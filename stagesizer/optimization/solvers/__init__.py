"""Solver module initialization."""
from .base_solver import BaseSolver
from .analytical_solver import AnalyticalOptimizer
from .brute_force_solver import BruteForceOptimizer

__all__ = [
    'BaseSolver',
    'AnalyticalOptimizer',
    'BruteForceOptimizer',
]
