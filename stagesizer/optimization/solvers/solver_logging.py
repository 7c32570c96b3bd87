"""Logging utilities for staging solvers."""
import logging
import os
from typing import Optional


def get_solver_logger(solver_name: str, log_dir: Optional[str] = None) -> logging.Logger:
    """Get the logger for a specific solver.

    The logger is a child of the package logger so console output is shared.
    When ``log_dir`` is given a dedicated file handler is attached as well.

    Args:
        solver_name: Name of the solver (e.g., 'BruteForceOptimizer')
        log_dir: Directory to store a per-solver log file, or None

    Returns:
        Logger instance for the solver
    """
    logger = logging.getLogger(f"stagesizer.solver.{solver_name}")
    logger.setLevel(logging.DEBUG)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.abspath(os.path.join(log_dir, f"{solver_name.lower()}.log"))

        # Avoid duplicate handlers when a solver is constructed repeatedly
        for handler in list(logger.handlers):
            if isinstance(handler, logging.FileHandler):
                logger.removeHandler(handler)
                handler.close()

        fh = logging.FileHandler(log_file, mode='w')
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        logger.addHandler(fh)

    return logger
