"""Monte Carlo robustness analysis of a sized vehicle."""
import concurrent.futures
import os
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np
from scipy import stats

from ..exceptions import NumericDomainError
from ..utils.config import logger
from ..vehicle import Stage, Vehicle
from .budget import SearchBudget
from .problem import Problem
from .solution import Solution
from .solver_config import get_solver_config
from .uncertainty import ParameterSampler, Uncertainty

PERCENTILES = (5.0, 50.0, 95.0)


@dataclass(frozen=True)
class TrialOutcome:
    """Result of one perturbed vehicle."""
    index: int
    delta_v: float = float('nan')
    total_mass: float = float('nan')
    burn_time: float = float('nan')
    failed: bool = False

    def succeeded(self, target: float) -> bool:
        return not self.failed and self.delta_v >= target


def percentile(sorted_samples, q: float) -> float:
    """Linear-interpolation percentile of already sorted samples (0.0 if empty)."""
    if len(sorted_samples) == 0:
        return 0.0
    return float(np.percentile(sorted_samples, float(np.clip(q, 0.0, 100.0)), method='linear'))


class MonteCarloResult:
    """Aggregated Monte Carlo statistics.

    ``delta_v_samples`` and ``mass_samples`` hold valid trials only, sorted
    ascending. Failed trials are counted but excluded from every statistic.
    """

    def __init__(self, outcomes: List[TrialOutcome], trials: int, target_delta_v: float,
                 uncertainty: Uncertainty, execution_time: float = 0.0, cancelled: bool = False):
        outcomes = sorted(outcomes, key=lambda o: o.index)
        valid = [o for o in outcomes if not o.failed]
        self.trials = trials
        self.completed = len(outcomes)
        self.failed = self.completed - len(valid)
        self.successes = sum(1 for o in valid if o.succeeded(target_delta_v))
        self.target_delta_v = target_delta_v
        self.uncertainty = uncertainty
        self.execution_time = execution_time
        self.cancelled = cancelled
        self.delta_v_samples = np.sort(np.array([o.delta_v for o in valid], dtype=float))
        self.mass_samples = np.sort(np.array([o.total_mass for o in valid], dtype=float))

    @property
    def valid_trials(self) -> int:
        return self.completed - self.failed

    @property
    def success_probability(self) -> float:
        if self.valid_trials == 0:
            return 0.0
        return self.successes / self.valid_trials

    def delta_v_percentile(self, q: float) -> float:
        return percentile(self.delta_v_samples, q)

    def mass_percentile(self, q: float) -> float:
        return percentile(self.mass_samples, q)

    @property
    def mean_delta_v(self) -> float:
        return float(np.mean(self.delta_v_samples)) if self.valid_trials else 0.0

    @property
    def std_delta_v(self) -> float:
        return float(np.std(self.delta_v_samples, ddof=1)) if self.valid_trials > 1 else 0.0

    @property
    def mean_mass(self) -> float:
        return float(np.mean(self.mass_samples)) if self.valid_trials else 0.0

    def confidence_interval(self, level: float = 0.95):
        """Clopper-Pearson interval on the success probability."""
        n, k = self.valid_trials, self.successes
        if n == 0:
            return 0.0, 1.0
        alpha = 1.0 - level
        low = 0.0 if k == 0 else float(stats.beta.ppf(alpha / 2.0, k, n - k + 1))
        high = 1.0 if k == n else float(stats.beta.ppf(1.0 - alpha / 2.0, k + 1, n - k))
        return low, high

    def required_margin(self, confidence: float = 0.95) -> float:
        """Extra delta-v (m/s) needed so that ``confidence`` of trials meet the target."""
        shortfall_dv = self.delta_v_percentile((1.0 - confidence) * 100.0)
        return max(self.target_delta_v - shortfall_dv, 0.0)

    def to_dict(self) -> Dict:
        ci_low, ci_high = self.confidence_interval()
        return {
            'trials': self.trials,
            'completed': self.completed,
            'failed': self.failed,
            'successes': self.successes,
            'success_probability': self.success_probability,
            'success_probability_ci95': [ci_low, ci_high],
            'target_delta_v': self.target_delta_v,
            'cancelled': self.cancelled,
            'uncertainty': self.uncertainty.to_dict(),
            'delta_v': {
                'mean': self.mean_delta_v,
                'std': self.std_delta_v,
                **{f"p{int(q)}": self.delta_v_percentile(q) for q in PERCENTILES},
            },
            'total_mass': {
                'mean': self.mean_mass,
                **{f"p{int(q)}": self.mass_percentile(q) for q in PERCENTILES},
            },
            'required_margin_95': self.required_margin(0.95),
            'execution_time': self.execution_time,
        }


class MonteCarloRunner:
    """Re-evaluates a nominal solution under random performance perturbations.

    Propellant masses and engine counts stay at their nominal values; only
    engine Isp, engine thrust and stage structural mass are perturbed. Trial
    ``i`` draws from its own generator seeded with ``(seed, i)``, so results
    do not depend on the number of workers or the order trials finish in.

    Args:
        config: Configuration dictionary
        seed: Base seed (defaults to the configured seed)
        max_workers: Thread pool size (None lets the executor choose)
        chunk_size: Trials handed to a worker at a time
        budget: Optional SearchBudget; one evaluation is reserved before each
            trial, so an evaluation cap is never overshot
    """

    def __init__(self, config=None, seed: Optional[int] = None, max_workers: Optional[int] = None,
                 chunk_size: Optional[int] = None, budget: Optional[SearchBudget] = None):
        settings = get_solver_config(config or {}, 'monte_carlo')
        self.seed = int(settings['seed'] if seed is None else seed)
        self.max_workers = settings['max_workers'] if max_workers is None else max_workers
        self.chunk_size = int(settings['chunk_size'] if chunk_size is None else chunk_size)
        self.default_trials = int(settings['trials'])
        self.budget = budget
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")

    def perturbed_vehicle(self, vehicle: Vehicle, uncertainty: Uncertainty,
                          rng: np.random.Generator) -> Vehicle:
        """Copy of ``vehicle`` with Isp, structural mass and thrust perturbed per stage."""
        sampler = ParameterSampler(uncertainty, rng)
        stages = []
        for stage in vehicle.stages:
            isp_factor, structural_factor, thrust_factor = sampler.stage_factors()
            stages.append(Stage(
                stage.unit.scaled(isp_factor=isp_factor, thrust_factor=thrust_factor),
                stage.unit_count,
                stage.propellant_mass,
                stage.structural_mass * structural_factor,
            ))
        return Vehicle(stages, vehicle.payload)

    def run_trial(self, index: int, vehicle: Vehicle, uncertainty: Uncertainty) -> TrialOutcome:
        rng = np.random.default_rng([self.seed, index])
        try:
            trial = self.perturbed_vehicle(vehicle, uncertainty, rng)
            delta_v = trial.total_delta_v.mps
            total_mass = trial.total_mass.kg
            burn = trial.total_burn_time.seconds
        except (NumericDomainError, ValueError, ZeroDivisionError) as e:
            logger.debug(f"Monte Carlo trial {index} failed: {str(e)}")
            return TrialOutcome(index, failed=True)
        if not (np.isfinite(delta_v) and np.isfinite(total_mass) and np.isfinite(burn)):
            return TrialOutcome(index, failed=True)
        return TrialOutcome(index, delta_v, total_mass, burn)

    def _run_chunk(self, indices, vehicle: Vehicle, uncertainty: Uncertainty) -> List[TrialOutcome]:
        outcomes = []
        for index in indices:
            # Reserve the trial up front so parallel chunks stop at the cap
            if self.budget is not None and not self.budget.reserve():
                break
            outcomes.append(self.run_trial(index, vehicle, uncertainty))
        return outcomes

    def run(self, problem: Problem, solution: Solution, trials: Optional[int] = None) -> MonteCarloResult:
        """Run ``trials`` perturbed evaluations of ``solution``.

        Args:
            problem: Supplies the uncertainty fractions and the target delta-v
            solution: Nominal solution, never modified
            trials: Number of trials (defaults to the configured count)

        Returns:
            MonteCarloResult: Aggregated statistics
        """
        trials = self.default_trials if trials is None else int(trials)
        if trials < 1:
            raise ValueError("trial count must be at least 1")
        problem.uncertainty.validate()
        start_time = time.time()
        if self.budget is not None:
            self.budget.start()

        vehicle = solution.vehicle
        uncertainty = problem.uncertainty
        chunks = [range(i, min(i + self.chunk_size, trials)) for i in range(0, trials, self.chunk_size)]
        workers = self.max_workers or min(32, (os.cpu_count() or 1) + 4)
        logger.info(f"Running {trials} Monte Carlo trials on {min(workers, len(chunks))} workers")

        outcomes: List[TrialOutcome] = []
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self._run_chunk, chunk, vehicle, uncertainty) for chunk in chunks]
            for future in concurrent.futures.as_completed(futures):
                outcomes.extend(future.result())

        cancelled = len(outcomes) < trials
        result = MonteCarloResult(
            outcomes, trials, problem.target_delta_v.mps, uncertainty,
            execution_time=time.time() - start_time, cancelled=cancelled,
        )
        if cancelled:
            logger.warning(f"Monte Carlo stopped early after {result.completed} of {trials} trials")
        if result.failed:
            logger.warning(f"{result.failed} Monte Carlo trials were numerically invalid")
        logger.info(
            f"Monte Carlo: success probability {result.success_probability:.1%}, "
            f"delta-v p5/p50/p95 {result.delta_v_percentile(5):,.0f}/"
            f"{result.delta_v_percentile(50):,.0f}/{result.delta_v_percentile(95):,.0f} m/s"
        )
        return result
