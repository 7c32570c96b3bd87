"""Tests for the Monte Carlo robustness runner."""
import numpy as np
import pytest

from stagesizer.exceptions import NumericDomainError
from stagesizer.optimization.budget import SearchBudget
from stagesizer.optimization.monte_carlo import MonteCarloResult, MonteCarloRunner, TrialOutcome, percentile
from stagesizer.optimization.solvers.analytical_solver import AnalyticalOptimizer
from stagesizer.optimization.uncertainty import Uncertainty


@pytest.fixture
def nominal(scenario_problem):
    return AnalyticalOptimizer().solve(scenario_problem)


def test_zero_uncertainty_reproduces_nominal(scenario_problem, nominal):
    problem = scenario_problem.with_uncertainty(Uncertainty.none())
    result = MonteCarloRunner(seed=7, max_workers=2, chunk_size=16).run(problem, nominal, trials=50)

    assert result.completed == 50
    assert result.failed == 0
    assert result.success_probability == 1.0
    np.testing.assert_allclose(result.delta_v_samples, nominal.delta_v.mps, rtol=1e-12)
    np.testing.assert_allclose(result.mass_samples, nominal.total_mass.kg, rtol=1e-12)
    assert result.required_margin(0.95) == 0.0
    assert not result.cancelled


def test_independent_of_workers_and_chunking(scenario_problem, nominal):
    serial = MonteCarloRunner(seed=11, max_workers=1, chunk_size=7).run(scenario_problem, nominal, trials=60)
    parallel = MonteCarloRunner(seed=11, max_workers=4, chunk_size=3).run(scenario_problem, nominal, trials=60)
    np.testing.assert_array_equal(serial.delta_v_samples, parallel.delta_v_samples)
    np.testing.assert_array_equal(serial.mass_samples, parallel.mass_samples)
    assert serial.successes == parallel.successes


def test_seed_changes_samples(scenario_problem, nominal):
    a = MonteCarloRunner(seed=1, max_workers=1).run(scenario_problem, nominal, trials=20)
    b = MonteCarloRunner(seed=2, max_workers=1).run(scenario_problem, nominal, trials=20)
    assert not np.array_equal(a.delta_v_samples, b.delta_v_samples)


def test_success_falls_with_uncertainty(scenario_problem, nominal):
    runner = MonteCarloRunner(seed=3, max_workers=2, chunk_size=50)
    probabilities = []
    for fraction in (0.0, 0.01, 0.05):
        problem = scenario_problem.with_uncertainty(Uncertainty(fraction, fraction, fraction))
        probabilities.append(runner.run(problem, nominal, trials=400).success_probability)
    assert probabilities[0] >= probabilities[1] >= probabilities[2]
    assert probabilities[2] < 1.0


def test_nominal_is_never_modified(scenario_problem, nominal):
    before = nominal.vehicle.to_dict()
    MonteCarloRunner(seed=5, max_workers=2).run(scenario_problem, nominal, trials=30)
    assert nominal.vehicle.to_dict() == before


def test_failed_trials_are_excluded(scenario_problem, nominal, monkeypatch):
    runner = MonteCarloRunner(seed=9, max_workers=1, chunk_size=4)
    original = runner.perturbed_vehicle
    calls = []

    def flaky(vehicle, uncertainty, rng):
        calls.append(1)
        if len(calls) % 2 == 1:
            raise NumericDomainError("mass ratio must be positive")
        return original(vehicle, uncertainty, rng)

    monkeypatch.setattr(runner, 'perturbed_vehicle', flaky)
    result = runner.run(scenario_problem, nominal, trials=20)

    assert result.completed == 20
    assert result.failed == 10
    assert result.valid_trials == 10
    assert len(result.delta_v_samples) == 10
    assert 0.0 <= result.success_probability <= 1.0
    assert result.successes <= 10


def test_budget_stops_trials(scenario_problem, nominal):
    budget = SearchBudget(max_evaluations=10)
    result = MonteCarloRunner(seed=1, max_workers=1, chunk_size=5, budget=budget).run(
        scenario_problem, nominal, trials=50)
    assert result.completed == 10
    assert result.cancelled
    assert result.trials == 50


def test_invalid_settings(scenario_problem, nominal):
    with pytest.raises(ValueError):
        MonteCarloRunner(chunk_size=0)
    with pytest.raises(ValueError):
        MonteCarloRunner(max_workers=0)
    with pytest.raises(ValueError):
        MonteCarloRunner().run(scenario_problem, nominal, trials=0)


def test_confidence_interval_contains_estimate(scenario_problem, nominal):
    result = MonteCarloRunner(seed=4, max_workers=2).run(scenario_problem, nominal, trials=200)
    low, high = result.confidence_interval(0.95)
    assert 0.0 <= low <= result.success_probability <= high <= 1.0


def test_empty_result():
    result = MonteCarloResult([], 10, 9400.0, Uncertainty())
    assert result.success_probability == 0.0
    assert result.delta_v_percentile(50) == 0.0
    assert result.confidence_interval() == (0.0, 1.0)


def test_statistics_from_outcomes():
    outcomes = [TrialOutcome(i, 9000.0 + 100.0 * i, 200_000.0, 400.0) for i in range(10)]
    outcomes.append(TrialOutcome(10, failed=True))
    result = MonteCarloResult(outcomes, 11, 9400.0, Uncertainty())
    # 9400 .. 9900 meet the target
    assert result.successes == 6
    assert result.success_probability == pytest.approx(0.6)
    assert result.delta_v_percentile(50) == pytest.approx(9450.0)
    assert result.required_margin(0.9) == pytest.approx(9400.0 - percentile(result.delta_v_samples, 10.0))


def test_to_dict_keys(scenario_problem, nominal):
    data = MonteCarloRunner(seed=2, max_workers=1).run(scenario_problem, nominal, trials=25).to_dict()
    for key in ('trials', 'completed', 'failed', 'success_probability', 'success_probability_ci95',
                'delta_v', 'total_mass', 'required_margin_95', 'uncertainty'):
        assert key in data
    assert set(data['delta_v']) >= {'mean', 'std', 'p5', 'p50', 'p95'}


def test_budget_cap_is_exact_with_parallel_workers(scenario_problem, nominal):
    budget = SearchBudget(max_evaluations=10)
    result = MonteCarloRunner(seed=1, max_workers=4, chunk_size=1, budget=budget).run(
        scenario_problem, nominal, trials=50)
    assert result.completed == 10
    assert budget.evaluations == 10
    assert result.cancelled


def test_trial_outcome_success():
    assert TrialOutcome(0, 9500.0, 1.0, 1.0).succeeded(9400.0)
    assert not TrialOutcome(1, 9300.0, 1.0, 1.0).succeeded(9400.0)
    assert not TrialOutcome(2, failed=True).succeeded(0.0)
