"""Tests for solver selection, configuration, budgets and the driver."""
import copy
import json
import os
from logging.handlers import RotatingFileHandler

import pytest

from stagesizer.optimization.budget import SearchBudget
from stagesizer.optimization.objective import RocketStageOptimizer, select_solver
from stagesizer.optimization.problem import Problem
from stagesizer.optimization.solver_config import get_solver_config
from stagesizer.optimization.solvers.analytical_solver import AnalyticalOptimizer
from stagesizer.optimization.solvers.brute_force_solver import BruteForceOptimizer
from stagesizer.optimization.solvers.solver_logging import get_solver_logger
from stagesizer.utils.config import CONFIG, load_config, logger, merge_config, setup_logging
from stagesizer.utils.units import Mass, Velocity


@pytest.fixture
def quick_config(small_grid):
    config = copy.deepcopy(CONFIG)
    config['optimization']['solvers']['brute_force'].update(small_grid)
    config['optimization']['solvers']['monte_carlo'].update({'trials': 30, 'max_workers': 2})
    return config


@pytest.fixture
def file_logging(tmp_path):
    yield tmp_path
    for handler in list(logger.handlers):
        if isinstance(handler, RotatingFileHandler):
            logger.removeHandler(handler)
            handler.close()


def test_select_solver(raptor, raptor_vacuum, scenario_problem):
    assert select_solver(scenario_problem) is AnalyticalOptimizer
    assert select_solver(scenario_problem.with_stage_count(3)) is BruteForceOptimizer
    free = Problem(Mass(5000.0), Velocity(9400.0), units=[raptor])
    assert select_solver(free) is BruteForceOptimizer
    mixed = Problem(Mass(5000.0), Velocity(9400.0), units=[raptor, raptor_vacuum], stage_count=2)
    assert select_solver(mixed) is BruteForceOptimizer


def test_optimizer_runs_sizing_and_monte_carlo(quick_config, scenario_problem):
    results = RocketStageOptimizer(quick_config, scenario_problem).solve()
    assert results['solution'].solver == "AnalyticalOptimizer"
    assert results['monte_carlo'].trials == 30
    assert results['monte_carlo'].completed == 30


def test_optimizer_without_monte_carlo(quick_config, raptor, raptor_vacuum):
    problem = Problem(Mass(5000.0), Velocity(9400.0), units=[raptor, raptor_vacuum], stage_count=2)
    results = RocketStageOptimizer(quick_config, problem).solve(run_monte_carlo=False)
    assert results['solution'].solver == "BruteForceOptimizer"
    assert results['monte_carlo'] is None


def test_budget_limits():
    budget = SearchBudget(max_evaluations=3).start()
    assert not budget.exhausted()
    budget.charge(3)
    assert budget.exhausted()
    budget.start()
    assert budget.evaluations == 0
    assert not budget.exhausted()

    assert SearchBudget(time_limit=0.0).start().exhausted()


def test_cancel_survives_restart():
    budget = SearchBudget()
    budget.charge(10 ** 9)
    assert not budget.exhausted()
    budget.cancel()
    budget.start()
    assert budget.cancelled
    assert budget.exhausted()


def test_budget_from_config():
    budget = SearchBudget.from_config({'optimization': {'budget': {'time_limit': 5, 'max_evaluations': 100}}})
    assert budget.time_limit == 5
    assert budget.max_evaluations == 100
    assert SearchBudget.from_config({}).max_evaluations is None


def test_solver_config_defaults():
    settings = get_solver_config({}, 'brute_force')
    assert settings['propellant_steps'] == 20
    assert settings['log_dir'] is None
    assert get_solver_config(None, 'analytical')['robustness_margin'] == 0.02


def test_solver_config_merges_user_values():
    config = {
        'optimization': {
            'constraints': {'max_stages': 2},
            'solvers': {'monte_carlo': {'trials': 10}},
        },
        'logging': {'log_dir': 'logs'},
    }
    settings = get_solver_config(config, 'monte_carlo')
    assert settings['trials'] == 10
    assert settings['seed'] == 42
    assert settings['constraints'] == {'max_stages': 2}
    assert settings['log_dir'] == 'logs'


def test_merge_config_is_deep():
    merged = merge_config(CONFIG, {'optimization': {'constraints': {'max_stages': 2}}})
    assert merged['optimization']['constraints']['max_stages'] == 2
    assert merged['optimization']['constraints']['min_liftoff_twr'] == 1.2
    assert CONFIG['optimization']['constraints']['max_stages'] == 3


def test_load_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({'optimization': {'budget': {'time_limit': 60}}}))
    config = load_config(str(path))
    assert config['optimization']['budget']['time_limit'] == 60
    assert config['optimization']['solvers']['monte_carlo']['seed'] == 42
    assert load_config(str(tmp_path / "missing.json")) == CONFIG

    path.write_text("{not json")
    assert load_config(str(path)) == CONFIG


def test_setup_logging_writes_files(file_logging):
    setup_logging(str(file_logging))
    logger.warning("budget exhausted")
    for handler in logger.handlers:
        handler.flush()
    assert (file_logging / "debug.log").exists()
    assert "budget exhausted" in (file_logging / "error.log").read_text()


def test_solver_logger_is_child(tmp_path):
    solver_logger = get_solver_logger("TestSolver", str(tmp_path))
    assert solver_logger.name == "stagesizer.solver.TestSolver"
    assert solver_logger.parent is logger
    solver_logger.info("hello")
    for handler in solver_logger.handlers:
        handler.flush()
    assert (tmp_path / "testsolver.log").exists()
    for handler in list(solver_logger.handlers):
        solver_logger.removeHandler(handler)
        handler.close()


def test_main_end_to_end(file_logging, quick_config):
    from main import main

    input_path = file_logging / "input.json"
    input_path.write_text(json.dumps({
        "parameters": {"payload_kg": 5000.0, "target_delta_v": 9400.0, "stage_count": 2},
        "engines": ["Raptor-2"],
    }))
    config_path = file_logging / "config.json"
    config_path.write_text(json.dumps(quick_config))
    output_dir = file_logging / "output"

    assert main(str(input_path), str(config_path), str(output_dir)) == 0
    for name in ("optimization_report.json", "stage_results.csv", "monte_carlo_samples.csv",
                 "mass_breakdown.png", "monte_carlo.png", "debug.log"):
        assert os.path.exists(output_dir / name)


def test_main_reports_infeasible(file_logging):
    from main import main

    input_path = file_logging / "input.json"
    input_path.write_text(json.dumps({
        "parameters": {"payload_kg": 5000.0, "target_delta_v": 9400.0, "stage_count": 2},
        "engines": ["Raptor-2"],
        "constraints": {"max_units_per_stage": 1},
    }))
    assert main(str(input_path), None, str(file_logging / "output")) == 1


def test_restricted_single_engine_problem_is_searched(raptor):
    problem = Problem(Mass(5000.0), Velocity(9400.0), units=[raptor], stage_count=2,
                      stage_units=[[raptor], [raptor]])
    assert select_solver(problem) is BruteForceOptimizer


def test_budget_reserve():
    budget = SearchBudget(max_evaluations=2).start()
    assert budget.reserve()
    assert budget.reserve()
    assert not budget.reserve()
    assert budget.evaluations == 2
