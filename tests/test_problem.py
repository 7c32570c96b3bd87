"""Tests for constraints, problems and solutions."""
import numpy as np
import pytest

from stagesizer.exceptions import InvalidConstraint
from stagesizer.optimization.problem import Constraints, Problem
from stagesizer.optimization.solution import Solution
from stagesizer.optimization.uncertainty import ParameterSampler, Uncertainty
from stagesizer.utils.units import Mass, Velocity
from stagesizer.vehicle import Stage, Vehicle


def test_default_constraints_are_valid():
    constraints = Constraints()
    constraints.validate()
    assert constraints.min_liftoff_twr == 1.2
    assert constraints.min_stage_twr == 0.5
    assert constraints.max_stages == 3
    assert constraints.structural_ratio == 0.08
    assert constraints.max_units_per_stage == 9


@pytest.mark.parametrize("kwargs", [
    {'structural_ratio': 0.0},
    {'structural_ratio': 1.0},
    {'structural_ratio': -0.1},
    {'min_liftoff_twr': 0.0},
    {'min_stage_twr': -1.0},
    {'max_stages': 0},
    {'max_units_per_stage': 0},
])
def test_invalid_constraints(kwargs):
    with pytest.raises(InvalidConstraint):
        Constraints(**kwargs).validate()


def test_constraints_from_dict_keeps_defaults():
    constraints = Constraints.from_dict({'max_stages': 2, 'structural_ratio': 0.1})
    assert constraints.max_stages == 2
    assert constraints.structural_ratio == 0.1
    assert constraints.min_liftoff_twr == 1.2


def test_empty_catalog_rejected():
    problem = Problem(Mass(5000.0), Velocity(9400.0), units=[])
    with pytest.raises(InvalidConstraint):
        problem.validate()


@pytest.mark.parametrize("payload, target", [(0.0, 9400.0), (-10.0, 9400.0), (5000.0, 0.0)])
def test_non_positive_payload_or_target_rejected(raptor, payload, target):
    with pytest.raises(InvalidConstraint):
        Problem(Mass(payload), Velocity(target), units=[raptor]).validate()


@pytest.mark.parametrize("count", [0, 4])
def test_stage_count_out_of_range(raptor, count):
    problem = Problem(Mass(5000.0), Velocity(9400.0), units=[raptor], stage_count=count)
    with pytest.raises(InvalidConstraint):
        problem.validate()


def test_problem_is_immutable(raptor):
    problem = Problem(Mass(5000.0), Velocity(9400.0), units=[raptor])
    assert isinstance(problem.units, tuple)
    with pytest.raises(AttributeError):
        problem.payload = Mass(1.0)
    fixed = problem.with_stage_count(2)
    assert fixed.stage_count == 2
    assert problem.stage_count is None


def test_stage_counts_and_units(raptor, raptor_vacuum):
    problem = Problem(Mass(5000.0), Velocity(9400.0), units=[raptor, raptor_vacuum],
                      stage_units=[[raptor]])
    assert problem.stage_counts() == [1, 2, 3]
    assert problem.units_for_stage(0) == (raptor,)
    assert problem.units_for_stage(1) == (raptor, raptor_vacuum)
    assert not problem.is_single_unit
    assert problem.with_stage_count(2).stage_counts() == [2]


def test_single_unit(raptor):
    problem = Problem(Mass(5000.0), Velocity(9400.0), units=[raptor])
    assert problem.is_single_unit
    assert problem.single_unit is raptor


def test_solution_margin(raptor):
    stages = [
        Stage.with_structural_ratio(raptor, 3, Mass(200_000.0), 0.08),
        Stage.with_structural_ratio(raptor, 1, Mass(30_000.0), 0.08),
    ]
    vehicle = Vehicle(stages, Mass(5000.0))
    solution = Solution(vehicle, Velocity(9000.0), evaluations=12, solver="Test")
    assert solution.margin.mps == pytest.approx(vehicle.total_delta_v.mps - 9000.0)
    assert solution.meets_target == (vehicle.total_delta_v.mps >= 9000.0)
    assert solution.margin_percent == pytest.approx(solution.margin.mps / 90.0)
    assert solution.payload_fraction_percent == pytest.approx(500000.0 / vehicle.total_mass.kg)
    data = solution.to_dict()
    assert data['execution_metrics']['function_evaluations'] == 12
    assert len(data['stages']) == 2


def test_uncertainty_validation():
    Uncertainty().validate()
    with pytest.raises(InvalidConstraint):
        Uncertainty(isp=-0.01).validate()
    assert Uncertainty.none().is_zero


def test_sampler_zero_fraction_is_exact():
    sampler = ParameterSampler(Uncertainty.none(), np.random.default_rng(1))
    assert sampler.stage_factors() == (1.0, 1.0, 1.0)


def test_sampler_factor_clamped():
    assert ParameterSampler.factor(0.5, -10.0) == pytest.approx(1e-3)
    assert ParameterSampler.factor(0.1, 1.0) == pytest.approx(1.1)
