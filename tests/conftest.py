"""Shared fixtures for staging tests."""
import os

os.environ.setdefault("MPLBACKEND", "Agg")

import pytest

from stagesizer.optimization.problem import Constraints, Problem
from stagesizer.utils.units import Force, Isp, Mass, Velocity
from stagesizer.vehicle.engine import Propellant, PropulsionUnit


def make_raptor():
    return PropulsionUnit(
        name="Raptor-2",
        thrust_sl=Force(2_256_000.0),
        thrust_vac=Force(2_450_000.0),
        isp_sl=Isp(327.0),
        isp_vac=Isp(350.0),
        dry_mass=Mass(1600.0),
        propellant=Propellant.LOX_CH4,
    )


def make_raptor_vacuum():
    return PropulsionUnit(
        name="Raptor-Vacuum",
        thrust_sl=Force(0.0),
        thrust_vac=Force(2_530_000.0),
        isp_sl=Isp(0.0),
        isp_vac=Isp(380.0),
        dry_mass=Mass(1600.0),
        propellant=Propellant.LOX_CH4,
    )


@pytest.fixture
def raptor():
    return make_raptor()


@pytest.fixture
def raptor_vacuum():
    return make_raptor_vacuum()


@pytest.fixture
def scenario_problem(raptor):
    """5 t payload, 9400 m/s, one Raptor-class engine, two fixed stages."""
    return Problem(
        payload=Mass(5000.0),
        target_delta_v=Velocity(9400.0),
        units=[raptor],
        constraints=Constraints(min_liftoff_twr=1.2, structural_ratio=0.08),
        stage_count=2,
    )


@pytest.fixture
def small_grid():
    """Brute-force settings small enough for quick tests."""
    return {
        'min_propellant_kg': 5.0e3,
        'max_propellant_kg': 5.0e5,
        'propellant_steps': 25,
        'refine_steps': 21,
    }
