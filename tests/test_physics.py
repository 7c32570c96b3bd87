import unittest

import numpy as np
import pytest

from stagesizer.exceptions import NumericDomainError
from stagesizer.optimization import losses
from stagesizer.optimization.physics import G0, burn_time, delta_v, required_mass_ratio, twr
from stagesizer.utils.units import Duration, Force, Isp, Mass, Ratio, Velocity


class TestPhysics(unittest.TestCase):
    def test_rocket_equation(self):
        dv = delta_v(Isp(350.0), Ratio(4.0))
        self.assertIsInstance(dv, Velocity)
        np.testing.assert_almost_equal(dv.mps, 350.0 * G0 * np.log(4.0), decimal=6)

    def test_unit_mass_ratio_gives_zero(self):
        self.assertEqual(delta_v(Isp(311.0), Ratio(1.0)).mps, 0.0)

    def test_non_positive_mass_ratio_rejected(self):
        with self.assertRaises(NumericDomainError):
            delta_v(Isp(300.0), Ratio(0.0))
        with self.assertRaises(NumericDomainError):
            delta_v(Isp(300.0), Ratio(-2.0))

    def test_required_mass_ratio(self):
        ratio = required_mass_ratio(Velocity(4794.0), Isp(350.0))
        np.testing.assert_almost_equal(ratio.value, 4.04191, decimal=4)

    def test_twr(self):
        value = twr(Force(2_256_000.0), Mass(100_000.0))
        np.testing.assert_almost_equal(value.value, 2_256_000.0 / (100_000.0 * G0))
        self.assertAlmostEqual(twr(Force(1000.0), Mass(100.0), gravity=10.0).value, 1.0)

    def test_burn_time(self):
        duration = burn_time(Mass(100_000.0), Force(2_450_000.0), Isp(350.0))
        self.assertIsInstance(duration, Duration)
        np.testing.assert_almost_equal(duration.seconds, 100_000.0 * 350.0 * G0 / 2_450_000.0)

    def test_burn_time_needs_thrust(self):
        with self.assertRaises(NumericDomainError):
            burn_time(Mass(1000.0), Force(0.0), Isp(300.0))


@pytest.mark.parametrize("isp", [200.0, 311.0, 350.0, 465.5])
@pytest.mark.parametrize("ratio", [1.01, 1.5, 3.0, 12.0, 60.0])
def test_required_mass_ratio_inverts_delta_v(isp, ratio):
    dv = delta_v(Isp(isp), Ratio(ratio))
    assert required_mass_ratio(dv, Isp(isp)).value == pytest.approx(ratio, rel=1e-4)


@pytest.mark.parametrize("isp", [250.0, 350.0, 450.0])
def test_delta_v_increasing_in_mass_ratio(isp):
    ratios = np.linspace(1.001, 20.0, 50)
    values = [delta_v(Isp(isp), Ratio(r)).mps for r in ratios]
    assert all(b > a for a, b in zip(values, values[1:]))


@pytest.mark.parametrize("ratio", [1.2, 4.0, 15.0])
def test_delta_v_increasing_in_isp(ratio):
    isps = np.linspace(100.0, 480.0, 40)
    values = [delta_v(Isp(i), Ratio(ratio)).mps for i in isps]
    assert all(b > a for a, b in zip(values, values[1:]))


def test_loss_estimate():
    estimate = losses.total_losses(Duration(150.0), Ratio(1.44))
    assert estimate.gravity == pytest.approx(G0 * 150.0 * 0.85 / 1.2)
    assert estimate.drag == pytest.approx(150.0 * (1.0 + 0.5 / 1.44))
    assert estimate.steering == 100.0
    assert estimate.total == pytest.approx(estimate.gravity + estimate.drag + 100.0)


def test_loss_estimate_clamps_twr():
    assert losses.drag_loss(Ratio(0.2)) == losses.drag_loss(Ratio(1.0))
    assert losses.gravity_loss(Duration(100.0), Ratio(50.0)) == losses.gravity_loss(Duration(100.0), Ratio(10.0))


def test_steering_loss_is_constant():
    assert losses.steering_loss() == losses.STEERING_LOSS


def test_leo_requirement():
    requirement = losses.leo_delta_v_requirement(Duration(150.0), Ratio(1.44))
    estimate = losses.total_losses(Duration(150.0), Ratio(1.44))
    assert requirement == pytest.approx(7800.0 + estimate.total + 150.0)


if __name__ == '__main__':
    unittest.main()
