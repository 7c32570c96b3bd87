"""Physics calculations for rocket stage sizing."""
import numpy as np

from ..exceptions import NumericDomainError
from ..utils.units import Duration, Ratio, Velocity

# Standard gravity (m/s^2)
G0 = 9.80665


def delta_v(isp, mass_ratio) -> Velocity:
    """Ideal rocket equation.

    Args:
        isp (Isp): Specific impulse
        mass_ratio (Ratio): Initial mass / final mass

    Returns:
        Velocity: isp * g0 * ln(mass_ratio)

    Raises:
        NumericDomainError: If the mass ratio is not positive
    """
    ratio = float(mass_ratio)
    if not ratio > 0.0:
        raise NumericDomainError(f"mass ratio must be positive, got {ratio}")
    if ratio == 1.0:
        return Velocity(0.0)
    return Velocity(float(isp) * G0 * float(np.log(ratio)))


def required_mass_ratio(target, isp) -> Ratio:
    """Inverse of :func:`delta_v`: the mass ratio that yields ``target``.

    Args:
        target (Velocity): Required delta-v
        isp (Isp): Specific impulse

    Returns:
        Ratio: exp(dv / (isp * g0))
    """
    isp_s = float(isp)
    if not isp_s > 0.0:
        raise NumericDomainError(f"specific impulse must be positive, got {isp_s}")
    return Ratio(float(np.exp(float(target) / (isp_s * G0))))


def twr(thrust, mass, gravity: float = G0) -> Ratio:
    """Thrust-to-weight ratio: thrust / (mass * gravity)."""
    weight = float(mass) * gravity
    if not weight > 0.0:
        raise NumericDomainError(f"weight must be positive, got {weight}")
    return Ratio(float(thrust) / weight)


def burn_time(propellant, thrust, isp) -> Duration:
    """Burn duration at constant thrust: mp * isp * g0 / thrust.

    Raises:
        NumericDomainError: If thrust is not positive
    """
    thrust_n = float(thrust)
    if not thrust_n > 0.0:
        raise NumericDomainError(f"thrust must be positive for burn time, got {thrust_n}")
    return Duration(float(propellant) * float(isp) * G0 / thrust_n)
