"""Optimization package for rocket stage sizing."""
from .physics import G0, burn_time, delta_v, required_mass_ratio, twr

__all__ = [
    'G0',
    'delta_v',
    'required_mass_ratio',
    'twr',
    'burn_time',
]
