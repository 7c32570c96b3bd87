"""Vehicle model: engines, stages and stacked vehicles."""
from .engine import Propellant, PropulsionUnit
from .stage import Stage
from .rocket import ConstraintViolation, Vehicle

__all__ = [
    'Propellant',
    'PropulsionUnit',
    'Stage',
    'Vehicle',
    'ConstraintViolation',
]
