"""Physical quantity types.

Each quantity is an immutable float wrapper tagged with its kind. Arithmetic is
only defined where it is dimensionally meaningful: adding two masses gives a
mass, dividing two masses gives a ``Ratio``, scaling by a plain number keeps
the kind. Anything else raises ``TypeError``.
"""
from dataclasses import dataclass
from numbers import Real
import math


@dataclass(frozen=True, order=False)
class Quantity:
    """Base class for tagged scalar quantities."""
    value: float

    unit = ""

    def __post_init__(self):
        object.__setattr__(self, 'value', float(self.value))

    def _check_kind(self, other, op):
        if type(other) is not type(self):
            raise TypeError(
                f"unsupported operand types for {op}: "
                f"'{type(self).__name__}' and '{type(other).__name__}'"
            )

    def __add__(self, other):
        self._check_kind(other, '+')
        return type(self)(self.value + other.value)

    def __sub__(self, other):
        self._check_kind(other, '-')
        return type(self)(self.value - other.value)

    def __mul__(self, factor):
        if isinstance(factor, Quantity) or not isinstance(factor, Real):
            return NotImplemented
        return type(self)(self.value * factor)

    __rmul__ = __mul__

    def __truediv__(self, other):
        if type(other) is type(self):
            return Ratio(self.value / other.value)
        if isinstance(other, Quantity) or not isinstance(other, Real):
            return NotImplemented
        return type(self)(self.value / other)

    def __neg__(self):
        return type(self)(-self.value)

    def __abs__(self):
        return type(self)(abs(self.value))

    def __float__(self):
        return self.value

    def __lt__(self, other):
        self._check_kind(other, '<')
        return self.value < other.value

    def __le__(self, other):
        self._check_kind(other, '<=')
        return self.value <= other.value

    def __gt__(self, other):
        self._check_kind(other, '>')
        return self.value > other.value

    def __ge__(self, other):
        self._check_kind(other, '>=')
        return self.value >= other.value

    def is_finite(self) -> bool:
        return math.isfinite(self.value)

    def __str__(self):
        return f"{format_number(self.value)} {self.unit}".rstrip()


@dataclass(frozen=True, order=False)
class Mass(Quantity):
    unit = "kg"

    @classmethod
    def from_kg(cls, kg):
        return cls(kg)

    @classmethod
    def from_tonnes(cls, tonnes):
        return cls(tonnes * 1000.0)

    @property
    def kg(self):
        return self.value

    @property
    def tonnes(self):
        return self.value / 1000.0


@dataclass(frozen=True, order=False)
class Velocity(Quantity):
    unit = "m/s"

    @classmethod
    def from_mps(cls, mps):
        return cls(mps)

    @classmethod
    def from_kmps(cls, kmps):
        return cls(kmps * 1000.0)

    @property
    def mps(self):
        return self.value

    @property
    def kmps(self):
        return self.value / 1000.0


@dataclass(frozen=True, order=False)
class Force(Quantity):
    unit = "N"

    @classmethod
    def from_newtons(cls, newtons):
        return cls(newtons)

    @classmethod
    def from_kilonewtons(cls, kn):
        return cls(kn * 1000.0)

    @property
    def newtons(self):
        return self.value

    @property
    def kilonewtons(self):
        return self.value / 1000.0

    def __str__(self):
        return f"{format_number(self.kilonewtons)} kN"


@dataclass(frozen=True, order=False)
class Duration(Quantity):
    unit = "s"

    @classmethod
    def from_seconds(cls, seconds):
        return cls(seconds)

    @property
    def seconds(self):
        return self.value

    @property
    def minutes(self):
        return self.value / 60.0


@dataclass(frozen=True, order=False)
class Isp(Quantity):
    """Specific impulse in seconds."""
    unit = "s"

    @classmethod
    def from_seconds(cls, seconds):
        return cls(seconds)

    @property
    def seconds(self):
        return self.value


@dataclass(frozen=True, order=False)
class Ratio(Quantity):
    """Dimensionless ratio."""

    def __mul__(self, factor):
        if isinstance(factor, Ratio):
            return Ratio(self.value * factor.value)
        return super().__mul__(factor)

    __rmul__ = __mul__

    @property
    def percent(self):
        return self.value * 100.0

    def __str__(self):
        return f"{self.value:.4f}"


def format_number(value: float) -> str:
    """Format a number with thousands separators and sensible precision."""
    if not math.isfinite(value):
        return str(value)
    if abs(value) >= 100:
        return f"{value:,.0f}"
    if abs(value) >= 1:
        return f"{value:,.1f}"
    return f"{value:.3f}"
