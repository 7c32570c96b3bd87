"""Propulsion unit (engine) descriptors."""
from dataclasses import dataclass
from enum import Enum

import numpy as np

from ..utils.units import Force, Isp, Mass


class Propellant(Enum):
    """Propellant families with display name and bulk density (kg/m^3)."""
    LOX_RP1 = ("LoxRp1", "LOX/RP-1", 1030.0, ("kerosene", "rp1", "rp-1", "lox/rp1"))
    LOX_LH2 = ("LoxLh2", "LOX/LH2", 360.0, ("hydrogen", "lh2", "hydrolox"))
    LOX_CH4 = ("LoxCh4", "LOX/CH4", 830.0, ("methane", "ch4", "methalox"))
    N2O4_UDMH = ("N2o4Udmh", "N2O4/UDMH", 1180.0, ("hypergolic", "udmh", "n2o4"))
    SOLID = ("Solid", "Solid", 1800.0, ("srb",))

    def __init__(self, key, display_name, density, aliases):
        self.key = key
        self.display_name = display_name
        self.density = density
        self.aliases = aliases

    def matches(self, text: str) -> bool:
        """Case-insensitive match against key, display name or a common alias."""
        needle = text.strip().lower()
        return (needle == self.key.lower()
                or needle == self.display_name.lower()
                or needle in self.aliases)

    @classmethod
    def parse(cls, text: str) -> 'Propellant':
        for propellant in cls:
            if propellant.matches(text):
                return propellant
        raise ValueError(f"Unknown propellant: {text!r}")

    def __str__(self):
        return self.display_name


@dataclass(frozen=True)
class PropulsionUnit:
    """Performance of a single engine.

    A sea-level thrust or Isp of zero marks a vacuum-only engine.
    """
    name: str
    thrust_sl: Force
    thrust_vac: Force
    isp_sl: Isp
    isp_vac: Isp
    dry_mass: Mass
    propellant: Propellant = Propellant.LOX_RP1

    def __post_init__(self):
        if self.thrust_vac.value <= 0.0:
            raise ValueError(f"{self.name}: vacuum thrust must be positive")
        if self.isp_vac.value <= 0.0:
            raise ValueError(f"{self.name}: vacuum Isp must be positive")
        if self.thrust_sl.value < 0.0 or self.isp_sl.value < 0.0:
            raise ValueError(f"{self.name}: sea-level performance cannot be negative")
        if self.dry_mass.value < 0.0:
            raise ValueError(f"{self.name}: dry mass cannot be negative")

    @property
    def is_upper_stage_only(self) -> bool:
        return self.thrust_sl.value == 0.0 or self.isp_sl.value == 0.0

    def isp_at(self, pressure_ratio: float) -> Isp:
        """Isp interpolated by ambient pressure ratio (0 = vacuum, 1 = sea level)."""
        p = float(np.clip(float(pressure_ratio), 0.0, 1.0))
        return Isp(self.isp_vac.value + p * (self.isp_sl.value - self.isp_vac.value))

    def thrust_at(self, pressure_ratio: float) -> Force:
        """Thrust interpolated by ambient pressure ratio (0 = vacuum, 1 = sea level)."""
        p = float(np.clip(float(pressure_ratio), 0.0, 1.0))
        return Force(self.thrust_vac.value + p * (self.thrust_sl.value - self.thrust_vac.value))

    def scaled(self, isp_factor=1.0, thrust_factor=1.0) -> 'PropulsionUnit':
        """Copy with Isp and thrust multiplied by the given factors."""
        return PropulsionUnit(
            name=self.name,
            thrust_sl=self.thrust_sl * thrust_factor,
            thrust_vac=self.thrust_vac * thrust_factor,
            isp_sl=self.isp_sl * isp_factor,
            isp_vac=self.isp_vac * isp_factor,
            dry_mass=self.dry_mass,
            propellant=self.propellant,
        )

    @classmethod
    def from_dict(cls, data):
        """Build from a catalog entry with SI values (N, s, kg)."""
        return cls(
            name=str(data['name']),
            thrust_sl=Force(data['thrust_sl']),
            thrust_vac=Force(data['thrust_vac']),
            isp_sl=Isp(data['isp_sl']),
            isp_vac=Isp(data['isp_vac']),
            dry_mass=Mass(data['dry_mass']),
            propellant=Propellant.parse(data.get('propellant', 'LoxRp1')),
        )

    def to_dict(self):
        return {
            'name': self.name,
            'thrust_sl': self.thrust_sl.newtons,
            'thrust_vac': self.thrust_vac.newtons,
            'isp_sl': self.isp_sl.seconds,
            'isp_vac': self.isp_vac.seconds,
            'dry_mass': self.dry_mass.kg,
            'propellant': self.propellant.key,
        }

    def __str__(self):
        return (f"{self.name} ({self.propellant}, "
                f"{self.thrust_vac} vac, Isp {self.isp_vac.seconds:.0f} s)")
