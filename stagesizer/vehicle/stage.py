"""Single rocket stage."""
from dataclasses import dataclass

from ..exceptions import NumericDomainError
from ..optimization import physics
from ..utils.units import Duration, Force, Isp, Mass, Ratio, Velocity
from .engine import PropulsionUnit


@dataclass(frozen=True)
class Stage:
    """One stage: a number of identical engines plus propellant and structure.

    Attributes:
        unit: Engine used by this stage
        unit_count: Number of engines (>= 1)
        propellant_mass: Usable propellant
        structural_mass: Tanks, interstage and everything else that is not
            engines or propellant
    """
    unit: PropulsionUnit
    unit_count: int
    propellant_mass: Mass
    structural_mass: Mass

    def __post_init__(self):
        if isinstance(self.unit_count, bool) or int(self.unit_count) != self.unit_count:
            raise ValueError(f"unit count must be an integer, got {self.unit_count!r}")
        if self.unit_count < 1:
            raise ValueError(f"unit count must be at least 1, got {self.unit_count}")
        object.__setattr__(self, 'unit_count', int(self.unit_count))
        if not self.propellant_mass.value >= 0.0:
            raise ValueError(f"propellant mass cannot be negative, got {self.propellant_mass}")
        if not self.structural_mass.value >= 0.0:
            raise ValueError(f"structural mass cannot be negative, got {self.structural_mass}")

    @classmethod
    def with_structural_ratio(cls, unit, unit_count, propellant_mass, structural_ratio):
        """Stage whose structure is ``structural_ratio`` times its propellant."""
        propellant_mass = propellant_mass if isinstance(propellant_mass, Mass) else Mass(propellant_mass)
        return cls(unit, unit_count, propellant_mass, propellant_mass * float(structural_ratio))

    @property
    def engine_mass(self) -> Mass:
        return self.unit.dry_mass * self.unit_count

    @property
    def dry_mass(self) -> Mass:
        return self.structural_mass + self.engine_mass

    @property
    def wet_mass(self) -> Mass:
        return self.dry_mass + self.propellant_mass

    @property
    def thrust_sl(self) -> Force:
        return self.unit.thrust_sl * self.unit_count

    @property
    def thrust_vac(self) -> Force:
        return self.unit.thrust_vac * self.unit_count

    @property
    def isp_vac(self) -> Isp:
        return self.unit.isp_vac

    @property
    def propellant_volume(self) -> float:
        """Propellant volume in cubic metres."""
        return self.propellant_mass.kg / self.unit.propellant.density

    def mass_ratio(self, mass_above=Mass(0.0)) -> Ratio:
        """(wet + above) / (dry + above)."""
        final = self.dry_mass + mass_above
        if not final.value > 0.0:
            raise NumericDomainError("stage burnout mass must be positive")
        return (self.wet_mass + mass_above) / final

    def delta_v(self, mass_above=Mass(0.0)) -> Velocity:
        """Vacuum delta-v with ``mass_above`` riding on top as inert mass."""
        return physics.delta_v(self.isp_vac, self.mass_ratio(mass_above))

    def ignition_twr(self, mass_above=Mass(0.0), sea_level: bool = False) -> Ratio:
        """Thrust-to-weight at ignition, carrying ``mass_above``."""
        thrust = self.thrust_sl if sea_level else self.thrust_vac
        return physics.twr(thrust, self.wet_mass + mass_above)

    @property
    def burn_time(self) -> Duration:
        return physics.burn_time(self.propellant_mass, self.thrust_vac, self.isp_vac)

    def to_dict(self, mass_above=Mass(0.0), sea_level: bool = False):
        return {
            'engine': self.unit.name,
            'engine_count': self.unit_count,
            'propellant_mass': self.propellant_mass.kg,
            'structural_mass': self.structural_mass.kg,
            'dry_mass': self.dry_mass.kg,
            'wet_mass': self.wet_mass.kg,
            'mass_ratio': self.mass_ratio(mass_above).value,
            'delta_v': self.delta_v(mass_above).mps,
            'twr': self.ignition_twr(mass_above, sea_level).value,
            'burn_time': self.burn_time.seconds,
        }
