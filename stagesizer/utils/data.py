"""Data loading utilities: engine catalogs and problem input files."""
import json
from typing import Dict, List, Optional

import numpy as np

from ..optimization.problem import Constraints, Problem
from ..optimization.uncertainty import Uncertainty
from .units import Mass, Velocity
from ..vehicle.engine import Propellant, PropulsionUnit
from .config import DEFAULT_CATALOG, logger

REQUIRED_ENGINE_KEYS = ('name', 'thrust_sl', 'thrust_vac', 'isp_sl', 'isp_vac', 'dry_mass')


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance between two strings."""
    if not a:
        return len(b)
    if not b:
        return len(a)
    previous = np.arange(len(b) + 1)
    for i, char_a in enumerate(a, start=1):
        current = np.empty_like(previous)
        current[0] = i
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current[j] = min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost)
        previous = current
    return int(previous[-1])


class EngineCatalog:
    """Read-only, ordered collection of propulsion units."""

    def __init__(self, units):
        self.units = tuple(units)

    def __len__(self):
        return len(self.units)

    def __iter__(self):
        return iter(self.units)

    def get(self, name: str) -> Optional[PropulsionUnit]:
        """Case-insensitive lookup by name."""
        wanted = name.strip().lower()
        for unit in self.units:
            if unit.name.lower() == wanted:
                return unit
        return None

    def require(self, name: str) -> PropulsionUnit:
        unit = self.get(name)
        if unit is None:
            hint = self.suggest(name)
            message = f"Unknown engine: {name!r}"
            if hint:
                message += f" (did you mean {', '.join(hint)}?)"
            raise KeyError(message)
        return unit

    def names(self) -> List[str]:
        return [unit.name for unit in self.units]

    def by_propellant(self, text: str) -> 'EngineCatalog':
        return EngineCatalog(u for u in self.units if u.propellant.matches(text))

    def suggest(self, query: str, limit: int = 3) -> List[str]:
        """Closest engine names to ``query``, best first.

        Prefix matches rank first, then substring matches, then names the
        query starts with, then edit distance. Poor matches are dropped.
        """
        query = query.strip().lower()
        scored = []
        for unit in self.units:
            name = unit.name.lower()
            if name.startswith(query):
                score = 0
            elif query in name:
                score = 1
            elif query.startswith(name):
                score = 2
            else:
                score = edit_distance(query, name) + 3
            scored.append((score, unit.name))
        scored.sort(key=lambda item: item[0])
        return [name for score, name in scored if score <= 6][:limit]


def parse_engines(entries) -> List[PropulsionUnit]:
    """Build PropulsionUnits from catalog entries, naming any malformed entry."""
    units = []
    for entry in entries:
        missing = [key for key in REQUIRED_ENGINE_KEYS if key not in entry]
        if missing:
            raise ValueError(f"Engine entry {entry.get('name', entry)!r} is missing {', '.join(missing)}")
        units.append(PropulsionUnit.from_dict(entry))
    return units


def load_catalog(filename: Optional[str] = None) -> EngineCatalog:
    """Load an engine catalog from JSON (``{"engines": [...]}``).

    Args:
        filename: Path to the catalog, or None for the bundled catalog

    Returns:
        EngineCatalog: Engines in file order
    """
    path = filename or DEFAULT_CATALOG
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Error loading engine catalog {path}: {e}")
        raise
    catalog = EngineCatalog(parse_engines(data.get('engines', [])))
    logger.debug(f"Loaded {len(catalog)} engines from {path}")
    return catalog


def load_input_data(filename: str, catalog: Optional[EngineCatalog] = None,
                    config: Optional[Dict] = None) -> Problem:
    """Load a staging problem from a JSON input file.

    The file holds ``parameters`` (payload_kg, target_delta_v, optional
    stage_count), ``engines`` (catalog names or full engine entries), and
    optional ``stage_engines``, ``constraints`` and ``uncertainty`` sections.
    Missing constraint and uncertainty values come from ``config``.

    Args:
        filename: Path to JSON input file
        catalog: Catalog used to resolve engine names (bundled one if None)
        config: Configuration dictionary supplying defaults

    Returns:
        Problem: The staging problem
    """
    try:
        with open(filename, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Error loading input data: {e}")
        raise

    if catalog is None:
        catalog = load_catalog()
    opt_config = (config or {}).get('optimization', {})

    def resolve(entries):
        return [catalog.require(e) if isinstance(e, str) else PropulsionUnit.from_dict(e) for e in entries]

    parameters = data['parameters']
    constraints = Constraints.from_dict({**opt_config.get('constraints', {}), **data.get('constraints', {})})
    uncertainty = Uncertainty.from_dict({**opt_config.get('uncertainty', {}), **data.get('uncertainty', {})})
    stage_engines = data.get('stage_engines')
    stage_count = parameters.get('stage_count')

    problem = Problem(
        payload=Mass(float(parameters['payload_kg'])),
        target_delta_v=Velocity(float(parameters['target_delta_v'])),
        units=resolve(data.get('engines', [])),
        constraints=constraints,
        stage_count=int(stage_count) if stage_count is not None else None,
        stage_units=[resolve(entries) for entries in stage_engines] if stage_engines else None,
        uncertainty=uncertainty,
    )
    logger.info(f"Loaded problem from {filename}: {len(problem.units)} engines, "
                f"payload {problem.payload}, target {problem.target_delta_v}")
    return problem


__all__ = [
    'EngineCatalog',
    'Propellant',
    'edit_distance',
    'load_catalog',
    'load_input_data',
    'parse_engines',
]
