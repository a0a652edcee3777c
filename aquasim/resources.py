"""
Resource registry.

Static metadata for every tracked quantity: bounds, default value, display
precision, optional formatter and alerting ranges. The effect fold consults
this table for clamping; no system hard-codes a bound.

Mass-based resources (nitrogen compounds and fertilizer nutrients) are stored
as absolute mass in mg. Their concentration is derived, never stored:
evaporation concentrates them because volume shrinks while mass stays put.
"""

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Tuple

INF = math.inf


@dataclass(frozen=True)
class ResourceDefinition:
    """
    Metadata for one resource key.

    Attributes:
        key: Resource name as used in state.resources and effects
        unit: Display unit (ppm for mass-based resources)
        bounds: (min, max) clamp range
        default_value: Value in a freshly created tank
        precision: Decimal places for display
        mass_based: Stored as mg, displayed as ppm
        safe_range: Optional (min, max) for UI/alerts, not clamping
        stress_range: Optional (min, max) for UI/alerts, not clamping
        formatter: Optional custom (value, water_volume) -> str
    """
    key: str
    unit: str
    bounds: Tuple[float, float]
    default_value: float
    precision: int
    mass_based: bool = False
    safe_range: Optional[Tuple[float, float]] = None
    stress_range: Optional[Tuple[float, float]] = None
    formatter: Optional[Callable[[float, Optional[float]], str]] = None


def get_ppm(mass_mg: float, water_liters: float) -> float:
    """Concentration (mg/L) from mass; 0 when there is no water"""
    if water_liters <= 0:
        return 0.0
    return mass_mg / water_liters


def get_mass_from_ppm(ppm: float, water_liters: float) -> float:
    """Mass (mg) for a concentration at a given volume; 0 when there is no water"""
    if water_liters <= 0:
        return 0.0
    return ppm * water_liters


def _format_units(value: float, water_volume: Optional[float] = None) -> str:
    return f"{round(value)} units"


_DEFINITIONS = (
    ResourceDefinition('water', 'L', (0.0, INF), 0.0, 1),
    ResourceDefinition('temperature', '°C', (0.0, 50.0), 25.0, 1,
                       safe_range=(18.0, 30.0), stress_range=(15.0, 33.0)),
    ResourceDefinition('food', 'g', (0.0, 1000.0), 0.0, 2),
    ResourceDefinition('waste', 'g', (0.0, 1000.0), 0.0, 2),
    ResourceDefinition('algae', '', (0.0, 100.0), 0.0, 0,
                       safe_range=(0.0, 50.0), stress_range=(50.0, 80.0)),
    ResourceDefinition('oxygen', 'mg/L', (0.0, 20.0), 8.0, 1,
                       safe_range=(6.0, 14.0), stress_range=(4.0, 6.0)),
    ResourceDefinition('co2', 'mg/L', (0.0, 100.0), 4.0, 1,
                       safe_range=(10.0, 30.0), stress_range=(5.0, 10.0)),
    ResourceDefinition('ph', '', (0.0, 14.0), 6.5, 2,
                       safe_range=(6.5, 7.5), stress_range=(6.0, 8.0)),
    ResourceDefinition('ammonia', 'ppm', (0.0, 1e6), 0.0, 3, mass_based=True,
                       safe_range=(0.0, 0.02), stress_range=(0.02, 0.05)),
    ResourceDefinition('nitrite', 'ppm', (0.0, 1e6), 0.0, 3, mass_based=True,
                       safe_range=(0.0, 0.1), stress_range=(0.1, 0.5)),
    ResourceDefinition('nitrate', 'ppm', (0.0, 1e7), 0.0, 1, mass_based=True,
                       safe_range=(0.0, 20.0), stress_range=(20.0, 80.0)),
    ResourceDefinition('phosphate', 'ppm', (0.0, 1e6), 0.0, 2, mass_based=True,
                       safe_range=(0.0, 2.0), stress_range=(2.0, 5.0)),
    ResourceDefinition('potassium', 'ppm', (0.0, 1e7), 0.0, 1, mass_based=True,
                       safe_range=(0.0, 20.0), stress_range=(20.0, 40.0)),
    ResourceDefinition('iron', 'ppm', (0.0, 1e5), 0.0, 2, mass_based=True,
                       safe_range=(0.0, 0.5), stress_range=(0.5, 1.0)),
    ResourceDefinition('aob', 'units', (0.0, INF), 0.0, 0, formatter=_format_units),
    ResourceDefinition('nob', 'units', (0.0, INF), 0.0, 0, formatter=_format_units),
    ResourceDefinition('surface', 'cm²', (0.0, INF), 0.0, 0),
    ResourceDefinition('flow', 'L/h', (0.0, INF), 0.0, 0),
    ResourceDefinition('light', 'W', (0.0, INF), 0.0, 0),
)

# Read-only, built once at import
RESOURCES: Mapping[str, ResourceDefinition] = MappingProxyType(
    {definition.key: definition for definition in _DEFINITIONS}
)

MASS_RESOURCES = tuple(d.key for d in _DEFINITIONS if d.mass_based)

# Keys stored in state.resources (water lives on state.tank)
STORED_RESOURCES = tuple(d.key for d in _DEFINITIONS if d.key != 'water')


def get_resource(key: str) -> ResourceDefinition:
    """Look up a resource definition, raising KeyError for unknown keys"""
    try:
        return RESOURCES[key]
    except KeyError:
        raise KeyError(f"Unknown resource: {key}") from None


def is_mass_based(key: str) -> bool:
    return get_resource(key).mass_based


def clamp_resource(key: str, value: float, capacity: Optional[float] = None) -> float:
    """
    Clamp a value to the registered bounds.

    Args:
        key: Resource key
        value: Unclamped value
        capacity: Tank capacity; replaces the upper bound for 'water'

    Returns:
        Value within [min, max]
    """
    low, high = get_resource(key).bounds
    if key == 'water' and capacity is not None:
        high = capacity
    return max(low, min(high, value))


def default_resources() -> dict:
    """Fresh resource mapping with registry defaults"""
    return {key: RESOURCES[key].default_value for key in STORED_RESOURCES}


def format_resource(key: str, value: float, water_volume: Optional[float] = None) -> str:
    """
    Render a resource value for display.

    Mass-based resources are shown as ppm, derived from water_volume.
    """
    definition = get_resource(key)
    if definition.formatter is not None:
        return definition.formatter(value, water_volume)

    if definition.mass_based:
        value = get_ppm(value, water_volume or 0.0)

    text = f"{value:.{definition.precision}f}"
    return f"{text} {definition.unit}" if definition.unit else text
