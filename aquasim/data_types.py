"""
Data types for species tables and simulation snapshots.

Species dataclasses are populated by loader.py from YAML files. Snapshot
dataclasses are frozen: every change produces a new instance through
dataclasses.replace, so a snapshot handed to a caller never changes.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


# ============================================================================
# Species Definitions
# ============================================================================

@dataclass(frozen=True)
class PlantSpecies:
    """Static plant species data"""
    species_id: str
    name: str
    growth_rate: float  # Relative share of distributed biomass
    nutrient_demand: str  # low, medium, high
    substrate_requirement: str  # none, sand, aqua_soil
    description: Optional[str] = None


@dataclass(frozen=True)
class FishSpecies:
    """Static fish species data"""
    species_id: str
    name: str
    adult_mass: float  # grams
    temperature_range: Tuple[float, float]  # (min, max) degC
    ph_range: Tuple[float, float]
    hardiness: float  # 0.0 fragile - 1.0 immune to stress
    max_age: int  # ticks
    max_flow: float  # L/h tolerated before flow stress
    description: Optional[str] = None


# ============================================================================
# Schedules and Equipment
# ============================================================================

@dataclass(frozen=True)
class DailySchedule:
    """Daily on-window, interpreted modulo 24 (may wrap past midnight)"""
    start_hour: int  # 0-23
    duration: int  # 0-24 hours


@dataclass(frozen=True)
class Heater:
    enabled: bool = True
    is_on: bool = False  # Thermostat state, written by the tick
    target_temperature: float = 25.0
    wattage: float = 100.0


@dataclass(frozen=True)
class Filter:
    enabled: bool = True
    type: str = 'sponge'  # sponge, hob, canister, sump


@dataclass(frozen=True)
class Powerhead:
    enabled: bool = False
    flow_rate_gph: int = 400  # 240, 400, 600, 850


@dataclass(frozen=True)
class Lid:
    type: str = 'none'  # none, mesh, full, sealed


@dataclass(frozen=True)
class AutoTopOff:
    enabled: bool = False


@dataclass(frozen=True)
class Substrate:
    type: str = 'none'  # none, sand, gravel, aqua_soil


@dataclass(frozen=True)
class HardscapeItem:
    id: str
    type: str  # neutral_rock, calcite_rock, driftwood, plastic_decoration


@dataclass(frozen=True)
class Hardscape:
    items: Tuple[HardscapeItem, ...] = ()


@dataclass(frozen=True)
class Light:
    enabled: bool = True
    wattage: float = 100.0
    schedule: DailySchedule = DailySchedule(start_hour=8, duration=10)


@dataclass(frozen=True)
class Co2Generator:
    enabled: bool = False
    is_on: bool = False
    bubble_rate: float = 1.0  # bubbles per second
    schedule: DailySchedule = DailySchedule(start_hour=8, duration=10)


@dataclass(frozen=True)
class AirPump:
    enabled: bool = False


@dataclass(frozen=True)
class AutoDoser:
    enabled: bool = False
    dose_amount_ml: float = 2.0
    schedule: DailySchedule = DailySchedule(start_hour=8, duration=1)  # duration unused
    dosed_today: bool = False


@dataclass(frozen=True)
class AutoFeeder:
    enabled: bool = False
    feed_amount_grams: float = 0.5
    schedule: DailySchedule = DailySchedule(start_hour=9, duration=1)  # duration unused
    fed_today: bool = False


@dataclass(frozen=True)
class Equipment:
    """One record per device"""
    heater: Heater = field(default_factory=Heater)
    filter: Filter = field(default_factory=Filter)
    powerhead: Powerhead = field(default_factory=Powerhead)
    lid: Lid = field(default_factory=Lid)
    ato: AutoTopOff = field(default_factory=AutoTopOff)
    substrate: Substrate = field(default_factory=Substrate)
    hardscape: Hardscape = field(default_factory=Hardscape)
    light: Light = field(default_factory=Light)
    co2_generator: Co2Generator = field(default_factory=Co2Generator)
    air_pump: AirPump = field(default_factory=AirPump)
    auto_doser: AutoDoser = field(default_factory=AutoDoser)
    auto_feeder: AutoFeeder = field(default_factory=AutoFeeder)


# ============================================================================
# Simulation Snapshot
# ============================================================================

@dataclass(frozen=True)
class Tank:
    capacity: float  # liters
    water_level: float  # liters, 0 <= water_level <= capacity


@dataclass(frozen=True)
class Environment:
    """External conditions, never modified by the tick"""
    room_temperature: float = 22.0
    tap_water_temperature: float = 20.0
    tap_water_ph: float = 7.0


@dataclass(frozen=True)
class Plant:
    id: str
    species: str
    size: float  # % of mature size, 0 marks for removal
    condition: float = 100.0  # 0-100


@dataclass(frozen=True)
class Fish:
    id: str
    species: str
    mass: float  # grams
    health: float  # 0-100
    age: int  # ticks
    hunger: float  # 0-100
    sex: str  # male, female


@dataclass(frozen=True)
class LogEntry:
    tick: int
    source: str
    severity: str  # info, warning
    message: str


@dataclass(frozen=True)
class SimulationState:
    """
    Root snapshot.

    Attributes:
        tick: Simulated hours elapsed
        tank: Capacity and current water volume
        resources: Flat mapping of resource key -> value. Mass-based keys
            (ammonia, nitrite, nitrate, phosphate, potassium, iron) hold mg.
            Treat as read-only; writers build a new dict.
        environment: Room and tap conditions
        equipment: Device records
        plants: Live plants
        fish: Live fish
        alert_state: Alert id -> latched flag
        logs: Append-only event log
    """
    tick: int
    tank: Tank
    resources: Dict[str, float]
    environment: Environment
    equipment: Equipment
    plants: Tuple[Plant, ...] = ()
    fish: Tuple[Fish, ...] = ()
    alert_state: Dict[str, bool] = field(default_factory=dict)
    logs: Tuple[LogEntry, ...] = ()
