"""
Simulation state factory and snapshot serialization.

create_simulation() builds tick 0 from a SimulationConfig: a full tank at
the initial temperature, registry-default resources, default equipment
with any overrides, and one creation log entry.

state_to_dict() / state_from_dict() convert a snapshot to and from plain
JSON-compatible structures for whatever persistence layer embeds the
engine. Missing equipment records fall back to their defaults.
"""

import logging
from dataclasses import asdict, dataclass, fields, replace
from typing import Optional

from .data_types import (
    DailySchedule,
    Environment,
    Equipment,
    Fish,
    Hardscape,
    HardscapeItem,
    Heater,
    LogEntry,
    Plant,
    SimulationState,
    Tank,
)
from .equipment import refresh_passive_resources
from .event_log import create_log
from .resources import default_resources

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 25.0
DEFAULT_ROOM_TEMPERATURE = 22.0


@dataclass(frozen=True)
class SimulationConfig:
    """
    Initial tank setup.

    Attributes:
        tank_capacity: Liters, must be positive
        initial_temperature: Water temperature at tick 0
        room_temperature: Ambient temperature the water drifts toward
        tap_water_temperature: Temperature of top-off and water change water
        tap_water_ph: pH of top-off and water change water
        heater: Heater record replacing the default one
        equipment: Full equipment set (heater override still applies)
    """
    tank_capacity: float
    initial_temperature: float = DEFAULT_TEMPERATURE
    room_temperature: float = DEFAULT_ROOM_TEMPERATURE
    tap_water_temperature: float = 20.0
    tap_water_ph: float = 7.0
    heater: Optional[Heater] = None
    equipment: Optional[Equipment] = None


def create_simulation(config: SimulationConfig) -> SimulationState:
    """
    Build the tick-0 snapshot.

    Raises:
        ValueError: Non-positive tank capacity
    """
    if config.tank_capacity <= 0:
        raise ValueError(f"Tank capacity must be positive, got {config.tank_capacity}")

    equipment = config.equipment or Equipment()
    if config.heater is not None:
        equipment = replace(equipment, heater=config.heater)

    resources = default_resources()
    resources['temperature'] = config.initial_temperature

    heater_status = 'enabled' if equipment.heater.enabled else 'disabled'
    message = (f"Simulation created: {config.tank_capacity:g}L tank, "
               f"{config.room_temperature:g}°C room, heater {heater_status}")

    state = SimulationState(
        tick=0,
        tank=Tank(capacity=config.tank_capacity, water_level=config.tank_capacity),
        resources=resources,
        environment=Environment(
            room_temperature=config.room_temperature,
            tap_water_temperature=config.tap_water_temperature,
            tap_water_ph=config.tap_water_ph,
        ),
        equipment=equipment,
        logs=(create_log(0, 'simulation', 'info', message),),
    )

    logger.info(message)
    return refresh_passive_resources(state)


# ============================================================================
# Serialization
# ============================================================================

def state_to_dict(state: SimulationState) -> dict:
    """
    Serialize a snapshot to a JSON-compatible dict.

    Returns:
        Dict with every snapshot field; tuples become lists
    """
    equipment = asdict(state.equipment)
    equipment['hardscape'] = {'items': [asdict(item) for item in state.equipment.hardscape.items]}

    return {
        'tick': state.tick,
        'tank': asdict(state.tank),
        'resources': dict(state.resources),
        'environment': asdict(state.environment),
        'equipment': equipment,
        'plants': [asdict(plant) for plant in state.plants],
        'fish': [asdict(fish) for fish in state.fish],
        'alert_state': dict(state.alert_state),
        'logs': [asdict(log) for log in state.logs],
    }


def _equipment_from_dict(data: dict) -> Equipment:
    records = {}
    for f in fields(Equipment):
        if f.name not in data:
            continue
        values = dict(data[f.name])
        if f.name == 'hardscape':
            records[f.name] = Hardscape(items=tuple(HardscapeItem(**item) for item in values.get('items', ())))
            continue
        if 'schedule' in values:
            values['schedule'] = DailySchedule(**values['schedule'])
        records[f.name] = f.default_factory(**values)
    return Equipment(**records)


def state_from_dict(data: dict) -> SimulationState:
    """
    Deserialize a snapshot produced by state_to_dict.

    Args:
        data: Dict with snapshot fields

    Returns:
        SimulationState instance
    """
    resources = default_resources()
    resources.update(data['resources'])

    return SimulationState(
        tick=data['tick'],
        tank=Tank(**data['tank']),
        resources=resources,
        environment=Environment(**data.get('environment', {})),
        equipment=_equipment_from_dict(data.get('equipment', {})),
        plants=tuple(Plant(**plant) for plant in data.get('plants', [])),
        fish=tuple(Fish(**fish) for fish in data.get('fish', [])),
        alert_state=dict(data.get('alert_state', {})),
        logs=tuple(LogEntry(**log) for log in data.get('logs', [])),
    )
