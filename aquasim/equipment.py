"""
Equipment control loops and passive equipment contributions.

Control loops (heater, auto top-off, CO2 generator, auto doser, auto feeder)
run in the immediate tier. They read the previous tick's resource values,
emit zero or more effects and write their on/off or once-a-day flags into
equipment state.

Passive contributions (bacteria surface, water flow, light) are recomputed
from equipment at the start of every tick and stored in resources.
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Tuple

from .blending import blend_temperature
from .config import FertilizerFormula, NutrientsConfig, TemperatureConfig, TunableConfig
from .constants import (
    AIR_PUMP_BASE_OUTPUT_LPH,
    AIR_PUMP_FLOW_PER_AIR_LPH,
    AIR_PUMP_MAX_CAPACITY_L,
    ATO_WATER_LEVEL_THRESHOLD,
    CO2_DOSING_RATE,
    FILTER_MAX_FLOW_LPH,
    FILTER_SURFACE,
    FILTER_TARGET_TURNOVER,
    HARDSCAPE_SURFACE,
    HOURS_PER_DAY,
    LITERS_TO_CM3,
    POWERHEAD_FLOW_LPH,
    SUBSTRATE_SURFACE_PER_LITER,
    TANK_GLASS_FACES,
)
from .data_types import HardscapeItem, SimulationState
from .effects import Effect, Tier
from .event_log import create_log
from .schedule import is_schedule_active

logger = logging.getLogger(__name__)


# ============================================================================
# Surface, Flow, Light
# ============================================================================

def calculate_tank_glass_surface(capacity: float) -> float:
    """Glass area (cm^2) of a cube tank's walls and bottom"""
    if capacity <= 0:
        return 0.0
    side_cm = (capacity * LITERS_TO_CM3) ** (1.0 / 3.0)
    return TANK_GLASS_FACES * side_cm * side_cm


def get_filter_surface(filter_type: str) -> float:
    return FILTER_SURFACE[filter_type]


def get_filter_flow(filter_type: str, capacity: float) -> float:
    """Flow (L/h) sized to the tank's target turnover, capped per filter type"""
    return min(capacity * FILTER_TARGET_TURNOVER[filter_type], FILTER_MAX_FLOW_LPH[filter_type])


def get_powerhead_flow(flow_rate_gph: int) -> float:
    return POWERHEAD_FLOW_LPH[flow_rate_gph]


def get_substrate_surface(substrate_type: str, capacity: float) -> float:
    return SUBSTRATE_SURFACE_PER_LITER[substrate_type] * capacity


def calculate_hardscape_surface(items: Tuple[HardscapeItem, ...]) -> float:
    return sum(HARDSCAPE_SURFACE[item.type] for item in items)


def get_air_pump_output(capacity: float) -> float:
    """Air output (L/h) of a pump sized to the tank"""
    if capacity <= 40:
        return AIR_PUMP_BASE_OUTPUT_LPH
    if capacity <= 150:
        return AIR_PUMP_BASE_OUTPUT_LPH * 2
    if capacity <= AIR_PUMP_MAX_CAPACITY_L:
        return AIR_PUMP_BASE_OUTPUT_LPH * 4
    return AIR_PUMP_BASE_OUTPUT_LPH * 6.67


def get_air_pump_flow(capacity: float) -> float:
    """Water flow (L/h) from bubble uplift"""
    return round(get_air_pump_output(capacity) * AIR_PUMP_FLOW_PER_AIR_LPH)


@dataclass(frozen=True)
class PassiveResources:
    surface: float  # cm^2
    flow: float  # L/h
    light: float  # W


def calculate_passive_resources(state: SimulationState) -> PassiveResources:
    """
    Recompute surface, flow and light from equipment.

    Surface: tank glass + filter media (when enabled) + substrate + hardscape.
    Flow: filter + powerhead + air pump uplift (each when enabled).
    Light: fixture wattage while enabled and inside its schedule.
    """
    tank, equipment = state.tank, state.equipment
    hour_of_day = state.tick % HOURS_PER_DAY

    surface = calculate_tank_glass_surface(tank.capacity)
    if equipment.filter.enabled:
        surface += get_filter_surface(equipment.filter.type)
    surface += get_substrate_surface(equipment.substrate.type, tank.capacity)
    surface += calculate_hardscape_surface(equipment.hardscape.items)

    flow = 0.0
    if equipment.filter.enabled:
        flow += get_filter_flow(equipment.filter.type, tank.capacity)
    if equipment.powerhead.enabled:
        flow += get_powerhead_flow(equipment.powerhead.flow_rate_gph)
    if equipment.air_pump.enabled:
        flow += get_air_pump_flow(tank.capacity)

    light = 0.0
    if equipment.light.enabled and is_schedule_active(hour_of_day, equipment.light.schedule):
        light = equipment.light.wattage

    return PassiveResources(surface=surface, flow=flow, light=light)


def refresh_passive_resources(state: SimulationState) -> SimulationState:
    """Write recomputed surface/flow/light into resources (direct, not an effect)"""
    passive = calculate_passive_resources(state)
    resources = dict(state.resources)
    resources['surface'] = passive.surface
    resources['flow'] = passive.flow
    resources['light'] = passive.light
    return replace(state, resources=resources)


# ============================================================================
# Heater
# ============================================================================

def calculate_heating_rate(wattage: float, water_volume: float,
                           config: TemperatureConfig = TemperatureConfig()) -> float:
    """
    Heating (degC per hour) delivered by a heater.

    Shares the volume scaling of temperature drift, so an undersized heater
    plateaus below target.
    """
    if water_volume <= 0:
        return 0.0
    volume_scale = (config.reference_volume / water_volume) ** config.volume_exponent
    return (wattage / water_volume) * volume_scale


def heater_update(state: SimulationState,
                  config: TemperatureConfig = TemperatureConfig()) -> Tuple[List[Effect], bool]:
    """
    Thermostat: on below target, off at or above target.

    Returns:
        (effects, is_on)
    """
    heater = state.equipment.heater
    current = state.resources['temperature']

    if not heater.enabled or current >= heater.target_temperature:
        return [], False
    if state.tank.water_level <= 0:
        return [], False

    rate = calculate_heating_rate(heater.wattage, state.tank.water_level, config)
    delta = min(rate, heater.target_temperature - current)
    if delta <= 0:
        return [], True
    return [Effect(Tier.IMMEDIATE, 'temperature', delta, 'heater')], True


# ============================================================================
# Auto Top-Off
# ============================================================================

def ato_update(state: SimulationState) -> Tuple[List[Effect], List]:
    """
    Float switch: below 99% of capacity, refill to capacity with tap water.

    Returns:
        (effects, log entries)
    """
    if not state.equipment.ato.enabled:
        return [], []

    capacity = state.tank.capacity
    water_level = state.tank.water_level
    if water_level >= capacity * ATO_WATER_LEVEL_THRESHOLD:
        return [], []

    water_to_add = capacity - water_level
    current_temp = state.resources['temperature']
    blended = blend_temperature(current_temp, water_level,
                                state.environment.tap_water_temperature, water_to_add)

    effects = [Effect(Tier.IMMEDIATE, 'water', water_to_add, 'ato')]
    if blended != current_temp:
        effects.append(Effect(Tier.IMMEDIATE, 'temperature', blended - current_temp, 'ato'))

    log = create_log(state.tick, 'equipment', 'info', f"ATO: added {water_to_add:.1f}L")
    return effects, [log]


# ============================================================================
# CO2 Generator
# ============================================================================

def calculate_co2_injection(bubble_rate: float) -> float:
    """CO2 (mg/L per hour) added at a bubble rate"""
    return bubble_rate * CO2_DOSING_RATE


def format_co2_rate(bubble_rate: float) -> str:
    return f"+{calculate_co2_injection(bubble_rate):.1f} mg/L/hr"


def co2_generator_update(state: SimulationState) -> Tuple[List[Effect], bool]:
    """
    Inject CO2 while enabled and inside the schedule.

    Returns:
        (effects, is_on)
    """
    generator = state.equipment.co2_generator
    hour_of_day = state.tick % HOURS_PER_DAY

    if not generator.enabled or not is_schedule_active(hour_of_day, generator.schedule):
        return [], False

    injection = calculate_co2_injection(generator.bubble_rate)
    return [Effect(Tier.IMMEDIATE, 'co2', injection, 'co2-generator')], True


# ============================================================================
# Auto Doser / Auto Feeder
# ============================================================================

def calculate_dose_nutrients(amount_ml: float, formula: FertilizerFormula) -> dict:
    """Nutrient mass (mg) delivered by a dose"""
    return {
        'nitrate': amount_ml * formula.nitrate,
        'phosphate': amount_ml * formula.phosphate,
        'potassium': amount_ml * formula.potassium,
        'iron': amount_ml * formula.iron,
    }


def auto_doser_update(state: SimulationState,
                      config: NutrientsConfig = NutrientsConfig()) -> Tuple[List[Effect], bool]:
    """
    Dose once per day at the schedule's start hour.

    Returns:
        (effects, dosed_today flag after this tick)
    """
    doser = state.equipment.auto_doser
    hour_of_day = state.tick % HOURS_PER_DAY
    dosed_today = False if hour_of_day == 0 else doser.dosed_today

    if not doser.enabled or dosed_today or hour_of_day != doser.schedule.start_hour:
        return [], dosed_today

    nutrients = calculate_dose_nutrients(doser.dose_amount_ml, config.fertilizer_formula)
    effects = [
        Effect(Tier.IMMEDIATE, nutrient, mass, 'auto-doser')
        for nutrient, mass in nutrients.items()
        if mass > 0
    ]
    return effects, True


def auto_feeder_update(state: SimulationState) -> Tuple[List[Effect], bool]:
    """
    Feed once per day at the schedule's start hour.

    Returns:
        (effects, fed_today flag after this tick)
    """
    feeder = state.equipment.auto_feeder
    hour_of_day = state.tick % HOURS_PER_DAY
    fed_today = False if hour_of_day == 0 else feeder.fed_today

    if not feeder.enabled or fed_today or hour_of_day != feeder.schedule.start_hour:
        return [], fed_today

    return [Effect(Tier.IMMEDIATE, 'food', feeder.feed_amount_grams, 'auto-feeder')], True


# ============================================================================
# Immediate Tier Entry Point
# ============================================================================

def process_equipment(state: SimulationState,
                      tunables: TunableConfig = TunableConfig()) -> Tuple[SimulationState, List[Effect]]:
    """
    Run every control loop against the previous tick's values.

    Args:
        state: Snapshot at the start of the tick
        tunables: Model parameters

    Returns:
        (state with updated equipment flags and ATO log, immediate effects)
    """
    effects: List[Effect] = []
    logs = []

    heater_effects, heater_on = heater_update(state, tunables.temperature)
    effects.extend(heater_effects)

    ato_effects, ato_logs = ato_update(state)
    effects.extend(ato_effects)
    logs.extend(ato_logs)

    co2_effects, co2_on = co2_generator_update(state)
    effects.extend(co2_effects)

    doser_effects, dosed_today = auto_doser_update(state, tunables.nutrients)
    effects.extend(doser_effects)
    if doser_effects:
        logs.append(create_log(state.tick, 'equipment', 'info',
                               f"Auto doser: dosed {state.equipment.auto_doser.dose_amount_ml:.1f}ml"))

    feeder_effects, fed_today = auto_feeder_update(state)
    effects.extend(feeder_effects)
    if feeder_effects:
        logs.append(create_log(state.tick, 'equipment', 'info',
                               f"Auto feeder: added {state.equipment.auto_feeder.feed_amount_grams:.2f}g food"))

    equipment = state.equipment
    equipment = replace(
        equipment,
        heater=replace(equipment.heater, is_on=heater_on),
        co2_generator=replace(equipment.co2_generator, is_on=co2_on),
        auto_doser=replace(equipment.auto_doser, dosed_today=dosed_today),
        auto_feeder=replace(equipment.auto_feeder, fed_today=fed_today),
    )

    logger.debug("tick %d: equipment emitted %d effects (heater=%s, co2=%s)",
                 state.tick, len(effects), heater_on, co2_on)

    return replace(state, equipment=equipment, logs=state.logs + tuple(logs)), effects
