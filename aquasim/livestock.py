"""
Livestock subsystem: fish metabolism, stress, health and death.

Runs in the active tier after plants, against the same starting snapshot.
Metabolism feeds the hungriest fish first from the shared food pool and
exchanges O2/CO2 in proportion to body mass. Health then moves by a fixed
recovery minus the summed environmental stress; fish whose health reaches
zero die, and fish past their species' maximum age face a small hourly
chance of dying of old age.
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Sequence, Tuple

from .config import LivestockConfig, TunableConfig
from .data_types import Fish, LogEntry, SimulationState
from .effects import Effect, Tier
from .event_log import create_log
from .loader import get_fish_species
from .resources import get_ppm
from .rng import RandomSource

logger = logging.getLogger(__name__)


# ============================================================================
# Metabolism
# ============================================================================

@dataclass(frozen=True)
class MetabolismResult:
    fish: Tuple[Fish, ...]  # Input order, hunger and age updated
    food_consumed: float  # g
    waste_produced: float  # g
    oxygen_delta: float  # mg/L
    co2_delta: float  # mg/L


def process_metabolism(fish: Sequence[Fish], available_food: float,
                       config: LivestockConfig = LivestockConfig()) -> MetabolismResult:
    """
    Feed, breathe and age every fish for one hour.

    Fish are served in descending hunger. Each wants
    hunger/100 * mass * base_food_rate grams and gets what is left.
    """
    updated = list(fish)
    remaining_food = available_food
    food_consumed = 0.0
    waste = 0.0
    oxygen_delta = 0.0
    co2_delta = 0.0

    order = sorted(range(len(fish)), key=lambda i: fish[i].hunger, reverse=True)
    for i in order:
        f = fish[i]
        needed = (f.hunger / 100.0) * f.mass * config.base_food_rate
        given = max(0.0, min(needed, remaining_food))
        remaining_food -= given
        food_consumed += given

        reduction = (given / needed) * f.hunger if needed > 0 else 0.0
        hunger = min(100.0, max(0.0, f.hunger - reduction + config.hunger_increase_rate))
        waste += given * config.waste_ratio

        oxygen_consumed = config.base_respiration_rate * f.mass
        oxygen_delta -= oxygen_consumed
        co2_delta += oxygen_consumed * config.respiratory_quotient

        updated[i] = replace(f, hunger=hunger, age=f.age + 1)

    return MetabolismResult(tuple(updated), food_consumed, waste, oxygen_delta, co2_delta)


# ============================================================================
# Health
# ============================================================================

def _range_deviation(value: float, bounds: Tuple[float, float]) -> float:
    low, high = bounds
    if value < low:
        return low - value
    if value > high:
        return value - high
    return 0.0


def calculate_stress(fish: Fish, resources: dict, water_volume: float, capacity: float,
                     config: LivestockConfig = LivestockConfig()) -> float:
    """
    Total stress for one fish this hour.

    Every stressor is scaled by (1 - hardiness). Toxin ppm is 0 without
    water, while an empty tank still stresses through water level.
    """
    species = get_fish_species(fish.species)
    stress = 0.0

    stress += config.temperature_stress_severity * _range_deviation(
        resources['temperature'], species.temperature_range)
    stress += config.ph_stress_severity * _range_deviation(resources['ph'], species.ph_range)

    stress += config.ammonia_stress_severity * get_ppm(resources['ammonia'], water_volume)
    stress += config.nitrite_stress_severity * get_ppm(resources['nitrite'], water_volume)

    nitrate_ppm = get_ppm(resources['nitrate'], water_volume)
    if nitrate_ppm > config.nitrate_stress_threshold:
        stress += config.nitrate_stress_severity * (nitrate_ppm - config.nitrate_stress_threshold)

    if fish.hunger > config.hunger_stress_threshold:
        stress += config.hunger_stress_severity * (fish.hunger - config.hunger_stress_threshold)

    if resources['oxygen'] < config.oxygen_stress_threshold:
        stress += config.oxygen_stress_severity * (config.oxygen_stress_threshold - resources['oxygen'])

    water_percent = (water_volume / capacity) * 100 if capacity > 0 else 100.0
    if water_percent < config.water_level_stress_threshold:
        stress += config.water_level_stress_severity * (config.water_level_stress_threshold - water_percent)

    if resources['flow'] > species.max_flow:
        stress += config.flow_stress_severity * (resources['flow'] - species.max_flow)

    return stress * (1 - species.hardiness)


@dataclass(frozen=True)
class HealthResult:
    surviving: Tuple[Fish, ...]
    dead_names: Tuple[str, ...]  # Species name, with " (old age)" for natural deaths
    death_waste: float  # g


def process_health(fish: Sequence[Fish], resources: dict, water_volume: float, capacity: float,
                   random: RandomSource, config: LivestockConfig = LivestockConfig()) -> HealthResult:
    surviving = []
    dead_names = []
    death_waste = 0.0

    for f in fish:
        species = get_fish_species(f.species)
        stress = calculate_stress(f, resources, water_volume, capacity, config)
        health = min(100.0, max(0.0, f.health + config.base_health_recovery - stress))

        if health <= 0:
            dead_names.append(species.name)
            death_waste += f.mass * config.death_decay_factor
            continue

        if f.age >= species.max_age and random() < config.old_age_death_chance:
            dead_names.append(f"{species.name} (old age)")
            death_waste += f.mass * config.death_decay_factor
            continue

        surviving.append(replace(f, health=health))

    return HealthResult(tuple(surviving), tuple(dead_names), death_waste)


# ============================================================================
# Active Tier Entry Point
# ============================================================================

def process_livestock(state: SimulationState, random: RandomSource,
                      tunables: TunableConfig = TunableConfig()) -> Tuple[Tuple[Fish, ...], List[Effect], List[LogEntry]]:
    """
    One hour of fish life.

    Args:
        state: Snapshot at the start of the tick
        random: Source for old-age death rolls
        tunables: Model parameters

    Returns:
        (surviving fish, active-tier effects, death logs)
    """
    if not state.fish:
        return state.fish, [], []

    config = tunables.livestock
    resources = state.resources
    effects: List[Effect] = []

    metabolism = process_metabolism(state.fish, resources['food'], config)
    if metabolism.food_consumed > 0:
        effects.append(Effect(Tier.ACTIVE, 'food', -metabolism.food_consumed, 'fish-metabolism'))
    if metabolism.waste_produced > 0:
        effects.append(Effect(Tier.ACTIVE, 'waste', metabolism.waste_produced, 'fish-metabolism'))
    if metabolism.oxygen_delta != 0:
        effects.append(Effect(Tier.ACTIVE, 'oxygen', metabolism.oxygen_delta, 'fish-respiration'))
    if metabolism.co2_delta != 0:
        effects.append(Effect(Tier.ACTIVE, 'co2', metabolism.co2_delta, 'fish-respiration'))

    health = process_health(metabolism.fish, resources, state.tank.water_level,
                            state.tank.capacity, random, config)
    if health.death_waste > 0:
        effects.append(Effect(Tier.ACTIVE, 'waste', health.death_waste, 'fish-death'))

    logs = []
    for name in health.dead_names:
        logger.warning("tick %d: %s died", state.tick, name)
        logs.append(create_log(state.tick, 'simulation', 'warning', f"{name} died"))

    return health.surviving, effects, logs
