"""
User actions.

Actions run outside the tick pipeline and change the snapshot immediately.
Each validates its preconditions and, on success, returns a new state with
exactly one 'user' log entry and a short result message. On rejection the
same state object is returned together with the reason. Actions never
advance the tick.

The action set is closed: apply_action dispatches on the action's type and
raises TypeError for anything it does not know.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Type

from .blending import blend_concentration, blend_ph, blend_temperature
from .config import FertilizerFormula, TunableConfig
from .constants import (
    DEFAULT_PLANT_SIZE,
    INITIAL_FISH_HEALTH,
    INITIAL_FISH_HUNGER,
    LITERS_PER_5_GALLONS,
    MAX_DOSE_ML,
    MAX_PLANT_SIZE,
    MIN_DOSE_ML,
    MIN_SCRUB_ALGAE,
    PLANTS_PER_5_GALLONS,
    SCRUB_MIN_PERCENT,
    SCRUB_PERCENT_RANGE,
    SUBSTRATE_COMPATIBILITY,
    TRIM_TARGET_SIZES,
)
from .data_types import Fish, Plant, SimulationState
from .equipment import calculate_dose_nutrients
from .event_log import append_logs, create_log
from .loader import fish_species_table, plant_species_table
from .resources import MASS_RESOURCES, clamp_resource
from .rng import RandomSource, default_source
from .water_chemistry import calculate_o2_saturation

logger = logging.getLogger(__name__)


# ============================================================================
# Action Types
# ============================================================================

@dataclass(frozen=True)
class TopOff:
    """Fill the tank back to capacity"""
    pass


@dataclass(frozen=True)
class Feed:
    amount: float  # grams


@dataclass(frozen=True)
class ScrubAlgae:
    percent: Optional[float] = None  # Fraction removed; random 10-30% when None


@dataclass(frozen=True)
class WaterChange:
    fraction: float  # 0.1, 0.25, 0.5 or 0.9 from the UI; any (0, 1] accepted


@dataclass(frozen=True)
class TrimPlants:
    target_size: float  # 50, 85 or 100


@dataclass(frozen=True)
class AddPlant:
    species: str
    initial_size: float = DEFAULT_PLANT_SIZE


@dataclass(frozen=True)
class RemovePlant:
    plant_id: str


@dataclass(frozen=True)
class Dose:
    amount_ml: float


@dataclass(frozen=True)
class AddFish:
    species: str


@dataclass(frozen=True)
class RemoveFish:
    fish_id: str


@dataclass(frozen=True)
class ActionResult:
    state: SimulationState
    message: str


def _user_log(state: SimulationState, message: str, source: str = 'user') -> SimulationState:
    return append_logs(state, [create_log(state.tick, source, 'info', message)])


def _with_resources(state: SimulationState, updates: Dict[str, float]) -> SimulationState:
    resources = dict(state.resources)
    for key, value in updates.items():
        resources[key] = clamp_resource(key, value)
    return replace(state, resources=resources)


def _next_id(prefix: str, tick: int, taken) -> str:
    """First free id of the form prefix_tick_n"""
    n = 0
    while f"{prefix}_{tick}_{n}" in taken:
        n += 1
    return f"{prefix}_{tick}_{n}"


# ============================================================================
# Water
# ============================================================================

def top_off(state: SimulationState, action: TopOff) -> ActionResult:
    """Raise water to capacity; dissolved mass is untouched so ppm drops"""
    capacity = state.tank.capacity
    water_level = state.tank.water_level
    if water_level >= capacity:
        return ActionResult(state, f"Water already at capacity ({capacity:g}L)")

    added = capacity - water_level
    new_state = replace(state, tank=replace(state.tank, water_level=capacity))
    new_state = _user_log(new_state, f"Topped off water: +{added:.1f}L to {capacity:g}L")
    return ActionResult(new_state, f"Added {added:.1f}L")


def water_change(state: SimulationState, action: WaterChange,
                 tunables: TunableConfig = TunableConfig()) -> ActionResult:
    """
    Replace a fraction of the water with tap water.

    Every dissolved mass is scaled by exactly (1 - fraction). Temperature,
    O2, CO2 and pH blend the remaining water with the refill (tap water
    arrives O2-saturated at tap temperature and at atmospheric CO2). The
    tank ends at capacity.
    """
    fraction = action.fraction
    if not 0 < fraction <= 1:
        return ActionResult(state, "Invalid water change amount")

    water_level = state.tank.water_level
    if water_level <= 0:
        return ActionResult(state, "No water to change")

    capacity = state.tank.capacity
    removed = water_level * fraction
    remaining = water_level - removed
    added = capacity - remaining

    resources = state.resources
    env = state.environment
    updates = {key: resources[key] * (1 - fraction) for key in MASS_RESOURCES}
    updates['temperature'] = round(blend_temperature(
        resources['temperature'], remaining, env.tap_water_temperature, added), 2)
    updates['oxygen'] = round(blend_concentration(
        resources['oxygen'], remaining,
        calculate_o2_saturation(env.tap_water_temperature, tunables.gas_exchange), added), 2)
    updates['co2'] = round(blend_concentration(
        resources['co2'], remaining, tunables.gas_exchange.atmospheric_co2, added), 2)
    updates['ph'] = round(blend_ph(resources['ph'], remaining, env.tap_water_ph, added), 2)

    new_state = _with_resources(state, updates)
    new_state = replace(new_state, tank=replace(state.tank, water_level=capacity))

    percent = round(fraction * 100)
    detail = f"removed {removed:.1f}L, added {added:.1f}L"
    new_state = _user_log(new_state, f"Water change: {percent}% ({detail})")
    return ActionResult(new_state, f"Changed {percent}% water ({detail})")


# ============================================================================
# Food, Algae, Fertilizer
# ============================================================================

def feed(state: SimulationState, action: Feed) -> ActionResult:
    amount = action.amount
    if not math.isfinite(amount):
        return ActionResult(state, "Feed amount must be a number")
    if amount <= 0:
        return ActionResult(state, "Cannot feed 0 or negative amount")

    new_state = _with_resources(state, {'food': round(state.resources['food'] + amount, 2)})
    new_state = _user_log(new_state, f"Fed {amount:.1f}g of food")
    return ActionResult(new_state, f"Added {amount:.1f}g of food")


def scrub_algae(state: SimulationState, action: ScrubAlgae,
                random: Optional[RandomSource] = None) -> ActionResult:
    """Scrape off a fraction of the algae; scraped algae leaves the tank"""
    percent = action.percent
    if percent is not None and not (math.isfinite(percent) and 0.0 <= percent <= 1.0):
        return ActionResult(state, "Scrub percent must be between 0 and 1")

    algae = state.resources['algae']
    if algae < MIN_SCRUB_ALGAE:
        return ActionResult(state, f"Algae level too low to scrub (minimum {MIN_SCRUB_ALGAE:g})")

    if percent is None:
        random = random or default_source()
        percent = SCRUB_MIN_PERCENT + random() * SCRUB_PERCENT_RANGE

    removed = algae * percent
    remaining = algae - removed

    new_state = _with_resources(state, {'algae': remaining})
    new_state = _user_log(new_state, f"Scraped algae: removed {removed:.1f}, remaining {remaining:.1f}",
                          source='scrub')
    return ActionResult(new_state, f"Removed {removed:.1f} algae ({percent * 100:.0f}%)")


def dose(state: SimulationState, action: Dose,
         formula: FertilizerFormula = FertilizerFormula()) -> ActionResult:
    """Add fertilizer; nutrients are added as mass (mg)"""
    amount_ml = action.amount_ml
    if not math.isfinite(amount_ml):
        return ActionResult(state, "Dose amount must be a number")
    if amount_ml <= 0:
        return ActionResult(state, "Cannot dose 0 or negative amount")
    if amount_ml < MIN_DOSE_ML:
        return ActionResult(state, f"Minimum dose is {MIN_DOSE_ML:g}ml")
    if amount_ml > MAX_DOSE_ML:
        return ActionResult(state, f"Maximum dose is {MAX_DOSE_ML:g}ml to prevent accidents")

    nutrients = calculate_dose_nutrients(amount_ml, formula)
    new_state = _with_resources(state, {
        key: state.resources[key] + mass for key, mass in nutrients.items()
    })
    new_state = _user_log(
        new_state,
        f"Dosed {amount_ml:.1f}ml fertilizer (+{nutrients['nitrate']:.1f}mg NO3, "
        f"+{nutrients['phosphate']:.2f}mg PO4, +{nutrients['potassium']:.1f}mg K, "
        f"+{nutrients['iron']:.2f}mg Fe)",
    )
    return ActionResult(new_state, f"Dosed {amount_ml:.1f}ml fertilizer")


# ============================================================================
# Plants
# ============================================================================

def get_max_plants(capacity: float) -> int:
    """Three plants per five gallons, at least one"""
    if capacity <= 0:
        return 0
    return max(1, math.floor(capacity / LITERS_PER_5_GALLONS * PLANTS_PER_5_GALLONS))


def is_substrate_compatible(species_id: str, substrate_type: str) -> bool:
    requirement = plant_species_table()[species_id].substrate_requirement
    return substrate_type in SUBSTRATE_COMPATIBILITY[requirement]


def get_substrate_incompatibility_reason(species_id: str, substrate_type: str) -> Optional[str]:
    if is_substrate_compatible(species_id, substrate_type):
        return None
    species = plant_species_table()[species_id]
    if species.substrate_requirement == 'sand':
        return f"{species.name} requires sand or aqua soil substrate"
    if species.substrate_requirement == 'aqua_soil':
        return f"{species.name} requires nutrient-rich aqua soil substrate"
    return f"{species.name} is not compatible with current substrate"


def add_plant(state: SimulationState, action: AddPlant) -> ActionResult:
    table = plant_species_table()
    if action.species not in table:
        return ActionResult(state, f"Unknown plant species: {action.species}")

    size = action.initial_size
    if not (math.isfinite(size) and 0.0 <= size <= MAX_PLANT_SIZE):
        return ActionResult(state, f"Plant size must be between 0 and {MAX_PLANT_SIZE:g}%")

    max_plants = get_max_plants(state.tank.capacity)
    if len(state.plants) >= max_plants:
        return ActionResult(state, f"Tank at plant capacity ({max_plants} plants max)")

    reason = get_substrate_incompatibility_reason(action.species, state.equipment.substrate.type)
    if reason:
        return ActionResult(state, reason)

    species = table[action.species]
    plant_id = _next_id('plant', state.tick, {plant.id for plant in state.plants})
    plant = Plant(id=plant_id, species=action.species, size=action.initial_size)

    new_state = replace(state, plants=state.plants + (plant,))
    new_state = _user_log(new_state, f"Added {species.name} ({action.initial_size:g}% size)")
    return ActionResult(new_state, f"Added {species.name}")


def remove_plant(state: SimulationState, action: RemovePlant) -> ActionResult:
    match = next((plant for plant in state.plants if plant.id == action.plant_id), None)
    if match is None:
        return ActionResult(state, "Plant not found")

    name = plant_species_table()[match.species].name
    new_state = replace(state, plants=tuple(p for p in state.plants if p.id != action.plant_id))
    new_state = _user_log(new_state, f"Removed {name}")
    return ActionResult(new_state, f"Removed {name}")


def trim_plants(state: SimulationState, action: TrimPlants) -> ActionResult:
    target = action.target_size
    if target not in TRIM_TARGET_SIZES:
        return ActionResult(state, "Invalid target size for trimming")

    to_trim = [plant for plant in state.plants if plant.size > target]
    if not to_trim:
        return ActionResult(state, f"No plants above {target:g}% to trim")

    total_removed = sum(plant.size - target for plant in to_trim)
    plants = tuple(replace(p, size=target) if p.size > target else p for p in state.plants)

    new_state = replace(state, plants=plants)
    new_state = _user_log(
        new_state,
        f"Trimmed {len(to_trim)} plant(s) to {target:g}% ({total_removed:.0f}% total removed)",
    )
    return ActionResult(new_state, f"Trimmed {len(to_trim)} plant(s) to {target:g}%")


# ============================================================================
# Fish
# ============================================================================

def add_fish(state: SimulationState, action: AddFish,
             random: Optional[RandomSource] = None) -> ActionResult:
    table = fish_species_table()
    if action.species not in table:
        return ActionResult(state, f"Unknown fish species: {action.species}")

    random = random or default_source()
    species = table[action.species]
    sex = 'male' if random() < 0.5 else 'female'
    fish = Fish(
        id=_next_id('fish', state.tick, {f.id for f in state.fish}),
        species=action.species,
        mass=species.adult_mass,
        health=INITIAL_FISH_HEALTH,
        age=0,
        hunger=INITIAL_FISH_HUNGER,
        sex=sex,
    )

    new_state = replace(state, fish=state.fish + (fish,))
    new_state = _user_log(new_state, f"Added {species.name} ({species.adult_mass:g}g, {sex})")
    return ActionResult(new_state, f"Added {species.name}")


def remove_fish(state: SimulationState, action: RemoveFish) -> ActionResult:
    match = next((f for f in state.fish if f.id == action.fish_id), None)
    if match is None:
        return ActionResult(state, "Fish not found")

    name = fish_species_table()[match.species].name
    new_state = replace(state, fish=tuple(f for f in state.fish if f.id != action.fish_id))
    new_state = _user_log(new_state, f"Removed {name}")
    return ActionResult(new_state, f"Removed {name}")


# ============================================================================
# Dispatch
# ============================================================================

Action = (TopOff, Feed, ScrubAlgae, WaterChange, TrimPlants,
          AddPlant, RemovePlant, Dose, AddFish, RemoveFish)

_HANDLERS: Dict[Type, Callable[[SimulationState, object, RandomSource, TunableConfig], ActionResult]] = {
    TopOff: lambda state, action, random, tunables: top_off(state, action),
    Feed: lambda state, action, random, tunables: feed(state, action),
    ScrubAlgae: lambda state, action, random, tunables: scrub_algae(state, action, random),
    WaterChange: lambda state, action, random, tunables: water_change(state, action, tunables),
    TrimPlants: lambda state, action, random, tunables: trim_plants(state, action),
    AddPlant: lambda state, action, random, tunables: add_plant(state, action),
    RemovePlant: lambda state, action, random, tunables: remove_plant(state, action),
    Dose: lambda state, action, random, tunables: dose(state, action, tunables.nutrients.fertilizer_formula),
    AddFish: lambda state, action, random, tunables: add_fish(state, action, random),
    RemoveFish: lambda state, action, random, tunables: remove_fish(state, action),
}

if set(_HANDLERS) != set(Action):
    raise TypeError("every action type needs a handler")


def apply_action(state: SimulationState, action,
                 random: Optional[RandomSource] = None,
                 tunables: Optional[TunableConfig] = None) -> ActionResult:
    """
    Apply one user action.

    Args:
        state: Current snapshot
        action: One of the action dataclasses in this module
        random: Source for random scrub amounts and fish sex
        tunables: Model parameters (fertilizer formula, tap water gases)

    Returns:
        ActionResult(state, message); state is unchanged on rejection

    Raises:
        TypeError: Unknown action type
    """
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"Unknown action: {action!r}")

    result = handler(state, action, random or default_source(), tunables or TunableConfig())
    if result.state is state:
        logger.debug("tick %d: %s rejected: %s", state.tick, type(action).__name__, result.message)
    else:
        logger.debug("tick %d: %s applied: %s", state.tick, type(action).__name__, result.message)
    return result
