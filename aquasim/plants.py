"""
Plant subsystem: photosynthesis, respiration, growth and nutrients.

Runs in the active tier against the tick's starting snapshot. Aggregate
photosynthesis is limited by the scarcer of CO2 and nitrate (Liebig's law)
and produces biomass that is shared out by species growth rate. Each plant
separately tracks a condition driven by fertilizer sufficiency; poor
condition sheds size and eventually kills the plant.

Entry point process_plants() returns the new plant tuple (dead plants
removed) together with the resource effects and any death logs.
"""

from dataclasses import dataclass, replace
from typing import List, Sequence, Tuple

from .config import NutrientsConfig, PlantsConfig, TunableConfig
from .constants import MAX_PLANT_SIZE
from .data_types import LogEntry, Plant, SimulationState
from .effects import Effect, Tier
from .event_log import create_log
from .loader import get_plant_species
from .resources import get_ppm

NUTRIENTS = ('nitrate', 'phosphate', 'potassium', 'iron')


# ============================================================================
# Photosynthesis and Respiration
# ============================================================================

@dataclass(frozen=True)
class PhotosynthesisResult:
    oxygen_delta: float  # mg/L
    co2_delta: float  # mg/L
    nitrate_delta: float  # mg
    biomass: float
    limiting_factor: float


def get_total_plant_size(plants: Sequence[Plant]) -> float:
    return sum(plant.size for plant in plants)


def calculate_co2_factor(co2: float, config: PlantsConfig = PlantsConfig()) -> float:
    if co2 <= 0:
        return 0.0
    return min(1.0, co2 / config.optimal_co2)


def calculate_nitrate_factor(nitrate_mass: float, water_volume: float,
                             config: PlantsConfig = PlantsConfig()) -> float:
    if nitrate_mass <= 0 or water_volume <= 0:
        return 0.0
    return min(1.0, get_ppm(nitrate_mass, water_volume) / config.optimal_nitrate)


def calculate_photosynthesis(total_size: float, light: float, co2: float, nitrate_mass: float,
                             water_volume: float, config: PlantsConfig = PlantsConfig()) -> PhotosynthesisResult:
    """
    Aggregate photosynthesis for all plants.

    Args:
        total_size: Sum of plant sizes (100 = one mature plant)
        light: Current light (W); nothing happens in the dark
        co2: Dissolved CO2 (mg/L)
        nitrate_mass: Nitrate (mg)
        water_volume: Liters

    Returns:
        PhotosynthesisResult; nitrate_delta is a mass so it scales with volume
    """
    if light <= 0 or total_size <= 0 or water_volume <= 0:
        return PhotosynthesisResult(0.0, 0.0, 0.0, 0.0, 0.0)

    limiting = min(calculate_co2_factor(co2, config),
                   calculate_nitrate_factor(nitrate_mass, water_volume, config))
    rate = config.base_photosynthesis_rate * (total_size / 100.0) * limiting

    return PhotosynthesisResult(
        oxygen_delta=rate * config.o2_per_photosynthesis,
        co2_delta=-rate * config.co2_per_photosynthesis,
        nitrate_delta=-rate * config.nitrate_per_photosynthesis * water_volume,
        biomass=rate * config.biomass_per_photosynthesis,
        limiting_factor=limiting,
    )


def get_respiration_temperature_factor(temperature: float, config: PlantsConfig = PlantsConfig()) -> float:
    return config.respiration_q10 ** ((temperature - config.respiration_reference_temp) / 10.0)


def calculate_respiration(total_size: float, temperature: float,
                          config: PlantsConfig = PlantsConfig()) -> Tuple[float, float]:
    """
    Plant respiration, day and night.

    Returns:
        (oxygen delta, co2 delta) in mg/L
    """
    if total_size <= 0:
        return 0.0, 0.0
    rate = (config.base_respiration_rate * (total_size / 100.0)
            * get_respiration_temperature_factor(temperature, config))
    return -rate * config.o2_per_respiration, rate * config.co2_per_respiration


# ============================================================================
# Growth
# ============================================================================

def calculate_overgrowth_penalty(max_size: float, config: PlantsConfig = PlantsConfig()) -> float:
    """Fraction of biomass lost to crowding: 0 up to 100% size, capped at 0.5"""
    if max_size <= 100:
        return 0.0
    return min(0.5, (max_size - 100) / config.overgrowth_penalty_scale)


def distribute_biomass(plants: Sequence[Plant], biomass: float,
                       config: PlantsConfig = PlantsConfig()) -> Tuple[List[Plant], float]:
    """
    Share biomass between plants by species growth rate.

    Returns:
        (updated plants, waste released by plants pushed past the size cap)
    """
    plants = list(plants)
    if not plants or biomass <= 0:
        return plants, 0.0

    penalty = calculate_overgrowth_penalty(max(plant.size for plant in plants), config)
    effective = biomass * (1 - penalty)

    growth_rates = [get_plant_species(plant.species).growth_rate for plant in plants]
    total_rate = sum(growth_rates)
    if total_rate <= 0:
        return plants, 0.0

    updated = []
    waste = 0.0
    for plant, growth_rate in zip(plants, growth_rates):
        size = plant.size + effective * (growth_rate / total_rate) * config.size_per_biomass
        if size > MAX_PLANT_SIZE:
            waste += (size - MAX_PLANT_SIZE) * config.waste_per_excess_size
            size = MAX_PLANT_SIZE
        updated.append(replace(plant, size=size))
    return updated, waste


# ============================================================================
# Nutrients
# ============================================================================

def get_demand_multiplier(demand: str, config: NutrientsConfig = NutrientsConfig()) -> float:
    return {
        'low': config.low_demand_multiplier,
        'medium': config.medium_demand_multiplier,
        'high': config.high_demand_multiplier,
    }[demand]


def _optimal_ppm(nutrient: str, config: NutrientsConfig) -> float:
    return getattr(config, f"optimal_{nutrient}_ppm")


def calculate_nutrient_factors(resources: dict, water_volume: float, species_id: str,
                               config: NutrientsConfig = NutrientsConfig()) -> dict:
    """Per-nutrient sufficiency (0-1) for one species at current ppm"""
    if water_volume <= 0:
        return {nutrient: 0.0 for nutrient in NUTRIENTS}
    demand = get_demand_multiplier(get_plant_species(species_id).nutrient_demand, config)

    factors = {}
    for nutrient in NUTRIENTS:
        required = _optimal_ppm(nutrient, config) * demand
        if required <= 0:
            factors[nutrient] = 1.0
        else:
            factors[nutrient] = min(1.0, get_ppm(resources[nutrient], water_volume) / required)
    return factors


def calculate_nutrient_sufficiency(resources: dict, water_volume: float, species_id: str,
                                   config: NutrientsConfig = NutrientsConfig()) -> float:
    """Liebig's law over nitrate, phosphate, potassium and iron"""
    return min(calculate_nutrient_factors(resources, water_volume, species_id, config).values())


def get_limiting_nutrient(resources: dict, water_volume: float, species_id: str,
                          config: NutrientsConfig = NutrientsConfig()) -> str:
    factors = calculate_nutrient_factors(resources, water_volume, species_id, config)
    return min(NUTRIENTS, key=lambda nutrient: factors[nutrient])


def update_plant_condition(condition: float, sufficiency: float,
                           config: NutrientsConfig = NutrientsConfig()) -> float:
    if sufficiency >= config.thriving_threshold:
        condition += config.condition_recovery_rate
    elif sufficiency >= config.adequate_threshold:
        condition += config.condition_recovery_rate * config.adequate_recovery_factor
    elif sufficiency >= config.struggling_threshold:
        condition -= config.condition_decay_rate * config.struggling_decay_factor
    else:
        condition -= config.condition_decay_rate
    return min(100.0, max(0.0, condition))


def calculate_shedding(plant: Plant, config: NutrientsConfig = NutrientsConfig()) -> Tuple[float, float]:
    """
    Size lost by a plant in poor condition.

    Returns:
        (size reduction, waste produced in g)
    """
    threshold = config.shedding_condition_threshold
    if plant.condition >= threshold:
        return 0.0, 0.0
    intensity = (threshold - plant.condition) / threshold
    reduction = plant.size * intensity * config.max_shedding_rate
    return reduction, reduction * config.waste_per_shed_size


def should_plant_die(plant: Plant, config: NutrientsConfig = NutrientsConfig()) -> bool:
    return plant.condition < config.death_condition_threshold or plant.size < config.death_size_threshold


def process_plant_nutrients(plant: Plant, sufficiency: float,
                            config: NutrientsConfig = NutrientsConfig()) -> Tuple[Plant, float]:
    """
    Condition update, shedding and death for one plant.

    Returns:
        (updated plant with size 0 if it died, waste released in g)
    """
    plant = replace(plant, condition=update_plant_condition(plant.condition, sufficiency, config))
    waste = 0.0

    reduction, shed_waste = calculate_shedding(plant, config)
    if reduction > 0:
        plant = replace(plant, size=max(0.0, plant.size - reduction))
        waste += shed_waste

    if should_plant_die(plant, config):
        waste += plant.size * config.waste_per_plant_death
        plant = replace(plant, size=0.0)

    return plant, waste


def calculate_nutrient_consumption(total_size: float, resources: dict,
                                   config: NutrientsConfig = NutrientsConfig()) -> dict:
    """Nutrient mass (mg) taken up this hour, in fertilizer proportions"""
    if total_size <= 0:
        return {nutrient: 0.0 for nutrient in NUTRIENTS}
    base = (total_size / 100.0) * config.base_consumption_rate
    return {
        nutrient: min(base * config.fertilizer_formula.ratio(nutrient), resources[nutrient])
        for nutrient in NUTRIENTS
    }


# ============================================================================
# Active Tier Entry Point
# ============================================================================

def process_plants(state: SimulationState,
                   tunables: TunableConfig = TunableConfig()) -> Tuple[Tuple[Plant, ...], List[Effect], List[LogEntry]]:
    """
    One hour of plant life.

    Args:
        state: Snapshot at the start of the tick
        tunables: Model parameters

    Returns:
        (surviving plants, active-tier effects, death logs)
    """
    effects: List[Effect] = []
    logs: List[LogEntry] = []
    resources = state.resources
    water_volume = state.tank.water_level
    total_size = get_total_plant_size(state.plants)

    if not state.plants or total_size <= 0:
        return state.plants, effects, logs

    def emit(resource: str, delta: float, source: str):
        if delta != 0:
            effects.append(Effect(Tier.ACTIVE, resource, delta, source))

    photosynthesis = calculate_photosynthesis(
        total_size, resources['light'], resources['co2'], resources['nitrate'],
        water_volume, tunables.plants,
    )
    emit('oxygen', photosynthesis.oxygen_delta, 'photosynthesis')
    emit('co2', photosynthesis.co2_delta, 'photosynthesis')
    emit('nitrate', photosynthesis.nitrate_delta, 'photosynthesis')

    o2_delta, co2_delta = calculate_respiration(total_size, resources['temperature'], tunables.plants)
    emit('oxygen', o2_delta, 'respiration')
    emit('co2', co2_delta, 'respiration')

    plants, overgrowth_waste = distribute_biomass(state.plants, photosynthesis.biomass, tunables.plants)
    emit('waste', overgrowth_waste, 'plant-overgrowth')

    consumption = calculate_nutrient_consumption(total_size, resources, tunables.nutrients)
    for nutrient, consumed in consumption.items():
        emit(nutrient, -consumed, 'nutrient-uptake')

    survivors = []
    nutrient_waste = 0.0
    for plant in plants:
        sufficiency = calculate_nutrient_sufficiency(resources, water_volume, plant.species, tunables.nutrients)
        plant, waste = process_plant_nutrients(plant, sufficiency, tunables.nutrients)
        nutrient_waste += waste
        if plant.size > 0:
            survivors.append(plant)
        else:
            name = get_plant_species(plant.species).name
            logs.append(create_log(state.tick, 'simulation', 'warning', f"{name} died"))
    emit('waste', nutrient_waste, 'plant-decay')

    return tuple(survivors), effects, logs
