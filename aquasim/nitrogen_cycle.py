"""
Nitrogen cycle: waste -> ammonia -> nitrite -> nitrate.

Two bacteria populations mediate the conversions: AOB (ammonia-oxidizing)
turn ammonia into nitrite, NOB (nitrite-oxidizing) turn nitrite into
nitrate. Both follow logistic growth capped by colonizable surface and die
back when starved.

All three compounds are stored as mass (mg). Conversions move mass between
pools 1:1; thresholds are expressed in ppm and converted with the current
water volume.

Order within one hour:
    0. Cap populations to the current surface (surface can shrink)
    1. Mineralize waste into ammonia
    2. AOB convert ammonia to nitrite
    3. NOB convert nitrite to nitrate
    4. Spawn a population that is absent when its substrate is abundant
    5. Grow populations whose substrate is above the food threshold
    6. Otherwise, die back
"""

from typing import List, Tuple

from .config import NitrogenCycleConfig
from .data_types import SimulationState
from .effects import Effect, Tier
from .resources import get_mass_from_ppm


def calculate_max_bacteria(surface: float, config: NitrogenCycleConfig = NitrogenCycleConfig()) -> float:
    """Carrying capacity for each population"""
    return surface * config.bacteria_per_cm2


def calculate_bacterial_growth(population: float, growth_rate: float, max_population: float) -> float:
    """Logistic growth increment"""
    if population <= 0 or max_population <= 0:
        return 0.0
    return population * growth_rate * (1 - population / max_population)


def calculate_waste_to_ammonia(waste: float,
                               config: NitrogenCycleConfig = NitrogenCycleConfig()) -> Tuple[float, float]:
    """
    Mineralization.

    Returns:
        (waste consumed in g, ammonia produced in mg)
    """
    if waste <= 0:
        return 0.0, 0.0
    consumed = waste * config.waste_conversion_rate
    return consumed, consumed * config.waste_to_ammonia_ratio


def calculate_bacterial_processing(substrate_mass: float, population: float, water_volume: float,
                                   config: NitrogenCycleConfig = NitrogenCycleConfig()) -> float:
    """Mass (mg) a population converts this hour, limited by what is present"""
    if substrate_mass <= 0 or population <= 0 or water_volume <= 0:
        return 0.0
    capacity_ppm = population * config.bacteria_processing_rate
    return min(get_mass_from_ppm(capacity_ppm, water_volume), substrate_mass)


def nitrogen_cycle_update(state: SimulationState,
                          config: NitrogenCycleConfig = NitrogenCycleConfig()) -> List[Effect]:
    effects: List[Effect] = []
    resources = state.resources
    water_volume = state.tank.water_level
    max_bacteria = calculate_max_bacteria(resources['surface'], config)

    waste = resources['waste']
    ammonia = resources['ammonia']
    nitrite = resources['nitrite']
    aob = resources['aob']
    nob = resources['nob']

    def emit(resource: str, delta: float, stage: str):
        effects.append(Effect(Tier.PASSIVE, resource, delta, f"nitrogen-cycle-{stage}"))

    # Step 0: surface cap
    if aob > max_bacteria:
        emit('aob', max_bacteria - aob, 'surface-cap')
        aob = max_bacteria
    if nob > max_bacteria:
        emit('nob', max_bacteria - nob, 'surface-cap')
        nob = max_bacteria

    # Step 1: mineralization
    waste_consumed, ammonia_produced = calculate_waste_to_ammonia(waste, config)
    if waste_consumed > 0:
        emit('waste', -waste_consumed, 'mineralization')
        emit('ammonia', ammonia_produced, 'mineralization')
        ammonia += ammonia_produced

    # Step 2: AOB
    processed = calculate_bacterial_processing(ammonia, aob, water_volume, config)
    if processed > 0:
        emit('ammonia', -processed, 'aob')
        emit('nitrite', processed, 'aob')
        ammonia -= processed
        nitrite += processed

    # Step 3: NOB
    processed = calculate_bacterial_processing(nitrite, nob, water_volume, config)
    if processed > 0:
        emit('nitrite', -processed, 'nob')
        emit('nitrate', processed, 'nob')
        nitrite -= processed

    aob_spawn_mass = get_mass_from_ppm(config.aob_spawn_threshold, water_volume)
    nob_spawn_mass = get_mass_from_ppm(config.nob_spawn_threshold, water_volume)
    aob_food_mass = get_mass_from_ppm(config.aob_food_threshold, water_volume)
    nob_food_mass = get_mass_from_ppm(config.nob_food_threshold, water_volume)

    # Step 4: spawning (never without water to live in)
    if water_volume > 0 and max_bacteria > 0:
        if aob == 0 and ammonia >= aob_spawn_mass:
            spawn = min(config.spawn_amount, max_bacteria)
            emit('aob', spawn, 'spawn')
            aob = spawn
        if nob == 0 and nitrite >= nob_spawn_mass:
            spawn = min(config.spawn_amount, max_bacteria)
            emit('nob', spawn, 'spawn')
            nob = spawn

    # Steps 5/6: growth or death
    for key, population, substrate, food_mass, growth_rate in (
        ('aob', aob, ammonia, aob_food_mass, config.aob_growth_rate),
        ('nob', nob, nitrite, nob_food_mass, config.nob_growth_rate),
    ):
        if population <= 0:
            continue
        if water_volume > 0 and substrate >= food_mass:
            growth = calculate_bacterial_growth(population, growth_rate, max_bacteria)
            actual = min(population + growth, max_bacteria) - population
            if actual > 0:
                emit(key, actual, 'growth')
        else:
            emit(key, -population * config.bacteria_death_rate, 'death')

    return effects
