"""
Algae growth driven by light intensity.

Growth saturates with watts per liter (Michaelis-Menten) and is suppressed
by plants competing for the same light and nutrients.
"""

from typing import Iterable, List

from .config import AlgaeConfig, PlantsConfig
from .data_types import Plant, SimulationState
from .effects import Effect, Tier


def calculate_algae_growth(light_watts: float, capacity: float, config: AlgaeConfig = AlgaeConfig()) -> float:
    """
    Algae growth per hour before plant competition.

    growth = max * wpl / (half + wpl), where wpl = light watts per liter.
    """
    if light_watts <= 0 or capacity <= 0:
        return 0.0
    watts_per_liter = light_watts / capacity
    return config.max_growth_rate * watts_per_liter / (config.half_saturation + watts_per_liter)


def calculate_plant_competition(total_plant_size: float, plants_config: PlantsConfig = PlantsConfig()) -> float:
    """Growth multiplier in (0, 1]: competition_scale total size halves growth"""
    if total_plant_size <= 0:
        return 1.0
    return plants_config.competition_scale / (plants_config.competition_scale + total_plant_size)


def total_plant_size(plants: Iterable[Plant]) -> float:
    return sum(plant.size for plant in plants)


def algae_update(state: SimulationState, config: AlgaeConfig = AlgaeConfig(),
                 plants_config: PlantsConfig = PlantsConfig()) -> List[Effect]:
    growth = calculate_algae_growth(state.resources['light'], state.tank.capacity, config)
    growth *= calculate_plant_competition(total_plant_size(state.plants), plants_config)

    headroom = config.algae_cap - state.resources['algae']
    growth = min(growth, max(0.0, headroom))
    if growth <= 0:
        return []
    return [Effect(Tier.PASSIVE, 'algae', growth, 'algae')]
