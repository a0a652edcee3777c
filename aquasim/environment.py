"""
Passive environmental drift: food decay, evaporation, temperature drift.

Each system is a pure function (state, config) -> List[Effect] reading the
snapshot from the start of the tick.
"""

from typing import List

from .constants import HOURS_PER_DAY
from .config import DecayConfig, EvaporationConfig, NutrientsConfig, TemperatureConfig
from .data_types import SimulationState
from .effects import Effect, Tier


# ============================================================================
# Decay
# ============================================================================

def get_temperature_factor(temperature: float, config: DecayConfig = DecayConfig()) -> float:
    """Q10 multiplier relative to the reference temperature"""
    return config.q10 ** ((temperature - config.reference_temp) / 10.0)


def calculate_decay(food: float, temperature: float, config: DecayConfig = DecayConfig()) -> float:
    """Grams of food decaying this hour, never more than is present"""
    if food <= 0:
        return 0.0
    amount = food * config.base_decay_rate * get_temperature_factor(temperature, config)
    return min(amount, food)


def decay_update(state: SimulationState, config: DecayConfig = DecayConfig(),
                 nutrients: NutrientsConfig = NutrientsConfig()) -> List[Effect]:
    """
    Uneaten food rots.

    A fixed fraction becomes solid waste. The rest oxidizes aerobically,
    consuming O2 and releasing CO2 in mg per gram, diluted into the current
    water volume. Decay also frees a trace of phosphate.
    """
    food = state.resources['food']
    amount = calculate_decay(food, state.resources['temperature'], config)
    if amount <= 0:
        return []

    effects = [
        Effect(Tier.PASSIVE, 'food', -amount, 'decay'),
        Effect(Tier.PASSIVE, 'waste', amount * config.waste_conversion_ratio, 'decay'),
    ]

    if nutrients.phosphate_per_decay > 0:
        effects.append(Effect(Tier.PASSIVE, 'phosphate', amount * nutrients.phosphate_per_decay,
                              'decay'))

    water_volume = state.tank.water_level
    if water_volume > 0:
        oxidized = amount * (1 - config.waste_conversion_ratio)
        gas_mg_per_l = oxidized * config.gas_exchange_per_gram_decay / water_volume
        effects.append(Effect(Tier.PASSIVE, 'co2', gas_mg_per_l, 'decay'))
        effects.append(Effect(Tier.PASSIVE, 'oxygen', -gas_mg_per_l, 'decay'))

    return effects


# ============================================================================
# Evaporation
# ============================================================================

def get_lid_multiplier(lid_type: str, config: EvaporationConfig = EvaporationConfig()) -> float:
    return config.lid_multipliers[lid_type]


def calculate_evaporation(water_level: float, water_temp: float, room_temp: float,
                          lid_type: str = 'none', config: EvaporationConfig = EvaporationConfig()) -> float:
    """
    Liters lost this hour.

    dailyRate = base * 2^(|Twater - Troom| / doublingInterval), scaled by lid,
    applied hourly to the current water level.
    """
    if water_level <= 0:
        return 0.0
    lid_multiplier = get_lid_multiplier(lid_type, config)
    if lid_multiplier == 0:
        return 0.0

    temp_multiplier = 2.0 ** (abs(water_temp - room_temp) / config.temp_doubling_interval)
    daily_rate = config.base_rate_per_day * temp_multiplier
    return water_level * (daily_rate / HOURS_PER_DAY) * lid_multiplier


def evaporation_update(state: SimulationState, config: EvaporationConfig = EvaporationConfig()) -> List[Effect]:
    amount = calculate_evaporation(
        state.tank.water_level,
        state.resources['temperature'],
        state.environment.room_temperature,
        state.equipment.lid.type,
        config,
    )
    if amount == 0:
        return []
    return [Effect(Tier.PASSIVE, 'water', -amount, 'evaporation')]


# ============================================================================
# Temperature Drift
# ============================================================================

def calculate_temperature_drift(water_temp: float, room_temp: float, capacity: float,
                                config: TemperatureConfig = TemperatureConfig()) -> float:
    """
    Newtonian cooling toward room temperature.

    Larger tanks drift slower via (referenceVolume / capacity)^exponent.
    The step never overshoots room temperature.
    """
    delta_t = water_temp - room_temp
    if delta_t == 0 or capacity <= 0:
        return 0.0

    volume_scale = (config.reference_volume / capacity) ** config.volume_exponent
    cooling = config.cooling_coefficient * abs(delta_t) * volume_scale
    magnitude = min(abs(delta_t), cooling)
    return -magnitude if delta_t > 0 else magnitude


def temperature_drift_update(state: SimulationState,
                             config: TemperatureConfig = TemperatureConfig()) -> List[Effect]:
    drift = calculate_temperature_drift(
        state.resources['temperature'],
        state.environment.room_temperature,
        state.tank.capacity,
        config,
    )
    if drift == 0:
        return []
    return [Effect(Tier.PASSIVE, 'temperature', drift, 'temperature-drift')]
