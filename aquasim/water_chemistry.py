"""
Dissolved gas exchange and pH drift.

Gas exchange pulls O2 toward a temperature-dependent saturation level and
CO2 toward the atmospheric equilibrium, at a rate proportional to surface
agitation (flow turnover, boosted by an air pump). pH drifts toward a target
set by hardscape minerals and dissolved CO2.
"""

from typing import List, Tuple

from .config import GasExchangeConfig, PhConfig
from .data_types import HardscapeItem, SimulationState
from .effects import Effect, Tier

NEGLIGIBLE_DELTA = 0.001


# ============================================================================
# Gas Exchange
# ============================================================================

def calculate_o2_saturation(temperature: float, config: GasExchangeConfig = GasExchangeConfig()) -> float:
    """Saturated O2 (mg/L), linear in temperature, floored"""
    saturation = config.o2_saturation_base + config.o2_saturation_slope * (temperature - config.o2_reference_temp)
    return max(saturation, config.o2_saturation_floor)


def calculate_flow_factor(flow: float, capacity: float, config: GasExchangeConfig = GasExchangeConfig()) -> float:
    """min(1, turnovers per hour / optimal turnover); 0 without a tank"""
    if capacity <= 0:
        return 0.0
    return min(1.0, (flow / capacity) / config.optimal_flow_turnover)


def calculate_gas_exchange(current: float, target: float, base_rate: float, flow_factor: float) -> float:
    """Exponential approach: rate * flowFactor * (target - current)"""
    return base_rate * flow_factor * (target - current)


def gas_exchange_update(state: SimulationState, config: GasExchangeConfig = GasExchangeConfig()) -> List[Effect]:
    """
    O2 and CO2 equilibration with the air.

    Zero flow without aeration exchanges nothing. An air pump multiplies
    the exchange rate, off-gasses CO2 harder, and injects O2 directly while
    the water is below saturation.
    """
    effects: List[Effect] = []
    resources = state.resources
    aerated = state.equipment.air_pump.enabled

    saturation = calculate_o2_saturation(resources['temperature'], config)
    flow_factor = calculate_flow_factor(resources['flow'], state.tank.capacity, config)

    rate = config.base_exchange_rate
    if aerated:
        rate *= config.aeration_exchange_multiplier
    co2_rate = rate * config.aeration_co2_offgas_multiplier if aerated else rate

    o2_delta = calculate_gas_exchange(resources['oxygen'], saturation, rate, flow_factor)
    if aerated and resources['oxygen'] < saturation:
        gap_after_exchange = saturation - (resources['oxygen'] + o2_delta)
        o2_delta += max(0.0, min(config.aeration_direct_o2, gap_after_exchange))

    if abs(o2_delta) > NEGLIGIBLE_DELTA:
        effects.append(Effect(Tier.PASSIVE, 'oxygen', o2_delta, 'gas-exchange-o2'))

    co2_delta = calculate_gas_exchange(resources['co2'], config.atmospheric_co2, co2_rate, flow_factor)
    if abs(co2_delta) > NEGLIGIBLE_DELTA:
        effects.append(Effect(Tier.PASSIVE, 'co2', co2_delta, 'gas-exchange-co2'))

    return effects


# ============================================================================
# pH Drift
# ============================================================================

def calculate_hardscape_target_ph(items: Tuple[HardscapeItem, ...], config: PhConfig = PhConfig()) -> float:
    """
    Target pH from hardscape alone.

    Each mineral type pulls by 1 - factor^count, so a second calcite rock
    adds less than the first.
    """
    calcite = sum(1 for item in items if item.type == 'calcite_rock')
    driftwood = sum(1 for item in items if item.type == 'driftwood')

    target = config.neutral_ph
    if calcite:
        target += (config.calcite_target_ph - config.neutral_ph) * (1 - config.hardscape_diminishing_factor ** calcite)
    if driftwood:
        target += (config.driftwood_target_ph - config.neutral_ph) * (1 - config.hardscape_diminishing_factor ** driftwood)
    return target


def calculate_co2_ph_effect(co2: float, config: PhConfig = PhConfig()) -> float:
    """Carbonic acid offset: linear in CO2 above the neutral level"""
    return (co2 - config.co2_neutral_level) * config.co2_ph_coefficient


def calculate_target_ph(items: Tuple[HardscapeItem, ...], co2: float, config: PhConfig = PhConfig()) -> float:
    return calculate_hardscape_target_ph(items, config) + calculate_co2_ph_effect(co2, config)


def ph_drift_update(state: SimulationState, config: PhConfig = PhConfig()) -> List[Effect]:
    target = calculate_target_ph(state.equipment.hardscape.items, state.resources['co2'], config)
    delta = config.base_drift_rate * (target - state.resources['ph'])
    if abs(delta) < NEGLIGIBLE_DELTA:
        return []
    return [Effect(Tier.PASSIVE, 'ph', delta, 'ph-drift')]
