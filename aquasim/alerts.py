"""
Edge-triggered threshold alerts.

Each alert latches a flag in state.alert_state. Crossing into the alarm
condition fires one warning log and sets the flag; staying there fires
nothing; leaving it clears the flag so the next crossing fires again.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Tuple

from .constants import (
    HIGH_ALGAE_THRESHOLD,
    HIGH_AMMONIA_THRESHOLD,
    HIGH_CO2_THRESHOLD,
    HIGH_NITRATE_THRESHOLD,
    HIGH_NITRITE_THRESHOLD,
    LOW_OXYGEN_THRESHOLD,
    WATER_LEVEL_CRITICAL_THRESHOLD,
)
from .data_types import LogEntry, SimulationState
from .event_log import create_log
from .resources import get_ppm

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlertResult:
    log: Optional[LogEntry]
    alert_state: Dict[str, bool]


@dataclass(frozen=True)
class Alert:
    """
    One hysteresis detector.

    Attributes:
        id: Key in state.alert_state
        source: Log source used when the alert fires
        triggered: Predicate for the alarm condition
        describe: Message for the fired log
    """
    id: str
    source: str
    triggered: Callable[[SimulationState], bool]
    describe: Callable[[SimulationState], str]

    def check(self, state: SimulationState) -> AlertResult:
        was_active = state.alert_state.get(self.id, False)
        if not self.triggered(state):
            return AlertResult(None, {self.id: False})
        if was_active:
            return AlertResult(None, {self.id: True})
        log = create_log(state.tick, self.source, 'warning', self.describe(state))
        return AlertResult(log, {self.id: True})


# ============================================================================
# Conditions
# ============================================================================

def _water_level_fraction(state: SimulationState) -> float:
    if state.tank.capacity <= 0:
        return 0.0
    return state.tank.water_level / state.tank.capacity


def _ppm(state: SimulationState, key: str) -> float:
    return get_ppm(state.resources[key], state.tank.water_level)


def _water_level_low(state: SimulationState) -> bool:
    # An empty tank is a different condition and does not alert
    return state.tank.water_level > 0 and _water_level_fraction(state) < WATER_LEVEL_CRITICAL_THRESHOLD


def _water_level_message(state: SimulationState) -> str:
    percent = _water_level_fraction(state) * 100
    return f"Water level critical: {state.tank.water_level:.1f}L ({percent:.1f}% of capacity)"


WATER_LEVEL_ALERT = Alert(
    id='water_level_critical',
    source='evaporation',
    triggered=_water_level_low,
    describe=_water_level_message,
)

HIGH_ALGAE_ALERT = Alert(
    id='high_algae',
    source='algae',
    triggered=lambda state: state.resources['algae'] >= HIGH_ALGAE_THRESHOLD,
    describe=lambda state: (f"High algae level: {state.resources['algae']:.1f}"
                            " - consider reducing light or scrubbing"),
)

HIGH_AMMONIA_ALERT = Alert(
    id='high_ammonia',
    source='nitrogen-cycle',
    triggered=lambda state: _ppm(state, 'ammonia') > HIGH_AMMONIA_THRESHOLD,
    describe=lambda state: (f"High ammonia level: {_ppm(state, 'ammonia'):.3f} ppm"
                            " - toxic to fish, check filter and reduce feeding"),
)

HIGH_NITRITE_ALERT = Alert(
    id='high_nitrite',
    source='nitrogen-cycle',
    triggered=lambda state: _ppm(state, 'nitrite') > HIGH_NITRITE_THRESHOLD,
    describe=lambda state: (f"High nitrite level: {_ppm(state, 'nitrite'):.2f} ppm"
                            " - tank still cycling, consider a water change"),
)

HIGH_NITRATE_ALERT = Alert(
    id='high_nitrate',
    source='nitrogen-cycle',
    triggered=lambda state: _ppm(state, 'nitrate') > HIGH_NITRATE_THRESHOLD,
    describe=lambda state: (f"High nitrate level: {_ppm(state, 'nitrate'):.1f} ppm"
                            " - consider water change"),
)

LOW_OXYGEN_ALERT = Alert(
    id='low_oxygen',
    source='gas-exchange',
    triggered=lambda state: state.resources['oxygen'] < LOW_OXYGEN_THRESHOLD,
    describe=lambda state: f"Low oxygen level: {state.resources['oxygen']:.1f} mg/L - critical for fish",
)

HIGH_CO2_ALERT = Alert(
    id='high_co2',
    source='gas-exchange',
    triggered=lambda state: state.resources['co2'] > HIGH_CO2_THRESHOLD,
    describe=lambda state: f"High CO2 level: {state.resources['co2']:.1f} mg/L - harmful to fish",
)

ALERTS: Tuple[Alert, ...] = (
    WATER_LEVEL_ALERT,
    HIGH_ALGAE_ALERT,
    HIGH_AMMONIA_ALERT,
    HIGH_NITRITE_ALERT,
    HIGH_NITRATE_ALERT,
    LOW_OXYGEN_ALERT,
    HIGH_CO2_ALERT,
)


def check_alerts(state: SimulationState, alerts: Tuple[Alert, ...] = ALERTS) -> SimulationState:
    """
    Run every alert against the updated state.

    Returns:
        New state with merged alert flags and fired logs appended
    """
    alert_state = dict(state.alert_state)
    logs = []
    for alert in alerts:
        result = alert.check(state)
        alert_state.update(result.alert_state)
        if result.log is not None:
            logger.warning("tick %d: %s", state.tick, result.log.message)
            logs.append(result.log)
    return replace(state, alert_state=alert_state, logs=state.logs + tuple(logs))
