"""
Tick orchestration.

tick() advances a snapshot by one simulated hour:

    0. Recompute passive equipment resources (surface, flow, light)
    1. Immediate tier: equipment control loops (heater, ATO, CO2, doser, feeder)
    2. Active tier: plants, then livestock
    3. Passive tier: decay, evaporation, temperature drift, nitrogen cycle,
       gas exchange, pH drift, algae
    4. Fold all effects, in tier order, into one new snapshot
    5. Edge-triggered alerts against the folded snapshot
    6. tick += 1

Stages 1-3 all read the same pre-fold snapshot, so no system sees another
system's deltas from the same hour. If any stage raises, the caller keeps
its previous snapshot; nothing partial escapes.

TankSimulation wraps the pure functions for scripts that want a mutable
handle with timing stats.
"""

import logging
import time
from dataclasses import replace
from typing import Callable, List, Optional, Tuple

from .actions import apply_action
from .alerts import check_alerts
from .algae import algae_update
from .config import DEFAULT_TUNABLES, TunableConfig
from .constants import HOURS_PER_DAY, TICK_SUMMARY_INTERVAL, TICK_TIME_WINDOW
from .data_types import SimulationState
from .effects import Effect, Tier, apply_effects, effects_for_tier
from .environment import decay_update, evaporation_update, temperature_drift_update
from .equipment import process_equipment, refresh_passive_resources
from .event_log import append_logs
from .livestock import process_livestock
from .nitrogen_cycle import nitrogen_cycle_update
from .plants import process_plants
from .rng import RandomSource, default_source, seeded_source
from .state import SimulationConfig, create_simulation, state_to_dict
from .water_chemistry import gas_exchange_update, ph_drift_update

logger = logging.getLogger(__name__)

PassiveSystem = Callable[[SimulationState, TunableConfig], List[Effect]]

# Fixed order; each reads the pre-fold snapshot
PASSIVE_SYSTEMS: Tuple[Tuple[str, PassiveSystem], ...] = (
    ('decay', lambda state, t: decay_update(state, t.decay, t.nutrients)),
    ('evaporation', lambda state, t: evaporation_update(state, t.evaporation)),
    ('temperature-drift', lambda state, t: temperature_drift_update(state, t.temperature)),
    ('nitrogen-cycle', lambda state, t: nitrogen_cycle_update(state, t.nitrogen_cycle)),
    ('gas-exchange', lambda state, t: gas_exchange_update(state, t.gas_exchange)),
    ('ph-drift', lambda state, t: ph_drift_update(state, t.ph)),
    ('algae', lambda state, t: algae_update(state, t.algae, t.plants)),
)


def get_hour_of_day(state: SimulationState) -> int:
    return state.tick % HOURS_PER_DAY


def get_day_number(state: SimulationState) -> int:
    return state.tick // HOURS_PER_DAY


def collect_passive_effects(state: SimulationState, tunables: TunableConfig = DEFAULT_TUNABLES) -> List[Effect]:
    effects: List[Effect] = []
    for _name, system in PASSIVE_SYSTEMS:
        effects.extend(system(state, tunables))
    return effects


def tick(state: SimulationState, tunables: Optional[TunableConfig] = None,
         random: Optional[RandomSource] = None) -> SimulationState:
    """
    Advance one simulated hour.

    Args:
        state: Current snapshot (not modified)
        tunables: Model parameters (defaults when None)
        random: Source for stochastic deaths (platform RNG when None)

    Returns:
        New snapshot with tick incremented

    Raises:
        InvariantViolation: A system produced an unknown resource or a
            non-finite delta
    """
    tunables = tunables or DEFAULT_TUNABLES
    random = random or default_source()

    state = refresh_passive_resources(state)

    # Stage 1: immediate (flags and ATO logs are written directly)
    state, immediate = process_equipment(state, tunables)

    # Stage 2: active, plants before livestock, same snapshot for both
    plants, plant_effects, plant_logs = process_plants(state, tunables)
    fish, fish_effects, fish_logs = process_livestock(state, random, tunables)

    # Stage 3: passive
    passive = collect_passive_effects(state, tunables)

    effects = immediate + plant_effects + fish_effects + passive
    ordered = [effect for tier in Tier for effect in effects_for_tier(effects, tier)]

    state = append_logs(replace(state, plants=plants, fish=fish), plant_logs + fish_logs)
    state = apply_effects(state, ordered)
    state = check_alerts(state)

    logger.debug("tick %d: %d effects folded (%d immediate, %d active, %d passive)",
                 state.tick, len(ordered), len(immediate),
                 len(plant_effects) + len(fish_effects), len(passive))

    return replace(state, tick=state.tick + 1)


# ============================================================================
# Runner
# ============================================================================

class TankSimulation:
    """
    Mutable handle around the pure engine.

    Holds the current snapshot, tunables and random source, and keeps a
    rolling window of tick wall-clock times.
    """

    def __init__(
        self,
        config: SimulationConfig,
        tunables: Optional[TunableConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Create a simulation from a tank setup.

        Args:
            config: Initial tank setup
            tunables: Model parameters (defaults when None)
            seed: Seed for a deterministic random source (OS entropy when None)
        """
        self.state: SimulationState = create_simulation(config)
        self.tunables: TunableConfig = tunables or DEFAULT_TUNABLES
        self.random: RandomSource = seeded_source(seed) if seed is not None else default_source()

        # Performance metrics
        self._tick_times: List[float] = []
        self._tick_time_sum: float = 0.0
        self._tick_time_window: int = TICK_TIME_WINDOW

    @property
    def tick_count(self) -> int:
        return self.state.tick

    def tick(self) -> SimulationState:
        """Advance one hour and record how long it took"""
        start = time.perf_counter()
        self.state = tick(self.state, self.tunables, self.random)
        self._record_tick_time(time.perf_counter() - start)
        return self.state

    def run(self, ticks: int, summary_every: int = TICK_SUMMARY_INTERVAL) -> SimulationState:
        """
        Advance several hours.

        Args:
            ticks: Number of hours to simulate
            summary_every: Log a summary every N ticks (0 disables)
        """
        for _ in range(ticks):
            self.tick()
            if summary_every and self.tick_count % summary_every == 0:
                self.print_tick_summary()
        return self.state

    def apply(self, action) -> str:
        """Apply a user action and return its message"""
        result = apply_action(self.state, action, self.random, self.tunables)
        self.state = result.state
        return result.message

    def get_tick_stats(self) -> dict:
        """
        Get current tick timing statistics.

        Returns:
            Dict with tick_count, avg_tick_time_ms, last_tick_time_ms
        """
        if not self._tick_times:
            return {
                'tick_count': self.tick_count,
                'avg_tick_time_ms': 0.0,
                'last_tick_time_ms': 0.0
            }

        return {
            'tick_count': self.tick_count,
            'avg_tick_time_ms': self._tick_time_sum / len(self._tick_times) * 1000.0,
            'last_tick_time_ms': self._tick_times[-1] * 1000.0
        }

    def _record_tick_time(self, elapsed: float):
        self._tick_times.append(elapsed)
        self._tick_time_sum += elapsed

        # Maintain rolling window
        if len(self._tick_times) > self._tick_time_window:
            removed = self._tick_times.pop(0)
            self._tick_time_sum -= removed

    def get_snapshot(self) -> dict:
        """Serialized state plus timing"""
        snapshot = state_to_dict(self.state)
        snapshot['timing'] = self.get_tick_stats()
        return snapshot

    def print_tick_summary(self):
        """Log a one-line summary (lightweight monitoring)"""
        stats = self.get_tick_stats()
        resources = self.state.resources
        logger.info("Day %3d | Tick %5d | Avg: %6.3f ms | Temp: %5.2f C | Water: %6.1f L | "
                    "Plants: %d | Fish: %d",
                    get_day_number(self.state), stats['tick_count'], stats['avg_tick_time_ms'],
                    resources['temperature'], self.state.tank.water_level,
                    len(self.state.plants), len(self.state.fish))
