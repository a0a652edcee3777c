"""
Long-run stability check for the tank engine.

Runs a few representative tank setups for 60 simulated days each and reports
per-tick timing (median/p90) plus end-of-run chemistry. Flags any snapshot
that leaves registered resource bounds.
"""

import logging
import time
from typing import List

import numpy as np

from aquasim.actions import AddFish, AddPlant, Dose, Feed, WaterChange, apply_action
from aquasim.data_types import Equipment, Filter, Substrate
from aquasim.resources import RESOURCES, get_ppm
from aquasim.rng import seeded_source
from aquasim.simulation import tick
from aquasim.state import SimulationConfig, create_simulation

logger = logging.getLogger("soak_run")

DAYS = 60
SEED = 42


def planted_community(capacity: float):
    """Planted tank with a small community, fed and dosed daily"""
    equipment = Equipment(filter=Filter(type='canister'), substrate=Substrate(type='aqua_soil'))
    return create_simulation(SimulationConfig(tank_capacity=capacity, equipment=equipment))


def check_bounds(state) -> List[str]:
    problems = []
    for key, value in state.resources.items():
        low, high = RESOURCES[key].bounds
        if not low <= value <= high:
            problems.append(f"{key}={value} outside [{low}, {high}]")
    if not 0 <= state.tank.water_level <= state.tank.capacity:
        problems.append(f"water_level={state.tank.water_level}")
    return problems


def run_setup(name: str, capacity: float) -> dict:
    random = seeded_source(SEED, name)
    state = planted_community(capacity)

    for species in ('java_fern', 'amazon_sword', 'dwarf_hairgrass'):
        state = apply_action(state, AddPlant(species), random).state
    for species in ('neon_tetra', 'neon_tetra', 'corydoras'):
        state = apply_action(state, AddFish(species), random).state

    tick_times = []
    problems = []
    for hour in range(DAYS * 24):
        if hour % 24 == 9:
            state = apply_action(state, Feed(0.1), random).state
        if hour % 24 == 10:
            state = apply_action(state, Dose(1.0), random).state
        if hour % (24 * 7) == 12:
            state = apply_action(state, WaterChange(0.25), random).state

        start = time.perf_counter()
        state = tick(state, random=random)
        tick_times.append(time.perf_counter() - start)

        problems.extend(check_bounds(state))

    tick_ms = np.array(tick_times) * 1000.0
    volume = state.tank.water_level
    return {
        'name': name,
        'p50_ms': float(np.percentile(tick_ms, 50)),
        'p90_ms': float(np.percentile(tick_ms, 90)),
        'temperature': state.resources['temperature'],
        'nitrate_ppm': get_ppm(state.resources['nitrate'], volume),
        'plants': len(state.plants),
        'fish': len(state.fish),
        'problems': problems,
    }


def main():
    """Run every setup and print a summary table."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("aquasim").setLevel(logging.WARNING)

    results = [run_setup(name, capacity) for name, capacity in (
        ('nano', 20.0), ('community', 100.0), ('display', 400.0))]

    print("=" * 80)
    print(f"Soak run: {DAYS} days per setup")
    print("=" * 80)
    print()
    print("| Setup     | p50 (ms) | p90 (ms) | Temp (C) | NO3 (ppm) | Plants | Fish |")
    print("|-----------|----------|----------|----------|-----------|--------|------|")
    for r in results:
        print(f"| {r['name']:9s} | {r['p50_ms']:8.3f} | {r['p90_ms']:8.3f} | {r['temperature']:8.2f} "
              f"| {r['nitrate_ppm']:9.2f} | {r['plants']:6d} | {r['fish']:4d} |")
    print()

    for r in results:
        if r['problems']:
            logger.warning("%s: %d bound violations, first: %s", r['name'], len(r['problems']), r['problems'][0])
        else:
            logger.info("%s: all snapshots within bounds", r['name'])


if __name__ == '__main__':
    main()
