"""
End-to-end scenarios through the public entry points.

Each scenario drives create_simulation / apply_action / tick the way an
embedding application would and checks the observable outcome.
"""

import sys
from dataclasses import replace
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from aquasim import SimulationConfig, apply_action, create_simulation, tick
from aquasim.actions import AddFish, Dose, Feed, ScrubAlgae, TopOff, WaterChange
from aquasim.data_types import Equipment, Filter, Heater, Substrate
from aquasim.resources import format_resource, get_ppm
from aquasim.rng import constant_source, seeded_source


def with_resources(state, **resources):
    updated = dict(state.resources)
    updated.update(resources)
    return replace(state, resources=updated)


def test_dose_adds_formula_mass():
    state = create_simulation(SimulationConfig(tank_capacity=100.0))
    result = apply_action(state, Dose(1.0))

    resources = result.state.resources
    assert resources['nitrate'] == pytest.approx(50.0)
    assert resources['phosphate'] == pytest.approx(5.0)
    assert resources['potassium'] == pytest.approx(40.0)
    assert resources['iron'] == pytest.approx(1.0)
    assert get_ppm(resources['nitrate'], result.state.tank.water_level) == pytest.approx(0.5)


def test_unheated_tank_cools_to_room():
    state = create_simulation(SimulationConfig(
        tank_capacity=100.0,
        initial_temperature=28.0,
        room_temperature=22.0,
        heater=Heater(enabled=False),
    ))
    random = constant_source(0.5)
    temperatures = []
    for _ in range(200):
        state = tick(state, random=random)
        temperatures.append(state.resources['temperature'])

    assert 22.0 <= state.resources['temperature'] <= 23.0
    assert min(temperatures) >= 22.0, "Drift must never overshoot room temperature"
    assert temperatures == sorted(temperatures, reverse=True)
    print(f"[OK] Cooled from 28.0 to {state.resources['temperature']:.2f} C")


def test_scrub_removes_exact_fraction():
    state = with_resources(create_simulation(SimulationConfig(tank_capacity=100.0)), algae=100.0)
    result = apply_action(state, ScrubAlgae(0.2))
    assert result.state.resources['algae'] == pytest.approx(80.0)


def test_top_off_dilutes_without_removing_mass():
    state = create_simulation(SimulationConfig(tank_capacity=100.0))
    state = with_resources(state, ammonia=100.0)
    state = replace(state, tank=replace(state.tank, water_level=80.0))
    assert format_resource('ammonia', state.resources['ammonia'], 80.0) == "1.250 ppm"

    result = apply_action(state, TopOff())
    assert result.state.tank.water_level == 100.0
    assert result.state.resources['ammonia'] == 100.0
    assert format_resource('ammonia', 100.0, 100.0) == "1.000 ppm"


def test_poisoned_fish_dies_and_decays():
    state = create_simulation(SimulationConfig(tank_capacity=100.0))
    state = apply_action(state, AddFish('neon_tetra'), random=constant_source(0.2)).state
    fish = state.fish[0]
    state = replace(state, fish=(replace(fish, health=1.0),))
    state = with_resources(state, ammonia=5000.0)

    new_state = tick(state, random=constant_source(0.5))

    assert new_state.fish == ()
    deaths = [log for log in new_state.logs if "died" in log.message]
    assert len(deaths) == 1
    assert deaths[0].message == "Neon Tetra died"
    assert new_state.resources['waste'] == pytest.approx(fish.mass * 0.5)


def test_water_change_conserves_mass_ratio():
    state = create_simulation(SimulationConfig(tank_capacity=100.0))
    state = with_resources(state, ammonia=40.0, nitrite=20.0, nitrate=300.0)
    result = apply_action(state, WaterChange(0.25))
    for key, before in (('ammonia', 40.0), ('nitrite', 20.0), ('nitrate', 300.0)):
        assert result.state.resources[key] == pytest.approx(before * 0.75)


def test_month_long_community_tank():
    """Fed and dosed daily, weekly water changes: both bacteria colonies establish"""
    equipment = Equipment(filter=Filter(type='canister'), substrate=Substrate(type='aqua_soil'))
    state = create_simulation(SimulationConfig(tank_capacity=100.0, equipment=equipment))
    random = seeded_source("integration", "month")

    for species in ('neon_tetra', 'neon_tetra', 'corydoras'):
        state = apply_action(state, AddFish(species), random=random).state

    for hour in range(24 * 30):
        if hour % 24 == 9:
            state = apply_action(state, Feed(0.1), random=random).state
            state = apply_action(state, Dose(1.0), random=random).state
        if hour % (24 * 7) == 12:
            state = apply_action(state, WaterChange(0.25), random=random).state
        state = tick(state, random=random)

    assert state.tick == 24 * 30
    assert state.resources['aob'] > 0, "Ammonia-oxidizing bacteria should have colonized"
    assert state.resources['nob'] > 0, "Nitrite-oxidizing bacteria should have colonized"
    assert 0.0 <= state.tank.water_level <= state.tank.capacity
    print(f"[OK] Day 30: {len(state.fish)} fish, "
          f"ammonia {get_ppm(state.resources['ammonia'], state.tank.water_level):.3f} ppm")
