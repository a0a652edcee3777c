"""
Nitrogen cycle: mineralization, bacterial conversion, spawn, growth, die-back.

No fixtures - inline helpers build 100L tanks with explicit resources.
"""

import sys
from dataclasses import replace
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from aquasim.config import NitrogenCycleConfig
from aquasim.effects import apply_effects
from aquasim.nitrogen_cycle import (
    calculate_bacterial_growth,
    calculate_bacterial_processing,
    calculate_max_bacteria,
    calculate_waste_to_ammonia,
    nitrogen_cycle_update,
)
from aquasim.state import SimulationConfig, create_simulation


def make_state(water: float = 100.0, **resources):
    state = create_simulation(SimulationConfig(tank_capacity=100.0))
    updated = dict(state.resources)
    updated.update(resources)
    return replace(state, resources=updated, tank=replace(state.tank, water_level=water))


def sources_for(effects, resource):
    return {effect.source: effect.delta for effect in effects if effect.resource == resource}


class TestFormulas:

    def test_mineralization(self):
        consumed, ammonia = calculate_waste_to_ammonia(1.0)
        assert consumed == pytest.approx(0.3)
        assert ammonia == pytest.approx(15.0)
        assert calculate_waste_to_ammonia(0.0) == (0.0, 0.0)

    def test_carrying_capacity(self):
        assert calculate_max_bacteria(10000.0) == pytest.approx(100.0)

    def test_logistic_growth(self):
        assert calculate_bacterial_growth(10.0, 0.04, 100.0) == pytest.approx(0.36)
        assert calculate_bacterial_growth(100.0, 0.04, 100.0) == 0.0
        assert calculate_bacterial_growth(0.0, 0.04, 100.0) == 0.0

    def test_processing_limited_by_population_and_substrate(self):
        # 50 units * 0.0002 ppm = 0.01 ppm = 1 mg in 100L
        assert calculate_bacterial_processing(100.0, 50.0, 100.0) == pytest.approx(1.0)
        assert calculate_bacterial_processing(0.5, 50.0, 100.0) == pytest.approx(0.5)
        assert calculate_bacterial_processing(100.0, 50.0, 0.0) == 0.0


class TestCycleUpdate:

    def test_new_tank_spawns_aob_from_waste(self):
        state = make_state(waste=1.0)
        effects = nitrogen_cycle_update(state)

        assert sources_for(effects, 'waste') == {'nitrogen-cycle-mineralization': pytest.approx(-0.3)}
        assert sources_for(effects, 'ammonia')['nitrogen-cycle-mineralization'] == pytest.approx(15.0)
        aob = sources_for(effects, 'aob')
        assert aob['nitrogen-cycle-spawn'] == pytest.approx(10.0)
        assert aob['nitrogen-cycle-growth'] > 0
        assert not sources_for(effects, 'nob'), "No nitrite yet, NOB must not spawn"
        print("[OK] Waste mineralized and AOB colony founded")

    def test_conversion_conserves_mass(self):
        state = make_state(ammonia=50.0, nitrite=50.0, aob=100.0, nob=100.0)
        before = sum(state.resources[k] for k in ('ammonia', 'nitrite', 'nitrate'))
        after_state = apply_effects(state, nitrogen_cycle_update(state))
        after = sum(after_state.resources[k] for k in ('ammonia', 'nitrite', 'nitrate'))
        assert after == pytest.approx(before)
        assert after_state.resources['nitrate'] > 0

    def test_population_capped_to_surface(self):
        state = make_state(aob=1e6, ammonia=100.0)
        max_bacteria = calculate_max_bacteria(state.resources['surface'])
        new_state = apply_effects(state, nitrogen_cycle_update(state))
        assert new_state.resources['aob'] == pytest.approx(max_bacteria)

    def test_starved_population_dies_back(self):
        state = make_state(aob=50.0, ammonia=0.0)
        aob = sources_for(nitrogen_cycle_update(state), 'aob')
        assert aob == {'nitrogen-cycle-death': pytest.approx(-50.0 * NitrogenCycleConfig().bacteria_death_rate)}

    def test_no_spawn_without_water(self):
        state = make_state(water=0.0, ammonia=500.0, nitrite=500.0)
        effects = nitrogen_cycle_update(state)
        assert not sources_for(effects, 'aob')
        assert not sources_for(effects, 'nob')

    def test_empty_tank_is_quiet(self):
        assert nitrogen_cycle_update(make_state()) == []
