"""
Fish metabolism, stress, health and death.
"""

import sys
from dataclasses import replace
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from aquasim.data_types import Fish
from aquasim.effects import Tier
from aquasim.livestock import calculate_stress, process_health, process_livestock, process_metabolism
from aquasim.resources import default_resources
from aquasim.rng import constant_source
from aquasim.state import SimulationConfig, create_simulation


def make_fish(fish_id: str = 'f1', species: str = 'neon_tetra', mass: float = 10.0,
              health: float = 100.0, age: int = 0, hunger: float = 30.0) -> Fish:
    return Fish(id=fish_id, species=species, mass=mass, health=health, age=age, hunger=hunger, sex='female')


def ideal_resources(**overrides):
    """Comfortable water for a neon tetra in 100L"""
    resources = default_resources()
    resources.update(temperature=25.0, ph=7.0, oxygen=8.0, flow=100.0)
    resources.update(overrides)
    return resources


def make_state(fish=(), **resources):
    state = create_simulation(SimulationConfig(tank_capacity=100.0))
    return replace(state, resources=ideal_resources(**resources), fish=tuple(fish))


# ============================================================================
# Metabolism
# ============================================================================

class TestMetabolism:

    def test_hungriest_fed_first(self):
        fish = [make_fish('calm', hunger=50.0), make_fish('starving', hunger=100.0)]
        result = process_metabolism(fish, 0.12)

        calm, starving = result.fish
        assert (calm.id, starving.id) == ('calm', 'starving'), "Output keeps input order"
        assert starving.hunger == pytest.approx(0.6)
        assert calm.hunger == pytest.approx(30.6)
        assert result.food_consumed == pytest.approx(0.12)
        assert result.waste_produced == pytest.approx(0.036)

    def test_respiration_scales_with_mass(self):
        result = process_metabolism([make_fish(mass=10.0), make_fish('f2', mass=10.0)], 0.0)
        assert result.oxygen_delta == pytest.approx(-0.4)
        assert result.co2_delta == pytest.approx(0.32)

    def test_no_food_hunger_rises_and_fish_age(self):
        result = process_metabolism([make_fish(hunger=99.8, age=5)], 0.0)
        assert result.fish[0].hunger == 100.0
        assert result.fish[0].age == 6
        assert result.food_consumed == 0.0


# ============================================================================
# Stress and Health
# ============================================================================

class TestStress:

    def test_comfortable_fish_has_no_stress(self):
        assert calculate_stress(make_fish(), ideal_resources(), 100.0, 100.0) == 0.0

    @pytest.mark.parametrize(
        "overrides, expected",
        [
            pytest.param({'ammonia': 10.0}, 2.5, id="ammonia-0.1ppm"),
            pytest.param({'nitrite': 10.0}, 1.0, id="nitrite-0.1ppm"),
            pytest.param({'nitrate': 5000.0}, 2.5, id="nitrate-50ppm"),
            pytest.param({'temperature': 30.0}, 2.0, id="too-warm"),
            pytest.param({'ph': 5.0}, 1.5, id="too-acidic"),
            pytest.param({'oxygen': 3.0}, 3.0, id="low-oxygen"),
            pytest.param({'flow': 400.0}, 0.5, id="strong-current"),
        ]
    )
    def test_single_stressor(self, overrides, expected):
        stress = calculate_stress(make_fish(), ideal_resources(**overrides), 100.0, 100.0)
        assert stress == pytest.approx(expected)

    def test_hunger_and_low_water(self):
        assert calculate_stress(make_fish(hunger=70.0), ideal_resources(), 100.0, 100.0) == pytest.approx(1.0)
        assert calculate_stress(make_fish(), ideal_resources(), 40.0, 100.0) == pytest.approx(1.0)

    def test_hardier_fish_feel_less(self):
        resources = ideal_resources(ammonia=10.0)
        tetra = calculate_stress(make_fish(species='neon_tetra'), resources, 100.0, 100.0)
        guppy = calculate_stress(make_fish(species='guppy'), dict(resources, ph=7.0), 100.0, 100.0)
        assert guppy < tetra


class TestHealth:

    def test_recovers_in_good_water(self):
        result = process_health([make_fish(health=50.0)], ideal_resources(), 100.0, 100.0, constant_source(0.5))
        assert result.surviving[0].health == pytest.approx(51.0)
        assert result.dead_names == ()

    def test_toxic_water_kills(self):
        fish = make_fish(health=1.0, mass=2.0)
        result = process_health([fish], ideal_resources(ammonia=5000.0), 100.0, 100.0, constant_source(0.5))
        assert result.surviving == ()
        assert result.dead_names == ('Neon Tetra',)
        assert result.death_waste == pytest.approx(1.0)

    def test_old_age_roll(self):
        old = make_fish(age=43800)
        unlucky = process_health([old], ideal_resources(), 100.0, 100.0, constant_source(0.0))
        assert unlucky.dead_names == ('Neon Tetra (old age)',)

        lucky = process_health([old], ideal_resources(), 100.0, 100.0, constant_source(0.5))
        assert len(lucky.surviving) == 1


# ============================================================================
# Entry Point
# ============================================================================

class TestProcessLivestock:

    def test_no_fish(self):
        assert process_livestock(make_state(), constant_source(0.5)) == ((), [], [])

    def test_effects_are_active_tier(self):
        state = make_state([make_fish(hunger=100.0)], food=1.0)
        fish, effects, logs = process_livestock(state, constant_source(0.5))

        assert len(fish) == 1 and logs == []
        sources = {(effect.resource, effect.source) for effect in effects}
        assert ('food', 'fish-metabolism') in sources
        assert ('oxygen', 'fish-respiration') in sources
        assert all(effect.tier is Tier.ACTIVE for effect in effects)

    def test_death_logs_and_waste(self):
        state = make_state([make_fish(health=1.0, mass=2.0)], ammonia=5000.0)
        fish, effects, logs = process_livestock(state, constant_source(0.5))

        assert fish == ()
        assert [log.message for log in logs] == ["Neon Tetra died"]
        assert logs[0].source == 'simulation' and logs[0].severity == 'warning'
        death = [effect for effect in effects if effect.source == 'fish-death']
        assert death[0].delta == pytest.approx(1.0)
        print("[OK] Fish death logged and decayed into waste")
