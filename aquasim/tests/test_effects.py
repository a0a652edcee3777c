"""
Effect fold: ordering, clamping, water level, failure modes.
"""

import math
import sys
from dataclasses import replace
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from aquasim.effects import Effect, InvariantViolation, Tier, apply_effects, effects_for_tier
from aquasim.state import SimulationConfig, create_simulation


def make_state(capacity: float = 100.0, water: float = None, **resources):
    """Fresh tank with selected resources overridden"""
    state = create_simulation(SimulationConfig(tank_capacity=capacity))
    updated = dict(state.resources)
    updated.update(resources)
    water_level = capacity if water is None else water
    return replace(state, resources=updated, tank=replace(state.tank, water_level=water_level))


def test_empty_list_returns_same_state():
    state = make_state()
    assert apply_effects(state, []) is state


def test_deltas_accumulate():
    state = make_state(food=1.0)
    result = apply_effects(state, [
        Effect(Tier.PASSIVE, 'food', 0.5, 'test'),
        Effect(Tier.PASSIVE, 'food', 0.25, 'test'),
    ])
    assert result.resources['food'] == pytest.approx(1.75)
    assert state.resources['food'] == 1.0, "Input snapshot was modified"


def test_clamp_after_every_delta():
    """Overshoot saturates, then the next delta starts from the bound"""
    state = make_state(algae=90.0)
    result = apply_effects(state, [
        Effect(Tier.PASSIVE, 'algae', 50.0, 'test'),
        Effect(Tier.PASSIVE, 'algae', -10.0, 'test'),
    ])
    assert result.resources['algae'] == pytest.approx(90.0), \
        f"Expected 100 then 90, got {result.resources['algae']}"

    result = apply_effects(state, [Effect(Tier.PASSIVE, 'oxygen', -100.0, 'test')])
    assert result.resources['oxygen'] == 0.0


def test_results_within_bounds_for_any_delta():
    state = make_state()
    for delta in (-1e9, -1.0, 0.0, 1.0, 1e9):
        result = apply_effects(state, [Effect(Tier.ACTIVE, 'ph', delta, 'test')])
        assert 0.0 <= result.resources['ph'] <= 14.0


def test_water_effect_moves_tank_level():
    state = make_state(capacity=100.0, water=80.0)
    result = apply_effects(state, [Effect(Tier.IMMEDIATE, 'water', 50.0, 'test')])
    assert result.tank.water_level == 100.0, "Water must clamp to capacity"
    assert 'water' not in result.resources

    result = apply_effects(state, [Effect(Tier.PASSIVE, 'water', -200.0, 'test')])
    assert result.tank.water_level == 0.0


def test_unknown_resource_raises():
    state = make_state()
    with pytest.raises(InvariantViolation):
        apply_effects(state, [Effect(Tier.PASSIVE, 'mana', 1.0, 'test')])


def test_non_finite_delta_raises():
    state = make_state()
    for bad in (math.nan, math.inf, -math.inf):
        with pytest.raises(InvariantViolation):
            apply_effects(state, [Effect(Tier.PASSIVE, 'food', bad, 'test')])


def test_effects_for_tier_preserves_order():
    effects = [
        Effect(Tier.PASSIVE, 'food', 1.0, 'a'),
        Effect(Tier.IMMEDIATE, 'food', 2.0, 'b'),
        Effect(Tier.PASSIVE, 'food', 3.0, 'c'),
    ]
    passive = effects_for_tier(effects, Tier.PASSIVE)
    assert [e.source for e in passive] == ['a', 'c']
    assert effects_for_tier(effects, Tier.ACTIVE) == []
