"""
Gas exchange and pH drift.
"""

import sys
from dataclasses import replace
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from aquasim.data_types import AirPump, Equipment, Hardscape, HardscapeItem
from aquasim.state import SimulationConfig, create_simulation
from aquasim.water_chemistry import (
    calculate_co2_ph_effect,
    calculate_flow_factor,
    calculate_hardscape_target_ph,
    calculate_o2_saturation,
    gas_exchange_update,
    ph_drift_update,
)


def make_state(equipment: Equipment = None, **resources):
    state = create_simulation(SimulationConfig(tank_capacity=100.0, equipment=equipment))
    updated = dict(state.resources)
    updated.update(resources)
    return replace(state, resources=updated)


def by_resource(effects):
    return {effect.resource: effect.delta for effect in effects}


def rocks(*types):
    return tuple(HardscapeItem(f"h{i}", kind) for i, kind in enumerate(types))


# ============================================================================
# Gas Exchange
# ============================================================================

class TestGasExchange:

    @pytest.mark.parametrize(
        "temperature, expected",
        [
            pytest.param(15.0, 10.08, id="reference"),
            pytest.param(25.0, 8.38, id="warm"),
            pytest.param(100.0, 4.0, id="floor"),
        ]
    )
    def test_o2_saturation(self, temperature, expected):
        assert calculate_o2_saturation(temperature) == pytest.approx(expected)

    def test_flow_factor(self):
        assert calculate_flow_factor(1000.0, 100.0) == 1.0
        assert calculate_flow_factor(5000.0, 100.0) == 1.0
        assert calculate_flow_factor(300.0, 100.0) == pytest.approx(0.3)
        assert calculate_flow_factor(300.0, 0.0) == 0.0

    def test_equilibrates_toward_targets(self):
        state = make_state(flow=1000.0, temperature=25.0, oxygen=6.0, co2=10.0)
        effects = by_resource(gas_exchange_update(state))
        assert effects['oxygen'] == pytest.approx(0.25 * (8.38 - 6.0))
        assert effects['co2'] == pytest.approx(0.25 * (4.0 - 10.0))

    def test_aeration_boosts_exchange(self):
        state = make_state(Equipment(air_pump=AirPump(enabled=True)),
                           flow=1000.0, temperature=25.0, oxygen=6.0, co2=10.0)
        effects = by_resource(gas_exchange_update(state))
        assert effects['oxygen'] == pytest.approx(0.75 * 2.38 + 0.05)
        assert effects['co2'] == pytest.approx(1.125 * -6.0)

    def test_direct_o2_never_exceeds_saturation(self):
        state = make_state(Equipment(air_pump=AirPump(enabled=True)),
                           flow=1000.0, temperature=25.0, oxygen=8.37, co2=4.0)
        delta = by_resource(gas_exchange_update(state)).get('oxygen', 0.0)
        assert 8.37 + delta <= 8.38 + 1e-9

    def test_no_flow_no_exchange(self):
        assert gas_exchange_update(make_state(flow=0.0, oxygen=2.0, co2=40.0)) == []


# ============================================================================
# pH
# ============================================================================

class TestPh:

    def test_neutral_without_hardscape(self):
        assert calculate_hardscape_target_ph(()) == 7.0
        assert calculate_hardscape_target_ph(rocks('neutral_rock', 'plastic_decoration')) == 7.0

    def test_diminishing_returns(self):
        one = calculate_hardscape_target_ph(rocks('calcite_rock'))
        two = calculate_hardscape_target_ph(rocks('calcite_rock', 'calcite_rock'))
        assert one == pytest.approx(7.3)
        assert two == pytest.approx(7.51)
        assert (two - one) < (one - 7.0), "Second rock should add less than the first"

    def test_driftwood_acidifies(self):
        assert calculate_hardscape_target_ph(rocks('driftwood')) == pytest.approx(6.7)
        mixed = calculate_hardscape_target_ph(rocks('driftwood', 'calcite_rock'))
        assert mixed == pytest.approx(7.0)

    def test_co2_lowers_target(self):
        assert calculate_co2_ph_effect(4.0) == 0.0
        assert calculate_co2_ph_effect(24.0) == pytest.approx(-1.0)

    def test_drift_toward_target(self):
        effects = ph_drift_update(make_state(ph=6.5, co2=4.0))
        assert by_resource(effects) == {'ph': pytest.approx(0.04)}

    def test_calcite_pushes_up(self):
        equipment = Equipment(hardscape=Hardscape(items=rocks('calcite_rock')))
        effects = ph_drift_update(make_state(equipment, ph=7.0, co2=4.0))
        assert effects[0].delta > 0

    def test_at_target_is_quiet(self):
        assert ph_drift_update(make_state(ph=7.0, co2=4.0)) == []
