"""
Water blending and daily schedules.
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from aquasim.blending import blend_concentration, blend_ph, blend_temperature, hydrogen_to_ph, ph_to_hydrogen
from aquasim.data_types import DailySchedule
from aquasim.schedule import format_schedule, is_schedule_active, is_valid_schedule


# ============================================================================
# Blending
# ============================================================================

@pytest.mark.parametrize(
    "t1, v1, t2, v2",
    [
        pytest.param(28.0, 80.0, 20.0, 20.0, id="top-off"),
        pytest.param(25.0, 50.0, 15.0, 50.0, id="half-change"),
        pytest.param(22.0, 1.0, 30.0, 99.0, id="mostly-new"),
    ]
)
def test_blend_temperature_weighted_mean(t1, v1, t2, v2):
    expected = (t1 * v1 + t2 * v2) / (v1 + v2)
    assert blend_temperature(t1, v1, t2, v2) == pytest.approx(expected)


def test_blend_zero_volume_keeps_existing():
    assert blend_temperature(24.0, 0.0, 18.0, 0.0) == 24.0
    assert blend_concentration(8.0, 0.0, 9.0, 0.0) == 8.0
    assert blend_ph(6.8, 0.0, 7.5, 0.0) == 6.8


def test_blend_concentration():
    assert blend_concentration(4.0, 75.0, 8.0, 25.0) == pytest.approx(5.0)


def test_blend_ph_through_hydrogen():
    """Equal volumes of pH 6 and 8 land near 6.3, not 7"""
    blended = blend_ph(6.0, 50.0, 8.0, 50.0)
    assert blended == pytest.approx(6.2967, abs=1e-3)
    assert blend_ph(7.0, 30.0, 7.0, 70.0) == pytest.approx(7.0)


def test_hydrogen_round_trip_and_guard():
    assert hydrogen_to_ph(ph_to_hydrogen(6.5)) == pytest.approx(6.5)
    assert hydrogen_to_ph(0.0) == 7.0


# ============================================================================
# Schedules
# ============================================================================

def test_schedule_simple_window():
    schedule = DailySchedule(start_hour=8, duration=10)
    active = [hour for hour in range(24) if is_schedule_active(hour, schedule)]
    assert active == list(range(8, 18))


def test_schedule_wraps_midnight():
    schedule = DailySchedule(start_hour=22, duration=4)
    active = [hour for hour in range(24) if is_schedule_active(hour, schedule)]
    assert active == [0, 1, 22, 23]


def test_schedule_zero_and_full_day():
    assert not any(is_schedule_active(h, DailySchedule(6, 0)) for h in range(24))
    assert all(is_schedule_active(h, DailySchedule(6, 24)) for h in range(24))


def test_schedule_validation_and_format():
    assert is_valid_schedule(DailySchedule(8, 10))
    assert not is_valid_schedule(DailySchedule(24, 1))
    assert not is_valid_schedule(DailySchedule(8, 25))
    assert format_schedule(DailySchedule(8, 10)) == "8:00 - 18:00 (10h)"
    assert format_schedule(DailySchedule(22, 4)) == "22:00 - 2:00 (4h)"
