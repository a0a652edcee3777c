"""
Resource registry: bounds, ppm conversion, formatting.
"""

import math
import sys
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from aquasim.resources import (
    MASS_RESOURCES,
    RESOURCES,
    STORED_RESOURCES,
    clamp_resource,
    default_resources,
    format_resource,
    get_mass_from_ppm,
    get_ppm,
    get_resource,
    is_mass_based,
)


def test_ppm_is_mass_over_volume():
    """100 mg in 80 L is 1.25 ppm"""
    assert get_ppm(100.0, 80.0) == pytest.approx(1.25)
    assert get_mass_from_ppm(1.25, 80.0) == pytest.approx(100.0)
    print("[OK] ppm <-> mass conversion")


def test_ppm_zero_volume_guard():
    assert get_ppm(500.0, 0.0) == 0.0
    assert get_ppm(500.0, -1.0) == 0.0
    assert get_mass_from_ppm(3.0, 0.0) == 0.0


def test_mass_resources():
    assert set(MASS_RESOURCES) == {'ammonia', 'nitrite', 'nitrate', 'phosphate', 'potassium', 'iron'}
    assert is_mass_based('nitrate')
    assert not is_mass_based('oxygen')


def test_unknown_resource_raises():
    with pytest.raises(KeyError):
        get_resource('unobtainium')


def test_clamp_to_registered_bounds():
    """Every resource clamps both ways"""
    for key, definition in RESOURCES.items():
        low, high = definition.bounds
        assert clamp_resource(key, low - 1000.0) == low, f"{key} below min not clamped"
        if math.isfinite(high):
            assert clamp_resource(key, high + 1000.0) == high, f"{key} above max not clamped"

    assert clamp_resource('algae', 150.0) == 100.0
    assert clamp_resource('ph', -2.0) == 0.0
    print("[OK] All resources clamp to registry bounds")


def test_water_clamps_to_capacity():
    assert clamp_resource('water', 120.0, capacity=100.0) == 100.0
    assert clamp_resource('water', -5.0, capacity=100.0) == 0.0
    assert clamp_resource('water', 50.0, capacity=100.0) == 50.0


def test_default_resources():
    resources = default_resources()
    assert tuple(resources) == STORED_RESOURCES
    assert 'water' not in resources
    assert resources['temperature'] == 25.0
    assert resources['oxygen'] == 8.0
    assert all(resources[key] == 0.0 for key in MASS_RESOURCES)


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        RESOURCES['temperature'] = None


def test_format_mass_resource_as_ppm():
    assert format_resource('ammonia', 100.0, water_volume=80.0) == "1.250 ppm"
    assert format_resource('ammonia', 100.0, water_volume=0.0) == "0.000 ppm"
    assert format_resource('nitrate', 2000.0, water_volume=100.0) == "20.0 ppm"


def test_format_plain_and_custom():
    assert format_resource('oxygen', 7.34) == "7.3 mg/L"
    assert format_resource('ph', 6.5) == "6.50"
    assert format_resource('aob', 12.6) == "13 units"
