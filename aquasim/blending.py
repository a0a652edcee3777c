"""
Volume-weighted mixing of two water bodies.

Used when new water enters the tank (top-off, water change, auto top-off).
Results are exact; callers round for display or storage where they need to.
"""

import math


def blend_temperature(existing_temp: float, existing_volume: float,
                      added_temp: float, added_volume: float) -> float:
    """
    Mix temperatures by volume.

    Returns:
        (t1*v1 + t2*v2) / (v1 + v2), or existing_temp when no volume
    """
    total_volume = existing_volume + added_volume
    if total_volume <= 0:
        return existing_temp
    return (existing_temp * existing_volume + added_temp * added_volume) / total_volume


def blend_concentration(existing_conc: float, existing_volume: float,
                        added_conc: float, added_volume: float) -> float:
    """Mix concentration-like quantities (mg/L) by volume"""
    total_volume = existing_volume + added_volume
    if total_volume <= 0:
        return existing_conc
    return (existing_conc * existing_volume + added_conc * added_volume) / total_volume


def ph_to_hydrogen(ph: float) -> float:
    return 10.0 ** (-ph)


def hydrogen_to_ph(hydrogen: float) -> float:
    if hydrogen <= 0:
        return 7.0
    return -math.log10(hydrogen)


def blend_ph(existing_ph: float, existing_volume: float,
             added_ph: float, added_volume: float) -> float:
    """
    Mix pH by volume through H+ concentration.

    pH is logarithmic, so equal volumes of pH 6 and pH 8 give ~6.3, not 7.
    """
    total_volume = existing_volume + added_volume
    if total_volume <= 0:
        return existing_ph
    blended_h = (
        ph_to_hydrogen(existing_ph) * existing_volume
        + ph_to_hydrogen(added_ph) * added_volume
    ) / total_volume
    return hydrogen_to_ph(blended_h)
