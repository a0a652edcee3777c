"""
Effect system.

An Effect is a signed delta on one resource, tagged with the tier that
produced it. apply_effects folds a list of effects into a new snapshot,
clamping after every delta with the resource registry's bounds. Water clamps
to [0, tank.capacity] and is written to tank.water_level.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, List

from .data_types import SimulationState
from .resources import RESOURCES, clamp_resource


class Tier(Enum):
    """Intra-tick ordering class of an effect"""
    IMMEDIATE = 'immediate'  # Equipment control loops
    ACTIVE = 'active'  # Plants, livestock
    PASSIVE = 'passive'  # Environmental drift


class InvariantViolation(Exception):
    """Raised when an effect would corrupt the snapshot (unknown key, non-finite delta)"""
    pass


@dataclass(frozen=True)
class Effect:
    tier: Tier
    resource: str
    delta: float
    source: str


def apply_effects(state: SimulationState, effects: Iterable[Effect]) -> SimulationState:
    """
    Fold effects into a new state.

    Effects are applied in the given order and each resource is clamped
    after every delta.

    Args:
        state: Snapshot to start from (not modified)
        effects: Effects to apply

    Returns:
        New snapshot, or the same object when effects is empty

    Raises:
        InvariantViolation: Unknown resource key or non-finite delta
    """
    effects = list(effects)
    if not effects:
        return state

    resources = dict(state.resources)
    water_level = state.tank.water_level
    capacity = state.tank.capacity

    for effect in effects:
        if effect.resource not in RESOURCES:
            raise InvariantViolation(
                f"Effect from '{effect.source}' targets unknown resource '{effect.resource}'"
            )
        if not math.isfinite(effect.delta):
            raise InvariantViolation(
                f"Effect from '{effect.source}' on '{effect.resource}' has non-finite delta {effect.delta}"
            )

        if effect.resource == 'water':
            water_level = clamp_resource('water', water_level + effect.delta, capacity)
        else:
            current = resources.get(effect.resource, RESOURCES[effect.resource].default_value)
            resources[effect.resource] = clamp_resource(effect.resource, current + effect.delta)

    tank = state.tank
    if water_level != tank.water_level:
        tank = replace(tank, water_level=water_level)

    return replace(state, tank=tank, resources=resources)


def effects_for_tier(effects: Iterable[Effect], tier: Tier) -> List[Effect]:
    """Filter effects by tier, preserving order"""
    return [e for e in effects if e.tier is tier]
