"""
AquaSim Tank Engine

A deterministic, headless state-and-chemistry engine for a virtual freshwater
aquarium. Each tick advances the tank one simulated hour: equipment control,
plant and fish biology, then environmental drift, folded into a new snapshot.

Architecture: SimulationState snapshots are the source of truth. Presentation
and persistence are consumers of create_simulation / tick / apply_action.
"""

__version__ = "0.1.0"

from .state import create_simulation, SimulationConfig
from .simulation import tick, get_hour_of_day, get_day_number, TankSimulation
from .actions import apply_action

__all__ = [
    "create_simulation",
    "SimulationConfig",
    "tick",
    "apply_action",
    "get_hour_of_day",
    "get_day_number",
    "TankSimulation",
]
