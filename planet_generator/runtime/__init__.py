# planet_generator/runtime/__init__.py

# This file makes the 'runtime' directory a Python package.
# We can also use it to define the public API of the package.

from .clock import SimulationClock
from .displacer import WaveDisplacer, wave_falloff, wave_value
from .simulation import PlanetSimulation
from .state import TerrainSimulationState
from .tracker import PlacementTracker

__all__ = [
    "SimulationClock",
    "WaveDisplacer",
    "wave_falloff",
    "wave_value",
    "PlanetSimulation",
    "TerrainSimulationState",
    "PlacementTracker",
]
