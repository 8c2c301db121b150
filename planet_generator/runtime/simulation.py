# planet_generator/runtime/simulation.py

"""
================================================================================
PLANET SIMULATION
================================================================================
The per-frame tick. Each call runs synchronously, in this order:
    1. advance the clock,
    2. refresh the impact point from the picker (None keeps the old one),
    3. displace the mesh from its baseline,
    4. re-sync the placed instances.
The mutated buffers are then free for the renderer to read.

Data Contract:
---------------
- Inputs (on initialization):
    - state (TerrainSimulationState): owned by the caller.
    - wave_params (WaveParameters).
    - speed (float): initial clock scale.
- Public Methods:
    - update(real_delta_time, picker=None) -> bool (False if the step was skipped).
- Side Effects: mutates state.mesh, state.impact and the placed instances.
================================================================================
"""
import logging
from typing import Optional

from .. import config as DEFAULTS
from ..errors import PlanetGeneratorError
from ..parameters import WaveParameters
from ..scene import Picker
from .clock import SimulationClock
from .displacer import WaveDisplacer
from .tracker import PlacementTracker


class PlanetSimulation:
    """Composes the clock, the wave displacer and the placement tracker."""

    def __init__(
        self,
        state,
        wave_params: WaveParameters = None,
        speed: float = DEFAULTS.INITIAL_SIMULATION_SPEED,
        logger: logging.Logger = None,
    ):
        self.state = state
        self.logger = logger or logging.getLogger(__name__)

        # --- Core Components (Rule 7 - Composition) ---
        self.clock = SimulationClock(speed)
        self.displacer = WaveDisplacer(wave_params)
        self.tracker = PlacementTracker()
        self.frame = 0

    @property
    def wave_params(self) -> WaveParameters:
        return self.displacer.params

    def set_wave_parameters(self, params: WaveParameters) -> None:
        """Takes effect on the next frame. The parameters are an immutable snapshot."""
        self.displacer.params = params

    def update(self, real_delta_time: float, picker: Optional[Picker] = None) -> bool:
        self.clock.update(real_delta_time)

        if picker is not None:
            self.state.impact.update(picker.pick())

        try:
            displaced = self.displacer.apply(self.state, self.clock.elapsed)
        except PlanetGeneratorError as e:
            self.logger.error(f"Skipping frame {self.frame}: {e}")
            return False

        if displaced:
            self.tracker.update(self.state)
        self.frame += 1
        return displaced
