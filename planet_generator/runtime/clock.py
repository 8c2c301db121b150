# planet_generator/runtime/clock.py

"""
================================================================================
SIMULATION CLOCK
================================================================================
Tracks the simulation time that drives the seismic waves.

Data Contract:
---------------
- Public Methods:
    - update(real_delta_time): Advances the clock.
    - set_speed(new_scale): Changes the speed of time.
    - reset(): Rewinds to zero.
- Public Properties:
    - elapsed (float seconds of simulation time).
- Invariants: The elapsed time depends only on the sum of real time scaled by
  the speed, never on the frequency of updates.
================================================================================
"""
from .. import config as DEFAULTS


class SimulationClock:
    """Manages the passage of simulation time."""

    def __init__(self, speed: float = DEFAULTS.INITIAL_SIMULATION_SPEED):
        self.time_scale = max(0.0, float(speed))
        self._elapsed = 0.0

    @property
    def elapsed(self) -> float:
        return self._elapsed

    def update(self, real_delta_time: float) -> float:
        """
        Advances the clock by a given amount of real-world time.

        Args:
            real_delta_time (float): The time elapsed in the real world, in seconds.
        """
        if self.time_scale <= 0 or real_delta_time <= 0:
            return self._elapsed  # Paused, or a clock hiccup; do nothing.

        self._elapsed += real_delta_time * self.time_scale
        return self._elapsed

    def set_speed(self, new_scale: float):
        """
        Sets the speed of simulation time.
        0 = paused, 1 = real-time, > 1 = fast-forward.
        """
        self.time_scale = max(0.0, new_scale)

    def reset(self):
        self._elapsed = 0.0

    def get_time_string(self) -> str:
        return f"t={self._elapsed:7.2f}s (x{self.time_scale:g})"
