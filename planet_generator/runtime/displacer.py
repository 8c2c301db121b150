# planet_generator/runtime/displacer.py

"""
================================================================================
WAVE DISPLACER
================================================================================
Perturbs a mesh with a radial "seismic" ripple centred on the impact point.

Data Contract:
---------------
- Inputs:
    - mesh (Mesh) and its BaselineSnapshot (same vertex count).
    - impact_point: world-space origin of the ripple.
    - time (float): simulation time in seconds.
    - params (WaveParameters): amplitude, frequency, time scale, falloff radius.
- Per vertex, with d the distance from the baseline position to the impact:
      wave    = sin(d * frequency - time * time_scale) * amplitude * falloff
      falloff = max(0, 1 - d / falloff_radius) ** 2
      position = baseline + normalize(baseline) * wave
- Side Effects: overwrites mesh.positions and mesh.normals.
- Invariants: positions are always derived from the baseline, never from the
  previous frame, so repeated steps cannot drift. Normals are recomputed only
  after every position has been written.
================================================================================
"""
import numpy as np

from ..errors import PreconditionViolation
from ..mesh import BaselineSnapshot, Mesh, compute_vertex_normals
from ..parameters import WaveParameters
from ..terrain import radial_directions


def wave_falloff(distance, falloff_radius: float):
    """Squared linear falloff; exactly zero at and beyond `falloff_radius`."""
    distance = np.asarray(distance, dtype=np.float64)
    if falloff_radius <= 0:
        return np.zeros_like(distance)
    return np.maximum(0.0, 1.0 - distance / falloff_radius) ** 2


def wave_value(distance, time: float, params: WaveParameters):
    """The signed radial offset at `distance` from the impact at `time`."""
    distance = np.asarray(distance, dtype=np.float64)
    phase = distance * params.frequency - time * params.time_scale
    return np.sin(phase) * params.amplitude * wave_falloff(distance, params.falloff_radius)


class WaveDisplacer:
    """Applies the ripple to whatever mesh the simulation state currently holds."""

    def __init__(self, params: WaveParameters = None):
        self.params = params or WaveParameters()

    def displace(self, mesh: Mesh, baseline: BaselineSnapshot, impact_point, time: float) -> np.ndarray:
        """Rewrites `mesh.positions` from `baseline` and returns the per-vertex wave values."""
        base = baseline.positions
        if base.shape[0] != mesh.vertex_count:
            raise PreconditionViolation(
                f"Baseline has {base.shape[0]} vertices but '{mesh.name}' has {mesh.vertex_count}; "
                "recapture the baseline after changing the mesh."
            )
        if base.shape[0] == 0:
            return np.zeros(0)

        # Work in the mesh's local frame.
        impact_local = np.asarray(impact_point, dtype=np.float64).reshape(3) - mesh.origin
        distances = np.linalg.norm(base - impact_local, axis=1)
        waves = wave_value(distances, time, self.params)

        # 1. Every position write...
        mesh.positions = base + radial_directions(base) * waves[:, np.newaxis]
        # 2. ...strictly before the normals read neighbouring triangles.
        compute_vertex_normals(mesh)
        return waves

    def apply(self, state, time: float) -> bool:
        """One simulation step over the state's mesh. Returns False if there is nothing to displace."""
        mesh = state.mesh
        if mesh is None or mesh.baseline is None:
            return False
        self.displace(mesh, mesh.baseline, state.impact.point, time)
        return True
