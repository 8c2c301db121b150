# planet_generator/runtime/state.py

"""
The explicit, single-owner simulation state.

One TerrainSimulationState is created when a scene is set up and torn down
with it. Every per-frame operation receives it by reference; nothing about
the running simulation lives in module-level variables.
"""
import logging
from typing import List, Optional

from ..mesh import Mesh
from ..picking import ImpactState
from ..scatter import PlacementRecord
from ..scene import Scene


class TerrainSimulationState:
    """Owns the active mesh, the impact point and the placement records."""

    def __init__(self, scene: Optional[Scene] = None, logger: logging.Logger = None):
        self.scene = scene
        self.logger = logger or logging.getLogger(__name__)
        self.mesh: Optional[Mesh] = None
        self.impact = ImpactState()
        self.records: List[PlacementRecord] = []

        # The most recent scatter request, replayed after a regenerate.
        self.last_scatter_params = None
        self.last_prefabs = None

    @property
    def baseline(self):
        return None if self.mesh is None else self.mesh.baseline

    def set_mesh(self, mesh: Mesh) -> None:
        """Swaps the active mesh, keeping the scene registration in step."""
        if self.mesh is not None and self.scene is not None:
            self.scene.remove(self.mesh)
        self.mesh = mesh
        if mesh is not None and self.scene is not None:
            self.scene.add(mesh)

    def release_placements(self) -> int:
        """Unregisters and releases every placed instance. Returns how many were released."""
        released = len(self.records)
        for record in self.records:
            record.release(self.scene)
        self.records = []
        if released:
            self.logger.debug(f"Released {released} placed instances.")
        return released

    def teardown(self) -> None:
        self.release_placements()
        self.set_mesh(None)
