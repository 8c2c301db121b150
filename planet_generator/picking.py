# planet_generator/picking.py

"""
================================================================================
SURFACE PICKING
================================================================================
Ray/mesh intersection and the impact point it feeds. A picker that finds no
intersection reports None, and the impact state keeps its previous point.

Data Contract:
---------------
- pick_surface_point(mesh, origin, direction) -> (3,) world point or None.
- ImpactState.update(point) -> the point now in effect.
================================================================================
"""
from typing import Optional

import numpy as np

from .mesh import Mesh

_PARALLEL_EPSILON = 1e-12


def pick_surface_point(mesh: Mesh, ray_origin, ray_direction) -> Optional[np.ndarray]:
    """
    Nearest intersection of a world-space ray with the mesh's triangles
    (Moller-Trumbore, evaluated for every triangle at once). Back faces count.
    """
    triangles = mesh.triangles()
    if triangles.size == 0:
        return None

    origin = np.asarray(ray_origin, dtype=np.float64)
    direction = np.asarray(ray_direction, dtype=np.float64)
    length = np.linalg.norm(direction)
    if length == 0.0:
        return None
    direction = direction / length

    world = mesh.world_positions()
    v0 = world[triangles[:, 0]]
    edge1 = world[triangles[:, 1]] - v0
    edge2 = world[triangles[:, 2]] - v0

    pvec = np.cross(direction, edge2)
    det = np.einsum('ij,ij->i', edge1, pvec)
    valid = np.abs(det) > _PARALLEL_EPSILON
    inv_det = np.zeros_like(det)
    inv_det[valid] = 1.0 / det[valid]

    tvec = origin - v0
    u = np.einsum('ij,ij->i', tvec, pvec) * inv_det
    qvec = np.cross(tvec, edge1)
    v = (qvec @ direction) * inv_det
    t = np.einsum('ij,ij->i', edge2, qvec) * inv_det

    hit = valid & (u >= 0.0) & (v >= 0.0) & (u + v <= 1.0) & (t > 0.0)
    if not np.any(hit):
        return None
    nearest = np.min(t[hit])
    return origin + direction * nearest


class ImpactState:
    """The current world-space origin of the seismic wave."""

    def __init__(self, point=None):
        self.point = np.zeros(3) if point is None else np.asarray(point, dtype=np.float64).reshape(3)

    def update(self, point: Optional[np.ndarray]) -> np.ndarray:
        """Adopts a new point; None (no intersection) keeps the previous one."""
        if point is not None:
            self.point = np.asarray(point, dtype=np.float64).reshape(3)
        return self.point

    def __repr__(self) -> str:
        return f"ImpactState(point={np.round(self.point, 4).tolist()})"


class RayPicker:
    """
    Casts a fixed world-space ray at the mesh currently held by a simulation
    state. The headless stand-in for mouse picking.
    """

    def __init__(self, state, ray_origin, ray_direction):
        self.state = state
        self.ray_origin = np.asarray(ray_origin, dtype=np.float64)
        self.ray_direction = np.asarray(ray_direction, dtype=np.float64)

    def pick(self) -> Optional[np.ndarray]:
        if self.state.mesh is None:
            return None
        return pick_surface_point(self.state.mesh, self.ray_origin, self.ray_direction)
