# planet_generator/terrain.py

"""
================================================================================
TERRAIN BAKER
================================================================================
Shapes a roughly spherical mesh by pushing every vertex along its radial
direction by an fBm noise value, then welds coincident seam vertices and
recomputes shading normals.

Data Contract:
---------------
- Inputs:
    - mesh (Mesh): centred on its local origin, never baked before.
    - noise_field (NoiseField): the deterministic sampler.
    - params (NoiseFieldParameters): fBm shaping.
- Outputs:
    - A NEW welded, indexed Mesh flagged `is_baked`. The input is untouched.
- Side Effects: Logs via the provided logger.
- Invariants: Baking is not cumulative. Callers re-derive from the unmodified
  base primitive every time ("regenerate"); baking an already baked mesh is
  refused.
================================================================================
"""
import logging
import time

import numpy as np

from . import config as DEFAULTS
from .errors import PreconditionViolation
from .mesh import Mesh, compute_vertex_normals, weld_vertices

logger = logging.getLogger(__name__)


def radial_directions(positions: np.ndarray) -> np.ndarray:
    """Unit vector from the local origin to each vertex (zero for a vertex at the origin)."""
    lengths = np.linalg.norm(positions, axis=1, keepdims=True)
    return np.divide(positions, lengths, out=np.zeros_like(positions), where=lengths > 0)


def bake_terrain(
    mesh: Mesh,
    noise_field,
    params,
    weld_epsilon: float = DEFAULTS.WELD_EPSILON,
    logger: logging.Logger = logger,
) -> Mesh:
    """
    Displaces every vertex by `direction * fbm(position)` and returns the
    welded result with fresh normals.
    """
    if mesh.is_baked:
        raise PreconditionViolation(
            "Mesh has already been baked. Regenerate from the unmodified base "
            "primitive instead of baking on top of baked terrain."
        )

    start_time = time.perf_counter()
    shaped = mesh.copy()

    # 1. Sample the height field at the undisplaced positions.
    heights = noise_field.fbm(shaped.positions, params)

    # 2. Push each vertex along its own outward direction.
    directions = radial_directions(shaped.positions)
    shaped.positions = shaped.positions + directions * heights[:, np.newaxis]
    shaped.is_baked = True

    # 3. Merge seam/pole duplicates, then derive normals from the welded topology.
    welded = weld_vertices(shaped, weld_epsilon)
    welded.is_baked = True
    compute_vertex_normals(welded)

    elapsed = time.perf_counter() - start_time
    logger.info(
        f"Baked terrain: {mesh.vertex_count} -> {welded.vertex_count} vertices "
        f"(octaves={params.octaves}, amplitude={params.amplitude}) in {elapsed:.3f}s."
    )
    return welded


def lock_baked_heights(mesh: Mesh, attribute_name: str = DEFAULTS.BAKED_HEIGHT_ATTRIBUTE) -> np.ndarray:
    """
    Captures each vertex's current distance from the local origin into a
    named attribute. The attribute is write-once: if it already exists it is
    returned unchanged, so later dynamic displacement can never overwrite it.
    """
    existing = mesh.get_attribute(attribute_name)
    if existing is not None:
        return existing

    heights = np.linalg.norm(mesh.positions, axis=1)
    heights.setflags(write=False)
    mesh.set_attribute(attribute_name, heights)
    return heights
