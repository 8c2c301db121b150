# planet_generator/mesh.py

"""
================================================================================
MESH DATA & TOPOLOGY UTILITIES
================================================================================
This module holds the triangle mesh container used throughout the pipeline,
the immutable baseline snapshot, the UV sphere primitive and the topology
helpers (welding, normals, closure checks).

Data Contract:
---------------
- Mesh.positions: (N, 3) float64, local (object) space.
- Mesh.indices:   (M, 3) int64 triangle list, or None for a non-indexed mesh
                  where every consecutive triple of vertices is a triangle.
- Mesh.normals:   (N, 3) float64 or None.
- Mesh.attributes: name -> array whose first dimension is N.
- Mesh.origin:    world-space translation of the mesh (local -> world).
- Invariants: indices are in range and distinct per triangle; normals and
  every auxiliary attribute match the vertex count.
================================================================================
"""
import logging
from typing import Dict, Optional

import numpy as np
from scipy.sparse import coo_matrix
from scipy.sparse.csgraph import connected_components
from scipy.spatial import cKDTree

from . import config as DEFAULTS

logger = logging.getLogger(__name__)


class BaselineSnapshot:
    """
    A read-only copy of a mesh's vertex positions at the moment of capture.
    Additive, re-computable displacement (the seismic waves) is always
    derived from this, never from the previous frame.
    """
    def __init__(self, positions: np.ndarray):
        self._positions = np.array(positions, dtype=np.float64, copy=True).reshape(-1, 3)
        self._positions.setflags(write=False)

    @property
    def positions(self) -> np.ndarray:
        return self._positions

    @property
    def vertex_count(self) -> int:
        return int(self._positions.shape[0])


class Mesh:
    """A triangle mesh with optional index buffer and per-vertex attributes."""

    def __init__(
        self,
        positions: np.ndarray,
        indices: Optional[np.ndarray] = None,
        normals: Optional[np.ndarray] = None,
        attributes: Optional[Dict[str, np.ndarray]] = None,
        origin=None,
        name: str = "mesh",
    ):
        self.name = name
        self.positions = np.ascontiguousarray(positions, dtype=np.float64).reshape(-1, 3)
        self.indices = None if indices is None else np.ascontiguousarray(indices, dtype=np.int64).reshape(-1, 3)
        self.normals = None if normals is None else np.ascontiguousarray(normals, dtype=np.float64).reshape(-1, 3)
        self.face_normals = None
        self.origin = np.zeros(3) if origin is None else np.asarray(origin, dtype=np.float64).reshape(3)
        self.attributes = {}
        for attr_name, values in (attributes or {}).items():
            self.set_attribute(attr_name, values)

        # --- Pipeline flags ---
        self.is_baked = False
        self.flat_shading = False
        self.baseline = None

    # --- Basic properties ---
    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])

    @property
    def is_indexed(self) -> bool:
        return self.indices is not None

    @property
    def triangle_count(self) -> int:
        if self.indices is not None:
            return int(self.indices.shape[0])
        return self.vertex_count // 3

    def triangles(self) -> np.ndarray:
        """(M, 3) vertex indices of every triangle, indexed or not."""
        if self.indices is not None:
            return self.indices
        usable = (self.vertex_count // 3) * 3
        return np.arange(usable, dtype=np.int64).reshape(-1, 3)

    def world_positions(self) -> np.ndarray:
        return self.positions + self.origin

    # --- Auxiliary attributes ---
    def set_attribute(self, name: str, values) -> None:
        values = np.asarray(values)
        if values.shape[0] != self.vertex_count:
            raise ValueError(
                f"Attribute '{name}' has {values.shape[0]} entries but the mesh has "
                f"{self.vertex_count} vertices."
            )
        self.attributes[name] = values

    def get_attribute(self, name: str) -> Optional[np.ndarray]:
        return self.attributes.get(name)

    # --- Snapshots ---
    def capture_baseline(self) -> BaselineSnapshot:
        """Stores and returns an immutable copy of the current positions."""
        self.baseline = BaselineSnapshot(self.positions)
        return self.baseline

    def copy(self) -> "Mesh":
        clone = Mesh(
            positions=self.positions.copy(),
            indices=None if self.indices is None else self.indices.copy(),
            normals=None if self.normals is None else self.normals.copy(),
            attributes={k: v.copy() for k, v in self.attributes.items()},
            origin=self.origin.copy(),
            name=self.name,
        )
        clone.face_normals = None if self.face_normals is None else self.face_normals.copy()
        clone.is_baked = self.is_baked
        clone.flat_shading = self.flat_shading
        # The snapshot is owned by the mesh that captured it; copies start clean.
        return clone

    def validate(self) -> None:
        """Raises ValueError if any structural invariant is broken."""
        if self.indices is not None and self.indices.size:
            if self.indices.min() < 0 or self.indices.max() >= self.vertex_count:
                raise ValueError("Index buffer references vertices out of range.")
            tri = self.indices
            if np.any((tri[:, 0] == tri[:, 1]) | (tri[:, 1] == tri[:, 2]) | (tri[:, 0] == tri[:, 2])):
                raise ValueError("Index buffer contains a degenerate triangle.")
        if self.normals is not None and self.normals.shape[0] != self.vertex_count:
            raise ValueError("Normal count does not match vertex count.")
        for name, values in self.attributes.items():
            if values.shape[0] != self.vertex_count:
                raise ValueError(f"Attribute '{name}' does not match vertex count.")

    def to_trimesh(self):
        """Bridge to trimesh for export, inspection or ray queries."""
        import trimesh
        return trimesh.Trimesh(
            vertices=self.world_positions(),
            faces=self.triangles(),
            process=False,
        )

    def __repr__(self) -> str:
        return (f"Mesh(name={self.name!r}, vertices={self.vertex_count}, "
                f"triangles={self.triangle_count}, indexed={self.is_indexed})")


def create_uv_sphere(
    radius: float = DEFAULTS.PLANET_RADIUS,
    width_segments: int = DEFAULTS.SPHERE_WIDTH_SEGMENTS,
    height_segments: int = DEFAULTS.SPHERE_HEIGHT_SEGMENTS,
) -> Mesh:
    """
    Builds an indexed latitude/longitude sphere centred on the origin.

    The layout is the conventional one: `height_segments + 1` rows of
    `width_segments + 1` vertices, so the seam column and both pole rows are
    duplicated. Pole caps emit a single triangle per segment. Those duplicates
    are exactly what `weld_vertices` later removes.
    """
    width_segments = max(3, int(width_segments))
    height_segments = max(2, int(height_segments))

    u = np.linspace(0.0, 1.0, width_segments + 1)
    v = np.linspace(0.0, 1.0, height_segments + 1)
    phi = u * 2.0 * np.pi
    theta = v * np.pi
    uu, vv = np.meshgrid(phi, theta)

    x = -radius * np.cos(uu) * np.sin(vv)
    y = radius * np.cos(vv)
    z = radius * np.sin(uu) * np.sin(vv)
    positions = np.column_stack((x.ravel(), y.ravel(), z.ravel()))

    grid = np.arange((height_segments + 1) * (width_segments + 1)).reshape(height_segments + 1, width_segments + 1)
    faces = []
    for iy in range(height_segments):
        for ix in range(width_segments):
            a = grid[iy, ix + 1]
            b = grid[iy, ix]
            c = grid[iy + 1, ix]
            d = grid[iy + 1, ix + 1]
            if iy != 0:
                faces.append((a, b, d))
            if iy != height_segments - 1:
                faces.append((b, c, d))

    mesh = Mesh(positions=positions, indices=np.array(faces, dtype=np.int64), name="planet")
    compute_vertex_normals(mesh)
    return mesh


def to_non_indexed(mesh: Mesh) -> Mesh:
    """Expands the index buffer so every triangle owns three private vertices."""
    if not mesh.is_indexed:
        return mesh.copy()
    flat = mesh.indices.ravel()
    result = Mesh(
        positions=mesh.positions[flat],
        attributes={k: v[flat] for k, v in mesh.attributes.items()},
        origin=mesh.origin.copy(),
        name=mesh.name,
    )
    result.is_baked = mesh.is_baked
    compute_vertex_normals(result)
    return result


def weld_vertices(mesh: Mesh, epsilon: float = DEFAULTS.WELD_EPSILON) -> Mesh:
    """
    Merges vertices closer than `epsilon`, reindexing triangles. Triangles that
    collapse onto fewer than three distinct vertices are dropped. Each merged
    group keeps the position and attributes of its lowest-index member.

    Returns a new, indexed mesh. Normals are cleared; the caller recomputes them.
    """
    n = mesh.vertex_count
    triangles = mesh.triangles()
    if n == 0:
        result = mesh.copy()
        result.indices = np.zeros((0, 3), dtype=np.int64)
        result.normals = None
        return result

    # --- 1. Group coincident vertices (transitively) ---
    tree = cKDTree(mesh.positions)
    pairs = tree.query_pairs(r=max(float(epsilon), 0.0), output_type='ndarray')
    if pairs.size:
        graph = coo_matrix(
            (np.ones(len(pairs), dtype=np.int8), (pairs[:, 0], pairs[:, 1])),
            shape=(n, n),
        )
        _, labels = connected_components(graph, directed=False)
    else:
        labels = np.arange(n)

    # --- 2. Pick the lowest original index of each group as its representative ---
    representative = np.full(labels.max() + 1, n, dtype=np.int64)
    np.minimum.at(representative, labels, np.arange(n))
    keep = np.unique(representative)  # sorted, preserves original vertex order
    new_index_of_rep = np.empty(n, dtype=np.int64)
    new_index_of_rep[keep] = np.arange(keep.size)
    remap = new_index_of_rep[representative[labels]]

    # --- 3. Reindex triangles and drop the degenerate ones ---
    new_tris = remap[triangles]
    valid = (
        (new_tris[:, 0] != new_tris[:, 1]) &
        (new_tris[:, 1] != new_tris[:, 2]) &
        (new_tris[:, 0] != new_tris[:, 2])
    )
    new_tris = new_tris[valid]

    result = Mesh(
        positions=mesh.positions[keep],
        indices=new_tris,
        attributes={k: v[keep] for k, v in mesh.attributes.items()},
        origin=mesh.origin.copy(),
        name=mesh.name,
    )
    result.is_baked = mesh.is_baked
    result.flat_shading = mesh.flat_shading

    merged = n - keep.size
    if merged:
        logger.debug(f"Welded {merged} coincident vertices ({n} -> {keep.size}).")
    return result


def compute_vertex_normals(mesh: Mesh) -> np.ndarray:
    """
    Recomputes smooth per-vertex normals as the area-weighted average of the
    incident face normals, and refreshes `mesh.face_normals`. A non-indexed
    mesh naturally ends up with flat (per-face) normals.
    """
    triangles = mesh.triangles()
    normals = np.zeros_like(mesh.positions)
    if triangles.size:
        v0 = mesh.positions[triangles[:, 0]]
        v1 = mesh.positions[triangles[:, 1]]
        v2 = mesh.positions[triangles[:, 2]]
        # The un-normalized cross product is already area weighted.
        cross = np.cross(v1 - v0, v2 - v0)
        for corner in range(3):
            np.add.at(normals, triangles[:, corner], cross)
        mesh.face_normals = _normalize_rows(cross)
    else:
        mesh.face_normals = np.zeros((0, 3))
    mesh.normals = _normalize_rows(normals)
    return mesh.normals


def edge_use_counts(triangles: np.ndarray) -> Dict[tuple, int]:
    """Maps each undirected edge (i, j) with i < j to the number of triangles using it."""
    if triangles.size == 0:
        return {}
    edges = np.concatenate([triangles[:, [0, 1]], triangles[:, [1, 2]], triangles[:, [2, 0]]])
    edges.sort(axis=1)
    unique, counts = np.unique(edges, axis=0, return_counts=True)
    return {(int(a), int(b)): int(c) for (a, b), c in zip(unique, counts)}


def is_closed_manifold(mesh: Mesh) -> bool:
    """True if every edge is shared by exactly two triangles (no holes, no fins)."""
    counts = edge_use_counts(mesh.triangles())
    return bool(counts) and all(c == 2 for c in counts.values())


def _normalize_rows(vectors: np.ndarray) -> np.ndarray:
    lengths = np.linalg.norm(vectors, axis=1, keepdims=True)
    return np.divide(vectors, lengths, out=np.zeros_like(vectors), where=lengths > 0)
