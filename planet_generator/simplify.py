# planet_generator/simplify.py

"""
================================================================================
MESH SIMPLIFIER
================================================================================
Reduces the vertex count of a closed, welded triangle mesh by iterative
quadric-error edge collapse, keeping the surface closed and the silhouette
intact. Normals are recomputed for faceted (low-poly) shading afterwards.

Data Contract:
---------------
- Inputs:
    - mesh (Mesh): indexed and welded. Non-indexed meshes, and indexed ones
      with unwelded seams, are auto-welded as a best effort, with a warning.
      A mesh still open after welding is rejected.
    - removal_count (int): how many vertices to remove.
- Outputs:
    - A NEW Mesh with `vertex_count - removal_count` vertices.
- Side Effects: None on the input. `reduce_mesh_complexity` logs.
- Failure: OverReduction when the target cannot be reached without
  degenerating the surface; the input is never modified.
================================================================================
"""
import heapq
import logging
import math
import time

import numpy as np

from . import config as DEFAULTS
from .errors import OverReduction, PreconditionViolation
from .mesh import Mesh, compute_vertex_normals, is_closed_manifold, weld_vertices

logger = logging.getLogger(__name__)


def _plane_quadric(p0: np.ndarray, p1: np.ndarray, p2: np.ndarray) -> np.ndarray:
    """Fundamental error quadric Kp = pp^T for the plane through a triangle."""
    normal = np.cross(p1 - p0, p2 - p0)
    length = np.linalg.norm(normal)
    if length == 0.0:
        return np.zeros((4, 4))
    normal = normal / length
    plane = np.append(normal, -np.dot(normal, p0))
    return np.outer(plane, plane)


def _quadric_error(quadric: np.ndarray, point: np.ndarray) -> float:
    homogeneous = np.append(point, 1.0)
    return float(homogeneous @ quadric @ homogeneous)


class _EdgeCollapser:
    """Mutable working state for one simplification run."""

    def __init__(self, mesh: Mesh, flip_threshold: float):
        self.positions = mesh.positions.copy()
        self.faces = mesh.indices.copy()
        self.attributes = {k: np.array(v, dtype=np.float64 if v.dtype.kind == 'f' else v.dtype, copy=True)
                           for k, v in mesh.attributes.items()}
        self.flip_threshold = flip_threshold

        n = self.positions.shape[0]
        self.vertex_alive = np.ones(n, dtype=bool)
        self.face_alive = np.ones(len(self.faces), dtype=bool)
        self.version = np.zeros(n, dtype=np.int64)
        self.vertex_faces = [set() for _ in range(n)]
        for f, (a, b, c) in enumerate(self.faces):
            self.vertex_faces[a].add(f)
            self.vertex_faces[b].add(f)
            self.vertex_faces[c].add(f)

        # --- Accumulate the plane quadrics of every incident face ---
        self.quadrics = np.zeros((n, 4, 4))
        for a, b, c in self.faces:
            kp = _plane_quadric(self.positions[a], self.positions[b], self.positions[c])
            self.quadrics[a] += kp
            self.quadrics[b] += kp
            self.quadrics[c] += kp

        self.alive_count = n
        self._heap = []
        seen = set()
        for a, b, c in self.faces:
            for u, v in ((a, b), (b, c), (c, a)):
                key = (min(u, v), max(u, v))
                if key not in seen:
                    seen.add(key)
                    self._push_edge(*key)

    # --- Heap maintenance ---
    def _push_edge(self, u: int, v: int) -> None:
        cost, target = self._best_target(u, v)
        heapq.heappush(self._heap, (cost, u, v, int(self.version[u]), int(self.version[v]), target))

    def _best_target(self, u: int, v: int):
        quadric = self.quadrics[u] + self.quadrics[v]
        candidates = (
            (self.positions[u], 'u'),
            (self.positions[v], 'v'),
            (0.5 * (self.positions[u] + self.positions[v]), 'mid'),
        )
        best_cost, best_target = math.inf, 'u'
        for point, label in candidates:
            cost = _quadric_error(quadric, point)
            if cost < best_cost - 1e-15:
                best_cost, best_target = cost, label
        return max(best_cost, 0.0), best_target

    # --- Topology queries ---
    def _neighbors(self, vertex: int) -> set:
        ring = set()
        for f in self.vertex_faces[vertex]:
            ring.update(int(i) for i in self.faces[f])
        ring.discard(vertex)
        return ring

    def _can_collapse(self, u: int, v: int, new_position: np.ndarray) -> bool:
        shared = self.vertex_faces[u] & self.vertex_faces[v]
        if len(shared) != 2:
            return False

        # Link condition: the only common neighbours are the two opposite corners.
        opposite = set()
        for f in shared:
            opposite.update(int(i) for i in self.faces[f] if i != u and i != v)
        if self._neighbors(u) & self._neighbors(v) != opposite:
            return False

        # Fold-over check on every face that survives the collapse.
        for f in (self.vertex_faces[u] | self.vertex_faces[v]) - shared:
            corners = self.faces[f]
            before = self.positions[corners]
            after = before.copy()
            for k in range(3):
                if corners[k] == u or corners[k] == v:
                    after[k] = new_position
            n_before = np.cross(before[1] - before[0], before[2] - before[0])
            n_after = np.cross(after[1] - after[0], after[2] - after[0])
            len_before = np.linalg.norm(n_before)
            len_after = np.linalg.norm(n_after)
            if len_after <= 1e-12:
                return False
            if len_before > 1e-12 and np.dot(n_before, n_after) / (len_before * len_after) < self.flip_threshold:
                return False
        return True

    def _collapse(self, u: int, v: int, target: str, new_position: np.ndarray) -> None:
        shared = self.vertex_faces[u] & self.vertex_faces[v]
        for f in shared:
            self.face_alive[f] = False
            for corner in self.faces[f]:
                self.vertex_faces[corner].discard(f)

        for f in self.vertex_faces[v]:
            self.faces[f][self.faces[f] == v] = u
            self.vertex_faces[u].add(f)
        self.vertex_faces[v] = set()

        for name, values in self.attributes.items():
            if target == 'v':
                values[u] = values[v]
            elif target == 'mid' and values.dtype.kind == 'f':
                values[u] = 0.5 * (values[u] + values[v])

        self.positions[u] = new_position
        self.quadrics[u] += self.quadrics[v]
        self.vertex_alive[v] = False
        self.alive_count -= 1
        self.version[u] += 1
        self.version[v] += 1

        for w in self._neighbors(u):
            self._push_edge(min(u, w), max(u, w))

    def run(self, removal_count: int, min_vertices: int) -> int:
        removed = 0
        while removed < removal_count and self._heap:
            if self.alive_count <= min_vertices:
                break
            _, u, v, stamp_u, stamp_v, target = heapq.heappop(self._heap)
            if not (self.vertex_alive[u] and self.vertex_alive[v]):
                continue
            if stamp_u != self.version[u] or stamp_v != self.version[v]:
                continue
            if target == 'u':
                new_position = self.positions[u].copy()
            elif target == 'v':
                new_position = self.positions[v].copy()
            else:
                new_position = 0.5 * (self.positions[u] + self.positions[v])
            if not self._can_collapse(u, v, new_position):
                continue
            self._collapse(u, v, target, new_position)
            removed += 1
        return removed

    def to_mesh(self, source: Mesh) -> Mesh:
        keep = np.flatnonzero(self.vertex_alive)
        remap = np.full(self.vertex_alive.size, -1, dtype=np.int64)
        remap[keep] = np.arange(keep.size)
        faces = remap[self.faces[self.face_alive]]
        result = Mesh(
            positions=self.positions[keep],
            indices=faces,
            attributes={k: v[keep] for k, v in self.attributes.items()},
            origin=source.origin.copy(),
            name=source.name,
        )
        result.is_baked = source.is_baked
        return result


def _welded_for_simplification(mesh: Mesh, weld_epsilon: float, logger: logging.Logger) -> Mesh:
    """Returns `mesh` itself when it is already indexed and closed, else a welded copy."""
    if mesh.is_indexed and is_closed_manifold(mesh):
        return mesh
    reason = "is not indexed" if not mesh.is_indexed else "has unwelded seams"
    logger.warning(f"Mesh '{mesh.name}' {reason}; auto-welding before simplification.")
    welded = weld_vertices(mesh, weld_epsilon)
    compute_vertex_normals(welded)
    return welded


def simplify_mesh(
    mesh: Mesh,
    removal_count: int,
    weld_epsilon: float = DEFAULTS.WELD_EPSILON,
    min_vertices: int = DEFAULTS.MIN_SIMPLIFIED_VERTICES,
    flip_threshold: float = DEFAULTS.SIMPLIFY_FLIP_THRESHOLD,
    logger: logging.Logger = logger,
) -> Mesh:
    """
    Removes `removal_count` vertices by edge collapse and returns a new mesh.

    Raises:
        PreconditionViolation: the (welded) mesh is not a closed manifold.
        OverReduction: the target would degenerate the surface. The input
            mesh is left untouched in both cases.
    """
    removal_count = int(removal_count)
    if removal_count <= 0 or mesh.vertex_count == 0:
        return mesh.copy()

    work = _welded_for_simplification(mesh, weld_epsilon, logger)

    before = work.vertex_count
    removable = max(0, before - min_vertices)
    if removal_count > removable:
        raise OverReduction(before, removal_count, removable)
    if not is_closed_manifold(work):
        raise PreconditionViolation(
            f"Mesh '{mesh.name}' is still open after welding; only closed surfaces can be simplified."
        )

    collapser = _EdgeCollapser(work, flip_threshold)
    removed = collapser.run(removal_count, min_vertices)
    if removed < removal_count:
        raise OverReduction(before, removal_count, removed)

    result = collapser.to_mesh(work)
    compute_vertex_normals(result)
    result.flat_shading = True
    return result


def reduce_mesh_complexity(
    mesh: Mesh,
    reduction_ratio: float = 0.5,
    weld_epsilon: float = DEFAULTS.WELD_EPSILON,
    logger: logging.Logger = logger,
) -> Mesh:
    """
    Entry point used by the pipeline: removes `floor(vertices * ratio)`
    vertices. On failure the error is logged and the original mesh is
    returned unchanged.
    """
    work = _welded_for_simplification(mesh, weld_epsilon, logger)
    initial_count = work.vertex_count
    count_to_remove = int(math.floor(initial_count * max(0.0, float(reduction_ratio))))

    start_time = time.perf_counter()
    try:
        simplified = simplify_mesh(work, count_to_remove, weld_epsilon=weld_epsilon, logger=logger)
    except OverReduction as e:
        logger.error(
            f"Simplification aborted for '{mesh.name}': {e} "
            f"Keeping the original {mesh.vertex_count} vertices."
        )
        return mesh
    except PreconditionViolation as e:
        logger.error(f"Simplification failed for '{mesh.name}': {e}")
        return mesh

    elapsed = time.perf_counter() - start_time
    logger.info(f"Reduced from {initial_count} to {simplified.vertex_count} vertices in {elapsed:.3f}s.")
    return simplified
