# planet_generator/scatter.py

"""
================================================================================
SURFACE SCATTER (CLONER)
================================================================================
Places instanced prefab objects on distinct vertices of a target mesh, each
standing upright along the outward surface direction, with optional random
scale, spin and local jitter.

Data Contract:
---------------
- Inputs:
    - mesh (Mesh): the target surface. Its origin defines "outward".
    - count (int): requested instance count. Clamped to the vertex count;
      zero or negative places nothing.
    - prefabs (PrefabLibrary or sequence of Prefab): must be non-empty when
      count > 0.
    - scene (Scene, optional): every created instance is registered with it.
    - params (ScatterParameters): randomization flags and ranges.
- Outputs:
    - A list of PlacementRecord, one per instance, each on a different vertex.
- Side Effects: scene.add() per instance. The prefabs are only read.
- Ownership: the caller releases the returned records before scattering
  again (see PlanetGenerator.rescatter).
================================================================================
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import trimesh
from scipy.spatial.transform import Rotation

from . import config as DEFAULTS
from .errors import PreconditionViolation
from .mesh import Mesh
from .parameters import ScatterParameters
from .transforms import align_up_to, outward_direction, random_spin

logger = logging.getLogger(__name__)


class Instance:
    """An independent, transformable copy of a prefab."""

    def __init__(self, prefab: "Prefab"):
        self.prefab = prefab
        # Geometry is shared read-only with the template; the transform is private.
        self.geometry = prefab.geometry
        self.position = np.zeros(3)
        self.rotation = Rotation.identity()
        self.scale = np.ones(3)
        self.released = False

    @property
    def name(self) -> str:
        return self.prefab.name

    def matrix(self) -> np.ndarray:
        """4x4 local-to-world transform (translate * rotate * scale)."""
        m = np.eye(4)
        m[:3, :3] = self.rotation.as_matrix() * self.scale[np.newaxis, :]
        m[:3, 3] = self.position
        return m

    def release(self) -> None:
        """Drops the geometry reference. Safe to call more than once."""
        self.geometry = None
        self.released = True

    def __repr__(self) -> str:
        return f"Instance(prefab={self.name!r}, position={np.round(self.position, 3).tolist()})"


class Prefab:
    """A loaded template object that can be cloned into independent instances."""

    def __init__(self, name: str, geometry: trimesh.Trimesh):
        self.name = name
        self.geometry = geometry

    def clone(self) -> Instance:
        return Instance(self)

    def __repr__(self) -> str:
        faces = 0 if self.geometry is None else len(self.geometry.faces)
        return f"Prefab(name={self.name!r}, faces={faces})"


def create_box_prefab(
    name: str = DEFAULTS.DEFAULT_PREFAB_NAME,
    extents: Tuple[float, float, float] = DEFAULTS.DEFAULT_PREFAB_EXTENTS,
) -> Prefab:
    """A box standing on its base at the local origin, pointing up +Y."""
    box = trimesh.creation.box(extents=extents)
    box.apply_translation([0.0, extents[1] / 2.0, 0.0])
    return Prefab(name, box)


class PrefabLibrary:
    """An immutable, ordered set of prefabs owned by the caller."""

    def __init__(self, prefabs: Iterable[Prefab] = ()):
        self._prefabs = tuple(prefabs)

    @classmethod
    def from_assets(cls, assets: Mapping[str, object]) -> "PrefabLibrary":
        """Keeps only the prefab entries of a loaded asset mapping (textures are skipped)."""
        return cls(asset for _, asset in sorted(assets.items()) if isinstance(asset, Prefab))

    @classmethod
    def default(cls) -> "PrefabLibrary":
        return cls([create_box_prefab()])

    @property
    def prefabs(self) -> Tuple[Prefab, ...]:
        return self._prefabs

    def __len__(self) -> int:
        return len(self._prefabs)

    def __getitem__(self, index: int) -> Prefab:
        return self._prefabs[index]

    def __iter__(self):
        return iter(self._prefabs)

    def __repr__(self) -> str:
        return f"PrefabLibrary({[p.name for p in self._prefabs]})"


@dataclass(eq=False)
class PlacementRecord:
    """Links a placed instance to the vertex it follows."""
    mesh: Mesh
    vertex_index: int
    instance: Instance
    # Creation-time randomization, re-applied whenever the instance is re-aligned.
    spin: Rotation = field(default_factory=Rotation.identity)
    jitter: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def release(self, scene=None) -> None:
        if scene is not None:
            scene.remove(self.instance)
        self.instance.release()


def sample_distinct_vertices(vertex_count: int, count: int, rng: np.random.Generator) -> List[int]:
    """
    Draws uniformly random vertex indices, rejecting repeats, until `count`
    distinct indices are collected. `count` is clamped to `vertex_count`.
    """
    count = min(int(count), int(vertex_count))
    if count <= 0:
        return []

    chosen = set()
    order = []
    while len(order) < count:
        # Batch the draws; rejection still happens one index at a time.
        for index in rng.integers(0, vertex_count, size=max(16, 2 * (count - len(order)))):
            index = int(index)
            if index in chosen:
                continue
            chosen.add(index)
            order.append(index)
            if len(order) == count:
                break
    return order


def place_instance(record: PlacementRecord) -> None:
    """Moves the instance onto its vertex and stands it along the outward direction."""
    mesh = record.mesh
    position = mesh.positions[record.vertex_index] + mesh.origin
    rotation = align_up_to(outward_direction(position, mesh.origin)) * record.spin
    record.instance.rotation = rotation
    record.instance.position = position + rotation.apply(record.jitter)


def scatter_instances(
    mesh: Mesh,
    count: int,
    prefabs: Sequence[Prefab],
    scene=None,
    params: ScatterParameters = None,
    rng: Optional[np.random.Generator] = None,
    logger: logging.Logger = logger,
) -> List[PlacementRecord]:
    """
    Creates up to `count` instances on distinct vertices of `mesh`.

    Raises:
        PreconditionViolation: `count` > 0 but the prefab set is empty.
    """
    params = params or ScatterParameters()
    if count <= 0:
        return []
    if len(prefabs) == 0:
        raise PreconditionViolation("Cannot scatter instances from an empty prefab set.")
    if mesh.vertex_count == 0:
        return []

    rng = rng if rng is not None else np.random.default_rng(params.seed)
    if count > mesh.vertex_count:
        logger.warning(
            f"Requested {count} instances but '{mesh.name}' only has "
            f"{mesh.vertex_count} vertices; clamping."
        )

    indices = sample_distinct_vertices(mesh.vertex_count, count, rng)
    low, high = params.scale_range

    records = []
    for vertex_index in indices:
        prefab = prefabs[int(rng.integers(0, len(prefabs)))]
        instance = prefab.clone()

        if params.scale_randomization:
            instance.scale = np.full(3, rng.uniform(low * params.size, high * params.size))

        spin = random_spin(rng) if params.rotation_randomization else Rotation.identity()
        if params.position_randomization:
            jitter = (rng.random(3) - 0.5) * params.jitter_range
        else:
            jitter = np.zeros(3)

        record = PlacementRecord(mesh=mesh, vertex_index=vertex_index, instance=instance, spin=spin, jitter=jitter)
        place_instance(record)
        if scene is not None:
            scene.add(instance)
        records.append(record)

    logger.info(f"Scattered {len(records)} instances from {len(prefabs)} prefab(s) onto '{mesh.name}'.")
    return records
