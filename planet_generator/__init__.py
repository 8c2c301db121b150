# planet_generator/__init__.py

# This file makes the 'planet_generator' directory a Python package.
# It also defines the public API of the package.

from .errors import AssetLoadFailure, OverReduction, PlanetGeneratorError, PreconditionViolation
from .generator import PlanetGenerator
from .mesh import BaselineSnapshot, Mesh, create_uv_sphere, to_non_indexed, weld_vertices
from .noise import NoiseField
from .parameters import NoiseFieldParameters, ScatterParameters, TerrainParameters, WaveParameters
from .picking import ImpactState, pick_surface_point
from .scatter import PlacementRecord, Prefab, PrefabLibrary, scatter_instances
from .simplify import reduce_mesh_complexity, simplify_mesh
from .terrain import bake_terrain, lock_baked_heights

__all__ = [
    "AssetLoadFailure",
    "OverReduction",
    "PlanetGeneratorError",
    "PreconditionViolation",
    "PlanetGenerator",
    "BaselineSnapshot",
    "Mesh",
    "create_uv_sphere",
    "to_non_indexed",
    "weld_vertices",
    "NoiseField",
    "NoiseFieldParameters",
    "ScatterParameters",
    "TerrainParameters",
    "WaveParameters",
    "ImpactState",
    "pick_surface_point",
    "PlacementRecord",
    "Prefab",
    "PrefabLibrary",
    "scatter_instances",
    "reduce_mesh_complexity",
    "simplify_mesh",
    "bake_terrain",
    "lock_baked_heights",
]
