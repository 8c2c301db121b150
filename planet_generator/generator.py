# planet_generator/generator.py

"""
================================================================================
CORE PLANET GENERATOR
================================================================================
This module contains the main PlanetGenerator class. It owns the deterministic
noise field and the pristine base primitive, and exposes the two entry points
the configuration surface is allowed to call: `regenerate` and `rescatter`.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): A dictionary of parameters which can override the
      internal defaults. Expected keys include 'seed', 'noise_scale', etc.
    - logger: A configured Python logging object for runtime messages.
- Inputs (per call): immutable parameter snapshots (TerrainParameters,
  ScatterParameters). A live settings object is never shared with the core.
- Outputs: a baked planet installed into a TerrainSimulationState.
- Side Effects: Logs messages; registers/unregisters objects with the
  state's scene.
- Invariants: Given the same seed and parameters, `regenerate` produces
  identical vertex positions every time. Baking always starts from an
  unmodified copy of the base primitive. A failed call leaves the previous
  state in place.
================================================================================
"""

import logging
import time
from dataclasses import replace

import numpy as np

from . import config as DEFAULTS
from .errors import PlanetGeneratorError, PreconditionViolation
from .mesh import Mesh, create_uv_sphere
from .noise import NoiseField
from .parameters import ScatterParameters, TerrainParameters, WaveParameters
from .scatter import PrefabLibrary, scatter_instances
from .simplify import reduce_mesh_complexity
from .terrain import bake_terrain, lock_baked_heights


class PlanetGenerator:
    """
    Builds and rebuilds the planet. This class is backend-only and does not
    handle any visualization.
    """
    def __init__(self, config: dict, logger: logging.Logger, permutation_table: np.ndarray = None):
        """
        Initializes the planet generator.

        Args:
            config (dict): User-defined parameters to override defaults.
            logger (logging.Logger): The logger instance for all output.
            permutation_table (np.ndarray, optional): A pre-computed noise
                permutation table. If None, one will be generated from the seed.
        """
        self.logger = logger
        self.user_config = config
        self.logger.info("PlanetGenerator initializing...")

        # --- Consolidate Configuration ---
        self.settings = {
            'seed': self.user_config.get('seed', DEFAULTS.DEFAULT_SEED),

            'planet_radius': self.user_config.get('planet_radius', DEFAULTS.PLANET_RADIUS),
            'sphere_width_segments': self.user_config.get('sphere_width_segments', DEFAULTS.SPHERE_WIDTH_SEGMENTS),
            'sphere_height_segments': self.user_config.get('sphere_height_segments', DEFAULTS.SPHERE_HEIGHT_SEGMENTS),

            'noise_scale': self.user_config.get('noise_scale', DEFAULTS.NOISE_SCALE),
            'noise_octaves': self.user_config.get('noise_octaves', DEFAULTS.NOISE_OCTAVES),
            'noise_persistence': self.user_config.get('noise_persistence', DEFAULTS.NOISE_PERSISTENCE),
            'noise_lacunarity': self.user_config.get('noise_lacunarity', DEFAULTS.NOISE_LACUNARITY),
            'noise_amplitude': self.user_config.get('noise_amplitude', DEFAULTS.NOISE_AMPLITUDE),

            'weld_epsilon': self.user_config.get('weld_epsilon', DEFAULTS.WELD_EPSILON),
            'reduction_ratio': self.user_config.get('reduction_ratio', DEFAULTS.REDUCTION_RATIO),

            'clone_count': self.user_config.get('clone_count', DEFAULTS.CLONE_COUNT),
            'scatter_size': self.user_config.get('scatter_size', DEFAULTS.SCATTER_SIZE),
            'scatter_scale_range': self.user_config.get('scatter_scale_range', DEFAULTS.SCATTER_SCALE_RANGE),
            'scatter_jitter_range': self.user_config.get('scatter_jitter_range', DEFAULTS.SCATTER_JITTER_RANGE),
            'scatter_scale_randomization': self.user_config.get('scatter_scale_randomization', DEFAULTS.SCATTER_SCALE_RANDOMIZATION),
            'scatter_rotation_randomization': self.user_config.get('scatter_rotation_randomization', DEFAULTS.SCATTER_ROTATION_RANDOMIZATION),
            'scatter_position_randomization': self.user_config.get('scatter_position_randomization', DEFAULTS.SCATTER_POSITION_RANDOMIZATION),
            'scatter_seed': self.user_config.get('scatter_seed', DEFAULTS.SCATTER_SEED),

            'wave_amplitude': self.user_config.get('wave_amplitude', DEFAULTS.WAVE_AMPLITUDE),
            'wave_frequency': self.user_config.get('wave_frequency', DEFAULTS.WAVE_FREQUENCY),
            'wave_time_scale': self.user_config.get('wave_time_scale', DEFAULTS.WAVE_TIME_SCALE),
            'wave_falloff_radius': self.user_config.get('wave_falloff_radius', DEFAULTS.WAVE_FALLOFF_RADIUS),
        }

        # --- Public Properties for easy access ---
        self.seed = self.settings['seed']

        # --- Initialize Noise ---
        if permutation_table is not None:
            self.logger.debug("Initialized with injected permutation table.")
        else:
            self.logger.debug("No permutation table provided, generating new one from seed.")
        self.noise_field = NoiseField(self.seed, permutation_table=permutation_table)
        self.permutation_table = self.noise_field.permutation_table

        # Pristine primitives, keyed by (radius, width_segments, height_segments).
        self._base_primitives = {}

        self.logger.info(f"PlanetGenerator initialized with seed: {self.seed}")
        self.logger.info(
            f"Planet: radius {self.settings['planet_radius']}, "
            f"{self.settings['sphere_width_segments']}x{self.settings['sphere_height_segments']} segments"
        )

    # --- Parameter Snapshots ---
    def terrain_parameters(self, **overrides) -> TerrainParameters:
        return replace(TerrainParameters.from_settings(self.settings), **overrides)

    def scatter_parameters(self, **overrides) -> ScatterParameters:
        return replace(ScatterParameters.from_settings(self.settings), **overrides)

    def wave_parameters(self, **overrides) -> WaveParameters:
        return replace(WaveParameters.from_settings(self.settings), **overrides)

    # --- Geometry Pipeline ---
    def base_primitive(self, params: TerrainParameters) -> Mesh:
        """Returns a fresh copy of the unmodified sphere for these parameters."""
        key = (float(params.radius), int(params.width_segments), int(params.height_segments))
        if key not in self._base_primitives:
            self._base_primitives[key] = create_uv_sphere(*key)
            self.logger.debug(f"Created base primitive {key}: {self._base_primitives[key]}")
        return self._base_primitives[key].copy()

    def build_planet(self, params: TerrainParameters) -> Mesh:
        """
        Runs the full pipeline on a copy of the base primitive:
        bake -> (simplify) -> lock heights -> capture baseline.
        """
        start_time = time.perf_counter()
        mesh = bake_terrain(
            self.base_primitive(params),
            self.noise_field,
            params.noise,
            weld_epsilon=params.weld_epsilon,
            logger=self.logger,
        )

        if params.reduction_ratio > 0:
            mesh = reduce_mesh_complexity(
                mesh, params.reduction_ratio, weld_epsilon=params.weld_epsilon, logger=self.logger
            )

        mesh.flat_shading = True
        lock_baked_heights(mesh)
        mesh.capture_baseline()
        mesh.validate()

        elapsed = time.perf_counter() - start_time
        self.logger.info(
            f"Planet built: {mesh.vertex_count} vertices, {mesh.triangle_count} triangles "
            f"in {elapsed:.3f}s."
        )
        return mesh

    # --- Entry Points ---
    def regenerate(self, state, params: TerrainParameters = None) -> bool:
        """
        Rebuilds the planet from the pristine base primitive and swaps it into
        `state`. The previous scatter, if any, is replayed on the new surface.
        Returns False (and leaves `state` untouched) if the build fails.
        """
        params = params or self.terrain_parameters()
        try:
            mesh = self.build_planet(params)
        except (PlanetGeneratorError, ValueError) as e:
            self.logger.error(f"Regenerate failed, keeping the previous planet: {e}")
            return False

        # Records point at vertices of the old buffer; they cannot survive the swap.
        state.release_placements()
        state.set_mesh(mesh)

        if state.last_scatter_params is not None:
            self.rescatter(state, state.last_scatter_params, state.last_prefabs)
        return True

    def rescatter(self, state, params: ScatterParameters = None, prefabs=None) -> bool:
        """
        Tears down every placement in `state` and scatters anew. Validation
        happens before teardown, so a rejected request keeps the old placements.
        """
        params = params or self.scatter_parameters()
        if prefabs is None:
            prefabs = state.last_prefabs if state.last_prefabs is not None else PrefabLibrary.default()

        if state.mesh is None:
            self.logger.error("Rescatter requested before a planet was generated.")
            return False
        if params.count > 0 and len(prefabs) == 0:
            self.logger.error("Rescatter rejected: cannot scatter instances from an empty prefab set.")
            return False

        state.release_placements()
        try:
            records = scatter_instances(
                state.mesh, params.count, prefabs, scene=state.scene, params=params, logger=self.logger
            )
        except PreconditionViolation as e:
            self.logger.error(f"Rescatter failed: {e}")
            return False

        state.records = records
        state.last_scatter_params = params
        state.last_prefabs = prefabs
        return True
