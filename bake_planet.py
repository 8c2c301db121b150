# bake_planet.py

"""
================================================================================
HEADLESS PLANET DRIVER
================================================================================
This script is a command-line tool for building a planet, scattering scenery
on it and running the seismic wave simulation for a fixed number of frames
without a window. The impact point is picked from the centre of the default
camera's view every frame, exactly as the interactive viewer does.

Usage:
    python bake_planet.py --config planet_config.json --frames 240 --export planet.glb
================================================================================
"""
import os
import sys
import json
import logging
import argparse
import time
import numpy as np
from tqdm import tqdm

# Add project root to Python path to allow importing from planet_generator
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from planet_generator.generator import PlanetGenerator
from planet_generator import color_maps
from planet_generator import config as DEFAULTS
from planet_generator.assets import load_assets_blocking
from planet_generator.picking import RayPicker
from planet_generator.runtime import PlanetSimulation, TerrainSimulationState
from planet_generator.scatter import PrefabLibrary
from planet_generator.scene import HeadlessScene


def run_planet(config_path: str, frames: int, fps: float, count: int = None, seed: int = None, export_path: str = None):
    """
    Loads a configuration, builds the planet, scatters instances and steps
    the simulation. Optionally exports the final frame as a mesh file.
    """
    # 1. --- Setup Logging (Rule 2) ---
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    logger = logging.getLogger("Planet")

    # 2. --- Load Configuration (Rule 1) ---
    config = {}
    if config_path:
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, 'r') as f:
                config = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError) as e:
            logger.critical(f"Failed to load or parse config file: {e}")
            return

    planet_params = dict(config.get('planet_generation_parameters', {}))
    if seed is not None:
        planet_params['seed'] = seed
    if count is not None:
        planet_params['clone_count'] = count

    # 3. --- Assets ---
    prefabs = PrefabLibrary.default()
    asset_sources = config.get('assets', {})
    if asset_sources:
        base_dir = os.path.dirname(os.path.abspath(config_path))
        resolved = {name: os.path.join(base_dir, path) for name, path in asset_sources.items()}
        loaded = PrefabLibrary.from_assets(load_assets_blocking(resolved, logger=logger))
        if len(loaded):
            prefabs = loaded
        else:
            logger.warning("No prefab assets loaded; falling back to the default building box.")

    # 4. --- Build the Planet ---
    generator = PlanetGenerator(config=planet_params, logger=logger)
    state = TerrainSimulationState(scene=HeadlessScene(logger=logger), logger=logger)
    if not generator.regenerate(state):
        logger.critical("Could not build the planet; aborting.")
        return
    generator.rescatter(state, generator.scatter_parameters(), prefabs)

    band_lut = color_maps.create_band_color_lut()
    band_map = color_maps.calculate_band_map(
        state.mesh.get_attribute(DEFAULTS.BAKED_HEIGHT_ATTRIBUTE),
        generator.settings['planet_radius'],
    )
    logger.info("--- Elevation Bands ---")
    for name, vertex_count in color_maps.band_histogram(band_map).items():
        logger.info(f"  - {name.capitalize()}: {vertex_count} vertices")

    # 5. --- Simulation Loop ---
    camera_position = np.array(DEFAULTS.CAMERA_POSITION)
    picker = RayPicker(state, camera_position, np.array(DEFAULTS.CAMERA_TARGET) - camera_position)
    simulation = PlanetSimulation(state, generator.wave_parameters(), logger=logger)

    delta_time = 1.0 / fps
    start_time = time.perf_counter()
    for _ in tqdm(range(frames), desc="Simulating Frames"):
        simulation.update(delta_time, picker=picker)
    end_time = time.perf_counter()

    radii = np.linalg.norm(state.mesh.positions, axis=1)
    logger.info(f"Simulation complete! {frames} frames in {end_time - start_time:.2f} seconds.")
    logger.info(f"Impact point: {state.impact}")
    logger.info(f"Radius range after last frame: [{radii.min():.3f}, {radii.max():.3f}]")
    logger.info(f"Placed instances: {len(state.records)} (scene holds {len(state.scene)} objects)")

    # 6. --- Export ---
    if export_path:
        exported = state.mesh.to_trimesh()
        exported.visual.vertex_colors = color_maps.get_vertex_color_array(band_map, band_lut)
        exported.export(export_path)
        logger.info(f"Final frame exported to: {export_path}")


# --- Command-Line Interface ---
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Headless driver for the Low-Poly Planet Generator.")
    parser.add_argument("--config", type=str, default=None, help="Path to the JSON configuration file.")
    parser.add_argument("--frames", type=int, default=120, help="Number of simulation frames to run.")
    parser.add_argument("--fps", type=float, default=60.0, help="Simulated frames per second.")
    parser.add_argument("--count", type=int, default=None, help="Override the scatter instance count.")
    parser.add_argument("--seed", type=int, default=None, help="Override the terrain noise seed.")
    parser.add_argument("--export", type=str, default=None, help="Write the final mesh (.glb, .obj, .ply).")
    args = parser.parse_args()

    run_planet(args.config, args.frames, args.fps, args.count, args.seed, args.export)
