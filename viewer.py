# viewer.py

"""
================================================================================
INTERACTIVE PLANET VIEWER
================================================================================
A small pygame front-end for the planet generator. It draws the flat-shaded
planet with a painter's algorithm, the scattered instances as markers and the
star field, and forwards user input to the two core entry points.

Controls:
    Mouse move     - aim the seismic impact point (ray cast from the cursor)
    Left/Right     - orbit the camera
    R              - regenerate with a new terrain seed
    [ / ]          - rescatter with fewer / more instances
    - / =          - lower / raise the wave amplitude
    F              - toggle wireframe
    Space          - pause / resume the simulation
    Esc            - quit

Usage:
    python viewer.py --config planet_config.json
================================================================================
"""
import argparse
import json
import logging
import math
import sys
from dataclasses import replace

import numpy as np
import pygame

from planet_generator import color_maps
from planet_generator import config as DEFAULTS
from planet_generator.generator import PlanetGenerator
from planet_generator.picking import pick_surface_point
from planet_generator.runtime import PlanetSimulation, TerrainSimulationState
from planet_generator.scatter import PrefabLibrary
from planet_generator.scene import HeadlessScene
from planet_generator.starfield import create_star_field

# --- Application Constants (Rule 1) ---
SCREEN_WIDTH = 1280
SCREEN_HEIGHT = 720
FIELD_OF_VIEW_DEGREES = 75.0
ORBIT_SPEED_RADIANS = 0.03
COUNT_STEP = 10
AMPLITUDE_STEP = 0.1
LIGHT_DIRECTION = np.array([0.5, 0.8, 0.3]) / np.linalg.norm([0.5, 0.8, 0.3])
AMBIENT_LIGHT = 0.35
BACKGROUND_COLOR = (5, 5, 15)
INSTANCE_COLOR = (200, 60, 40)


class OrbitCamera:
    """A perspective camera orbiting the planet around the world Y axis."""
    def __init__(self, position=DEFAULTS.CAMERA_POSITION, target=DEFAULTS.CAMERA_TARGET):
        self.target = np.asarray(target, dtype=np.float64)
        offset = np.asarray(position, dtype=np.float64) - self.target
        self.distance = float(np.linalg.norm(offset))
        self.height = float(offset[1])
        self.yaw = math.atan2(offset[0], offset[2])
        self.focal = (SCREEN_HEIGHT / 2) / math.tan(math.radians(FIELD_OF_VIEW_DEGREES) / 2)

    @property
    def position(self) -> np.ndarray:
        horizontal = math.sqrt(max(self.distance ** 2 - self.height ** 2, 0.0))
        return self.target + np.array([horizontal * math.sin(self.yaw), self.height, horizontal * math.cos(self.yaw)])

    def basis(self):
        forward = self.target - self.position
        forward /= np.linalg.norm(forward)
        right = np.cross(forward, [0.0, 1.0, 0.0])
        right /= np.linalg.norm(right)
        up = np.cross(right, forward)
        return right, up, forward

    def orbit(self, delta_yaw: float):
        self.yaw += delta_yaw

    def project(self, points: np.ndarray):
        """World points -> (screen xy, camera depth)."""
        right, up, forward = self.basis()
        relative = points - self.position
        x = relative @ right
        y = relative @ up
        z = relative @ forward
        safe_z = np.where(z > 1e-6, z, 1e-6)
        screen = np.column_stack((
            SCREEN_WIDTH / 2 + self.focal * x / safe_z,
            SCREEN_HEIGHT / 2 - self.focal * y / safe_z,
        ))
        return screen, z

    def screen_ray(self, screen_x: float, screen_y: float) -> np.ndarray:
        right, up, forward = self.basis()
        direction = (
            right * (screen_x - SCREEN_WIDTH / 2) / self.focal
            + up * (SCREEN_HEIGHT / 2 - screen_y) / self.focal
            + forward
        )
        return direction / np.linalg.norm(direction)


class PlanetViewerApp:
    """The main application class for the planet viewer."""
    def __init__(self, config: dict):
        logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
        self.logger = logging.getLogger(__name__)

        self.logger.info("Initializing Pygame...")
        pygame.init()
        self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
        pygame.display.set_caption("Low-Poly Planet")
        self.clock = pygame.time.Clock()
        self.is_running = True
        self.wireframe = False

        # --- Core ---
        self.config = dict(config)
        self.generator = PlanetGenerator(config=self.config, logger=self.logger)
        self.state = TerrainSimulationState(scene=HeadlessScene(logger=self.logger), logger=self.logger)
        self.terrain_params = self.generator.terrain_parameters()
        self.scatter_params = self.generator.scatter_parameters()
        self.prefabs = PrefabLibrary.default()

        self.generator.regenerate(self.state, self.terrain_params)
        self.generator.rescatter(self.state, self.scatter_params, self.prefabs)
        self.simulation = PlanetSimulation(self.state, self.generator.wave_parameters(), logger=self.logger)

        self.camera = OrbitCamera()
        self.stars = create_star_field(rng=np.random.default_rng(self.generator.seed))
        self.band_lut = color_maps.create_band_color_lut()
        self._refresh_band_map()

    def _refresh_band_map(self):
        self.band_map = color_maps.calculate_band_map(
            self.state.mesh.get_attribute(DEFAULTS.BAKED_HEIGHT_ATTRIBUTE),
            self.terrain_params.radius,
        )

    def run(self):
        """The main application loop."""
        while self.is_running:
            delta_time = self.clock.tick(60) / 1000.0
            self.handle_events()
            self.update(delta_time)
            self.draw()

        self.logger.info("Exiting viewer.")
        self.state.teardown()
        pygame.quit()
        sys.exit()

    def handle_events(self):
        """Processes user input and other events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.is_running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.is_running = False
                elif event.key == pygame.K_f:
                    self.wireframe = not self.wireframe
                elif event.key == pygame.K_SPACE:
                    self.simulation.clock.set_speed(0.0 if self.simulation.clock.time_scale > 0 else 1.0)
                elif event.key == pygame.K_r:
                    self._regenerate_with_new_seed()
                elif event.key == pygame.K_LEFTBRACKET:
                    self._rescatter(self.scatter_params.count - COUNT_STEP)
                elif event.key == pygame.K_RIGHTBRACKET:
                    self._rescatter(self.scatter_params.count + COUNT_STEP)
                elif event.key == pygame.K_MINUS:
                    self._change_amplitude(-AMPLITUDE_STEP)
                elif event.key == pygame.K_EQUALS:
                    self._change_amplitude(AMPLITUDE_STEP)

    def _regenerate_with_new_seed(self):
        self.config['seed'] = int(np.random.default_rng().integers(0, 2**31 - 1))
        self.generator = PlanetGenerator(config=self.config, logger=self.logger)
        if self.generator.regenerate(self.state, self.terrain_params):
            self._refresh_band_map()

    def _rescatter(self, new_count: int):
        self.scatter_params = replace(self.scatter_params, count=max(0, new_count))
        self.generator.rescatter(self.state, self.scatter_params, self.prefabs)

    def _change_amplitude(self, delta: float):
        params = self.simulation.wave_params
        self.simulation.set_wave_parameters(replace(params, amplitude=max(0.0, params.amplitude + delta)))
        self.logger.info(f"Wave amplitude set to {self.simulation.wave_params.amplitude:.2f}.")

    def _update_caption(self):
        pygame.display.set_caption(
            f"Low-Poly Planet | {len(self.state.records)} instances | "
            f"amplitude {self.simulation.wave_params.amplitude:.2f} | {self.simulation.clock.get_time_string()}"
        )

    def update(self, delta_time: float):
        """Handles continuous input and steps the simulation."""
        keys = pygame.key.get_pressed()
        if keys[pygame.K_LEFT]:
            self.camera.orbit(-ORBIT_SPEED_RADIANS)
        if keys[pygame.K_RIGHT]:
            self.camera.orbit(ORBIT_SPEED_RADIANS)

        mouse_x, mouse_y = pygame.mouse.get_pos()
        hit = pick_surface_point(self.state.mesh, self.camera.position, self.camera.screen_ray(mouse_x, mouse_y))
        self.state.impact.update(hit)
        self.simulation.update(delta_time)
        self._update_caption()

    def draw(self):
        """Handles all rendering for the application."""
        self.screen.fill(BACKGROUND_COLOR)
        self._draw_stars()
        self._draw_planet()
        self._draw_instances()
        pygame.display.flip()

    def _draw_stars(self):
        screen, depth = self.camera.project(self.stars.positions)
        colors = np.clip(self.stars.colors * 255, 0, 255).astype(np.uint8)
        for (x, y), z, color, size in zip(screen, depth, colors, self.stars.sizes):
            if z > 0 and 0 <= x < SCREEN_WIDTH and 0 <= y < SCREEN_HEIGHT:
                pygame.draw.circle(self.screen, color, (int(x), int(y)), max(1, int(size / 2)))

    def _draw_planet(self):
        mesh = self.state.mesh
        triangles = mesh.triangles()
        world = mesh.world_positions()
        screen, depth = self.camera.project(world)

        face_colors = color_maps.get_face_color_array(self.band_map, triangles, self.band_lut)
        light = np.clip(mesh.face_normals @ LIGHT_DIRECTION, 0.0, 1.0)
        shaded = (face_colors * (AMBIENT_LIGHT + (1 - AMBIENT_LIGHT) * light)[:, np.newaxis]).astype(np.uint8)

        # Back-face culling against the camera, then far-to-near.
        centers = world[triangles].mean(axis=1)
        facing = np.einsum('ij,ij->i', mesh.face_normals, self.camera.position - centers) > 0
        face_depth = depth[triangles].mean(axis=1)
        for f in np.argsort(-face_depth):
            if not facing[f] or np.any(depth[triangles[f]] <= 0):
                continue
            points = screen[triangles[f]]
            if self.wireframe:
                pygame.draw.polygon(self.screen, shaded[f], points, 1)
            else:
                pygame.draw.polygon(self.screen, shaded[f], points)

    def _draw_instances(self):
        if not self.state.records:
            return
        # Base and tip of each instance's local +Y axis, mapped through its transform.
        local = np.array([[0.0, 0.0, 0.0, 1.0], [0.0, DEFAULTS.DEFAULT_PREFAB_EXTENTS[1], 0.0, 1.0]])
        ends = np.array([(r.instance.matrix() @ local.T).T[:, :3] for r in self.state.records])
        bases, tops = ends[:, 0], ends[:, 1]
        base_screen, base_depth = self.camera.project(bases)
        top_screen, top_depth = self.camera.project(tops)
        for b, t, bd, td in zip(base_screen, top_screen, base_depth, top_depth):
            if bd > 0 and td > 0:
                pygame.draw.line(self.screen, INSTANCE_COLOR, b, t, 2)


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="Interactive viewer for the Low-Poly Planet Generator.")
    parser.add_argument("--config", type=str, default=None, help="Path to the JSON configuration file.")
    args = parser.parse_args()

    planet_params = {}
    if args.config:
        with open(args.config, 'r') as f:
            planet_params = json.load(f).get('planet_generation_parameters', {})

    app = PlanetViewerApp(planet_params)
    app.run()
