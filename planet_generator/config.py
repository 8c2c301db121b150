# planet_generator/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the planet
generator. These values are used if they are not explicitly provided by the
user's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC PLANET.
Instead, pass a configuration dictionary to the PlanetGenerator instance.
================================================================================
"""

# --- Noise Generation ---
DEFAULT_SEED = 1337

# --- Base Primitive (Rule 1) ---
# The planet starts life as a latitude/longitude sphere centred on the origin.
PLANET_RADIUS = 10.0
SPHERE_WIDTH_SEGMENTS = 32
SPHERE_HEIGHT_SEGMENTS = 24

# --- Terrain Noise (fBm) ---
# NOISE_SCALE is the base frequency applied to raw vertex coordinates, so a
# smaller number means larger continents.
NOISE_SCALE = 0.05
NOISE_OCTAVES = 4
NOISE_PERSISTENCE = 0.5
NOISE_LACUNARITY = 2.0
# Final displacement magnitude in world units. A value of 4 on a radius-10
# planet keeps every vertex within [6, 14] of the centre.
NOISE_AMPLITUDE = 4.0

# --- Welding & Simplification ---
# Vertices closer than this distance are considered coincident and merged.
# Exact float equality is never relied upon: sphere seams and poles are
# generated with trigonometry and differ in the last few bits.
WELD_EPSILON = 1e-6
# Fraction of vertices removed after baking. 0.0 disables simplification.
REDUCTION_RATIO = 0.0
# A closed manifold cannot be collapsed below a tetrahedron.
MIN_SIMPLIFIED_VERTICES = 4
# Minimum cosine between a face normal before and after a collapse. Collapses
# that rotate any surrounding face further than this are rejected (fold-over).
SIMPLIFY_FLIP_THRESHOLD = 0.2

# --- Locked Height Attribute ---
# Name of the per-vertex scalar written once after baking and never touched by
# the wave simulation.
BAKED_HEIGHT_ATTRIBUTE = "baked_height"

# --- Scatter / Cloner ---
CLONE_COUNT = 50
SCATTER_SIZE = 1.0
# Random uniform scale range, multiplied by SCATTER_SIZE.
SCATTER_SCALE_RANGE = (0.001, 0.002)
# Full width of the random jitter applied along each local axis. Each offset
# is drawn from [-range/2, range/2).
SCATTER_JITTER_RANGE = 0.5
SCATTER_SCALE_RANDOMIZATION = False
SCATTER_ROTATION_RANDOMIZATION = False
SCATTER_POSITION_RANDOMIZATION = False
# None means unseeded (fresh OS entropy on every scatter).
SCATTER_SEED = None

# The default prefab: a simple box "building", in local units.
DEFAULT_PREFAB_NAME = "building"
DEFAULT_PREFAB_EXTENTS = (0.2, 1.0, 0.2)

# --- Seismic Wave Simulation (Rule 8) ---
# Peak radial displacement in world units.
WAVE_AMPLITUDE = 0.5
# Spatial frequency of the ripple (radians per world unit of distance).
WAVE_FREQUENCY = 2.0
# How fast the ripple travels outwards (radians per second of sim time).
WAVE_TIME_SCALE = 5.0
# Beyond this distance from the impact point the surface is untouched.
WAVE_FALLOFF_RADIUS = 15.0

# --- Simulation Clock ---
# 0 = paused, 1 = real-time, > 1 = fast-forward.
INITIAL_SIMULATION_SPEED = 1.0

# --- Elevation Bands (Rule 3) ---
# Offsets above the planet radius at which each band ends. Anything above the
# last offset is snow. The values reproduce the classic low-poly palette on a
# radius-10 planet (ocean < 10.2 < sand < 10.5 < grass < 11.2 < rock < 12.0).
ELEVATION_BAND_OFFSETS = {
    "ocean": 0.2,
    "sand": 0.5,
    "grass": 1.2,
    "rock": 2.0,
    "snow": float("inf"),  # The rest is snow
}

# --- Star Field ---
STAR_COUNT = 2000
STAR_FIELD_RADIUS = 300.0
# Stars are scattered across a shell of this thickness outside the radius.
STAR_FIELD_DEPTH = 100.0
STAR_MIN_INTENSITY = 0.5
STAR_INTENSITY_RANGE = 2.0
STAR_MAX_SIZE = 2.0

# --- Camera (used by the headless driver to emulate centre-screen picking) ---
CAMERA_POSITION = (0.0, 10.0, 15.0)
CAMERA_TARGET = (0.0, 0.0, 0.0)
