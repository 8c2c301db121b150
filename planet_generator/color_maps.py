# planet_generator/color_maps.py

"""
================================================================================
ELEVATION BAND COLOR MAPPING
================================================================================
This module contains the band constants and functions for converting locked
baked heights into per-vertex colors.

It is a pure, stateless utility with no dependencies on Pygame, so it is
shared by the real-time viewer and the headless CLI driver. Classification
always reads the locked baked height, never the live (vibrating) positions,
so band boundaries stay put while the surface ripples.
================================================================================
"""
import numpy as np
from . import config as DEFAULTS

# --- Band ID Constants (Rule 1) ---
BAND_ID_OCEAN = 0
BAND_ID_SAND = 1
BAND_ID_GRASS = 2
BAND_ID_ROCK = 3
BAND_ID_SNOW = 4

BAND_NAMES = ("ocean", "sand", "grass", "rock", "snow")

# --- Default Color Mappings ---
COLOR_MAP_PLANET = {
    "ocean": (30, 80, 200),
    "sand": (230, 215, 140),
    "grass": (60, 150, 60),
    "rock": (110, 100, 95),
    "snow": (245, 245, 250),
}


def create_band_color_lut() -> np.ndarray:
    """Creates a LUT where the index is the band ID and the value is the RGB color."""
    return np.array([COLOR_MAP_PLANET[name] for name in BAND_NAMES], dtype=np.uint8)


def calculate_band_map(baked_heights: np.ndarray, radius: float = DEFAULTS.PLANET_RADIUS) -> np.ndarray:
    """
    Classifies each vertex by its locked distance from the planet centre.
    Band edges are `radius + offset` for each entry of ELEVATION_BAND_OFFSETS.
    """
    offsets = DEFAULTS.ELEVATION_BAND_OFFSETS
    heights = np.asarray(baked_heights, dtype=np.float64)
    conditions = [
        heights < radius + offsets["ocean"],
        heights < radius + offsets["sand"],
        heights < radius + offsets["grass"],
        heights < radius + offsets["rock"],
    ]
    choices = [BAND_ID_OCEAN, BAND_ID_SAND, BAND_ID_GRASS, BAND_ID_ROCK]
    return np.select(conditions, choices, default=BAND_ID_SNOW).astype(np.uint8)


def get_vertex_color_array(band_map: np.ndarray, band_lut: np.ndarray) -> np.ndarray:
    """
    Converts a band map into an (N, 3) uint8 color array using a pre-computed
    lookup table. This is a very fast operation.
    """
    return band_lut[band_map]


def get_face_color_array(band_map: np.ndarray, triangles: np.ndarray, band_lut: np.ndarray) -> np.ndarray:
    """Flat per-face colors: each triangle takes the highest band among its corners."""
    if triangles.size == 0:
        return np.zeros((0, 3), dtype=np.uint8)
    face_bands = band_map[triangles].max(axis=1)
    return band_lut[face_bands]


def band_histogram(band_map: np.ndarray) -> dict:
    """Vertex count per band name, used for logging."""
    counts = np.bincount(band_map, minlength=len(BAND_NAMES))
    return {name: int(counts[i]) for i, name in enumerate(BAND_NAMES)}
