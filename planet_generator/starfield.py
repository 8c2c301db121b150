# planet_generator/starfield.py

"""
Background star field: points scattered over a thick spherical shell around
the planet, tinted from a small warm palette.
"""
from dataclasses import dataclass

import numpy as np

from . import config as DEFAULTS

# Base RGB tints in [0, 1], from blue-white to orange.
STAR_PALETTE = np.array([
    [0.8, 0.9, 1.0],
    [1.0, 1.0, 1.0],
    [1.0, 0.95, 0.8],
    [1.0, 0.85, 0.6],
    [1.0, 0.7, 0.5],
])


@dataclass
class StarField:
    positions: np.ndarray  # (N, 3)
    colors: np.ndarray     # (N, 3) RGB, may exceed 1.0 for bright stars
    sizes: np.ndarray      # (N,)

    @property
    def count(self) -> int:
        return int(self.positions.shape[0])


def create_star_field(
    count: int = DEFAULTS.STAR_COUNT,
    radius: float = DEFAULTS.STAR_FIELD_RADIUS,
    rng: np.random.Generator = None,
) -> StarField:
    """Random directions pushed out to `radius` plus up to STAR_FIELD_DEPTH."""
    rng = rng if rng is not None else np.random.default_rng()
    count = max(0, int(count))

    directions = rng.random((count, 3)) - 0.5
    lengths = np.linalg.norm(directions, axis=1, keepdims=True)
    directions = np.divide(directions, lengths, out=np.zeros_like(directions), where=lengths > 0)
    distances = radius + rng.random(count) * DEFAULTS.STAR_FIELD_DEPTH
    positions = directions * distances[:, np.newaxis]

    tints = STAR_PALETTE[rng.integers(0, len(STAR_PALETTE), size=count)]
    intensity = DEFAULTS.STAR_MIN_INTENSITY + rng.random(count) * DEFAULTS.STAR_INTENSITY_RANGE
    colors = tints * intensity[:, np.newaxis]

    sizes = rng.random(count) * DEFAULTS.STAR_MAX_SIZE
    return StarField(positions=positions, colors=colors, sizes=sizes)
