# planet_generator/noise.py

"""
================================================================================
NOISE GENERATION UTILITIES
================================================================================
This module provides 3D Perlin noise and fractal (fBm) sums of it. The JIT
kernels are pure and stateless; `NoiseField` binds them to a permutation table
fixed at construction.

Data Contract:
---------------
- Inputs:
    - p: A pre-shuffled NumPy permutation table (int array of length 512).
    - points: (N, 3) float64 array of coordinates.
    - scale, octaves, persistence, lacunarity: Standard fBm parameters.
- Outputs:
    - A NumPy array of N noise values in [-1, 1].
- Side Effects: None. Sampling never mutates the table, so a NoiseField can be
  shared between threads.
- Invariants: The same point always yields the same value for a given table.
================================================================================
"""

import numpy as np
from numba import njit

from . import config as DEFAULTS

# The 12 edge midpoints of a cube, as used by improved Perlin noise.
_GRADIENT_VECTORS = np.array([
    [1, 1, 0], [-1, 1, 0], [1, -1, 0], [-1, -1, 0],
    [1, 0, 1], [-1, 0, 1], [1, 0, -1], [-1, 0, -1],
    [0, 1, 1], [0, -1, 1], [0, 1, -1], [0, -1, -1],
], dtype=np.float64)

@njit
def _lerp(a, b, x):
    "Linear interpolation."
    return a + x * (b - a)

@njit
def _fade(t):
    "6t^5 - 15t^4 + 10t^3"
    return t * t * t * (t * (t * 6 - 15) + 10)

@njit
def _gradient(h, x, y, z):
    """Calculates the dot product between a gradient vector and coordinates."""
    g = _GRADIENT_VECTORS[h % 12]
    return g[0] * x + g[1] * y + g[2] * z

@njit
def perlin_noise_3d(p, x, y, z):
    """Single-octave 3D Perlin noise at one coordinate."""
    x_floor = np.floor(x)
    y_floor = np.floor(y)
    z_floor = np.floor(z)

    xi = int(x_floor) & 255
    yi = int(y_floor) & 255
    zi = int(z_floor) & 255

    xf = x - x_floor
    yf = y - y_floor
    zf = z - z_floor

    u = _fade(xf)
    v = _fade(yf)
    w = _fade(zf)

    # Numba requires scalar indexing
    a = p[xi] + yi
    aa = p[a] + zi
    ab = p[a + 1] + zi
    b = p[xi + 1] + yi
    ba = p[b] + zi
    bb = p[b + 1] + zi

    x1 = _lerp(_gradient(p[aa], xf, yf, zf), _gradient(p[ba], xf - 1, yf, zf), u)
    x2 = _lerp(_gradient(p[ab], xf, yf - 1, zf), _gradient(p[bb], xf - 1, yf - 1, zf), u)
    y1 = _lerp(x1, x2, v)

    x3 = _lerp(_gradient(p[aa + 1], xf, yf, zf - 1), _gradient(p[ba + 1], xf - 1, yf, zf - 1), u)
    x4 = _lerp(_gradient(p[ab + 1], xf, yf - 1, zf - 1), _gradient(p[bb + 1], xf - 1, yf - 1, zf - 1), u)
    y2 = _lerp(x3, x4, v)

    return _lerp(y1, y2, w)

@njit
def fbm_noise_3d(p, points, scale=1.0, octaves=1, persistence=0.5, lacunarity=2.0):
    """
    Fractal Brownian motion over a batch of points. Each octave samples at
    `frequency` (starting at `scale`) weighted by `amplitude` (starting at
    1.0); the sum is divided by the total weight so the result stays in
    [-1, 1] regardless of the octave count.
    """
    n = points.shape[0]
    total_noise = np.zeros(n)

    for i in range(n):
        noise_val = 0.0
        amplitude = 1.0
        frequency = scale
        max_value = 0.0

        for _ in range(octaves):
            octave_noise = perlin_noise_3d(
                p,
                points[i, 0] * frequency,
                points[i, 1] * frequency,
                points[i, 2] * frequency,
            )
            noise_val += octave_noise * amplitude
            max_value += abs(amplitude)
            amplitude *= persistence
            frequency *= lacunarity

        if max_value > 0.0:
            total_noise[i] = noise_val / max_value

    return total_noise


def build_permutation_table(seed: int) -> np.ndarray:
    """Shuffles 0..255 deterministically and doubles it to avoid index wrapping."""
    p = np.arange(256, dtype=np.int64)
    rng = np.random.default_rng(seed)
    rng.shuffle(p)
    return np.stack([p, p]).flatten()


class NoiseField:
    """
    Deterministic 3D noise sampler. The seed is fixed at construction; two
    fields built from the same seed produce identical values.
    """
    def __init__(self, seed: int = DEFAULTS.DEFAULT_SEED, permutation_table: np.ndarray = None):
        self.seed = seed
        if permutation_table is not None:
            self._p = np.ascontiguousarray(permutation_table, dtype=np.int64)
        else:
            self._p = build_permutation_table(seed)

    @property
    def permutation_table(self) -> np.ndarray:
        return self._p

    def sample(self, x: float, y: float, z: float) -> float:
        """Raw single-octave noise in [-1, 1]."""
        value = perlin_noise_3d(self._p, float(x), float(y), float(z))
        return float(min(1.0, max(-1.0, value)))

    def sample_points(self, points: np.ndarray) -> np.ndarray:
        """Raw single-octave noise for an (N, 3) array."""
        pts = np.ascontiguousarray(points, dtype=np.float64).reshape(-1, 3)
        return np.clip(fbm_noise_3d(self._p, pts, 1.0, 1, 1.0, 1.0), -1.0, 1.0)

    def fbm(self, points: np.ndarray, params) -> np.ndarray:
        """
        Returns the final displacement magnitude for each point: normalized
        fBm in [-1, 1] scaled by `params.amplitude`.

        Args:
            points (np.ndarray): (N, 3) coordinates.
            params (NoiseFieldParameters): Shaping parameters.
        """
        pts = np.ascontiguousarray(points, dtype=np.float64).reshape(-1, 3)
        if pts.shape[0] == 0 or params.octaves <= 0:
            return np.zeros(pts.shape[0])
        values = fbm_noise_3d(
            self._p, pts,
            float(params.scale),
            int(params.octaves),
            float(params.persistence),
            float(params.lacunarity),
        )
        # Perlin output can overshoot 1.0 by a hair; clamp so the displacement
        # bound is exact.
        return np.clip(values, -1.0, 1.0) * params.amplitude
