# planet_generator/parameters.py

"""
================================================================================
PARAMETER SNAPSHOTS
================================================================================
Immutable value types handed to the core entry points. The configuration
surface (GUI sliders, CLI flags, JSON files) never shares a live object with
the core: it builds a fresh snapshot and passes it to `regenerate` or
`rescatter`. Use `dataclasses.replace` to derive a modified snapshot.

Data Contract:
---------------
- Inputs: a consolidated settings dict (see PlanetGenerator.settings).
- Outputs: frozen dataclasses with no identity beyond their field values.
- Side Effects: None.
================================================================================
"""
from dataclasses import dataclass, field
from typing import Optional, Tuple

from . import config as DEFAULTS


@dataclass(frozen=True)
class NoiseFieldParameters:
    """fBm shaping parameters. Pure value type."""
    scale: float = DEFAULTS.NOISE_SCALE
    octaves: int = DEFAULTS.NOISE_OCTAVES
    persistence: float = DEFAULTS.NOISE_PERSISTENCE
    lacunarity: float = DEFAULTS.NOISE_LACUNARITY
    amplitude: float = DEFAULTS.NOISE_AMPLITUDE

    @classmethod
    def from_settings(cls, settings: dict) -> "NoiseFieldParameters":
        return cls(
            scale=float(settings.get('noise_scale', DEFAULTS.NOISE_SCALE)),
            octaves=int(settings.get('noise_octaves', DEFAULTS.NOISE_OCTAVES)),
            persistence=float(settings.get('noise_persistence', DEFAULTS.NOISE_PERSISTENCE)),
            lacunarity=float(settings.get('noise_lacunarity', DEFAULTS.NOISE_LACUNARITY)),
            amplitude=float(settings.get('noise_amplitude', DEFAULTS.NOISE_AMPLITUDE)),
        )


@dataclass(frozen=True)
class TerrainParameters:
    """Everything `regenerate` needs to rebuild the planet from scratch."""
    radius: float = DEFAULTS.PLANET_RADIUS
    width_segments: int = DEFAULTS.SPHERE_WIDTH_SEGMENTS
    height_segments: int = DEFAULTS.SPHERE_HEIGHT_SEGMENTS
    noise: NoiseFieldParameters = field(default_factory=NoiseFieldParameters)
    reduction_ratio: float = DEFAULTS.REDUCTION_RATIO
    weld_epsilon: float = DEFAULTS.WELD_EPSILON

    @classmethod
    def from_settings(cls, settings: dict) -> "TerrainParameters":
        return cls(
            radius=float(settings.get('planet_radius', DEFAULTS.PLANET_RADIUS)),
            width_segments=int(settings.get('sphere_width_segments', DEFAULTS.SPHERE_WIDTH_SEGMENTS)),
            height_segments=int(settings.get('sphere_height_segments', DEFAULTS.SPHERE_HEIGHT_SEGMENTS)),
            noise=NoiseFieldParameters.from_settings(settings),
            reduction_ratio=float(settings.get('reduction_ratio', DEFAULTS.REDUCTION_RATIO)),
            weld_epsilon=float(settings.get('weld_epsilon', DEFAULTS.WELD_EPSILON)),
        )


@dataclass(frozen=True)
class ScatterParameters:
    """Options for one scatter pass. `seed=None` draws from fresh OS entropy."""
    count: int = DEFAULTS.CLONE_COUNT
    size: float = DEFAULTS.SCATTER_SIZE
    scale_randomization: bool = DEFAULTS.SCATTER_SCALE_RANDOMIZATION
    rotation_randomization: bool = DEFAULTS.SCATTER_ROTATION_RANDOMIZATION
    position_randomization: bool = DEFAULTS.SCATTER_POSITION_RANDOMIZATION
    scale_range: Tuple[float, float] = DEFAULTS.SCATTER_SCALE_RANGE
    jitter_range: float = DEFAULTS.SCATTER_JITTER_RANGE
    seed: Optional[int] = DEFAULTS.SCATTER_SEED

    @classmethod
    def from_settings(cls, settings: dict) -> "ScatterParameters":
        scale_range = settings.get('scatter_scale_range', DEFAULTS.SCATTER_SCALE_RANGE)
        return cls(
            count=int(settings.get('clone_count', DEFAULTS.CLONE_COUNT)),
            size=float(settings.get('scatter_size', DEFAULTS.SCATTER_SIZE)),
            scale_randomization=bool(settings.get('scatter_scale_randomization', DEFAULTS.SCATTER_SCALE_RANDOMIZATION)),
            rotation_randomization=bool(settings.get('scatter_rotation_randomization', DEFAULTS.SCATTER_ROTATION_RANDOMIZATION)),
            position_randomization=bool(settings.get('scatter_position_randomization', DEFAULTS.SCATTER_POSITION_RANDOMIZATION)),
            scale_range=(float(scale_range[0]), float(scale_range[1])),
            jitter_range=float(settings.get('scatter_jitter_range', DEFAULTS.SCATTER_JITTER_RANGE)),
            seed=settings.get('scatter_seed', DEFAULTS.SCATTER_SEED),
        )


@dataclass(frozen=True)
class WaveParameters:
    """Seismic ripple shaping. `amplitude=0` disables the deformation."""
    amplitude: float = DEFAULTS.WAVE_AMPLITUDE
    frequency: float = DEFAULTS.WAVE_FREQUENCY
    time_scale: float = DEFAULTS.WAVE_TIME_SCALE
    falloff_radius: float = DEFAULTS.WAVE_FALLOFF_RADIUS

    @classmethod
    def from_settings(cls, settings: dict) -> "WaveParameters":
        return cls(
            amplitude=float(settings.get('wave_amplitude', DEFAULTS.WAVE_AMPLITUDE)),
            frequency=float(settings.get('wave_frequency', DEFAULTS.WAVE_FREQUENCY)),
            time_scale=float(settings.get('wave_time_scale', DEFAULTS.WAVE_TIME_SCALE)),
            falloff_radius=float(settings.get('wave_falloff_radius', DEFAULTS.WAVE_FALLOFF_RADIUS)),
        )
