import dataclasses
import logging

import numpy as np
import pytest

from planet_generator import config as DEFAULTS
from planet_generator.errors import PreconditionViolation
from planet_generator.generator import PlanetGenerator
from planet_generator.mesh import is_closed_manifold
from planet_generator.parameters import ScatterParameters, TerrainParameters
from planet_generator.runtime import TerrainSimulationState
from planet_generator.scatter import PrefabLibrary
from planet_generator.scene import HeadlessScene


@pytest.fixture
def generator(logger):
    return PlanetGenerator(config={}, logger=logger)


@pytest.fixture
def state():
    return TerrainSimulationState(scene=HeadlessScene())


def test_settings_consolidation(logger):
    generator = PlanetGenerator(config={'seed': 7, 'noise_octaves': 6, 'clone_count': 12}, logger=logger)
    assert generator.seed == 7
    assert generator.settings['noise_octaves'] == 6
    assert generator.settings['planet_radius'] == DEFAULTS.PLANET_RADIUS
    assert generator.terrain_parameters().noise.octaves == 6
    assert generator.scatter_parameters().count == 12
    assert generator.wave_parameters().falloff_radius == DEFAULTS.WAVE_FALLOFF_RADIUS


def test_parameter_snapshots_are_frozen(generator):
    params = generator.terrain_parameters()
    with pytest.raises(dataclasses.FrozenInstanceError):
        params.radius = 3.0
    assert generator.terrain_parameters(radius=3.0).radius == 3.0


def test_regenerate_is_deterministic(generator, state):
    assert generator.regenerate(state)
    first = state.mesh.positions.copy()
    assert generator.regenerate(state)
    np.testing.assert_array_equal(state.mesh.positions, first)

    other = TerrainSimulationState()
    PlanetGenerator(config={}, logger=logging.getLogger("other")).regenerate(other)
    np.testing.assert_array_equal(other.mesh.positions, first)


def test_regenerate_installs_a_complete_planet(generator, state):
    generator.regenerate(state)
    mesh = state.mesh
    assert mesh.vertex_count == 738
    assert is_closed_manifold(mesh)
    assert mesh in state.scene
    np.testing.assert_array_equal(mesh.baseline.positions, mesh.positions)
    heights = mesh.get_attribute(DEFAULTS.BAKED_HEIGHT_ATTRIBUTE)
    np.testing.assert_allclose(heights, np.linalg.norm(mesh.positions, axis=1))


def test_base_primitive_stays_pristine(generator):
    params = generator.terrain_parameters()
    generator.build_planet(params)
    generator.build_planet(params)
    base = generator.base_primitive(params)
    assert not base.is_baked
    np.testing.assert_allclose(np.linalg.norm(base.positions, axis=1), params.radius)


def test_regenerate_with_reduction(generator, state):
    params = generator.terrain_parameters(reduction_ratio=0.3)
    assert generator.regenerate(state, params)
    assert state.mesh.vertex_count == 738 - int(738 * 0.3)
    assert is_closed_manifold(state.mesh)
    assert state.mesh.flat_shading


def test_failed_regenerate_keeps_previous_planet(generator, state, monkeypatch):
    generator.regenerate(state)
    previous = state.mesh

    def broken_build(params):
        raise PreconditionViolation("boom")

    monkeypatch.setattr(generator, "build_planet", broken_build)
    assert generator.regenerate(state) is False
    assert state.mesh is previous


def test_rescatter_tears_down_previous_placements(generator, state):
    generator.regenerate(state)
    prefabs = PrefabLibrary.default()

    assert generator.rescatter(state, ScatterParameters(count=50), prefabs)
    old_records = list(state.records)
    assert len(state.scene) == 51

    assert generator.rescatter(state, ScatterParameters(count=20), prefabs)
    assert len(state.records) == 20
    assert len(state.scene) == 21
    for record in old_records:
        assert record.instance.released
        assert record.instance not in state.scene


def test_rescatter_rejects_empty_prefabs_without_teardown(generator, state):
    generator.regenerate(state)
    generator.rescatter(state, ScatterParameters(count=5), PrefabLibrary.default())
    kept = list(state.records)

    assert generator.rescatter(state, ScatterParameters(count=5), PrefabLibrary()) is False
    assert len(state.records) == len(kept)
    assert all(a is b for a, b in zip(state.records, kept))
    assert not any(r.instance.released for r in kept)


def test_rescatter_before_regenerate_fails(generator, state):
    assert generator.rescatter(state, ScatterParameters(count=5)) is False


def test_regenerate_replays_last_scatter(generator, state):
    generator.regenerate(state)
    generator.rescatter(state, ScatterParameters(count=10), PrefabLibrary.default())
    old_mesh = state.mesh

    generator.regenerate(state, generator.terrain_parameters(noise=dataclasses.replace(
        generator.terrain_parameters().noise, amplitude=2.0)))
    assert state.mesh is not old_mesh
    assert old_mesh not in state.scene
    assert len(state.records) == 10
    assert all(r.mesh is state.mesh for r in state.records)
    assert len(state.scene) == 11
