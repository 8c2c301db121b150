import numpy as np
import pytest

from planet_generator.errors import PreconditionViolation
from planet_generator.mesh import BaselineSnapshot
from planet_generator.parameters import ScatterParameters, WaveParameters
from planet_generator.picking import ImpactState
from planet_generator.runtime import (
    PlacementTracker,
    PlanetSimulation,
    SimulationClock,
    TerrainSimulationState,
    WaveDisplacer,
    wave_falloff,
    wave_value,
)
from planet_generator.scatter import PrefabLibrary, scatter_instances
from planet_generator.scene import HeadlessScene
from planet_generator.transforms import UP_AXIS


@pytest.fixture
def planet(welded_sphere):
    welded_sphere.positions = welded_sphere.positions * 10.0
    welded_sphere.capture_baseline()
    return welded_sphere


@pytest.fixture
def state(planet):
    state = TerrainSimulationState(scene=HeadlessScene())
    state.set_mesh(planet)
    state.impact.update(planet.positions[0])
    return state


class FixedPicker:
    def __init__(self, point):
        self.point = point

    def pick(self):
        return self.point


def test_falloff_is_zero_beyond_radius():
    distances = np.array([15.0, 15.5, 40.0, 1e6])
    np.testing.assert_array_equal(wave_falloff(distances, 15.0), 0.0)
    params = WaveParameters(amplitude=3.0, falloff_radius=15.0)
    for time in np.linspace(0.0, 50.0, 37):
        np.testing.assert_array_equal(wave_value(distances, time, params), 0.0)


def test_falloff_shape():
    np.testing.assert_allclose(wave_falloff([0.0, 7.5], 15.0), [1.0, 0.25])
    np.testing.assert_array_equal(wave_falloff([0.0, 1.0], 0.0), [0.0, 0.0])


def test_zero_amplitude_matches_baseline(planet, rng):
    displacer = WaveDisplacer(WaveParameters(amplitude=0.0))
    for time in (0.0, 0.7, 12.3):
        impact = rng.uniform(-12, 12, size=3)
        displacer.displace(planet, planet.baseline, impact, time)
        np.testing.assert_allclose(planet.positions, planet.baseline.positions, atol=1e-12)


def test_displacement_never_compounds(planet):
    displacer = WaveDisplacer(WaveParameters(amplitude=0.5))
    impact = planet.positions[3].copy()
    displacer.displace(planet, planet.baseline, impact, 1.0)
    first = planet.positions.copy()
    for time in np.linspace(1.1, 5.0, 40):
        displacer.displace(planet, planet.baseline, impact, time)
    displacer.displace(planet, planet.baseline, impact, 1.0)
    np.testing.assert_allclose(planet.positions, first)


def test_displacement_is_radial_and_bounded(planet):
    displacer = WaveDisplacer(WaveParameters(amplitude=0.5))
    displacer.displace(planet, planet.baseline, planet.positions[0].copy(), 0.3)
    base_radii = np.linalg.norm(planet.baseline.positions, axis=1)
    radii = np.linalg.norm(planet.positions, axis=1)
    assert np.all(np.abs(radii - base_radii) <= 0.5 + 1e-12)
    cross = np.cross(planet.positions, planet.baseline.positions)
    np.testing.assert_allclose(cross, 0.0, atol=1e-9)


def test_normals_follow_displacement(planet):
    before = planet.normals.copy()
    WaveDisplacer(WaveParameters(amplitude=2.0, frequency=3.0)).displace(
        planet, planet.baseline, planet.positions[0].copy(), 0.1
    )
    assert planet.normals.shape == before.shape
    assert not np.allclose(planet.normals, before)


def test_impact_is_interpreted_in_world_space(planet):
    displacer = WaveDisplacer(WaveParameters(amplitude=0.5, falloff_radius=1.0))
    planet.origin = np.array([100.0, 0.0, 0.0])
    # Far from every vertex once the origin is taken into account.
    displacer.displace(planet, planet.baseline, planet.baseline.positions[0], 0.0)
    np.testing.assert_allclose(planet.positions, planet.baseline.positions)


def test_mismatched_baseline_is_rejected(planet):
    with pytest.raises(PreconditionViolation):
        WaveDisplacer().displace(planet, BaselineSnapshot(np.zeros((3, 3))), np.zeros(3), 0.0)


def test_tracker_glues_instances_to_vertices(state, rng):
    state.records = scatter_instances(
        state.mesh, 25, PrefabLibrary.default(), scene=state.scene,
        params=ScatterParameters(rotation_randomization=True), rng=rng,
    )
    WaveDisplacer(WaveParameters(amplitude=1.0)).apply(state, 0.4)
    synced = PlacementTracker().update(state)

    assert synced == 25
    for record in state.records:
        vertex = state.mesh.positions[record.vertex_index]
        np.testing.assert_allclose(record.instance.position, vertex)
        outward = vertex / np.linalg.norm(vertex)
        expected_up = outward
        # The creation-time spin is applied first, in the local frame.
        up = (record.instance.rotation * record.spin.inv()).apply(UP_AXIS)
        np.testing.assert_allclose(up, expected_up, atol=1e-9)


def test_tracker_skips_released_instances(state, rng):
    state.records = scatter_instances(state.mesh, 5, PrefabLibrary.default(), rng=rng)
    state.records[0].instance.release()
    assert PlacementTracker().update(state) == 4


def test_clock_speed_and_pause():
    clock = SimulationClock(speed=2.0)
    clock.update(0.5)
    clock.update(0.5)
    assert clock.elapsed == pytest.approx(2.0)

    clock.set_speed(0.0)
    clock.update(10.0)
    assert clock.elapsed == pytest.approx(2.0)

    clock.set_speed(-4.0)
    assert clock.time_scale == 0.0
    assert clock.get_time_string() == "t=   2.00s (x0)"
    clock.reset()
    assert clock.elapsed == 0.0


def test_wave_parameters_take_effect_next_frame(state):
    simulation = PlanetSimulation(state, WaveParameters(amplitude=0.0))
    simulation.update(0.1)
    np.testing.assert_allclose(state.mesh.positions, state.baseline.positions, atol=1e-12)

    simulation.set_wave_parameters(WaveParameters(amplitude=1.0))
    assert simulation.wave_params.amplitude == 1.0
    simulation.update(0.1)
    assert not np.allclose(state.mesh.positions, state.baseline.positions)


def test_impact_state_retains_point_on_miss():
    impact = ImpactState([1.0, 2.0, 3.0])
    impact.update(None)
    np.testing.assert_array_equal(impact.point, [1.0, 2.0, 3.0])
    impact.update(np.array([4.0, 5.0, 6.0]))
    np.testing.assert_array_equal(impact.point, [4.0, 5.0, 6.0])


def test_simulation_frame(state):
    target = state.mesh.positions[7].copy()
    simulation = PlanetSimulation(state, WaveParameters(amplitude=0.5))

    assert simulation.update(1 / 60, picker=FixedPicker(target))
    np.testing.assert_array_equal(state.impact.point, target)

    assert simulation.update(1 / 60, picker=FixedPicker(None))
    np.testing.assert_array_equal(state.impact.point, target)
    assert simulation.clock.elapsed == pytest.approx(2 / 60)
    assert simulation.frame == 2


def test_simulation_without_mesh_is_a_no_op():
    simulation = PlanetSimulation(TerrainSimulationState())
    assert simulation.update(0.1) is False


def test_state_teardown_releases_everything(state, rng):
    state.records = scatter_instances(state.mesh, 10, PrefabLibrary.default(), scene=state.scene, rng=rng)
    assert len(state.scene) == 11
    state.teardown()
    assert state.scene.objects == []
    assert state.records == []
    assert state.mesh is None
