import numpy as np

from planet_generator.mesh import create_uv_sphere, weld_vertices
from planet_generator.picking import RayPicker, pick_surface_point
from planet_generator.runtime import TerrainSimulationState


def test_ray_hits_nearest_surface():
    sphere = weld_vertices(create_uv_sphere(10.0, 32, 24))
    hit = pick_surface_point(sphere, [0.37, 0.21, 30.0], [0.0, 0.0, -1.0])
    assert hit is not None
    assert 9.0 < hit[2] <= 10.0 + 1e-9
    np.testing.assert_allclose(hit[:2], [0.37, 0.21], atol=1e-9)


def test_ray_respects_mesh_origin():
    sphere = weld_vertices(create_uv_sphere(10.0, 32, 24))
    sphere.origin = np.array([50.0, 0.0, 0.0])
    assert pick_surface_point(sphere, [0.0, 0.0, 30.0], [0.0, 0.0, -1.0]) is None
    assert pick_surface_point(sphere, [50.37, 0.21, 30.0], [0.0, 0.0, -1.0]) is not None


def test_miss_returns_none(welded_sphere):
    assert pick_surface_point(welded_sphere, [0.0, 0.0, 5.0], [0.0, 0.0, 1.0]) is None
    assert pick_surface_point(welded_sphere, [0.0, 0.0, 5.0], [0.0, 0.0, 0.0]) is None


def test_ray_picker_reads_current_mesh(welded_sphere):
    state = TerrainSimulationState()
    picker = RayPicker(state, [0.05, 10.0, 15.0], [-0.05, -10.0, -15.0])
    assert picker.pick() is None

    state.set_mesh(welded_sphere)
    hit = picker.pick()
    assert hit is not None
    assert np.linalg.norm(hit) <= 1.0 + 1e-9
