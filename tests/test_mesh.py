import numpy as np
import pytest

from planet_generator.mesh import (
    BaselineSnapshot,
    Mesh,
    compute_vertex_normals,
    create_uv_sphere,
    is_closed_manifold,
    to_non_indexed,
    weld_vertices,
)


def test_uv_sphere_layout():
    sphere = create_uv_sphere(10.0, 32, 24)
    assert sphere.vertex_count == 33 * 25
    assert sphere.triangle_count == 1472
    np.testing.assert_allclose(np.linalg.norm(sphere.positions, axis=1), 10.0)
    sphere.validate()


def test_raw_sphere_has_open_seams(raw_sphere):
    assert not is_closed_manifold(raw_sphere)


def test_weld_closes_the_sphere():
    welded = weld_vertices(create_uv_sphere(10.0, 32, 24))
    assert welded.vertex_count == 738
    assert welded.triangle_count == 1472
    assert is_closed_manifold(welded)
    # Euler characteristic of a sphere.
    assert welded.vertex_count - 3 * welded.triangle_count // 2 + welded.triangle_count == 2


def test_weld_non_indexed_mesh(welded_sphere):
    exploded = to_non_indexed(welded_sphere)
    assert not exploded.is_indexed
    assert exploded.vertex_count == 3 * welded_sphere.triangle_count

    rewelded = weld_vertices(exploded)
    assert rewelded.vertex_count == welded_sphere.vertex_count
    assert is_closed_manifold(rewelded)


def test_weld_carries_attributes(raw_sphere):
    raw_sphere.set_attribute("tag", np.arange(raw_sphere.vertex_count, dtype=np.float64))
    welded = weld_vertices(raw_sphere)
    assert welded.get_attribute("tag").shape == (welded.vertex_count,)


def test_vertex_normals_point_outward(welded_sphere):
    normals = compute_vertex_normals(welded_sphere)
    radial = welded_sphere.positions / np.linalg.norm(welded_sphere.positions, axis=1, keepdims=True)
    assert np.all(np.einsum('ij,ij->i', normals, radial) > 0.95)
    assert welded_sphere.face_normals.shape == (welded_sphere.triangle_count, 3)


def test_attribute_length_is_enforced(welded_sphere):
    with pytest.raises(ValueError):
        welded_sphere.set_attribute("bad", np.zeros(3))


def test_validate_rejects_out_of_range_indices():
    mesh = Mesh(positions=np.zeros((3, 3)), indices=[[0, 1, 5]])
    with pytest.raises(ValueError):
        mesh.validate()


def test_baseline_snapshot_is_immutable(welded_sphere):
    snapshot = welded_sphere.capture_baseline()
    assert isinstance(snapshot, BaselineSnapshot)
    assert welded_sphere.baseline is snapshot
    with pytest.raises(ValueError):
        snapshot.positions[0, 0] = 5.0

    welded_sphere.positions[0, 0] = 123.0
    assert snapshot.positions[0, 0] != 123.0


def test_copy_is_independent(welded_sphere):
    clone = welded_sphere.copy()
    clone.positions[0] += 1.0
    assert not np.array_equal(clone.positions[0], welded_sphere.positions[0])


def test_to_trimesh_applies_origin(welded_sphere):
    welded_sphere.origin = np.array([1.0, 2.0, 3.0])
    tm = welded_sphere.to_trimesh()
    assert len(tm.vertices) == welded_sphere.vertex_count
    np.testing.assert_allclose(tm.vertices[0], welded_sphere.positions[0] + [1.0, 2.0, 3.0])
