import logging

import numpy as np
import pytest

from planet_generator.errors import OverReduction, PreconditionViolation
from planet_generator.mesh import Mesh, create_uv_sphere, is_closed_manifold, to_non_indexed, weld_vertices
from planet_generator.parameters import NoiseFieldParameters
from planet_generator.simplify import reduce_mesh_complexity, simplify_mesh
from planet_generator.terrain import bake_terrain


def test_zero_removal_is_a_no_op(welded_sphere):
    result = simplify_mesh(welded_sphere, 0)
    assert result.vertex_count == welded_sphere.vertex_count
    assert result is not welded_sphere


def test_simplification_preserves_closure(welded_sphere):
    removal = welded_sphere.vertex_count // 2
    result = simplify_mesh(welded_sphere, removal)

    assert result.vertex_count == welded_sphere.vertex_count - removal
    assert is_closed_manifold(result)
    assert result.flat_shading
    assert result.normals.shape == result.positions.shape
    assert result.face_normals.shape == (result.triangle_count, 3)
    result.validate()


def test_simplification_keeps_the_silhouette(welded_sphere):
    result = simplify_mesh(welded_sphere, welded_sphere.vertex_count // 3)
    radii = np.linalg.norm(result.positions, axis=1)
    assert radii.min() > 0.8
    assert radii.max() < 1.05


def test_simplify_baked_planet(noise_field, logger):
    baked = bake_terrain(create_uv_sphere(10.0, 32, 24), noise_field, NoiseFieldParameters(), logger=logger)
    result = simplify_mesh(baked, 200, logger=logger)
    assert result.vertex_count == baked.vertex_count - 200
    assert is_closed_manifold(result)
    assert result.is_baked


def test_attributes_follow_collapses(welded_sphere):
    welded_sphere.set_attribute("height", np.linalg.norm(welded_sphere.positions, axis=1))
    result = simplify_mesh(welded_sphere, 40)
    assert result.get_attribute("height").shape == (result.vertex_count,)


def test_non_indexed_input_is_auto_welded(welded_sphere, caplog):
    exploded = to_non_indexed(welded_sphere)
    with caplog.at_level(logging.WARNING):
        result = simplify_mesh(exploded, 10)
    assert result.vertex_count == welded_sphere.vertex_count - 10
    assert is_closed_manifold(result)
    assert "auto-welding" in caplog.text


def test_unwelded_seams_are_auto_welded(raw_sphere, welded_sphere, caplog):
    assert raw_sphere.is_indexed
    with caplog.at_level(logging.WARNING):
        result = simplify_mesh(raw_sphere, 5)
    assert result.vertex_count == welded_sphere.vertex_count - 5
    assert is_closed_manifold(result)
    assert "unwelded seams" in caplog.text
    assert raw_sphere.vertex_count == 17 * 13


def test_reduce_mesh_complexity_welds_raw_primitive(caplog):
    raw = create_uv_sphere(10.0, 32, 24)
    welded_count = weld_vertices(raw).vertex_count
    with caplog.at_level(logging.INFO):
        result = reduce_mesh_complexity(raw, 0.3)
    assert result is not raw
    assert result.vertex_count == welded_count - int(welded_count * 0.3)
    assert is_closed_manifold(result)
    assert "Simplification failed" not in caplog.text


def test_open_mesh_is_rejected(welded_sphere):
    holed = Mesh(positions=welded_sphere.positions, indices=welded_sphere.indices[1:], name="holed")
    with pytest.raises(PreconditionViolation):
        simplify_mesh(holed, 5)


def test_over_reduction_leaves_original(welded_sphere):
    before = welded_sphere.positions.copy()
    with pytest.raises(OverReduction) as excinfo:
        simplify_mesh(welded_sphere, welded_sphere.vertex_count)
    assert excinfo.value.before == welded_sphere.vertex_count
    assert excinfo.value.requested == welded_sphere.vertex_count
    np.testing.assert_array_equal(welded_sphere.positions, before)


def test_reduce_mesh_complexity_logs_counts(welded_sphere, caplog):
    with caplog.at_level(logging.INFO):
        result = reduce_mesh_complexity(welded_sphere, 0.5)
    expected = welded_sphere.vertex_count - welded_sphere.vertex_count // 2
    assert result.vertex_count == expected
    assert f"Reduced from {welded_sphere.vertex_count} to {expected}" in caplog.text


def test_reduce_mesh_complexity_recovers_from_over_reduction(welded_sphere, caplog):
    with caplog.at_level(logging.ERROR):
        result = reduce_mesh_complexity(welded_sphere, 1.0)
    assert result is welded_sphere
    assert "Cannot remove" in caplog.text
