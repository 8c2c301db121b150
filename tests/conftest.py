import logging
import os

import numpy as np
import pytest

from planet_generator.mesh import compute_vertex_normals, create_uv_sphere, weld_vertices
from planet_generator.noise import NoiseField


@pytest.fixture(scope="session")
def rng_seed():
    return int(os.environ.get("PLANET_TEST_SEED", "1234"))


@pytest.fixture
def rng(rng_seed):
    return np.random.default_rng(rng_seed)


@pytest.fixture
def logger():
    return logging.getLogger("planet_generator.tests")


@pytest.fixture(scope="session")
def noise_field():
    return NoiseField(seed=1337)


@pytest.fixture
def raw_sphere():
    """Unwelded unit sphere straight from the primitive builder."""
    return create_uv_sphere(1.0, 16, 12)


@pytest.fixture
def welded_sphere():
    mesh = weld_vertices(create_uv_sphere(1.0, 16, 12))
    compute_vertex_normals(mesh)
    return mesh
