import numpy as np

from planet_generator.noise import NoiseField, build_permutation_table
from planet_generator.parameters import NoiseFieldParameters


def test_sampling_is_pure(noise_field):
    first = noise_field.sample(0.3, 1.7, -2.2)
    second = noise_field.sample(0.3, 1.7, -2.2)
    assert first == second

    points = np.array([[0.1, 0.2, 0.3], [4.5, -1.25, 7.0]])
    np.testing.assert_array_equal(noise_field.sample_points(points), noise_field.sample_points(points))


def test_same_seed_same_field(rng):
    points = rng.uniform(-20, 20, size=(200, 3))
    params = NoiseFieldParameters()
    a = NoiseField(seed=42).fbm(points, params)
    b = NoiseField(seed=42).fbm(points, params)
    np.testing.assert_array_equal(a, b)


def test_different_seeds_differ(rng):
    points = rng.uniform(-20, 20, size=(200, 3))
    params = NoiseFieldParameters(scale=0.3)
    a = NoiseField(seed=1).fbm(points, params)
    b = NoiseField(seed=2).fbm(points, params)
    assert not np.allclose(a, b)


def test_raw_noise_is_bounded(noise_field, rng):
    points = rng.uniform(-50, 50, size=(2000, 3))
    values = noise_field.sample_points(points)
    assert values.min() >= -1.0
    assert values.max() <= 1.0


def test_noise_vanishes_on_lattice_points(noise_field):
    for x, y, z in [(0, 0, 0), (1, 2, 3), (-4, 7, 11)]:
        assert noise_field.sample(x, y, z) == 0.0


def test_fbm_scaled_by_amplitude(noise_field, rng):
    points = rng.uniform(-30, 30, size=(1000, 3))
    unit = noise_field.fbm(points, NoiseFieldParameters(scale=0.2, amplitude=1.0))
    scaled = noise_field.fbm(points, NoiseFieldParameters(scale=0.2, amplitude=4.0))
    assert np.all(np.abs(scaled) <= 4.0)
    np.testing.assert_allclose(scaled, unit * 4.0)


def test_fbm_degenerate_inputs(noise_field):
    assert noise_field.fbm(np.zeros((0, 3)), NoiseFieldParameters()).shape == (0,)
    zeros = noise_field.fbm(np.ones((5, 3)), NoiseFieldParameters(octaves=0))
    np.testing.assert_array_equal(zeros, np.zeros(5))


def test_permutation_table_layout():
    table = build_permutation_table(7)
    assert table.shape == (512,)
    np.testing.assert_array_equal(table[:256], table[256:])
    np.testing.assert_array_equal(np.sort(table[:256]), np.arange(256))


def test_injected_permutation_table_is_used():
    table = build_permutation_table(99)
    field = NoiseField(seed=0, permutation_table=table)
    np.testing.assert_array_equal(field.permutation_table, table)
    assert field.sample(0.5, 0.25, 0.75) == NoiseField(seed=99).sample(0.5, 0.25, 0.75)
