"""Tests for the 3D Perlin noise source."""

import numpy as np

from planet_generator import noise

from conftest import fibonacci_directions


def test_permutation_table_is_doubled_and_seeded():
    p = noise.create_permutation_table(144)
    assert p.shape == (512,)
    np.testing.assert_array_equal(p[:256], p[256:])
    assert sorted(p[:256].tolist()) == list(range(256))
    np.testing.assert_array_equal(p, noise.create_permutation_table(144))
    assert not np.array_equal(p, noise.create_permutation_table(145))


def test_noise_is_zero_on_integer_lattice():
    p = noise.create_permutation_table(7)
    coords = np.array([0.0, 1.0, -3.0, 17.0, 255.0, 300.0])
    values = noise.perlin_noise_3d(p, coords, coords[::-1].copy(), coords * 2.0, 1, 0.5, 2.0)
    np.testing.assert_array_equal(values, np.zeros_like(coords))


def test_fractal_noise_stays_roughly_in_unit_range():
    p = noise.create_permutation_table(3)
    directions = fibonacci_directions(5000)
    values = noise.sample_sphere_noise(p, directions, 4.0, octaves=5)
    assert np.all(np.abs(values) <= 1.1)
    assert values.std() > 0.05


def test_ridged_noise_is_clipped_to_unit_interval():
    p = noise.create_permutation_table(3)
    values = noise.sample_sphere_noise(p, fibonacci_directions(2000), 8.0, octaves=4, ridged=True)
    assert values.min() >= 0.0
    assert values.max() <= 1.0


def test_sample_does_not_depend_on_batch():
    p = noise.create_permutation_table(11)
    directions = fibonacci_directions(1000)
    full = noise.sample_sphere_noise(p, directions, 2.5, offset=12347, octaves=3)
    part = noise.sample_sphere_noise(p, directions[250:600], 2.5, offset=12347, octaves=3)
    np.testing.assert_array_equal(full[250:600], part)


def test_offsets_decorrelate_layers():
    p = noise.create_permutation_table(11)
    directions = fibonacci_directions(2000)
    a = noise.sample_sphere_noise(p, directions, 3.0, offset=0.0, octaves=3)
    b = noise.sample_sphere_noise(p, directions, 3.0, offset=98761.0, octaves=3)
    assert abs(np.corrcoef(a, b)[0, 1]) < 0.5
