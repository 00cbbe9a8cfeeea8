"""Tests for plate generation and the warped two-nearest-plate partition."""

import numpy as np
import pytest

from planet_generator import config as DEFAULTS
from planet_generator import noise
from planet_generator import tectonics

from conftest import fibonacci_directions


def _plates(num_plates=15, continental_fraction=0.4, min_separation=0.4, seed=144):
    return tectonics.generate_plates(
        num_plates, continental_fraction, min_separation, np.random.default_rng(seed)
    )


class TestGeneratePlates:
    def test_count_and_unit_vectors(self):
        plates = _plates()
        assert plates.num_plates == 15
        np.testing.assert_allclose(np.linalg.norm(plates.centers, axis=1), 1.0)
        np.testing.assert_allclose(np.linalg.norm(plates.drifts, axis=1), 1.0)
        assert set(plates.types.tolist()) <= {DEFAULTS.PLATE_TYPE_OCEANIC, DEFAULTS.PLATE_TYPE_CONTINENTAL}

    @pytest.mark.parametrize("seed", [0, 1, 144, 2024])
    def test_centers_respect_minimum_separation(self, seed):
        plates = _plates(num_plates=30, seed=seed)
        gaps = np.linalg.norm(plates.centers[:, None, :] - plates.centers[None, :, :], axis=2)
        off_diagonal = gaps[~np.eye(plates.num_plates, dtype=bool)]
        assert off_diagonal.min() >= 0.4

    def test_same_seed_same_plates(self):
        a = _plates(seed=99)
        b = _plates(seed=99)
        np.testing.assert_array_equal(a.centers, b.centers)
        np.testing.assert_array_equal(a.types, b.types)
        np.testing.assert_array_equal(a.drifts, b.drifts)

    def test_continental_fraction_extremes(self):
        assert np.all(_plates(continental_fraction=1.0).is_continental)
        assert not np.any(_plates(continental_fraction=0.0).is_continental)

    def test_plates_are_read_only(self):
        plates = _plates()
        with pytest.raises(ValueError):
            plates.centers[0, 0] = 0.0
        with pytest.raises(ValueError):
            plates.types[0] = DEFAULTS.PLATE_TYPE_CONTINENTAL

    def test_infeasible_count_rejected_before_sampling(self):
        rng = np.random.default_rng(0)
        state_before = rng.bit_generator.state
        with pytest.raises(ValueError, match="Cannot place"):
            tectonics.generate_plates(500, 0.4, 0.4, rng)
        assert rng.bit_generator.state == state_before

    def test_attempt_cap_raises_instead_of_looping(self):
        with pytest.raises(RuntimeError):
            tectonics.generate_plates(40, 0.4, 0.4, np.random.default_rng(0), max_attempts=5)

    @pytest.mark.parametrize("num_plates, fraction", [(0, 0.5), (5, -0.1), (5, 1.5)])
    def test_bad_arguments(self, num_plates, fraction):
        with pytest.raises(ValueError):
            tectonics.generate_plates(num_plates, fraction, 0.4, np.random.default_rng(0))


class TestPlateCapacity:
    def test_no_separation_is_unbounded(self):
        assert tectonics.plate_capacity(0.0) == float("inf")

    def test_capacity_shrinks_with_separation(self):
        assert tectonics.plate_capacity(0.2) > tectonics.plate_capacity(0.4) > tectonics.plate_capacity(1.0)

    def test_single_plate_always_fits(self):
        tectonics.check_plate_capacity(1, 2.0)

    def test_default_configuration_fits(self):
        tectonics.check_plate_capacity(DEFAULTS.DEFAULT_NUM_PLATES, DEFAULTS.MIN_PLATE_SEPARATION)


class TestPartition:
    def test_nearest_two_plates_are_ordered(self):
        plates = _plates()
        points = fibonacci_directions(3000)
        idx1, idx2, dist1, dist2 = tectonics.query_nearest_plates(points, plates.centers)

        all_dists = np.linalg.norm(points[:, None, :] - plates.centers[None, :, :], axis=2)
        rows = np.arange(points.shape[0])
        np.testing.assert_allclose(dist1, all_dists[rows, idx1])
        np.testing.assert_allclose(dist2, all_dists[rows, idx2])
        assert np.all(idx1 != idx2)
        assert np.all(dist1 <= dist2)

        others = all_dists.copy()
        others[rows, idx1] = np.inf
        others[rows, idx2] = np.inf
        assert np.all(dist2 <= others.min(axis=1) + 1e-12)

    def test_single_plate_has_no_distinct_neighbour(self):
        plates = _plates(num_plates=1)
        points = fibonacci_directions(100)
        idx1, idx2, dist1, dist2 = tectonics.query_nearest_plates(points, plates.centers)
        assert np.all(idx1 == 0)
        np.testing.assert_array_equal(idx1, idx2)
        assert np.all(np.isinf(dist2))
        factor = tectonics.calculate_boundary_factor(dist1, dist2, DEFAULTS.EDGE_THRESHOLD)
        np.testing.assert_array_equal(factor, np.zeros_like(factor))

    def test_warp_keeps_points_on_sphere(self):
        p = noise.create_permutation_table(5)
        points = fibonacci_directions(1000)
        warped = tectonics.warp_directions(points, p, 1.5, 0.25, offset=12347, octaves=3)
        np.testing.assert_allclose(np.linalg.norm(warped, axis=1), 1.0)
        assert not np.allclose(warped, points)
        # The warp is a perturbation, not a scramble.
        assert np.max(np.linalg.norm(warped - points, axis=1)) < 0.6

    def test_zero_warp_is_identity(self):
        p = noise.create_permutation_table(5)
        points = fibonacci_directions(50)
        np.testing.assert_array_equal(tectonics.warp_directions(points, p, 1.5, 0.0), points)

    def test_warp_components_use_permuted_axes(self):
        p = noise.create_permutation_table(5)
        points = fibonacci_directions(500)
        warped = tectonics.warp_directions(points, p, 1.5, 0.25)
        offsets = np.stack([
            noise.sample_sphere_noise(p, points, 1.5),
            noise.sample_sphere_noise(p, points[:, [1, 2, 0]], 1.5),
            noise.sample_sphere_noise(p, points[:, [2, 0, 1]], 1.5),
        ], axis=1)
        expected = points + 0.25 * offsets
        expected /= np.linalg.norm(expected, axis=1, keepdims=True)
        np.testing.assert_allclose(warped, expected, atol=1e-12)


class TestBoundaryFactor:
    def test_profile(self):
        dist1 = np.array([0.3, 0.3, 0.3, 0.3])
        dist2 = np.array([0.3, 0.3 + 0.225, 0.3 + 0.45, 1.5])
        factor = tectonics.calculate_boundary_factor(dist1, dist2, 0.45)
        np.testing.assert_allclose(factor, [1.0, 0.5, 0.0, 0.0], atol=1e-12)
