"""Tests for biome banding and color conversion."""

import numpy as np
import pytest

from planet_generator import color_maps
from planet_generator import config as DEFAULTS

BAND_NAMES = [name for _, name in DEFAULTS.BIOME_BANDS]


def _band_name(height):
    return BAND_NAMES[int(color_maps.calculate_biome_map(np.array([height]))[0])]


@pytest.mark.parametrize("height, expected", [
    (-0.9, "deep_trench"),
    (-10.0, "deep_trench"),
    (-0.45, "ocean"),
    (-0.3, "ocean"),
    (-0.25, "shallow_water"),
    (0.0, "sand"),
    (0.1, "plains"),
    (0.2, "foothills"),
    (0.4, "high_rock"),
    (0.5, "snow"),
    (25.0, "snow"),
])
def test_band_lookup(height, expected):
    assert _band_name(height) == expected


def test_banding_is_monotonic():
    heights = np.linspace(-1.0, 2.0, 5001)
    band_ids = color_maps.calculate_biome_map(heights)
    assert np.all(np.diff(band_ids.astype(int)) >= 0)
    assert band_ids[0] == 0
    assert band_ids[-1] == len(DEFAULTS.BIOME_BANDS) - 1


def test_last_band_catches_everything_without_infinite_threshold():
    bands = [(-0.1, "ocean"), (0.3, "plains"), (0.6, "snow")]
    band_ids = color_maps.calculate_biome_map(np.array([-1.0, 0.0, 0.6, 4.0]), bands)
    assert band_ids.tolist() == [0, 1, 2, 2]


def test_colors_come_from_the_lut():
    lut = color_maps.create_biome_color_lut()
    assert lut.shape == (len(DEFAULTS.BIOME_BANDS), 4)
    assert lut.dtype == np.float32
    colors = color_maps.get_biome_color_array(np.array([0, 7], dtype=np.uint8), lut)
    np.testing.assert_array_equal(colors[0], np.float32(color_maps.COLOR_MAP_BIOMES["deep_trench"]))
    np.testing.assert_array_equal(colors[1], np.float32(color_maps.COLOR_MAP_BIOMES["snow"]))


@pytest.mark.parametrize("bands", [
    [],
    [(0.1, "plains"), (0.1, "snow")],
    [(0.5, "plains"), (0.1, "snow")],
    [(0.1, "lava")],
])
def test_invalid_bands_are_rejected(bands):
    with pytest.raises(ValueError):
        color_maps.validate_biome_bands(bands)


def test_linear_to_srgb_endpoints_and_brightening():
    linear = np.array([[0.0, 0.5, 1.0, 1.0]], dtype=np.float32)
    srgb = color_maps.linear_to_srgb8(linear)
    assert srgb.shape == (1, 3)
    assert srgb[0, 0] == 0
    assert srgb[0, 2] == 255
    # Linear mid-grey encodes brighter than 50% in sRGB.
    assert srgb[0, 1] > 128


def test_elevation_view_is_grayscale():
    colors = color_maps.get_elevation_color_array(np.array([-0.9, 0.3, 1.5, 9.0]), -0.9, 1.5)
    assert colors.shape == (4, 3)
    assert colors[0].tolist() == [0, 0, 0]
    assert colors[2].tolist() == [255, 255, 255]
    assert colors[3].tolist() == [255, 255, 255]


def test_plate_colors_are_deterministic():
    ids = np.array([0, 1, 2, 1])
    a = color_maps.get_plate_color_array(ids, 3, 144)
    b = color_maps.get_plate_color_array(ids, 3, 144)
    np.testing.assert_array_equal(a, b)
    np.testing.assert_array_equal(a[1], a[3])
