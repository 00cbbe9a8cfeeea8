# planet_generator/color_maps.py

"""
================================================================================
SHARED COLOR MAPPING UTILITIES
================================================================================
This module contains the biome color constants and functions for converting
final heights into per-vertex colors.

Colors are stored in linear light as RGBA floats, which is what the
rendering side consumes. Helpers for 8-bit sRGB output exist for preview
images only.
================================================================================
"""
import numpy as np
from . import config as DEFAULTS

# --- Default Color Mappings (linear RGBA) ---
COLOR_MAP_BIOMES = {
    "deep_trench": (0.01, 0.02, 0.08, 1.0),
    "ocean": (0.02, 0.05, 0.2, 1.0),
    "shallow_water": (0.05, 0.2, 0.5, 1.0),
    "sand": (0.8, 0.7, 0.4, 1.0),
    "plains": (0.1, 0.4, 0.1, 1.0),
    "foothills": (0.3, 0.2, 0.15, 1.0),
    "high_rock": (0.4, 0.4, 0.4, 1.0),
    "snow": (0.9, 0.9, 1.0, 1.0),
}

def validate_biome_bands(bands) -> None:
    """Raises ValueError unless thresholds ascend strictly and every name has a color."""
    if not bands:
        raise ValueError("biome_bands must contain at least one band")
    thresholds = [threshold for threshold, _ in bands]
    for lower, upper in zip(thresholds, thresholds[1:]):
        if not lower < upper:
            raise ValueError(f"biome_bands thresholds must ascend strictly, got {thresholds}")
    for _, name in bands:
        if name not in COLOR_MAP_BIOMES:
            raise ValueError(f"Unknown biome '{name}' in biome_bands")

# --- Color Lookup Table (LUT) Generation ---
def create_biome_color_lut(bands=None) -> np.ndarray:
    """Creates a LUT where the index is the band index and the value is the linear RGBA color."""
    if bands is None:
        bands = DEFAULTS.BIOME_BANDS
    return np.array([COLOR_MAP_BIOMES[name] for _, name in bands], dtype=np.float32)

# --- Biome & Color Array Generation Functions ---
def calculate_biome_map(height_values: np.ndarray, bands=None) -> np.ndarray:
    """
    Returns the band index of every height: the first band whose upper
    threshold exceeds the height. Heights beyond the last threshold fall into
    the last band.
    """
    if bands is None:
        bands = DEFAULTS.BIOME_BANDS
    thresholds = np.array([threshold for threshold, _ in bands], dtype=np.float64)
    band_ids = np.searchsorted(thresholds, height_values, side='right')
    return np.minimum(band_ids, len(bands) - 1).astype(np.uint8)

def get_biome_color_array(biome_map: np.ndarray, biome_lut: np.ndarray) -> np.ndarray:
    """Converts band indices into an (M, 4) linear RGBA array via the LUT."""
    return biome_lut[biome_map]

def linear_to_srgb8(colors: np.ndarray) -> np.ndarray:
    """Encodes linear RGB(A) floats as 8-bit sRGB, dropping alpha."""
    rgb = np.clip(colors[..., :3], 0.0, 1.0)
    encoded = np.where(
        rgb <= 0.0031308,
        rgb * 12.92,
        1.055 * np.power(rgb, 1.0 / 2.4) - 0.055,
    )
    return np.round(encoded * 255).astype(np.uint8)

def get_elevation_color_array(height_values: np.ndarray, floor: float, ceiling: float) -> np.ndarray:
    """Converts heights into a grayscale RGB array, floor -> black, ceiling -> white."""
    normalized = np.clip((height_values - floor) / (ceiling - floor), 0.0, 1.0)
    gray_values = (normalized * 255).astype(np.uint8)
    return np.stack([gray_values] * 3, axis=-1)

def get_plate_color_array(plate_id_map: np.ndarray, num_plates: int, seed: int) -> np.ndarray:
    """Generates a color array where each tectonic plate has a unique, deterministic color."""
    # 1. Create a deterministic but random color for each plate ID.
    rng = np.random.default_rng(seed)
    color_palette = rng.integers(0, 256, size=(num_plates, 3), dtype=np.uint8)

    # 2. Use the plate_id_map as indices to look up colors from the palette.
    return color_palette[plate_id_map]
