# planet_generator/noise.py

"""
================================================================================
NOISE GENERATION UTILITIES
================================================================================
This module provides functions for generating 3D Perlin noise sampled on (or
near) the unit sphere. It is designed to be a pure, stateless utility.

Data Contract:
---------------
- Inputs:
    - p: A pre-shuffled NumPy permutation table (int array, length 512).
    - x, y, z: 1-D NumPy arrays of coordinates.
    - octaves, persistence, lacunarity: Standard noise parameters.
- Outputs:
    - A 1-D NumPy array of noise values (roughly in the range [-1, 1]).
- Side Effects: None.
- Invariants: The output for a coordinate depends only on that coordinate and
  the permutation table, never on its neighbours in the array.
================================================================================
"""

import numpy as np
from numba import njit

# The 12 cube-edge gradient directions of improved Perlin noise.
_GRADIENT_VECTORS = np.array([
    [1, 1, 0], [-1, 1, 0], [1, -1, 0], [-1, -1, 0],
    [1, 0, 1], [-1, 0, 1], [1, 0, -1], [-1, 0, -1],
    [0, 1, 1], [0, -1, 1], [0, 1, -1], [0, -1, -1],
], dtype=np.float64)

def create_permutation_table(seed: int) -> np.ndarray:
    """Builds the doubled 512-entry permutation table for a seed."""
    p = np.arange(256, dtype=np.int64)
    rng = np.random.default_rng(seed)
    rng.shuffle(p)
    return np.stack([p, p]).flatten()

@njit
def _lerp(a, b, x):
    "Linear interpolation."
    return a + x * (b - a)

@njit
def _fade(t):
    "6t^5 - 15t^4 + 10t^3"
    return t * t * t * (t * (t * 6 - 15) + 10)

@njit
def _gradient(h, x, y, z):
    """Calculates the dot product between a gradient vector and coordinates."""
    g = _GRADIENT_VECTORS[h % 12]
    return g[0] * x + g[1] * y + g[2] * z

@njit
def _perlin_3d_single(p, x, y, z):
    """One octave of 3D Perlin noise at a single coordinate."""
    xi = int(np.floor(x))
    yi = int(np.floor(y))
    zi = int(np.floor(z))

    xf = x - xi
    yf = y - yi
    zf = z - zi

    u = _fade(xf)
    v = _fade(yf)
    w = _fade(zf)

    px0 = xi % 256
    px1 = (px0 + 1) % 256
    py0 = yi % 256
    py1 = (py0 + 1) % 256
    pz0 = zi % 256
    pz1 = (pz0 + 1) % 256

    # Hash each of the 8 cube corners.
    a0 = p[px0] + py0
    a1 = p[px0] + py1
    b0 = p[px1] + py0
    b1 = p[px1] + py1

    g000 = _gradient(p[p[a0] + pz0], xf, yf, zf)
    g001 = _gradient(p[p[a0] + pz1], xf, yf, zf - 1)
    g010 = _gradient(p[p[a1] + pz0], xf, yf - 1, zf)
    g011 = _gradient(p[p[a1] + pz1], xf, yf - 1, zf - 1)
    g100 = _gradient(p[p[b0] + pz0], xf - 1, yf, zf)
    g101 = _gradient(p[p[b0] + pz1], xf - 1, yf, zf - 1)
    g110 = _gradient(p[p[b1] + pz0], xf - 1, yf - 1, zf)
    g111 = _gradient(p[p[b1] + pz1], xf - 1, yf - 1, zf - 1)

    x00 = _lerp(g000, g100, u)
    x10 = _lerp(g010, g110, u)
    x01 = _lerp(g001, g101, u)
    x11 = _lerp(g011, g111, u)

    y0 = _lerp(x00, x10, v)
    y1 = _lerp(x01, x11, v)
    return _lerp(y0, y1, w)

@njit
def perlin_noise_3d(p, x, y, z, octaves=1, persistence=0.5, lacunarity=2.0):
    """
    Generate multi-octave 3D Perlin noise using a pre-computed permutation table.
    This function is JIT-compiled with Numba for maximum performance.
    The octave sum is divided by the total amplitude so the result stays
    within roughly [-1, 1] for any octave count.
    """
    n = x.shape[0]
    total_noise = np.zeros(n)

    max_amplitude = 0.0
    amplitude = 1.0
    for _ in range(octaves):
        max_amplitude += amplitude
        amplitude *= persistence

    for i in range(n):
        noise_val = 0.0
        amplitude = 1.0
        frequency = 1.0

        for _ in range(octaves):
            octave_noise = _perlin_3d_single(
                p, x[i] * frequency, y[i] * frequency, z[i] * frequency
            )
            noise_val += octave_noise * amplitude
            amplitude *= persistence
            frequency *= lacunarity

        total_noise[i] = noise_val / max_amplitude

    return total_noise

def ridged_noise_3d(p, x, y, z, octaves=1, persistence=0.5, lacunarity=2.0) -> np.ndarray:
    """
    Ridged variant of the fractal noise in [0, 1]. Folding the signal with
    abs() turns its zero crossings into sharp crests.
    """
    fbm = perlin_noise_3d(p, x, y, z, octaves, persistence, lacunarity)
    return np.clip(1.0 - np.abs(fbm), 0.0, 1.0)

def sample_sphere_noise(p, directions: np.ndarray, frequency: float, offset: float = 0.0,
                        octaves: int = 1, persistence: float = 0.5, lacunarity: float = 2.0,
                        ridged: bool = False) -> np.ndarray:
    """
    Samples noise at `directions * frequency + offset` for an (M, 3) array.
    The offset shifts each layer into its own region of the noise domain.
    """
    coords = np.ascontiguousarray(directions, dtype=np.float64) * frequency + offset
    x = np.ascontiguousarray(coords[:, 0])
    y = np.ascontiguousarray(coords[:, 1])
    z = np.ascontiguousarray(coords[:, 2])
    if ridged:
        return ridged_noise_3d(p, x, y, z, octaves, persistence, lacunarity)
    return perlin_noise_3d(p, x, y, z, octaves, persistence, lacunarity)
