# planet_generator/tectonics.py

"""
================================================================================
TECTONIC PLATE GENERATION
================================================================================
This module generates the tectonic plate set and partitions the sphere into
plates with a domain-warped spherical Voronoi lookup. The two nearest plates
of a point, and how much closer the first one is, drive every boundary
feature of the planet.

Data Contract:
---------------
- Inputs:
    - Plate count, continental probability, minimum separation, a seeded
      numpy Generator.
    - (M, 3) NumPy arrays of unit direction vectors.
- Outputs:
    - PlateSet: read-only arrays of plate centers, types and drift vectors.
    - idx1, idx2, dist1, dist2: the nearest and second-nearest plate per point
      and their chordal distances from the warped point.
- Side Effects: None.
================================================================================
"""
import math
from typing import NamedTuple

import numpy as np
from scipy.spatial import cKDTree

from . import config as DEFAULTS
from . import noise

# Vectors shorter than this cannot be normalized reliably and are redrawn.
_MIN_DRAW_LENGTH = 1e-9

class PlateSet(NamedTuple):
    """The immutable plates of one generated planet."""
    centers: np.ndarray  # (N, 3) unit vectors
    types: np.ndarray    # (N,) PLATE_TYPE_* ids
    drifts: np.ndarray   # (N, 3) unit vectors

    @property
    def num_plates(self) -> int:
        return self.centers.shape[0]

    @property
    def is_continental(self) -> np.ndarray:
        return self.types == DEFAULTS.PLATE_TYPE_CONTINENTAL

def plate_capacity(min_separation: float,
                   jamming_fraction: float = DEFAULTS.PLATE_PACKING_JAMMING_FRACTION) -> float:
    """
    Largest plate count that rejection sampling can be expected to place for
    a given chordal separation. Returns inf when there is no separation.
    """
    if min_separation <= 0.0:
        return math.inf

    # Chordal distance -> angular separation. Centers at least `theta` apart
    # own disjoint caps of angular radius theta/2.
    theta = 2.0 * math.asin(min(min_separation, 2.0) / 2.0)
    cap_fraction = (1.0 - math.cos(theta / 2.0)) / 2.0
    packing_bound = 1.0 / cap_fraction
    return max(1.0, math.floor(packing_bound * jamming_fraction))

def check_plate_capacity(num_plates: int, min_separation: float,
                         jamming_fraction: float = DEFAULTS.PLATE_PACKING_JAMMING_FRACTION) -> None:
    """Raises ValueError if the plate count cannot fit at the given separation."""
    capacity = plate_capacity(min_separation, jamming_fraction)
    if num_plates > capacity:
        raise ValueError(
            f"Cannot place {num_plates} plates with minimum separation "
            f"{min_separation}: at most {int(capacity)} fit reliably. "
            f"Lower 'num_plates' or 'min_plate_separation'."
        )

def _random_unit_vector(rng: np.random.Generator) -> np.ndarray:
    """Normalizes a uniform draw from [-1, 1]^3, redrawing degenerate vectors."""
    while True:
        vector = rng.uniform(-1.0, 1.0, 3)
        length = math.sqrt(vector[0] ** 2 + vector[1] ** 2 + vector[2] ** 2)
        if length > _MIN_DRAW_LENGTH:
            return vector / length

def generate_plates(num_plates: int, continental_fraction: float, min_separation: float,
                    rng: np.random.Generator,
                    max_attempts: int = DEFAULTS.MAX_PLATE_PLACEMENT_ATTEMPTS) -> PlateSet:
    """
    Generates the plate set deterministically from the given random generator.

    Centers are placed by rejection sampling: a candidate closer than
    `min_separation` to any accepted center is discarded and redrawn. Every
    accepted plate is continental with probability `continental_fraction`
    and gets its own random drift direction.
    """
    if num_plates < 1:
        raise ValueError(f"num_plates must be at least 1, got {num_plates}")
    if not 0.0 <= continental_fraction <= 1.0:
        raise ValueError(f"continental_fraction must be in [0, 1], got {continental_fraction}")
    check_plate_capacity(num_plates, min_separation)

    centers = np.zeros((num_plates, 3))
    drifts = np.zeros((num_plates, 3))
    types = np.zeros(num_plates, dtype=np.int8)

    placed = 0
    attempts = 0
    while placed < num_plates:
        if attempts >= max_attempts:
            raise RuntimeError(
                f"Placed only {placed} of {num_plates} plates after {attempts} attempts "
                f"(minimum separation {min_separation})."
            )
        attempts += 1

        candidate = _random_unit_vector(rng)
        if placed > 0:
            gaps = np.sqrt(np.sum((centers[:placed] - candidate) ** 2, axis=1))
            if np.min(gaps) < min_separation:
                continue

        centers[placed] = candidate
        if rng.random() < continental_fraction:
            types[placed] = DEFAULTS.PLATE_TYPE_CONTINENTAL
        else:
            types[placed] = DEFAULTS.PLATE_TYPE_OCEANIC
        drifts[placed] = _random_unit_vector(rng)
        placed += 1

    for array in (centers, types, drifts):
        array.setflags(write=False)
    return PlateSet(centers=centers, types=types, drifts=drifts)

def normalize_directions(vectors: np.ndarray) -> np.ndarray:
    """Scales each row of an (M, 3) array to unit length."""
    lengths = np.sqrt(vectors[:, 0] ** 2 + vectors[:, 1] ** 2 + vectors[:, 2] ** 2)
    return vectors / lengths[:, np.newaxis]

def warp_directions(directions: np.ndarray, p: np.ndarray, frequency: float, strength: float,
                    offset: float = 0.0, octaves: int = 1, persistence: float = 0.5,
                    lacunarity: float = 2.0) -> np.ndarray:
    """
    Offsets each direction by a noise vector and projects it back onto the
    sphere. The three offset components sample the same noise field with
    cyclically permuted axes so they are decorrelated from each other.
    """
    if strength == 0.0:
        return np.array(directions, dtype=np.float64)

    offsets = np.empty_like(directions, dtype=np.float64)
    for axis in range(3):
        rotated = np.roll(directions, -axis, axis=1)
        offsets[:, axis] = noise.sample_sphere_noise(
            p, rotated, frequency, offset, octaves, persistence, lacunarity
        )
    return normalize_directions(directions + offsets * strength)

def query_nearest_plates(points: np.ndarray, centers: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Finds the nearest and second-nearest plate centers for every point by
    straight-line distance. With a single plate, the second plate is the
    first one again and its distance is infinite.
    """
    tree = cKDTree(centers)
    if centers.shape[0] == 1:
        dist1, idx1 = tree.query(points, k=1)
        return idx1, idx1.copy(), dist1, np.full_like(dist1, np.inf)

    dist, indices = tree.query(points, k=2)
    return indices[:, 0], indices[:, 1], dist[:, 0], dist[:, 1]

def calculate_boundary_factor(dist1: np.ndarray, dist2: np.ndarray, edge_threshold: float) -> np.ndarray:
    """
    Calculates the boundary factor from the two nearest plate distances.
    It is 1.0 exactly on a plate boundary and falls linearly to 0.0 where the
    boundary distance (dist2 - dist1) reaches `edge_threshold`.
    """
    boundary_dist = dist2 - dist1
    return np.clip(1.0 - boundary_dist / edge_threshold, 0.0, 1.0)
