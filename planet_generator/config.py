# planet_generator/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the planet
generator. These values are used if they are not explicitly provided by the
user's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC PLANET.
Instead, pass a configuration dictionary to the PlanetGenerator instance.
================================================================================
"""

# --- Seeds ---
# A fixed seed gives the reference planet. Pass 'seed': None in the user
# config to draw a random seed once at startup.
DEFAULT_SEED = 144
# Large prime numbers used to offset seeds/coordinates for different layers,
# ensuring they are unique but deterministic from the master seed.
PLATE_SEED_OFFSET = 54321
WARP_SEED_OFFSET = 12347
MOUNTAIN_SEED_OFFSET = 25391
DETAIL_SEED_OFFSET = 98761

# --- Planet Geometry ---
DEFAULT_RADIUS = 3.0

# --- Plate Generation ---
DEFAULT_NUM_PLATES = 15
# Probability that any single plate is continental rather than oceanic.
DEFAULT_CONTINENTAL_FRACTION = 0.4
# Minimum straight-line distance between two plate centers on the unit sphere.
MIN_PLATE_SEPARATION = 0.4
# Hard ceiling on rejection-sampling draws. Reaching it is an error.
MAX_PLATE_PLACEMENT_ATTEMPTS = 100000
# Random sequential placement of non-overlapping caps jams well before the
# ideal packing density. Plate counts above this share of the cap-packing
# bound are rejected up front.
PLATE_PACKING_JAMMING_FRACTION = 0.5

PLATE_TYPE_OCEANIC = 0
PLATE_TYPE_CONTINENTAL = 1

# --- Noise Settings ---
NOISE_PERSISTENCE = 0.5
NOISE_LACUNARITY = 2.0

# Domain warp applied before the plate lookup (low frequency).
WARP_FREQUENCY = 1.5
WARP_STRENGTH = 0.25
WARP_OCTAVES = 3
# The noise offset can approach sqrt(3) in length; below this strength a
# warped direction can never collapse onto the origin.
MAX_WARP_STRENGTH = 0.5

# Ridged noise that modulates mountain and ridge magnitude. Sampled at the
# unwarped point with a much higher frequency than the warp.
MOUNTAIN_FREQUENCY = 8.0
MOUNTAIN_OCTAVES = 4
MOUNTAIN_NOISE_BIAS = 0.6
MOUNTAIN_NOISE_GAIN = 1.2

# Broad roughness added everywhere, independent of plate logic.
DETAIL_FREQUENCY = 4.0
DETAIL_OCTAVES = 4
DETAIL_WEIGHT = 0.35

# --- Plate Interaction Model ---
# 'nearest_pair' is the canonical nearest-two-plates rule table.
# 'stress' is the softmax blend over all plates with pairwise stress.
DEFAULT_INTERACTION_MODEL = 'nearest_pair'
INTERACTION_MODELS = ('nearest_pair', 'stress')

CONTINENTAL_BASE_HEIGHT = 0.12
OCEANIC_BASE_HEIGHT = -0.35

# Width of the boundary zone, measured in boundary distance (d2 - d1).
EDGE_THRESHOLD = 0.45
# Dead zone around dot(drift1, drift2) == 0 where neither feature forms.
COLLISION_THRESHOLD = -0.2
SEPARATION_THRESHOLD = 0.2

# Feature magnitudes for the rule table.
MAIN_RIDGE_HEIGHT = 0.9
SECONDARY_RIDGE_HEIGHT = 0.15
RIDGE_FOLD_COUNT = 3.0
RIFT_DEPTH = 0.3
SUBDUCTION_ARC_HEIGHT = 0.45
TRENCH_DEPTH = 0.5
# Both sides of a passive continent/ocean boundary meet at this height.
SHELF_HEIGHT = -0.1
ISLAND_ARC_HEIGHT = 0.9
MID_OCEAN_RIDGE_HEIGHT = 0.2

# Lowest allowed height, keeps the surface well away from the sphere center.
HEIGHT_FLOOR = -0.9

# --- Stress Model (softmax blend) ---
STRESS_SOFTMAX_SHARPNESS = 25.0
STRESS_MIN_WEIGHT = 0.01
STRESS_PAIR_GAIN = 4.0
STRESS_DRIFT_THRESHOLD = 0.1
STRESS_CONTINENTAL_BASE_HEIGHT = 0.08
STRESS_OCEANIC_BASE_HEIGHT = -0.35
STRESS_OROGENY = 0.55
STRESS_RIFT = 0.35
STRESS_SUBDUCTION = 0.8
STRESS_SUBDUCTION_PROFILE_GAIN = 2.0
STRESS_PASSIVE_MARGIN = 0.1
STRESS_ISLAND_ARC = 0.6
STRESS_MID_OCEAN_RIDGE = 0.2
STRESS_SURFACE_FREQUENCY = 1.5
STRESS_SURFACE_WEIGHT = 0.4
STRESS_MOUNTAIN_FREQUENCY = 0.5
STRESS_MOUNTAIN_GAIN = 2.5
STRESS_TRENCH_GAIN = 5.5

# --- Biome Bands ---
# Ascending (upper_threshold, biome name) pairs. A height takes the first band
# whose threshold exceeds it; the last band is the catch-all.
BIOME_BANDS = [
    (-0.45, "deep_trench"),
    (-0.25, "ocean"),
    (-0.05, "shallow_water"),
    (0.02, "sand"),
    (0.15, "plains"),
    (0.35, "foothills"),
    (0.5, "high_rock"),
    (float('inf'), "snow"),
]

# --- Field Application ---
# Number of vertices processed per work unit by the field applicator.
VERTEX_CHUNK_SIZE = 65536
