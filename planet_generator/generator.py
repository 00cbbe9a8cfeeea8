# planet_generator/generator.py

"""
================================================================================
CORE PLANET GENERATOR
================================================================================
This module contains the main PlanetGenerator class, responsible for creating
the plate set of a planet and sampling its height and biome color at any
direction on the sphere.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): A dictionary of generation parameters which can override
      the internal defaults. Expected keys include 'seed', 'num_plates', etc.
    - logger: A configured Python logging object for runtime messages.
- Outputs (from methods):
    - NumPy arrays of heights (float64) and linear RGBA colors (float32),
      one row per query direction.
- Side Effects: Logs messages using the provided logger.
- Invariants: Given the same seed and configuration, the output for a
  direction is deterministic and independent of which other directions are
  sampled alongside it.
================================================================================
"""

import numpy as np
import logging
import time

from . import config as DEFAULTS
from . import color_maps
from . import interactions
from . import noise
from . import stress_model
from . import tectonics

class PlanetGenerator:
    """
    Generates the plate set of a planet and samples its surface field.
    This class is backend-only and does not own any mesh or renderer state.
    """
    def __init__(self, config: dict, logger: logging.Logger, permutation_table: np.ndarray = None):
        """
        Initializes the planet generator.

        Args:
            config (dict): User-defined parameters to override defaults.
            logger (logging.Logger): The logger instance for all output.
            permutation_table (np.ndarray, optional): A pre-computed noise
                permutation table. If None, one will be generated from the seed.

        Raises:
            ValueError: If the configuration is invalid or the plate count
                cannot be placed at the requested separation.
        """
        self.logger = logger
        self.user_config = config
        self.logger.info("PlanetGenerator initializing...")

        # --- Consolidate Configuration ---
        self.settings = {
            'seed': self.user_config.get('seed', DEFAULTS.DEFAULT_SEED),
            'plate_seed_offset': self.user_config.get('plate_seed_offset', DEFAULTS.PLATE_SEED_OFFSET),
            'warp_seed_offset': self.user_config.get('warp_seed_offset', DEFAULTS.WARP_SEED_OFFSET),
            'mountain_seed_offset': self.user_config.get('mountain_seed_offset', DEFAULTS.MOUNTAIN_SEED_OFFSET),
            'detail_seed_offset': self.user_config.get('detail_seed_offset', DEFAULTS.DETAIL_SEED_OFFSET),

            'radius': self.user_config.get('radius', DEFAULTS.DEFAULT_RADIUS),
            'num_plates': self.user_config.get('num_plates', DEFAULTS.DEFAULT_NUM_PLATES),
            'continental_fraction': self.user_config.get('continental_fraction', DEFAULTS.DEFAULT_CONTINENTAL_FRACTION),
            'min_plate_separation': self.user_config.get('min_plate_separation', DEFAULTS.MIN_PLATE_SEPARATION),
            'max_plate_placement_attempts': self.user_config.get('max_plate_placement_attempts', DEFAULTS.MAX_PLATE_PLACEMENT_ATTEMPTS),

            'noise_persistence': self.user_config.get('noise_persistence', DEFAULTS.NOISE_PERSISTENCE),
            'noise_lacunarity': self.user_config.get('noise_lacunarity', DEFAULTS.NOISE_LACUNARITY),
            'warp_frequency': self.user_config.get('warp_frequency', DEFAULTS.WARP_FREQUENCY),
            'warp_strength': self.user_config.get('warp_strength', DEFAULTS.WARP_STRENGTH),
            'warp_octaves': self.user_config.get('warp_octaves', DEFAULTS.WARP_OCTAVES),
            'mountain_frequency': self.user_config.get('mountain_frequency', DEFAULTS.MOUNTAIN_FREQUENCY),
            'mountain_octaves': self.user_config.get('mountain_octaves', DEFAULTS.MOUNTAIN_OCTAVES),
            'mountain_noise_bias': self.user_config.get('mountain_noise_bias', DEFAULTS.MOUNTAIN_NOISE_BIAS),
            'mountain_noise_gain': self.user_config.get('mountain_noise_gain', DEFAULTS.MOUNTAIN_NOISE_GAIN),
            'detail_frequency': self.user_config.get('detail_frequency', DEFAULTS.DETAIL_FREQUENCY),
            'detail_octaves': self.user_config.get('detail_octaves', DEFAULTS.DETAIL_OCTAVES),
            'detail_weight': self.user_config.get('detail_weight', DEFAULTS.DETAIL_WEIGHT),

            'interaction_model': self.user_config.get('interaction_model', DEFAULTS.DEFAULT_INTERACTION_MODEL),
            'continental_base_height': self.user_config.get('continental_base_height', DEFAULTS.CONTINENTAL_BASE_HEIGHT),
            'oceanic_base_height': self.user_config.get('oceanic_base_height', DEFAULTS.OCEANIC_BASE_HEIGHT),
            'edge_threshold': self.user_config.get('edge_threshold', DEFAULTS.EDGE_THRESHOLD),
            'collision_threshold': self.user_config.get('collision_threshold', DEFAULTS.COLLISION_THRESHOLD),
            'separation_threshold': self.user_config.get('separation_threshold', DEFAULTS.SEPARATION_THRESHOLD),
            'main_ridge_height': self.user_config.get('main_ridge_height', DEFAULTS.MAIN_RIDGE_HEIGHT),
            'secondary_ridge_height': self.user_config.get('secondary_ridge_height', DEFAULTS.SECONDARY_RIDGE_HEIGHT),
            'ridge_fold_count': self.user_config.get('ridge_fold_count', DEFAULTS.RIDGE_FOLD_COUNT),
            'rift_depth': self.user_config.get('rift_depth', DEFAULTS.RIFT_DEPTH),
            'subduction_arc_height': self.user_config.get('subduction_arc_height', DEFAULTS.SUBDUCTION_ARC_HEIGHT),
            'trench_depth': self.user_config.get('trench_depth', DEFAULTS.TRENCH_DEPTH),
            'shelf_height': self.user_config.get('shelf_height', DEFAULTS.SHELF_HEIGHT),
            'island_arc_height': self.user_config.get('island_arc_height', DEFAULTS.ISLAND_ARC_HEIGHT),
            'mid_ocean_ridge_height': self.user_config.get('mid_ocean_ridge_height', DEFAULTS.MID_OCEAN_RIDGE_HEIGHT),
            'height_floor': self.user_config.get('height_floor', DEFAULTS.HEIGHT_FLOOR),

            'stress_softmax_sharpness': self.user_config.get('stress_softmax_sharpness', DEFAULTS.STRESS_SOFTMAX_SHARPNESS),
            'stress_min_weight': self.user_config.get('stress_min_weight', DEFAULTS.STRESS_MIN_WEIGHT),
            'stress_pair_gain': self.user_config.get('stress_pair_gain', DEFAULTS.STRESS_PAIR_GAIN),
            'stress_drift_threshold': self.user_config.get('stress_drift_threshold', DEFAULTS.STRESS_DRIFT_THRESHOLD),
            'stress_continental_base_height': self.user_config.get('stress_continental_base_height', DEFAULTS.STRESS_CONTINENTAL_BASE_HEIGHT),
            'stress_oceanic_base_height': self.user_config.get('stress_oceanic_base_height', DEFAULTS.STRESS_OCEANIC_BASE_HEIGHT),
            'stress_orogeny': self.user_config.get('stress_orogeny', DEFAULTS.STRESS_OROGENY),
            'stress_rift': self.user_config.get('stress_rift', DEFAULTS.STRESS_RIFT),
            'stress_subduction': self.user_config.get('stress_subduction', DEFAULTS.STRESS_SUBDUCTION),
            'stress_subduction_profile_gain': self.user_config.get('stress_subduction_profile_gain', DEFAULTS.STRESS_SUBDUCTION_PROFILE_GAIN),
            'stress_passive_margin': self.user_config.get('stress_passive_margin', DEFAULTS.STRESS_PASSIVE_MARGIN),
            'stress_island_arc': self.user_config.get('stress_island_arc', DEFAULTS.STRESS_ISLAND_ARC),
            'stress_mid_ocean_ridge': self.user_config.get('stress_mid_ocean_ridge', DEFAULTS.STRESS_MID_OCEAN_RIDGE),
            'stress_surface_frequency': self.user_config.get('stress_surface_frequency', DEFAULTS.STRESS_SURFACE_FREQUENCY),
            'stress_surface_weight': self.user_config.get('stress_surface_weight', DEFAULTS.STRESS_SURFACE_WEIGHT),
            'stress_mountain_frequency': self.user_config.get('stress_mountain_frequency', DEFAULTS.STRESS_MOUNTAIN_FREQUENCY),
            'stress_mountain_gain': self.user_config.get('stress_mountain_gain', DEFAULTS.STRESS_MOUNTAIN_GAIN),
            'stress_trench_gain': self.user_config.get('stress_trench_gain', DEFAULTS.STRESS_TRENCH_GAIN),

            'biome_bands': [tuple(band) for band in self.user_config.get('biome_bands', DEFAULTS.BIOME_BANDS)],
            'vertex_chunk_size': self.user_config.get('vertex_chunk_size', DEFAULTS.VERTEX_CHUNK_SIZE),
        }

        # --- Seed ---
        # A missing seed is drawn once here and written back into the settings,
        # so the settings alone are enough to rebuild this exact planet.
        if self.settings['seed'] is None:
            self.settings['seed'] = int(np.random.default_rng().integers(0, 2**32))
            self.logger.info(f"No seed given, drew random seed {self.settings['seed']}.")
        self.seed = self.settings['seed']

        self._validate_settings()

        # --- Initialize Noise ---
        if permutation_table is not None:
            self._p = permutation_table
            self.logger.debug("Initialized with injected permutation table.")
        else:
            self.logger.debug("No permutation table provided, generating new one from seed.")
            self._p = noise.create_permutation_table(self.seed)
        self.permutation_table = self._p

        # --- Generate Plates ---
        start_time = time.perf_counter()
        plate_rng = np.random.default_rng(self.seed + self.settings['plate_seed_offset'])
        self.plates = tectonics.generate_plates(
            self.settings['num_plates'],
            self.settings['continental_fraction'],
            self.settings['min_plate_separation'],
            plate_rng,
            max_attempts=self.settings['max_plate_placement_attempts'],
        )
        elapsed_ms = (time.perf_counter() - start_time) * 1000.0

        self.biome_lut = color_maps.create_biome_color_lut(self.settings['biome_bands'])

        num_continental = int(np.count_nonzero(self.plates.is_continental))
        self.logger.info(f"PlanetGenerator initialized with seed: {self.seed}")
        self.logger.info(
            f"Generated {self.plates.num_plates} plates "
            f"({num_continental} continental, {self.plates.num_plates - num_continental} oceanic) "
            f"in {elapsed_ms:.1f} ms using the '{self.settings['interaction_model']}' model."
        )

    def _validate_settings(self) -> None:
        """Rejects configurations that cannot produce a planet, before any sampling."""
        s = self.settings
        if s['interaction_model'] not in DEFAULTS.INTERACTION_MODELS:
            raise ValueError(
                f"Unknown interaction_model '{s['interaction_model']}', "
                f"expected one of {DEFAULTS.INTERACTION_MODELS}"
            )
        if not isinstance(s['num_plates'], (int, np.integer)) or s['num_plates'] < 1:
            raise ValueError(f"num_plates must be a positive integer, got {s['num_plates']!r}")
        if not 0.0 <= s['continental_fraction'] <= 1.0:
            raise ValueError(f"continental_fraction must be in [0, 1], got {s['continental_fraction']}")
        if not 0.0 <= s['min_plate_separation'] <= 2.0:
            raise ValueError(f"min_plate_separation must be in [0, 2], got {s['min_plate_separation']}")
        if s['radius'] <= 0.0:
            raise ValueError(f"radius must be positive, got {s['radius']}")
        if s['edge_threshold'] <= 0.0:
            raise ValueError(f"edge_threshold must be positive, got {s['edge_threshold']}")
        if s['collision_threshold'] > s['separation_threshold']:
            raise ValueError(
                f"collision_threshold ({s['collision_threshold']}) must not exceed "
                f"separation_threshold ({s['separation_threshold']})"
            )
        if s['radius'] + s['height_floor'] <= 0.0:
            raise ValueError(
                f"height_floor {s['height_floor']} would push the surface through the "
                f"center of a sphere of radius {s['radius']}"
            )
        if not 0.0 <= s['warp_strength'] < DEFAULTS.MAX_WARP_STRENGTH:
            raise ValueError(
                f"warp_strength must be in [0, {DEFAULTS.MAX_WARP_STRENGTH}), got {s['warp_strength']}"
            )
        if s['vertex_chunk_size'] < 1:
            raise ValueError(f"vertex_chunk_size must be positive, got {s['vertex_chunk_size']}")
        color_maps.validate_biome_bands(s['biome_bands'])
        tectonics.check_plate_capacity(s['num_plates'], s['min_plate_separation'])

    def get_partition_data(self, directions: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """
        Finds the nearest and second-nearest plate of every direction after
        domain warping. Returns (idx1, idx2, dist1, dist2).
        """
        warped = tectonics.warp_directions(
            directions, self._p,
            self.settings['warp_frequency'],
            self.settings['warp_strength'],
            offset=self.settings['warp_seed_offset'],
            octaves=self.settings['warp_octaves'],
            persistence=self.settings['noise_persistence'],
            lacunarity=self.settings['noise_lacunarity'],
        )
        return tectonics.query_nearest_plates(warped, self.plates.centers)

    def get_mountain_modulation(self, directions: np.ndarray) -> np.ndarray:
        """
        High-frequency ridged noise at the unwarped directions, biased so it is
        always positive and never turns a ridge into a canyon.
        """
        ridged = noise.sample_sphere_noise(
            self._p, directions,
            self.settings['mountain_frequency'],
            self.settings['mountain_seed_offset'],
            self.settings['mountain_octaves'],
            self.settings['noise_persistence'],
            self.settings['noise_lacunarity'],
            ridged=True,
        )
        return self.settings['mountain_noise_bias'] + ridged * self.settings['mountain_noise_gain']

    def get_detail_noise(self, directions: np.ndarray) -> np.ndarray:
        """Low-frequency roughness added everywhere, independent of the plates."""
        detail = noise.sample_sphere_noise(
            self._p, directions,
            self.settings['detail_frequency'],
            self.settings['detail_seed_offset'],
            self.settings['detail_octaves'],
            self.settings['noise_persistence'],
            self.settings['noise_lacunarity'],
        )
        return detail * self.settings['detail_weight']

    def get_interaction_data(self, directions: np.ndarray, partition=None) -> tuple[np.ndarray, np.ndarray]:
        """
        Classifies every direction into an interaction id.
        Returns (interaction_ids, boundary_factor).
        """
        if partition is None:
            partition = self.get_partition_data(directions)
        idx1, idx2, dist1, dist2 = partition

        boundary_factor = tectonics.calculate_boundary_factor(dist1, dist2, self.settings['edge_threshold'])
        drift_dot = interactions.calculate_drift_dot(self.plates.drifts, idx1, idx2)
        overriding = interactions.calculate_overriding_mask(self.plates.centers, self.plates.drifts, idx1, idx2)
        interaction_ids = interactions.classify_interactions(
            self.plates.types[idx1], self.plates.types[idx2], drift_dot,
            boundary_factor, overriding,
            self.settings['collision_threshold'],
            self.settings['separation_threshold'],
        )
        return interaction_ids, boundary_factor

    def _get_nearest_pair_elevation(self, directions: np.ndarray) -> np.ndarray:
        """Rule-table elevation from each point's two nearest plates."""
        partition = self.get_partition_data(directions)
        interaction_ids, boundary_factor = self.get_interaction_data(directions, partition)

        base_height = interactions.calculate_base_height(self.plates.types[partition[0]], self.settings)
        mountain = self.get_mountain_modulation(directions)
        height = interactions.apply_interactions(
            base_height, interaction_ids, boundary_factor, mountain, self.settings
        )

        height += self.get_detail_noise(directions)
        return np.maximum(height, self.settings['height_floor'])

    def get_elevation(self, directions: np.ndarray) -> np.ndarray:
        """
        Computes the final height of every unit direction with the configured
        interaction model. Heights are never below the height floor.
        """
        if self.settings['interaction_model'] == 'stress':
            return stress_model.calculate_stress_height(directions, self.plates, self._p, self.settings)
        return self._get_nearest_pair_elevation(directions)

    def get_biome_colors(self, heights: np.ndarray) -> np.ndarray:
        """Maps final heights to (M, 4) linear RGBA biome colors."""
        biome_map = color_maps.calculate_biome_map(heights, self.settings['biome_bands'])
        return color_maps.get_biome_color_array(biome_map, self.biome_lut)

    def sample(self, points: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """
        The pure surface transform: (M, 3) points -> (heights, colors).
        Points need not be unit length; only their direction is used.
        """
        directions = prepare_directions(points)
        heights = self.get_elevation(directions)
        return heights, self.get_biome_colors(heights)

def prepare_directions(points: np.ndarray) -> np.ndarray:
    """
    Validates an (M, 3) array of points and returns their unit directions.

    Raises:
        ValueError: On a wrong shape, any NaN/Inf coordinate, or a point at
            the origin, which has no direction.
    """
    points = np.asarray(points, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != 3:
        raise ValueError(f"Expected an (M, 3) array of points, got shape {points.shape}")
    if not np.all(np.isfinite(points)):
        bad = int(np.count_nonzero(~np.all(np.isfinite(points), axis=1)))
        raise ValueError(f"{bad} point(s) contain NaN or infinite coordinates")
    lengths = np.sqrt(points[:, 0] ** 2 + points[:, 1] ** 2 + points[:, 2] ** 2)
    if np.any(lengths == 0.0):
        raise ValueError("Points at the origin have no direction on the sphere")
    return points / lengths[:, np.newaxis]
