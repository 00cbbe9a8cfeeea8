# planet_generator/interactions.py

"""
================================================================================
PLATE BOUNDARY INTERACTIONS
================================================================================
This module turns the relationship between a point's owning plate and its
neighbouring plate into elevation. Every point is first classified into one
of a small, closed set of interaction ids; each id is then handled by one
pure, vectorised rule function.

Data Contract:
---------------
- Inputs:
    - Plate types and drift dot products of the (owner, neighbour) pair.
    - boundary factor f in [0, 1] (1 on the boundary, 0 outside the zone).
    - mountain modulation m (always positive).
    - settings (dict): the consolidated generator settings.
- Outputs:
    - interaction ids (int8 array) and heights (float array).
- Side Effects: None.
- Invariants: Every rule leaves the base height unchanged at f == 0, and the
  rules on either side of a boundary meet at the same height at f == 1.
================================================================================
"""
import numpy as np

from . import config as DEFAULTS

# --- Interaction ID Constants ---
INTERACTION_INTERIOR = 0
INTERACTION_OROGENY = 1            # continental owner, continental neighbour, converging
INTERACTION_RIFT = 2               # continental owner, continental neighbour, diverging
INTERACTION_SUBDUCTION_ARC = 3     # continental owner, oceanic neighbour, converging
INTERACTION_PASSIVE_MARGIN = 4     # continental owner, oceanic neighbour, diverging
INTERACTION_CONTINENTAL_SHELF = 5  # continental owner, oceanic neighbour, neutral
INTERACTION_TRENCH = 6             # oceanic owner, continental neighbour, converging
INTERACTION_PASSIVE_SHELF = 7      # oceanic owner, continental neighbour, diverging
INTERACTION_OCEANIC_SHELF = 8      # oceanic owner, continental neighbour, neutral
INTERACTION_ISLAND_ARC = 9         # oceanic owner, oceanic neighbour, converging
INTERACTION_MID_OCEAN_RIDGE = 10   # oceanic owner, oceanic neighbour, diverging

INTERACTION_NAMES = {
    INTERACTION_INTERIOR: "interior",
    INTERACTION_OROGENY: "orogeny",
    INTERACTION_RIFT: "rift",
    INTERACTION_SUBDUCTION_ARC: "subduction_arc",
    INTERACTION_PASSIVE_MARGIN: "passive_margin",
    INTERACTION_CONTINENTAL_SHELF: "continental_shelf",
    INTERACTION_TRENCH: "trench",
    INTERACTION_PASSIVE_SHELF: "passive_shelf",
    INTERACTION_OCEANIC_SHELF: "oceanic_shelf",
    INTERACTION_ISLAND_ARC: "island_arc",
    INTERACTION_MID_OCEAN_RIDGE: "mid_ocean_ridge",
}

def calculate_drift_dot(drifts: np.ndarray, idx1: np.ndarray, idx2: np.ndarray) -> np.ndarray:
    """dot(drift[idx1], drift[idx2]) per point. Negative means converging."""
    d1 = drifts[idx1]
    d2 = drifts[idx2]
    return d1[:, 0] * d2[:, 0] + d1[:, 1] * d2[:, 1] + d1[:, 2] * d2[:, 2]

def calculate_overriding_mask(centers: np.ndarray, drifts: np.ndarray,
                              idx1: np.ndarray, idx2: np.ndarray) -> np.ndarray:
    """
    True where the owning plate overrides its neighbour in a collision.
    The plate that drifts harder towards the other one dives beneath it.
    Ties go to the plate with the lower index.
    """
    # Both approach speeds share the factor |c2 - c1|, so it is not normalized.
    towards = centers[idx2] - centers[idx1]
    d1 = drifts[idx1]
    d2 = drifts[idx2]
    approach1 = d1[:, 0] * towards[:, 0] + d1[:, 1] * towards[:, 1] + d1[:, 2] * towards[:, 2]
    approach2 = -(d2[:, 0] * towards[:, 0] + d2[:, 1] * towards[:, 1] + d2[:, 2] * towards[:, 2])
    return (approach1 < approach2) | ((approach1 == approach2) & (idx1 < idx2))

def classify_interactions(type1: np.ndarray, type2: np.ndarray, drift_dot: np.ndarray,
                          boundary_factor: np.ndarray, overriding: np.ndarray,
                          collision_threshold: float, separation_threshold: float) -> np.ndarray:
    """
    Classifies each point by (owner type, neighbour type, drift regime).
    Points outside the boundary zone are INTERIOR whatever their pair.
    """
    in_zone = boundary_factor > 0.0
    owner_continental = type1 == DEFAULTS.PLATE_TYPE_CONTINENTAL
    neighbour_continental = type2 == DEFAULTS.PLATE_TYPE_CONTINENTAL
    converging = drift_dot < collision_threshold
    diverging = drift_dot > separation_threshold

    cc = in_zone & owner_continental & neighbour_continental
    co = in_zone & owner_continental & ~neighbour_continental
    oc = in_zone & ~owner_continental & neighbour_continental
    oo = in_zone & ~owner_continental & ~neighbour_continental

    conditions = [
        cc & converging,
        cc & diverging,
        co & converging,
        co & diverging,
        co,
        oc & converging,
        oc & diverging,
        oc,
        oo & converging & overriding,
        oo & diverging,
    ]
    choices = [
        INTERACTION_OROGENY,
        INTERACTION_RIFT,
        INTERACTION_SUBDUCTION_ARC,
        INTERACTION_PASSIVE_MARGIN,
        INTERACTION_CONTINENTAL_SHELF,
        INTERACTION_TRENCH,
        INTERACTION_PASSIVE_SHELF,
        INTERACTION_OCEANIC_SHELF,
        INTERACTION_ISLAND_ARC,
        INTERACTION_MID_OCEAN_RIDGE,
    ]
    return np.select(conditions, choices, default=INTERACTION_INTERIOR).astype(np.int8)

def _smoothstep(t):
    return t * t * (3.0 - 2.0 * t)

def _blend(height, target, t):
    return height + (target - height) * t

# --- Rule Functions ---
# Each takes the base height h, boundary factor f and mountain modulation m
# of the points it owns and returns their new heights.

def orogeny(h, f, m, settings):
    """Colliding continents fold up a main ridge with parallel secondary folds."""
    folds = (1.0 - np.cos(np.pi * settings['ridge_fold_count'] * f)) / 2.0
    ridge = f ** 4 * settings['main_ridge_height'] + folds * f * settings['secondary_ridge_height']
    return h + ridge * m

def rift(h, f, m, settings):
    """Continents pulling apart sink into a rift valley."""
    return h - f ** 2 * settings['rift_depth']

def subduction_arc(h, f, m, settings):
    """
    The coast is pinned to sea level while a volcanic range rises inland.
    The sin^2 peak sits halfway between the coast and the edge of the zone.
    """
    pinned = h * (1.0 - f ** 3)
    return pinned + np.sin(np.pi * f) ** 2 * settings['subduction_arc_height'] * m

def passive_margin(h, f, m, settings):
    return _blend(h, settings['shelf_height'], _smoothstep(f))

def continental_shelf(h, f, m, settings):
    return _blend(h, settings['shelf_height'], f ** 3)

def trench(h, f, m, settings):
    """
    The sea floor rises to meet the coast, and a trench opens just off it.
    sin(pi * f^2) puts the deepest point closer to the boundary than the middle.
    """
    pinned = h * (1.0 - f ** 3)
    return pinned - np.sin(np.pi * f ** 2) * settings['trench_depth']

def passive_shelf(h, f, m, settings):
    return _blend(h, settings['shelf_height'], f ** 2)

def oceanic_shelf(h, f, m, settings):
    return _blend(h, settings['shelf_height'], f ** 3)

def island_arc(h, f, m, settings):
    """A volcanic island chain on the overriding side, vanishing at the boundary."""
    return h + f ** 3 * np.sin(f * np.pi) * settings['island_arc_height'] * m

def mid_ocean_ridge(h, f, m, settings):
    return h + f ** 2 * settings['mid_ocean_ridge_height']

INTERACTION_RULES = {
    INTERACTION_OROGENY: orogeny,
    INTERACTION_RIFT: rift,
    INTERACTION_SUBDUCTION_ARC: subduction_arc,
    INTERACTION_PASSIVE_MARGIN: passive_margin,
    INTERACTION_CONTINENTAL_SHELF: continental_shelf,
    INTERACTION_TRENCH: trench,
    INTERACTION_PASSIVE_SHELF: passive_shelf,
    INTERACTION_OCEANIC_SHELF: oceanic_shelf,
    INTERACTION_ISLAND_ARC: island_arc,
    INTERACTION_MID_OCEAN_RIDGE: mid_ocean_ridge,
}

def calculate_base_height(type1: np.ndarray, settings: dict) -> np.ndarray:
    """The owning plate alone sets the base height."""
    return np.where(
        type1 == DEFAULTS.PLATE_TYPE_CONTINENTAL,
        settings['continental_base_height'],
        settings['oceanic_base_height'],
    ).astype(np.float64)

def apply_interactions(base_height: np.ndarray, interaction_ids: np.ndarray,
                       boundary_factor: np.ndarray, mountain: np.ndarray, settings: dict) -> np.ndarray:
    """Dispatches every point to the rule for its interaction id."""
    height = base_height.copy()
    for interaction_id, rule in INTERACTION_RULES.items():
        mask = interaction_ids == interaction_id
        if np.any(mask):
            height[mask] = rule(base_height[mask], boundary_factor[mask], mountain[mask], settings)
    return height
