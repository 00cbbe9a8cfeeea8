# planet_generator/stress_model.py

"""
================================================================================
SOFTMAX STRESS MODEL
================================================================================
An alternative to the nearest-pair rule table. Instead of committing every
point to its two nearest plates, every plate gets a softmax weight from its
proximity to the point, base heights are blended by those weights, and a
pairwise "stress" is accumulated over every pair of plates that both have
a noticeable weight.

It gives smoother, wider boundary features at O(N^2) cost per point. Select
it with 'interaction_model': 'stress'; it is never mixed with the rule table.

Data Contract:
---------------
- Inputs:
    - directions: (M, 3) unit vectors.
    - plates: the PlateSet.
    - p: the noise permutation table.
    - settings (dict): the consolidated generator settings.
- Outputs:
    - (M,) heights, clamped to the height floor.
- Side Effects: None.
================================================================================
"""
import numpy as np

from . import noise

def calculate_plate_weights(directions: np.ndarray, centers: np.ndarray, sharpness: float) -> np.ndarray:
    """Softmax of sharpness * dot(v, center) over all plates, per point."""
    dots = (
        directions[:, 0:1] * centers[:, 0]
        + directions[:, 1:2] * centers[:, 1]
        + directions[:, 2:3] * centers[:, 2]
    )
    # Shifting by the row maximum keeps exp() finite for any sharpness.
    exponents = sharpness * (dots - np.max(dots, axis=1, keepdims=True))
    weights = np.exp(exponents)
    return weights / np.sum(weights, axis=1, keepdims=True)

def calculate_stress(weights: np.ndarray, plates, settings: dict) -> np.ndarray:
    """
    Accumulates the signed tectonic stress of every plate pair at every point.
    Positive stress raises mountains and arcs, negative stress opens rifts.
    """
    num_points, num_plates = weights.shape
    stress = np.zeros(num_points)
    min_weight = settings['stress_min_weight']
    threshold = settings['stress_drift_threshold']
    continental = plates.is_continental

    for i in range(num_plates):
        wi = weights[:, i]
        for j in range(i + 1, num_plates):
            wj = weights[:, j]
            active = (wi >= min_weight) & (wj >= min_weight)
            if not np.any(active):
                continue

            w_pair = np.where(active, wi * wj * settings['stress_pair_gain'], 0.0)
            drift_dot = float(np.dot(plates.drifts[i], plates.drifts[j]))

            # 1. Continent - continent: orogeny or rift valley.
            if continental[i] and continental[j]:
                if drift_dot < -threshold:
                    stress += w_pair * settings['stress_orogeny']
                elif drift_dot > threshold:
                    stress -= w_pair * settings['stress_rift']

            # 2. Continent - ocean: subduction or a passive margin.
            elif continental[i] or continental[j]:
                if drift_dot < -threshold:
                    if continental[i]:
                        w_cont, w_ocean = wi, wj
                    else:
                        w_cont, w_ocean = wj, wi
                    # diff is 0 on the boundary, positive inland and negative
                    # offshore, giving a peak -> coast -> trench S-profile.
                    diff = w_cont - w_ocean
                    profile = diff ** 5 * w_pair * settings['stress_subduction_profile_gain']
                    stress += profile * settings['stress_subduction']
                else:
                    stress -= w_pair * settings['stress_passive_margin']

            # 3. Ocean - ocean: island arcs or mid-ocean ridges.
            else:
                if drift_dot < -threshold:
                    stress += w_pair * settings['stress_island_arc']
                elif drift_dot > threshold:
                    stress += w_pair * settings['stress_mid_ocean_ridge']

    return stress

def calculate_stress_height(directions: np.ndarray, plates, p: np.ndarray, settings: dict) -> np.ndarray:
    """Computes the final height of every direction under the stress model."""
    weights = calculate_plate_weights(directions, plates.centers, settings['stress_softmax_sharpness'])

    # --- 1. Blended base height ---
    plate_heights = np.where(
        plates.is_continental,
        settings['stress_continental_base_height'],
        settings['stress_oceanic_base_height'],
    )
    base_height = np.zeros(directions.shape[0])
    for i in range(plates.num_plates):
        base_height += weights[:, i] * plate_heights[i]

    # --- 2. Tectonic stress ---
    stress = calculate_stress(weights, plates, settings)

    # --- 3. Noise layers ---
    surface_noise = noise.sample_sphere_noise(
        p, directions, settings['stress_surface_frequency'], settings['detail_seed_offset'],
        settings['detail_octaves'], settings['noise_persistence'], settings['noise_lacunarity']
    )
    mountain_noise = np.abs(noise.sample_sphere_noise(
        p, directions, settings['stress_mountain_frequency'], settings['mountain_seed_offset'],
        settings['mountain_octaves'], settings['noise_persistence'], settings['noise_lacunarity']
    ))

    # --- 4. Final height ---
    # Only positive stress is roughened into mountains; trenches and rifts
    # are deepened by the same noise but keep their smooth outline.
    surface_height = base_height + surface_noise * settings['stress_surface_weight']
    mountains = np.maximum(stress, 0.0) * mountain_noise * settings['stress_mountain_gain']
    trenches = np.minimum(stress, 0.0) * mountain_noise * settings['stress_trench_gain']

    return np.maximum(surface_height + mountains + trenches, settings['height_floor'])
