# planet_generator/applicator.py

"""
================================================================================
FIELD APPLICATOR
================================================================================
This module applies a planet's surface field to an externally owned mesh.
It displaces every vertex along its direction by the sampled height and
fills a parallel per-vertex color buffer.

Data Contract:
---------------
- Inputs:
    - generator: a PlanetGenerator.
    - positions: (M, 3) float array owned by the caller, mutated in place.
    - colors (optional): (M, 4) float array owned by the caller.
    - recompute_normals (optional): a callable invoked once with the final
      positions after every vertex has been written.
- Outputs:
    - The (M, 4) linear RGBA color buffer.
- Side Effects: Mutates `positions` (and `colors` if given). Logs timings.
- Invariants: The vertex count never changes, both buffers stay index
  aligned, and the result does not depend on chunking or worker count.
  If anything fails, neither buffer is touched.
================================================================================
"""
import logging
import multiprocessing
import os
import time

import numpy as np

from .generator import PlanetGenerator, prepare_directions

# --- Global variables for worker processes ---
worker_generator = None

def init_worker(settings: dict, permutation_table: np.ndarray):
    """
    Initializes the generator for each worker process. The parent's noise
    table is passed along so an injected table survives the process hop.
    """
    global worker_generator

    worker_logger = logging.getLogger(f"Worker-{os.getpid()}")
    worker_generator = PlanetGenerator(config=settings, logger=worker_logger,
                                       permutation_table=permutation_table)

def process_chunk(args: tuple) -> tuple:
    """
    A top-level, pickle-able function designed to be run in a worker process.
    It samples a single chunk of directions and returns the results.
    """
    start, directions = args
    heights = worker_generator.get_elevation(directions)
    return start, heights, worker_generator.get_biome_colors(heights)

def _chunk_bounds(num_vertices: int, chunk_size: int) -> list:
    return [(start, min(start + chunk_size, num_vertices)) for start in range(0, num_vertices, chunk_size)]

def sample_field(generator: PlanetGenerator, points: np.ndarray, num_workers: int = 1,
                 chunk_size: int = None) -> tuple[np.ndarray, np.ndarray]:
    """
    Samples heights and colors for (M, 3) points chunk by chunk, optionally
    spread over a process pool. Each chunk only fills its own slice of the
    output arrays. Points need not be unit length: they are validated and
    normalized exactly as `PlanetGenerator.sample` does, so both give the
    same bits for the same input.
    """
    directions = prepare_directions(points)
    if chunk_size is None:
        chunk_size = generator.settings['vertex_chunk_size']
    num_vertices = directions.shape[0]
    heights = np.empty(num_vertices)
    colors = np.empty((num_vertices, generator.biome_lut.shape[1]), dtype=np.float32)
    bounds = _chunk_bounds(num_vertices, chunk_size)

    if num_workers <= 1 or len(bounds) <= 1:
        for start, stop in bounds:
            chunk_heights = generator.get_elevation(directions[start:stop])
            heights[start:stop] = chunk_heights
            colors[start:stop] = generator.get_biome_colors(chunk_heights)
        return heights, colors

    tasks = [(start, directions[start:stop]) for start, stop in bounds]
    init_args = (generator.settings, generator.permutation_table)
    with multiprocessing.Pool(processes=num_workers, initializer=init_worker, initargs=init_args) as pool:
        for start, chunk_heights, chunk_colors in pool.imap_unordered(process_chunk, tasks):
            stop = start + chunk_heights.shape[0]
            heights[start:stop] = chunk_heights
            colors[start:stop] = chunk_colors
    return heights, colors

def apply_to_vertices(generator: PlanetGenerator, positions: np.ndarray, colors: np.ndarray = None,
                      recompute_normals=None, num_workers: int = 1, chunk_size: int = None) -> np.ndarray:
    """
    Displaces every vertex to `direction * (radius + height)` in place and
    writes its biome color into the parallel color buffer.

    Raises:
        ValueError: If a buffer has the wrong shape or is read-only, or a
            position is NaN/Inf or at the origin. Raised before any write.
    """
    logger = generator.logger

    # --- 1. Validate buffers before anything is computed or written ---
    if not isinstance(positions, np.ndarray) or not np.issubdtype(positions.dtype, np.floating):
        raise ValueError("positions must be a floating point NumPy array")
    if not positions.flags.writeable:
        raise ValueError("positions buffer is read-only")
    directions = prepare_directions(positions)
    num_vertices = positions.shape[0]

    if colors is None:
        colors = np.zeros((num_vertices, 4), dtype=np.float32)
    elif colors.shape != (num_vertices, 4):
        raise ValueError(f"colors buffer must have shape ({num_vertices}, 4), got {colors.shape}")
    elif not colors.flags.writeable:
        raise ValueError("colors buffer is read-only")

    # --- 2. Sample the whole field ---
    start_time = time.perf_counter()
    heights, new_colors = sample_field(generator, positions, num_workers=num_workers, chunk_size=chunk_size)
    elapsed = time.perf_counter() - start_time

    # --- 3. Write back. Nothing above touched the caller's buffers. ---
    radii = generator.settings['radius'] + heights
    positions[:] = directions * radii[:, np.newaxis]
    colors[:] = new_colors

    if num_vertices:
        logger.info(
            f"Applied surface field to {num_vertices} vertices in {elapsed:.2f}s "
            f"(heights {heights.min():.3f} to {heights.max():.3f})."
        )
    else:
        logger.warning("Applied surface field to an empty vertex buffer.")

    # --- 4. Normals must see the displaced surface, so they come last ---
    if recompute_normals is not None:
        recompute_normals(positions)

    return colors
