# preview_planet.py

"""
================================================================================
PLANET PREVIEW SCRIPT
================================================================================
This script is a command-line tool for rendering a generated planet to an
equirectangular (longitude/latitude) PNG image. The image is rendered in
independent horizontal tiles spread over a pool of worker processes; since
the surface field depends only on direction, the tiles join seamlessly.

Only the image is written. The planet itself is regenerated from its
configuration every time.

Usage:
    python preview_planet.py --seed 144 --width 1024 --view terrain
    python preview_planet.py --config path/to/config.json --output planet.png
================================================================================
"""
import os
import sys
import json
import logging
import argparse
import time
import multiprocessing

import numpy as np
from PIL import Image
from tqdm import tqdm

from planet_generator.generator import PlanetGenerator
from planet_generator import color_maps
from planet_generator import config as DEFAULTS

VIEW_MODES = ("terrain", "elevation", "plates")
DEFAULT_TILE_ROWS = 16
# Heights above this render as white in the elevation view.
ELEVATION_VIEW_CEILING = 1.5

def equirectangular_directions(width: int, height: int, row_start: int, row_stop: int) -> np.ndarray:
    """
    Unit directions through the pixel centers of rows [row_start, row_stop)
    of a width x height equirectangular image. +Y is north.
    """
    cols = (np.arange(width) + 0.5) / width
    rows = (np.arange(row_start, row_stop) + 0.5) / height
    lon = cols * 2.0 * np.pi - np.pi
    lat = np.pi / 2.0 - rows * np.pi
    lon_grid, lat_grid = np.meshgrid(lon, lat)

    directions = np.stack([
        np.cos(lat_grid) * np.cos(lon_grid),
        np.sin(lat_grid),
        np.cos(lat_grid) * np.sin(lon_grid),
    ], axis=-1)
    return directions.reshape(-1, 3)

def render_rows(generator: PlanetGenerator, view_mode: str, width: int, height: int,
                row_start: int, row_stop: int) -> np.ndarray:
    """Renders one tile of rows into an (rows, width, 3) uint8 sRGB array."""
    directions = equirectangular_directions(width, height, row_start, row_stop)

    if view_mode == "terrain":
        heights = generator.get_elevation(directions)
        color_array = color_maps.linear_to_srgb8(generator.get_biome_colors(heights))
    elif view_mode == "elevation":
        heights = generator.get_elevation(directions)
        color_array = color_maps.get_elevation_color_array(
            heights, generator.settings['height_floor'], ELEVATION_VIEW_CEILING
        )
    elif view_mode == "plates":
        plate_ids = generator.get_partition_data(directions)[0]
        color_array = color_maps.get_plate_color_array(plate_ids, generator.plates.num_plates, generator.seed)
    else:
        raise ValueError(f"Unknown view mode '{view_mode}', expected one of {VIEW_MODES}")

    return color_array.reshape(row_stop - row_start, width, 3)

# --- Global variables for worker processes ---
worker_generator = None
worker_view_mode = None
worker_image_size = (0, 0)

def init_worker(settings, permutation_table, view_mode, image_size):
    """Initializes the global state for each worker process."""
    global worker_generator, worker_view_mode, worker_image_size

    worker_logger = logging.getLogger(f"Worker-{os.getpid()}")
    worker_generator = PlanetGenerator(config=settings, logger=worker_logger,
                                       permutation_table=permutation_table)
    worker_view_mode = view_mode
    worker_image_size = image_size

def process_tile(bounds):
    """Renders a single tile of rows. Returns the bounds and its pixels."""
    row_start, row_stop = bounds
    width, height = worker_image_size
    pixels = render_rows(worker_generator, worker_view_mode, width, height, row_start, row_stop)
    return row_start, row_stop, pixels

def render_preview(generator: PlanetGenerator, view_mode: str, width: int, num_workers: int = 1,
                   tile_rows: int = DEFAULT_TILE_ROWS, show_progress: bool = False) -> np.ndarray:
    """Renders the whole planet into a (width // 2, width, 3) uint8 image array."""
    height = max(1, width // 2)
    image = np.zeros((height, width, 3), dtype=np.uint8)
    tasks = [(start, min(start + tile_rows, height)) for start in range(0, height, tile_rows)]

    if num_workers <= 1:
        for row_start, row_stop in tqdm(tasks, desc="Rendering Tiles", disable=not show_progress):
            image[row_start:row_stop] = render_rows(generator, view_mode, width, height, row_start, row_stop)
        return image

    init_args = (generator.settings, generator.permutation_table, view_mode, (width, height))
    with multiprocessing.Pool(processes=num_workers, initializer=init_worker, initargs=init_args) as pool:
        results_iterator = pool.imap_unordered(process_tile, tasks)
        for row_start, row_stop, pixels in tqdm(results_iterator, total=len(tasks),
                                                desc="Rendering Tiles", disable=not show_progress):
            image[row_start:row_stop] = pixels
    return image

def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render an equirectangular preview of a tectonic planet.")
    parser.add_argument("--config", type=str, help="Path to a JSON file of generator settings.")
    parser.add_argument("--seed", type=int, help="Overrides the seed from the config.")
    parser.add_argument("--plates", type=int, help="Overrides the number of plates.")
    parser.add_argument("--model", choices=DEFAULTS.INTERACTION_MODELS, help="Overrides the interaction model.")
    parser.add_argument("--width", type=int, default=1024, help="Image width in pixels (height is half).")
    parser.add_argument("--view", choices=VIEW_MODES, default="terrain", help="What to render.")
    parser.add_argument("--workers", type=int, default=max(1, multiprocessing.cpu_count() - 1),
                        help="Number of worker processes.")
    parser.add_argument("--output", type=str, help="Output PNG path. Defaults to planet_<seed>_<view>.png.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser

def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)

    # 1. --- Setup Logging ---
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    logger = logging.getLogger("Preview")

    # 2. --- Load Configuration ---
    config = {}
    if args.config:
        logger.info(f"Loading configuration from: {args.config}")
        try:
            with open(args.config, 'r') as f:
                config = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError) as e:
            logger.critical(f"Failed to load or parse config file: {e}")
            return 1
    if args.seed is not None:
        config['seed'] = args.seed
    if args.plates is not None:
        config['num_plates'] = args.plates
    if args.model is not None:
        config['interaction_model'] = args.model

    # 3. --- Generate and Render ---
    try:
        generator = PlanetGenerator(config=config, logger=logger)
        logger.info(f"Rendering {args.view} view at {args.width}x{max(1, args.width // 2)} with {args.workers} worker(s)...")
        start_time = time.perf_counter()
        image = render_preview(generator, args.view, args.width, num_workers=args.workers, show_progress=True)
        logger.info(f"Rendering complete in {time.perf_counter() - start_time:.2f} seconds.")
    except Exception as e:
        logger.critical(f"Planet generation failed: {e}", exc_info=True)
        return 1

    # 4. --- Save ---
    output_path = args.output or f"planet_{generator.seed}_{args.view}.png"
    Image.fromarray(image, 'RGB').save(output_path, 'PNG')
    logger.info(f"Preview saved to: {output_path}")
    return 0


# --- Command-Line Interface ---
if __name__ == "__main__":
    sys.exit(main())
