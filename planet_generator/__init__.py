# planet_generator/__init__.py

# This file makes the 'planet_generator' directory a Python package.
# We also use it to define the public API of the package.

from .generator import PlanetGenerator, prepare_directions
from .applicator import apply_to_vertices, sample_field
from .tectonics import PlateSet, generate_plates

__all__ = [
    "PlanetGenerator",
    "prepare_directions",
    "apply_to_vertices",
    "sample_field",
    "PlateSet",
    "generate_plates",
]
