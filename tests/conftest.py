import logging

import numpy as np
import pytest

from planet_generator.generator import PlanetGenerator


def fibonacci_directions(count: int) -> np.ndarray:
    """Evenly spread unit vectors on the sphere (golden-angle spiral)."""
    i = np.arange(count) + 0.5
    y = 1.0 - 2.0 * i / count
    r = np.sqrt(1.0 - y * y)
    theta = np.pi * (3.0 - np.sqrt(5.0)) * i
    return np.stack([r * np.cos(theta), y, r * np.sin(theta)], axis=1)


@pytest.fixture(scope="session")
def logger():
    return logging.getLogger("PlanetGeneratorTests")


@pytest.fixture(scope="session")
def generator(logger):
    return PlanetGenerator(config={}, logger=logger)


@pytest.fixture(scope="session")
def sphere_directions():
    return fibonacci_directions(4000)
