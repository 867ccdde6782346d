"""
Initial particle layouts.

Two layouts are supported:
- random placement with rejection of overlapping particles
- a deterministic square lattice centred in the area
"""

import logging
import math
from typing import Tuple

import numpy as np

from ..config import ConfigurationError

logger = logging.getLogger(__name__)


def random_placement(count: int, area_size: Tuple[float, float], particle_radius: float,
                     rng: np.random.Generator, max_attempts: int = 200) -> np.ndarray:
    """Scatter particles uniformly with no two closer than 2 * radius.

    Args:
        count: Number of particles
        area_size: (width, height) of the area
        particle_radius: Particle radius; centres stay this far from the walls
        rng: Random generator
        max_attempts: Candidate positions tried per particle before giving up

    Returns:
        Array of (x, y) positions, shape (count, 2)

    Raises:
        ConfigurationError: if some particle cannot be placed
    """
    width, height = area_size
    min_dist_sq = (2.0 * particle_radius) ** 2
    positions = np.zeros((count, 2), dtype=np.float64)

    for i in range(count):
        placed = positions[:i]
        for _ in range(max_attempts):
            x = rng.uniform(particle_radius, width - particle_radius)
            y = rng.uniform(particle_radius, height - particle_radius)
            if i == 0:
                break
            dx = placed[:, 0] - x
            dy = placed[:, 1] - y
            if np.min(dx * dx + dy * dy) >= min_dist_sq:
                break
        else:
            raise ConfigurationError(
                f"Could not place particle {i + 1} of {count} without overlap "
                f"after {max_attempts} attempts; area {area_size} is too crowded"
            )
        positions[i] = (x, y)

    logger.debug("Placed %d particles at random", count)
    return positions


def grid_placement(count: int, area_size: Tuple[float, float], spacing: float,
                   particle_radius: float = 0.0) -> np.ndarray:
    """Lay particles out row by row on a near-square lattice centred in the area.

    Returns:
        Array of (x, y) positions, shape (count, 2)

    Raises:
        ConfigurationError: if the lattice does not fit inside the area
    """
    width, height = area_size
    free_w = width - 2.0 * particle_radius
    free_h = height - 2.0 * particle_radius
    if free_w < 0 or free_h < 0:
        raise ConfigurationError(f"Area {area_size} is smaller than one particle")

    max_cols = int(free_w // spacing) + 1
    cols = min(int(math.ceil(math.sqrt(count))), max_cols)
    rows = int(math.ceil(count / cols))
    block_w = (cols - 1) * spacing
    block_h = (rows - 1) * spacing
    if block_h > free_h:
        raise ConfigurationError(
            f"{count} particles at spacing {spacing} need {rows} rows; area {area_size} is too small"
        )

    origin_x = (width - block_w) / 2.0
    origin_y = (height - block_h) / 2.0

    k = np.arange(count)
    positions = np.empty((count, 2), dtype=np.float64)
    positions[:, 0] = origin_x + (k % cols) * spacing
    positions[:, 1] = origin_y + (k // cols) * spacing
    return positions
