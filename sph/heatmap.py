"""Coarse density field sampling for visualization."""

import math
from typing import Tuple

import numpy as np

from .core.kernels import SmoothingKernels
from .core.particles import ParticleArrays
from .core.spatial_grid import SpatialGrid
from .physics.density_numba import sample_density_grid_numba


def heatmap_shape(area_size: Tuple[float, float], resolution: float) -> Tuple[int, int]:
    return (max(1, int(math.ceil(area_size[0] / resolution))),
            max(1, int(math.ceil(area_size[1] / resolution))))


def sample_heatmap(particles: ParticleArrays, grid: SpatialGrid, kernels: SmoothingKernels,
                   area_size: Tuple[float, float], resolution: float) -> np.ndarray:
    """Density sampled at the centre of each heatmap cell.

    Args:
        particles: Particle arrays the grid was built from
        grid: Neighbour grid
        kernels: Kernel set carrying the smoothing radius
        area_size: (width, height) of the area
        resolution: Heatmap cell edge length, independent of the grid cell size

    Returns:
        Array of shape (nx, ny), indexed [x, y]
    """
    heatmap = np.zeros(heatmap_shape(area_size, resolution), dtype=np.float64)
    if not grid.is_built:
        return heatmap
    sample_density_grid_numba(
        particles.position_x, particles.position_y,
        float(particles.mass), kernels.radius,
        grid.sorted_indices, grid.cell_start,
        grid.nx, grid.ny, grid.cell_size,
        float(resolution), heatmap
    )
    return heatmap
