"""
Density computation for SPH by direct summation:

    ρ(x) = Σⱼ m W(|xⱼ - x|, h)
"""

import numpy as np

from ..core.kernels import SmoothingKernels
from ..core.particles import ParticleArrays
from ..core.spatial_grid import SpatialGrid
from ..core.vector import Vector2
from .density_numba import compute_densities_numba


def compute_density(point: Vector2, particles: ParticleArrays, candidates: np.ndarray,
                    kernels: SmoothingKernels) -> float:
    """Density at ``point`` from the candidate particles.

    Candidates beyond the smoothing radius contribute nothing, so a
    conservative grid query can be passed straight in. If ``point`` is one
    of the particles, the caller removes it from ``candidates``.

    Args:
        point: Sample location
        particles: Particle arrays
        candidates: Indices into ``particles``
        kernels: Kernel set carrying the smoothing radius

    Returns:
        Density value (0 when no candidate is in range)
    """
    if len(candidates) == 0:
        return 0.0
    dx = particles.position_x[candidates] - point.x
    dy = particles.position_y[candidates] - point.y
    distances = np.sqrt(dx * dx + dy * dy)
    return float(particles.mass * np.sum(kernels.density(distances)))


def neighbors_of(index: int, particles: ParticleArrays, grid: SpatialGrid,
                 kernels: SmoothingKernels) -> np.ndarray:
    """Grid candidates around particle ``index`` with the particle itself removed."""
    candidates = grid.query_radius(particles.position(index), kernels.radius)
    return candidates[candidates != index]


def compute_densities(particles: ParticleArrays, grid: SpatialGrid, kernels: SmoothingKernels):
    """Fill ``particles.density`` for every particle.

    The grid must already be rebuilt from ``particles``' positions. Gives
    the same values as calling ``compute_density`` per particle with
    ``neighbors_of`` candidates.
    """
    compute_densities_numba(
        particles.position_x, particles.position_y,
        float(particles.mass), kernels.radius,
        grid.sorted_indices, grid.cell_start,
        grid.nx, grid.ny, grid.cell_size,
        particles.density
    )
