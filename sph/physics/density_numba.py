"""
Numba-compiled density summation.

The loops read the grid's ``sorted_indices``/``cell_start`` arrays directly
and visit the same cells, in the same order, as ``SpatialGrid.query_radius``.
Everything here is compiled serially; one thread walks every particle.
"""

import numpy as np
import numba as nb


@nb.njit(cache=True)
def density_weight(r: float, h: float) -> float:
    """Density kernel evaluation, zero outside the support."""
    if r >= h:
        return 0.0
    volume = np.pi * h**4 / 6.0
    return (h - r) * (h - r) / volume


@nb.njit(cache=True)
def cell_span(lo: float, hi: float, cell_size: float, n_cells: int):
    """First and last cell index covering ``[lo, hi]`` along one axis, clamped."""
    first = int(np.floor(lo / cell_size))
    last = int(np.floor(hi / cell_size))
    first = max(0, min(first, n_cells - 1))
    last = max(0, min(last, n_cells - 1))
    return first, last


@nb.njit(cache=True)
def density_at(px: float, py: float, exclude: int,
               position_x: np.ndarray, position_y: np.ndarray, mass: float, h: float,
               sorted_indices: np.ndarray, cell_start: np.ndarray,
               nx: int, ny: int, cell_size: float) -> float:
    """Density at (px, py) from every particle except index ``exclude``."""
    x0, x1 = cell_span(px - h, px + h, cell_size, nx)
    y0, y1 = cell_span(py - h, py + h, cell_size, ny)

    total = 0.0
    for cy in range(y0, y1 + 1):
        row = cy * nx
        for k in range(cell_start[row + x0], cell_start[row + x1 + 1]):
            j = sorted_indices[k]
            if j == exclude:
                continue
            dx = position_x[j] - px
            dy = position_y[j] - py
            total += density_weight(np.sqrt(dx * dx + dy * dy), h)
    return mass * total


@nb.njit(cache=True)
def compute_densities_numba(position_x: np.ndarray, position_y: np.ndarray,
                            mass: float, h: float,
                            sorted_indices: np.ndarray, cell_start: np.ndarray,
                            nx: int, ny: int, cell_size: float,
                            density: np.ndarray):
    for i in range(position_x.shape[0]):
        density[i] = density_at(position_x[i], position_y[i], i,
                                position_x, position_y, mass, h,
                                sorted_indices, cell_start, nx, ny, cell_size)


@nb.njit(cache=True)
def sample_density_grid_numba(position_x: np.ndarray, position_y: np.ndarray,
                              mass: float, h: float,
                              sorted_indices: np.ndarray, cell_start: np.ndarray,
                              nx: int, ny: int, cell_size: float,
                              resolution: float, out: np.ndarray):
    """Fill ``out[ix, iy]`` with the density at each sample cell's centre."""
    for ix in range(out.shape[0]):
        cx = (ix + 0.5) * resolution
        for iy in range(out.shape[1]):
            cy = (iy + 0.5) * resolution
            out[ix, iy] = density_at(cx, cy, -1, position_x, position_y, mass, h,
                                     sorted_indices, cell_start, nx, ny, cell_size)
