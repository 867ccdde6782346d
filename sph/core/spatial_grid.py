"""
Uniform cell grid for neighbour lookups.

The grid stores particle indices, not particle copies. Rebuilding is a
counting sort: particles are ordered by linear cell id and ``cell_start``
holds the offset of each cell's run inside ``sorted_indices``. Cells along
one grid row have consecutive ids, so a rectangular query reads one slice
per row.
"""

import logging
import math
from typing import Tuple

import numpy as np

from .vector import Vector2

logger = logging.getLogger(__name__)

_EMPTY = np.empty(0, dtype=np.intp)


class SpatialGrid:
    """Cell lists over the simulation area ``[0, width] x [0, height]``."""

    def __init__(self, area_size: Tuple[float, float], cell_size: float):
        """Initialize an empty grid.

        Args:
            area_size: (width, height) of the simulation area
            cell_size: Edge length of one cell, normally the smoothing radius
        """
        if not cell_size > 0:
            raise ValueError(f"Cell size must be positive, got {cell_size}")
        self.cell_size = float(cell_size)
        self.area_size = (float(area_size[0]), float(area_size[1]))

        self.nx = max(1, int(math.ceil(self.area_size[0] / self.cell_size)))
        self.ny = max(1, int(math.ceil(self.area_size[1] / self.cell_size)))
        self.n_cells = self.nx * self.ny

        self.sorted_indices = _EMPTY
        self.cell_start = np.zeros(self.n_cells + 1, dtype=np.intp)
        self.is_built = False

        logger.debug("Spatial grid: %dx%d cells, cell size %s", self.nx, self.ny, cell_size)

    def _cell_coords(self, x, y):
        cx = np.clip(np.floor(np.asarray(x) / self.cell_size), 0, self.nx - 1).astype(np.intp)
        cy = np.clip(np.floor(np.asarray(y) / self.cell_size), 0, self.ny - 1).astype(np.intp)
        return cx, cy

    def rebuild(self, position_x: np.ndarray, position_y: np.ndarray):
        """Bin every particle index into the cell containing its position.

        Positions outside the area are clamped into the border cells.
        """
        cell_x, cell_y = self._cell_coords(position_x, position_y)
        cell_ids = cell_y * self.nx + cell_x

        # Stable sort keeps indices ascending inside each cell
        self.sorted_indices = np.argsort(cell_ids, kind='stable').astype(np.intp)
        counts = np.bincount(cell_ids, minlength=self.n_cells)
        self.cell_start = np.zeros(self.n_cells + 1, dtype=np.intp)
        np.cumsum(counts, out=self.cell_start[1:])
        self.is_built = True

    def clear(self):
        self.sorted_indices = _EMPTY
        self.cell_start = np.zeros(self.n_cells + 1, dtype=np.intp)
        self.is_built = False

    def cell_of(self, point: Vector2) -> Tuple[int, int]:
        """Clamped (cx, cy) cell coordinates of a point."""
        cx, cy = self._cell_coords(point.x, point.y)
        return int(cx), int(cy)

    def get_cell_particles(self, cell_x: int, cell_y: int) -> np.ndarray:
        """Get particle indices in a specific cell."""
        if not self.is_built or not (0 <= cell_x < self.nx and 0 <= cell_y < self.ny):
            return _EMPTY
        cell_id = cell_y * self.nx + cell_x
        return self.sorted_indices[self.cell_start[cell_id]:self.cell_start[cell_id + 1]]

    def query_radius(self, center: Vector2, radius: float) -> np.ndarray:
        """Candidate neighbour indices for a disc around ``center``.

        Returns every index in the cells overlapping the square
        ``center ± radius``. This is a superset of the true neighbours;
        callers apply the exact cutoff through the kernels.
        """
        if not self.is_built:
            return _EMPTY

        if radius <= 0:
            cx, cy = self.cell_of(center)
            return self.get_cell_particles(cx, cy)

        min_x, min_y = self._cell_coords(center.x - radius, center.y - radius)
        max_x, max_y = self._cell_coords(center.x + radius, center.y + radius)

        runs = []
        for cy in range(int(min_y), int(max_y) + 1):
            row = cy * self.nx
            start = self.cell_start[row + min_x]
            end = self.cell_start[row + max_x + 1]
            if end > start:
                runs.append(self.sorted_indices[start:end])

        if not runs:
            return _EMPTY
        if len(runs) == 1:
            return runs[0]
        return np.concatenate(runs)

    def get_statistics(self) -> dict:
        """Get grid occupancy statistics for debugging."""
        counts = np.diff(self.cell_start)
        occupied = counts > 0
        return {
            'total_cells': self.n_cells,
            'occupied_cells': int(np.sum(occupied)),
            'occupancy_rate': float(np.sum(occupied)) / self.n_cells,
            'max_particles_per_cell': int(np.max(counts)) if counts.size else 0,
            'mean_particles_per_occupied_cell': float(np.mean(counts[occupied])) if np.any(occupied) else 0.0,
        }
