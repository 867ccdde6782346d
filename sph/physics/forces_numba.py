"""
Numba-compiled acceleration pass.

Evaluates gravity, drag, pressure, viscosity and pointer terms for every
particle in one serial sweep over the neighbour grid. Pairs at exactly zero
distance have no defined direction; they are skipped here and counted in
``coincident`` so the caller can add their pressure contribution.
"""

import numpy as np
import numba as nb

from .density_numba import cell_span


@nb.njit(cache=True)
def pressure_slope(r: float, h: float) -> float:
    """Derivative of the density kernel, negative inside the support."""
    if r >= h:
        return 0.0
    return (r - h) * (12.0 / (np.pi * h**4))


@nb.njit(cache=True)
def viscosity_weight(r: float, h: float) -> float:
    if r >= h:
        return 0.0
    value = max(h * h - r * r, 0.0)
    return value**3 / (np.pi * h**8 / 4.0)


@nb.njit(cache=True)
def compute_accelerations_numba(position_x: np.ndarray, position_y: np.ndarray,
                                velocity_x: np.ndarray, velocity_y: np.ndarray,
                                density: np.ndarray, h: float,
                                sorted_indices: np.ndarray, cell_start: np.ndarray,
                                nx: int, ny: int, cell_size: float,
                                gravity: float, drag_coefficient: float,
                                pressure_constant: float, density_floor: float,
                                viscosity_constant: float, use_viscosity: bool,
                                density_epsilon: float,
                                pointer_sign: float, pointer_x: float, pointer_y: float,
                                pointer_radius: float, pointer_constant: float,
                                accel_x: np.ndarray, accel_y: np.ndarray,
                                coincident: np.ndarray):
    """Total acceleration of every particle.

    ``pointer_sign`` is +1 to attract, -1 to repel and 0 when the pointer is
    off.
    """
    for i in range(position_x.shape[0]):
        px = position_x[i]
        py = position_y[i]
        vx = velocity_x[i]
        vy = velocity_y[i]
        pressure_i = pressure_constant * (density[i] - density_floor)

        x0, x1 = cell_span(px - h, px + h, cell_size, nx)
        y0, y1 = cell_span(py - h, py + h, cell_size, ny)

        fx = 0.0
        fy = 0.0
        visc_x = 0.0
        visc_y = 0.0
        n_coincident = 0
        for cy in range(y0, y1 + 1):
            row = cy * nx
            for k in range(cell_start[row + x0], cell_start[row + x1 + 1]):
                j = sorted_indices[k]
                if j == i:
                    continue
                dx = px - position_x[j]
                dy = py - position_y[j]
                r = np.sqrt(dx * dx + dy * dy)

                weight = viscosity_weight(r, h)
                visc_x += (velocity_x[j] - vx) * weight
                visc_y += (velocity_y[j] - vy) * weight

                if r == 0.0:
                    n_coincident += 1
                    continue
                slope = pressure_slope(r, h)
                if slope != 0.0:
                    pressure_j = pressure_constant * (density[j] - density_floor)
                    magnitude = (pressure_i + pressure_j) / 2.0 * slope
                    fx -= dx / r * magnitude
                    fy -= dy / r * magnitude

        guarded = density[i] + density_epsilon

        ax = 0.0
        ay = gravity
        speed_sq = vx * vx + vy * vy
        if speed_sq > 0.0:
            speed = np.sqrt(speed_sq)
            ax -= vx / speed * (drag_coefficient * speed_sq)
            ay -= vy / speed * (drag_coefficient * speed_sq)

        ax += fx / guarded
        ay += fy / guarded
        if use_viscosity:
            ax += visc_x * viscosity_constant
            ay += visc_y * viscosity_constant

        if pointer_sign != 0.0:
            ox = pointer_x - px
            oy = pointer_y - py
            distance = np.sqrt(ox * ox + oy * oy)
            if distance < pointer_radius and distance > 0.0:
                scale = pointer_sign * pointer_constant / distance
                ax += ox * scale / guarded
                ay += oy * scale / guarded

        accel_x[i] = ax
        accel_y[i] = ay
        coincident[i] = n_coincident
