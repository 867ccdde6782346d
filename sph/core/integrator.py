"""
Vectorized time integration for SPH particles.

Includes:
- Semi-implicit (symplectic) Euler integration
- Reflective wall collisions with damping
"""

import numpy as np
from typing import Tuple


def particle_bounds(area_size: Tuple[float, float], particle_radius: float) -> Tuple[float, float, float, float]:
    """(xmin, xmax, ymin, ymax) valid for particle centres in an area anchored at the origin."""
    width, height = area_size
    return (particle_radius, width - particle_radius,
            particle_radius, height - particle_radius)


def integrate_semi_implicit_vectorized(position_x: np.ndarray, position_y: np.ndarray,
                                       velocity_x: np.ndarray, velocity_y: np.ndarray,
                                       accel_x: np.ndarray, accel_y: np.ndarray,
                                       dt: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Semi-implicit Euler step on fresh arrays.

    v' = v + a*dt, then p' = p + v'*dt. Inputs are not modified.

    Returns:
        (next_x, next_y, next_vx, next_vy)
    """
    next_vx = velocity_x + accel_x * dt
    next_vy = velocity_y + accel_y * dt
    next_x = position_x + next_vx * dt
    next_y = position_y + next_vy * dt
    return next_x, next_y, next_vx, next_vy


def boundary_normals_vectorized(position_x: np.ndarray, position_y: np.ndarray,
                                bounds: Tuple[float, float, float, float]) -> Tuple[np.ndarray, np.ndarray]:
    """Inward unit normals of the violated walls (zero where inside).

    A particle past a corner gets the normalized sum of both axis normals.
    """
    xmin, xmax, ymin, ymax = bounds
    normal_x = (position_x < xmin).astype(np.float64) - (position_x > xmax).astype(np.float64)
    normal_y = (position_y < ymin).astype(np.float64) - (position_y > ymax).astype(np.float64)

    length = np.hypot(normal_x, normal_y)
    hit = length > 0
    normal_x[hit] /= length[hit]
    normal_y[hit] /= length[hit]
    return normal_x, normal_y


def resolve_boundary_collisions_vectorized(position_x: np.ndarray, position_y: np.ndarray,
                                           next_x: np.ndarray, next_y: np.ndarray,
                                           next_vx: np.ndarray, next_vy: np.ndarray,
                                           dt: float,
                                           bounds: Tuple[float, float, float, float],
                                           damping: float = 1.0):
    """Reflect tentative steps that leave the area (in place on the ``next_*`` arrays).

    For particles whose tentative position is outside ``bounds`` and that move
    outward, the normal velocity component is flipped and scaled by
    ``damping``: v'' = v' - (1 + damping)(v'·n)n. Their displacement is then
    recomputed from the start-of-tick position. Finally every position is
    clamped into bounds so float error can never leave a particle outside.

    Args:
        position_x, position_y: Start-of-tick positions
        next_x, next_y: Tentative positions, overwritten with committed ones
        next_vx, next_vy: Tentative velocities, overwritten with committed ones
        dt: Time step
        bounds: (xmin, xmax, ymin, ymax) for particle centres
        damping: Fraction of normal speed kept after a bounce
    """
    xmin, xmax, ymin, ymax = bounds
    normal_x, normal_y = boundary_normals_vectorized(next_x, next_y, bounds)

    normal_speed = next_vx * normal_x + next_vy * normal_y
    bounce = normal_speed < 0.0

    if np.any(bounce):
        factor = (1.0 + damping) * normal_speed[bounce]
        next_vx[bounce] -= factor * normal_x[bounce]
        next_vy[bounce] -= factor * normal_y[bounce]
        next_x[bounce] = position_x[bounce] + next_vx[bounce] * dt
        next_y[bounce] = position_y[bounce] + next_vy[bounce] * dt

    np.clip(next_x, xmin, xmax, out=next_x)
    np.clip(next_y, ymin, ymax, out=next_y)
