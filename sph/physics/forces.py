"""
Force computation for the SPH fluid.

Includes:
- Linear equation of state with a rest-density floor
- Symmetric pairwise pressure forces
- Velocity-blending viscosity
- Pointer attraction/repulsion, gravity and quadratic drag
"""

import enum
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..config import SimulationConfig
from ..core.kernels import SmoothingKernels
from ..core.particles import ParticleArrays
from ..core.spatial_grid import SpatialGrid
from ..core.vector import Vector2
from .forces_numba import compute_accelerations_numba


class PointerMode(enum.Enum):
    """What the pointer does to particles inside its radius."""
    NONE = "none"
    ATTRACT = "attract"
    REPEL = "repel"


_POINTER_SIGN = {
    PointerMode.NONE: 0.0,
    PointerMode.ATTRACT: 1.0,
    PointerMode.REPEL: -1.0,
}


@dataclass(frozen=True)
class PointerForce:
    """Point source supplied fresh every tick by the input layer."""
    position: Vector2
    mode: PointerMode = PointerMode.NONE
    radius: float = 0.0

    @staticmethod
    def inactive() -> 'PointerForce':
        return PointerForce(Vector2.zero(), PointerMode.NONE, 0.0)

    @property
    def is_active(self) -> bool:
        return self.mode is not PointerMode.NONE and self.radius > 0


class ForceModel:
    """Evaluates every acceleration term, per particle or for the whole set.

    Forces read only from the ``particles`` snapshot they are given, so the
    caller controls which state (pre-tick) a particle observes.
    """

    def __init__(self, config: SimulationConfig, rng: Optional[np.random.Generator] = None):
        self.config = config
        self.kernels = SmoothingKernels(config.smoothing_radius)
        self.rng = rng if rng is not None else np.random.default_rng()

    # ---------- equation of state ------------------------------------------

    def density_to_pressure(self, density):
        """P = k (ρ - ρ₀). Negative below the floor, which pulls sparse regions together."""
        return self.config.pressure_constant * (density - self.config.density_floor)

    def shared_pressure(self, density_a, density_b):
        """Mean pressure of a pair, identical for both sides of the pair."""
        return (self.density_to_pressure(density_a) + self.density_to_pressure(density_b)) / 2.0

    # ---------- pairwise forces --------------------------------------------

    def _offsets(self, index: int, neighbors: np.ndarray, particles: ParticleArrays):
        """Unit directions from each neighbour to ``index`` and the distances.

        Coincident neighbours get a random unit direction.
        """
        dx = particles.position_x[index] - particles.position_x[neighbors]
        dy = particles.position_y[index] - particles.position_y[neighbors]
        distances = np.sqrt(dx * dx + dy * dy)

        coincident = distances == 0.0
        safe = np.where(coincident, 1.0, distances)
        dir_x = dx / safe
        dir_y = dy / safe
        for k in np.flatnonzero(coincident):
            direction = Vector2.random_unit(self.rng)
            dir_x[k] = direction.x
            dir_y[k] = direction.y
        return dir_x, dir_y, distances

    def pressure_force(self, index: int, neighbors: np.ndarray, particles: ParticleArrays) -> Vector2:
        """Pressure force on particle ``index``.

        Each neighbour contributes -dir * shared_pressure * W'(r), with dir
        pointing from the neighbour to the particle. W' is negative inside
        the support, so positive shared pressure pushes the pair apart and
        the force on the neighbour is exactly the negation.
        """
        if len(neighbors) == 0:
            return Vector2.zero()
        dir_x, dir_y, distances = self._offsets(index, neighbors, particles)
        slope = self.kernels.pressure_derivative(distances)
        shared = self.shared_pressure(particles.density[index], particles.density[neighbors])
        magnitude = shared * slope
        return Vector2(float(-np.sum(dir_x * magnitude)), float(-np.sum(dir_y * magnitude)))

    def viscosity_force(self, index: int, neighbors: np.ndarray, particles: ParticleArrays) -> Vector2:
        """Pull the particle's velocity toward its neighbourhood's velocities."""
        if len(neighbors) == 0:
            return Vector2.zero()
        dx = particles.position_x[index] - particles.position_x[neighbors]
        dy = particles.position_y[index] - particles.position_y[neighbors]
        weights = self.kernels.viscosity(np.sqrt(dx * dx + dy * dy))
        dvx = particles.velocity_x[neighbors] - particles.velocity_x[index]
        dvy = particles.velocity_y[neighbors] - particles.velocity_y[index]
        scale = self.config.viscosity_constant
        return Vector2(float(np.sum(dvx * weights)) * scale, float(np.sum(dvy * weights)) * scale)

    # ---------- external forces --------------------------------------------

    def pointer_force(self, position: Vector2, pointer: Optional[PointerForce]) -> Vector2:
        """Flat attraction/repulsion well: constant magnitude inside the radius."""
        if pointer is None or pointer.mode is PointerMode.NONE:
            return Vector2.zero()
        offset = pointer.position - position
        if offset.magnitude() >= pointer.radius:
            return Vector2.zero()
        direction = offset.normalize()
        if pointer.mode is PointerMode.REPEL:
            direction = -direction
        return direction * self.config.pointer_constant

    def gravity(self) -> Vector2:
        # y points down
        return Vector2(0.0, self.config.gravity)

    def drag(self, velocity: Vector2) -> Vector2:
        """Quadratic drag -c|v|² v̂; zero for a particle at rest."""
        speed_sq = velocity.magnitude_squared()
        if speed_sq == 0.0:
            return Vector2.zero()
        return -velocity.normalize() * (self.config.drag_coefficient * speed_sq)

    # ---------- total ------------------------------------------------------

    def total_acceleration(self, index: int, neighbors: np.ndarray, particles: ParticleArrays,
                           pointer: Optional[PointerForce] = None) -> Vector2:
        """Sum of gravity, drag, pressure, viscosity and pointer terms.

        Pressure and pointer forces are divided by ρ + ε so an isolated
        particle (ρ = 0) never divides by zero.
        """
        density = float(particles.density[index]) + self.config.density_epsilon
        velocity = particles.velocity(index)

        acceleration = self.gravity() + self.drag(velocity)
        acceleration = acceleration + self.pressure_force(index, neighbors, particles) / density
        if self.config.enable_viscosity:
            acceleration = acceleration + self.viscosity_force(index, neighbors, particles)
        if self.config.enable_pointer_force:
            acceleration = acceleration + self.pointer_force(particles.position(index), pointer) / density
        return acceleration

    def accelerations(self, particles: ParticleArrays, grid: SpatialGrid,
                      pointer: Optional[PointerForce] = None):
        """``total_acceleration`` for every particle in one compiled pass.

        ``particles.density`` must be filled and the grid rebuilt from the
        same positions.

        Returns:
            (accel_x, accel_y) arrays
        """
        n = len(particles)
        cfg = self.config
        accel_x = np.zeros(n, dtype=np.float64)
        accel_y = np.zeros(n, dtype=np.float64)
        coincident = np.zeros(n, dtype=np.int64)

        sign = 0.0
        pointer_x = pointer_y = pointer_radius = 0.0
        if pointer is not None and cfg.enable_pointer_force:
            sign = _POINTER_SIGN[pointer.mode]
            pointer_x, pointer_y = pointer.position.as_tuple()
            pointer_radius = float(pointer.radius)

        compute_accelerations_numba(
            particles.position_x, particles.position_y,
            particles.velocity_x, particles.velocity_y,
            particles.density, self.kernels.radius,
            grid.sorted_indices, grid.cell_start,
            grid.nx, grid.ny, grid.cell_size,
            float(cfg.gravity), float(cfg.drag_coefficient),
            float(cfg.pressure_constant), float(cfg.density_floor),
            float(cfg.viscosity_constant), bool(cfg.enable_viscosity),
            float(cfg.density_epsilon),
            sign, float(pointer_x), float(pointer_y),
            pointer_radius, float(cfg.pointer_constant),
            accel_x, accel_y, coincident
        )

        for i in np.flatnonzero(coincident):
            force = self._coincident_pressure(i, particles, grid)
            guarded = float(particles.density[i]) + cfg.density_epsilon
            accel_x[i] += force.x / guarded
            accel_y[i] += force.y / guarded
        return accel_x, accel_y

    def _coincident_pressure(self, index: int, particles: ParticleArrays, grid: SpatialGrid) -> Vector2:
        """Pressure from neighbours sitting exactly on ``index``, each along a random direction."""
        candidates = grid.query_radius(particles.position(index), self.kernels.radius)
        position = particles.position(index)
        slope = self.kernels.pressure_derivative(0.0)
        force = Vector2.zero()
        for j in candidates:
            if j == index or particles.position(j) != position:
                continue
            shared = self.shared_pressure(particles.density[index], particles.density[j])
            force = force - Vector2.random_unit(self.rng) * float(shared * slope)
        return force
