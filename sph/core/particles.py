"""
Particle storage using a Structure-of-Arrays (SoA) layout.

The simulation keeps two of these and swaps them every tick: one is the
frozen snapshot of the previous state, the other receives the new state.
A particle's index in the arrays is its identity for the neighbour grid.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional

from .vector import Vector2

DTYPE = np.float64


@dataclass(frozen=True)
class Particle:
    """Read-only view of one particle."""
    position: Vector2
    velocity: Vector2
    density: float = 0.0
    mass: float = 1.0
    radius: float = 1.0

    @property
    def speed(self) -> float:
        return self.velocity.magnitude()


@dataclass
class ParticleArrays:
    """Structure of arrays for N particles.

    All particles share the same mass and radius, so those are scalars.
    """
    position_x: np.ndarray      # shape: (N,)
    position_y: np.ndarray      # shape: (N,)
    velocity_x: np.ndarray      # shape: (N,)
    velocity_y: np.ndarray      # shape: (N,)
    density: np.ndarray         # shape: (N,)
    mass: float = 1.0
    radius: float = 1.0

    @staticmethod
    def allocate(count: int, mass: float = 1.0, radius: float = 1.0) -> 'ParticleArrays':
        """Zero-initialised arrays for ``count`` particles."""
        return ParticleArrays(
            position_x=np.zeros(count, dtype=DTYPE),
            position_y=np.zeros(count, dtype=DTYPE),
            velocity_x=np.zeros(count, dtype=DTYPE),
            velocity_y=np.zeros(count, dtype=DTYPE),
            density=np.zeros(count, dtype=DTYPE),
            mass=mass,
            radius=radius,
        )

    @staticmethod
    def from_positions(positions: np.ndarray, velocities: Optional[np.ndarray] = None,
                       mass: float = 1.0, radius: float = 1.0) -> 'ParticleArrays':
        """Build particles from an (N, 2) position array, at rest unless velocities are given."""
        positions = np.asarray(positions, dtype=DTYPE).reshape(-1, 2)
        particles = ParticleArrays.allocate(len(positions), mass=mass, radius=radius)
        particles.position_x[:] = positions[:, 0]
        particles.position_y[:] = positions[:, 1]
        if velocities is not None:
            velocities = np.asarray(velocities, dtype=DTYPE).reshape(-1, 2)
            particles.velocity_x[:] = velocities[:, 0]
            particles.velocity_y[:] = velocities[:, 1]
        return particles

    def __len__(self) -> int:
        return self.position_x.shape[0]

    def copy(self) -> 'ParticleArrays':
        return ParticleArrays(
            position_x=self.position_x.copy(),
            position_y=self.position_y.copy(),
            velocity_x=self.velocity_x.copy(),
            velocity_y=self.velocity_y.copy(),
            density=self.density.copy(),
            mass=self.mass,
            radius=self.radius,
        )

    def get_positions(self, indices: Optional[np.ndarray] = None) -> np.ndarray:
        """Get particle positions as (N, 2) array for convenience."""
        if indices is None:
            return np.column_stack((self.position_x, self.position_y))
        return np.column_stack((self.position_x[indices], self.position_y[indices]))

    def get_velocities(self, indices: Optional[np.ndarray] = None) -> np.ndarray:
        """Get particle velocities as (N, 2) array for convenience."""
        if indices is None:
            return np.column_stack((self.velocity_x, self.velocity_y))
        return np.column_stack((self.velocity_x[indices], self.velocity_y[indices]))

    def position(self, index: int) -> Vector2:
        return Vector2(float(self.position_x[index]), float(self.position_y[index]))

    def velocity(self, index: int) -> Vector2:
        return Vector2(float(self.velocity_x[index]), float(self.velocity_y[index]))

    def particle(self, index: int) -> Particle:
        return Particle(
            position=self.position(index),
            velocity=self.velocity(index),
            density=float(self.density[index]),
            mass=self.mass,
            radius=self.radius,
        )
