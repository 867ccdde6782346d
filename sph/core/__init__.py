"""Core SPH components: vectors, kernels, particles, neighbour grid and integration."""

from .vector import Vector2
from .kernels import (
    density_kernel,
    pressure_kernel_derivative,
    viscosity_kernel,
    SmoothingKernels
)
from .particles import Particle, ParticleArrays
from .spatial_grid import SpatialGrid
from .integrator import (
    integrate_semi_implicit_vectorized,
    resolve_boundary_collisions_vectorized,
    boundary_normals_vectorized,
    particle_bounds
)

__all__ = [
    'Vector2',
    'density_kernel',
    'pressure_kernel_derivative',
    'viscosity_kernel',
    'SmoothingKernels',
    'Particle',
    'ParticleArrays',
    'SpatialGrid',
    'integrate_semi_implicit_vectorized',
    'resolve_boundary_collisions_vectorized',
    'boundary_normals_vectorized',
    'particle_bounds'
]
