"""SPH (Smoothed Particle Hydrodynamics) simulation of a 2D particle fluid."""

from . import core
from . import physics
from . import scenarios

from .config import SimulationConfig, ConfigurationError, configure_logging
from .core import Vector2, Particle, ParticleArrays, SpatialGrid, SmoothingKernels
from .physics import (
    compute_density,
    compute_densities,
    ForceModel,
    PointerForce,
    PointerMode
)
from .heatmap import sample_heatmap
from .simulation import Simulation, SimulationState, initialize

__version__ = "0.3.0"

__all__ = [
    # Modules
    'core',
    'physics',
    'scenarios',

    # Configuration
    'SimulationConfig',
    'ConfigurationError',
    'configure_logging',

    # Core classes
    'Vector2',
    'Particle',
    'ParticleArrays',
    'SpatialGrid',
    'SmoothingKernels',

    # Physics
    'compute_density',
    'compute_densities',
    'ForceModel',
    'PointerForce',
    'PointerMode',

    # Simulation
    'sample_heatmap',
    'Simulation',
    'SimulationState',
    'initialize'
]
