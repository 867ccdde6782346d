"""Physics modules for SPH: density and forces."""

from .density import (
    compute_density,
    compute_densities,
    neighbors_of
)
from .forces import (
    ForceModel,
    PointerForce,
    PointerMode
)

__all__ = [
    # Density
    'compute_density',
    'compute_densities',
    'neighbors_of',
    # Forces
    'ForceModel',
    'PointerForce',
    'PointerMode'
]
