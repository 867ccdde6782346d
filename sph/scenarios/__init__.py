"""Initial particle layouts."""

from .placement import (
    random_placement,
    grid_placement
)

__all__ = [
    'random_placement',
    'grid_placement'
]
