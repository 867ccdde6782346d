"""
Simulation configuration for the 2D SPH fluid.

All physical constants live in a single :class:`SimulationConfig` that is
validated once at startup and treated as read-only while a simulation runs.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Tuple


class ConfigurationError(ValueError):
    """Raised when a configuration cannot produce a valid simulation."""


@dataclass(frozen=True)
class SimulationConfig:
    """Physical constants and setup parameters.

    Coordinates are in pixels with +y pointing down, so a positive
    ``gravity`` pulls particles towards the bottom of the area.
    """
    # Simulation area
    area_size: Tuple[float, float] = (1200.0, 900.0)

    # Particles
    particle_count: int = 2048
    particle_radius: float = 3.0
    particle_spacing: float = 6.0
    particle_mass: float = 1.0
    use_random_placement: bool = True
    max_placement_attempts: int = 200

    # External forces
    gravity: float = 150.0
    drag_coefficient: float = 0.01
    collision_damping: float = 1.0

    # SPH
    smoothing_radius: float = 20.0
    density_floor: float = 20.0
    pressure_constant: float = 800.0
    viscosity_constant: float = 1000.0
    density_epsilon: float = 1e-3

    # Pointer interaction
    pointer_radius: float = 128.0
    pointer_constant: float = 5.0

    # Optional contributions to the acceleration sum
    enable_viscosity: bool = True
    enable_pointer_force: bool = True

    # Diagnostics / front end
    heatmap_resolution: float = 10.0
    fps: int = 60

    @property
    def width(self) -> float:
        return float(self.area_size[0])

    @property
    def height(self) -> float:
        return float(self.area_size[1])

    def with_overrides(self, **overrides) -> 'SimulationConfig':
        """Return a copy with the given fields replaced."""
        return replace(self, **overrides)

    def validate(self) -> 'SimulationConfig':
        """Check the configuration and return it unchanged.

        Raises:
            ConfigurationError: if any value would make the simulation
                produce NaN/Inf or prevents particles from being placed.
        """
        if len(self.area_size) != 2:
            raise ConfigurationError(f"area_size must have two components, got {self.area_size!r}")
        if not all(math.isfinite(s) and s > 0 for s in self.area_size):
            raise ConfigurationError(f"area_size must be positive, got {self.area_size!r}")
        if self.particle_count <= 0:
            raise ConfigurationError(f"particle_count must be positive, got {self.particle_count}")
        if self.particle_radius <= 0:
            raise ConfigurationError(f"particle_radius must be positive, got {self.particle_radius}")
        if self.particle_spacing < 2 * self.particle_radius:
            raise ConfigurationError(
                f"particle_spacing ({self.particle_spacing}) must be at least "
                f"twice the particle radius ({self.particle_radius})"
            )
        if self.particle_mass <= 0:
            raise ConfigurationError(f"particle_mass must be positive, got {self.particle_mass}")
        if not (math.isfinite(self.smoothing_radius) and self.smoothing_radius > 0):
            raise ConfigurationError(f"smoothing_radius must be positive, got {self.smoothing_radius}")
        if self.density_epsilon <= 0:
            raise ConfigurationError(f"density_epsilon must be positive, got {self.density_epsilon}")
        if self.collision_damping < 0:
            raise ConfigurationError(f"collision_damping must be >= 0, got {self.collision_damping}")
        if self.drag_coefficient < 0:
            raise ConfigurationError(f"drag_coefficient must be >= 0, got {self.drag_coefficient}")
        if self.pointer_radius < 0:
            raise ConfigurationError(f"pointer_radius must be >= 0, got {self.pointer_radius}")
        if self.heatmap_resolution <= 0:
            raise ConfigurationError(f"heatmap_resolution must be positive, got {self.heatmap_resolution}")
        if self.max_placement_attempts <= 0:
            raise ConfigurationError("max_placement_attempts must be positive")

        # The free area has to hold every particle's exclusion disc
        free_w = self.width - 2 * self.particle_radius
        free_h = self.height - 2 * self.particle_radius
        if free_w < 0 or free_h < 0:
            raise ConfigurationError(
                f"area {self.area_size} is smaller than a single particle of radius {self.particle_radius}"
            )
        cols = int(free_w // self.particle_spacing) + 1
        rows = int(free_h // self.particle_spacing) + 1
        if cols * rows < self.particle_count:
            raise ConfigurationError(
                f"area {self.area_size} cannot hold {self.particle_count} particles "
                f"at spacing {self.particle_spacing} (room for {cols * rows})"
            )
        return self


def configure_logging(level="INFO") -> logging.Logger:
    """Install a message-only stream handler on the ``sph`` logger."""
    logger = logging.getLogger("sph")
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    return logger
