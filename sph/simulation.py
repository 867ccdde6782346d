"""
Simulation step and play/pause state machine.

Each tick works on two particle buffers. The current buffer is the frozen
pre-tick snapshot: the grid is built from it, its densities are filled in,
and every force reads from it. New positions and velocities go into the back
buffer, and the buffers are swapped at the end of the tick, so no particle
sees another particle's updated state within the same tick.
"""

import enum
import logging
import math
import time
from typing import Optional, Tuple

import numpy as np

from .config import ConfigurationError, SimulationConfig
from .core.integrator import (
    integrate_semi_implicit_vectorized,
    particle_bounds,
    resolve_boundary_collisions_vectorized,
)
from .core.particles import Particle, ParticleArrays
from .core.spatial_grid import SpatialGrid
from .heatmap import sample_heatmap
from .physics.density import compute_densities
from .physics.forces import ForceModel, PointerForce
from .scenarios.placement import grid_placement, random_placement


class SimulationState(enum.Enum):
    PAUSED = "paused"
    PLAYING = "playing"


class Simulation:
    """2D SPH fluid in the area ``[0, width] x [0, height]`` (y down)."""

    def __init__(self, config: Optional[SimulationConfig] = None, seed: Optional[int] = None,
                 particles: Optional[ParticleArrays] = None, log_level: str = "INFO"):
        """
        Args:
            config: Physical constants; validated here
            seed: Seed for placement and tie-breaking randomness
            particles: Explicit initial particles instead of a generated layout.
                Copied, and must hold exactly ``config.particle_count`` particles
            log_level: Level of this simulation's logger
        """
        self.config = (config or SimulationConfig()).validate()

        # ---------- logger -------------------------------------------------
        self.logger = logging.getLogger(f"sph.simulation.{id(self)}")
        self.logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))

        self.rng = np.random.default_rng(seed)
        self.grid = SpatialGrid(self.config.area_size, self.config.smoothing_radius)
        self.force_model = ForceModel(self.config, self.rng)
        self.bounds = particle_bounds(self.config.area_size, self.config.particle_radius)

        self.state = SimulationState.PAUSED
        self.frame_count = 0
        self.last_tick_seconds = 0.0

        if particles is None:
            particles = self._generate_particles(self.config.use_random_placement)
        else:
            if len(particles) != self.config.particle_count:
                raise ConfigurationError(
                    f"Got {len(particles)} particles but particle_count is {self.config.particle_count}")
            particles = particles.copy()
            particles.mass = self.config.particle_mass
            particles.radius = self.config.particle_radius
        self._particles = particles
        self._back = particles.copy()

        self.logger.info("Initialized %d particles in %sx%s area (smoothing radius %s)",
                         len(particles), self.config.width, self.config.height,
                         self.config.smoothing_radius)

    # ---------- setup ------------------------------------------------------

    def _generate_particles(self, use_random_placement: bool) -> ParticleArrays:
        cfg = self.config
        if use_random_placement:
            positions = random_placement(cfg.particle_count, cfg.area_size, cfg.particle_radius,
                                         self.rng, cfg.max_placement_attempts)
        else:
            positions = grid_placement(cfg.particle_count, cfg.area_size, cfg.particle_spacing,
                                       cfg.particle_radius)
        return ParticleArrays.from_positions(positions, mass=cfg.particle_mass,
                                             radius=cfg.particle_radius)

    def reset(self, use_random_placement: Optional[bool] = None):
        """Replace all particles with a fresh layout at rest.

        The frame counter goes back to zero; the play/pause state is kept.
        """
        if use_random_placement is None:
            use_random_placement = self.config.use_random_placement
        self._particles = self._generate_particles(use_random_placement)
        self._back = self._particles.copy()
        self.grid.clear()
        self.frame_count = 0
        self.logger.info("Reset with %s placement", "random" if use_random_placement else "grid")

    # ---------- state machine ----------------------------------------------

    def toggle_pause(self) -> SimulationState:
        if self.state is SimulationState.PLAYING:
            self.state = SimulationState.PAUSED
        else:
            self.state = SimulationState.PLAYING
        self.logger.info("Simulation %s", self.state.value)
        return self.state

    @property
    def is_paused(self) -> bool:
        return self.state is SimulationState.PAUSED

    # ---------- stepping ---------------------------------------------------

    def tick(self, pointer: Optional[PointerForce] = None, delta_time: Optional[float] = None):
        """Advance the simulation by ``delta_time`` seconds.

        Does nothing while paused. ``delta_time`` defaults to one frame at
        the configured fps.
        """
        if self.is_paused:
            return
        if delta_time is None:
            delta_time = 1.0 / self.config.fps
        if not (math.isfinite(delta_time) and delta_time >= 0):
            raise ValueError(f"delta_time must be a finite non-negative number, got {delta_time}")

        t0 = time.perf_counter()
        self.frame_count += 1

        current = self._particles
        self.grid.rebuild(current.position_x, current.position_y)

        # Every density must be known before any pressure force is evaluated
        compute_densities(current, self.grid, self.force_model.kernels)
        accel_x, accel_y = self.force_model.accelerations(current, self.grid, pointer)

        next_x, next_y, next_vx, next_vy = integrate_semi_implicit_vectorized(
            current.position_x, current.position_y,
            current.velocity_x, current.velocity_y,
            accel_x, accel_y, delta_time
        )
        resolve_boundary_collisions_vectorized(
            current.position_x, current.position_y,
            next_x, next_y, next_vx, next_vy,
            delta_time, self.bounds, self.config.collision_damping
        )

        back = self._back
        back.position_x[:] = next_x
        back.position_y[:] = next_y
        back.velocity_x[:] = next_vx
        back.velocity_y[:] = next_vy
        back.density[:] = current.density
        self._particles, self._back = back, current

        self.last_tick_seconds = time.perf_counter() - t0
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug("Frame %d: %.2f ms, grid %s", self.frame_count,
                              self.last_tick_seconds * 1000.0, self.grid.get_statistics())

    def sample_heatmap(self) -> np.ndarray:
        """Density on the coarse heatmap grid, indexed [x, y]."""
        current = self._particles
        self.grid.rebuild(current.position_x, current.position_y)
        return sample_heatmap(current, self.grid, self.force_model.kernels,
                              self.config.area_size, self.config.heatmap_resolution)

    # ---------- read accessors ---------------------------------------------

    @property
    def particles(self) -> ParticleArrays:
        """Current particle state. Treat as read-only."""
        return self._particles

    @property
    def particle_count(self) -> int:
        return len(self._particles)

    @property
    def positions(self) -> np.ndarray:
        return self._particles.get_positions()

    @property
    def velocities(self) -> np.ndarray:
        return self._particles.get_velocities()

    @property
    def densities(self) -> np.ndarray:
        return self._particles.density.copy()

    def particle(self, index: int) -> Particle:
        return self._particles.particle(index)


def initialize(particle_count: int, area_size: Tuple[float, float], use_random_placement: bool,
               smoothing_radius: float, heatmap_resolution: float,
               config: Optional[SimulationConfig] = None, seed: Optional[int] = None) -> Simulation:
    """Build a paused simulation.

    Raises:
        ConfigurationError: if the parameters cannot produce a valid simulation
    """
    config = (config or SimulationConfig()).with_overrides(
        particle_count=particle_count,
        area_size=(float(area_size[0]), float(area_size[1])),
        use_random_placement=use_random_placement,
        smoothing_radius=smoothing_radius,
        heatmap_resolution=heatmap_resolution,
    )
    return Simulation(config, seed=seed)
