"""
Interactive pygame front end for the SPH fluid.

Controls:
- Space: pause / resume
- R: reset particles
- Left shift (held): density heatmap overlay
- Left mouse: attract particles to the pointer
- Right mouse: repel particles from the pointer
- Esc or window close: quit
"""

import time
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pygame

from .core.vector import Vector2
from .physics.forces import PointerForce, PointerMode
from .simulation import Simulation

# Longest frame fed to the physics; avoids huge steps after a stall
MAX_DELTA_TIME = 1.0 / 20.0


def pointer_from_mouse(position: Tuple[int, int], buttons: Sequence[bool], radius: float) -> PointerForce:
    """Translate pygame mouse state into a pointer force.

    Left button attracts, right button repels; left wins if both are held.
    """
    if buttons[0]:
        mode = PointerMode.ATTRACT
    elif len(buttons) > 2 and buttons[2]:
        mode = PointerMode.REPEL
    else:
        mode = PointerMode.NONE
    return PointerForce(Vector2(float(position[0]), float(position[1])), mode, radius)


def speed_colors(velocities: np.ndarray, v_max: float = 200.0) -> List[Tuple[int, int, int]]:
    """Blue for slow particles through to white for fast ones."""
    if len(velocities) == 0:
        return []
    speed = np.hypot(velocities[:, 0], velocities[:, 1])
    t = np.clip(speed / v_max, 0.0, 1.0)
    red = (60 + 195 * t).astype(int)
    green = (120 + 135 * t).astype(int)
    blue = np.full_like(red, 255)
    return list(zip(red.tolist(), green.tolist(), blue.tolist()))


class SPHVisualizer:
    """Window, input handling and frame pacing around a :class:`Simulation`."""

    def __init__(self, simulation: Simulation, target_fps: Optional[int] = None,
                 heatmap_gain: float = 255.0 * 100.0):
        """
        Args:
            simulation: Simulation to drive
            target_fps: Frame rate cap (defaults to the simulation config)
            heatmap_gain: Density to overlay alpha scale
        """
        self.simulation = simulation
        self.target_fps = target_fps or simulation.config.fps
        self.heatmap_gain = heatmap_gain

        self.window_size = (int(simulation.config.width), int(simulation.config.height))
        self.bg_color = (0, 0, 0)
        self.heatmap_color = (255, 0, 0)

        self.screen = None
        self.clock = None
        self.font = None
        self.running = True
        self.show_heatmap = False

    def pointer(self) -> PointerForce:
        return pointer_from_mouse(pygame.mouse.get_pos(), pygame.mouse.get_pressed(),
                                  self.simulation.config.pointer_radius)

    def run(self):
        """Main visualization loop."""
        pygame.init()
        self.screen = pygame.display.set_mode(self.window_size)
        pygame.display.set_caption("SPH Fluid")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 22)

        last = time.perf_counter()
        while self.running:
            self.handle_events()

            now = time.perf_counter()
            delta_time = min(now - last, MAX_DELTA_TIME)
            last = now

            self.simulation.tick(self.pointer(), delta_time)
            self.draw(self.screen)
            pygame.display.flip()

            self.clock.tick(self.target_fps)

        pygame.quit()

    def handle_events(self):
        """Handle user input events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                self.handle_keydown(event)
            elif event.type == pygame.KEYUP:
                if event.key == pygame.K_LSHIFT:
                    self.show_heatmap = False

    def handle_keydown(self, event):
        """Handle keyboard input."""
        if event.key == pygame.K_SPACE:
            self.simulation.toggle_pause()
        elif event.key == pygame.K_r:
            self.simulation.reset()
        elif event.key == pygame.K_LSHIFT:
            self.show_heatmap = True
        elif event.key == pygame.K_ESCAPE:
            self.running = False

    def draw(self, surface: pygame.Surface):
        """Render the current simulation state onto ``surface``."""
        surface.fill(self.bg_color)
        if self.show_heatmap:
            self.draw_heatmap(surface)
        self.draw_particles(surface)
        if self.font is not None:
            self.draw_status(surface)

    def draw_particles(self, surface: pygame.Surface):
        sim = self.simulation
        radius = max(1, int(round(sim.config.particle_radius)))
        positions = sim.positions
        for (x, y), color in zip(positions, speed_colors(sim.velocities)):
            pygame.draw.circle(surface, color, (int(x), int(y)), radius)

    def draw_heatmap(self, surface: pygame.Surface):
        heatmap = self.simulation.sample_heatmap()
        res = self.simulation.config.heatmap_resolution
        size = max(1, int(np.ceil(res)))
        overlay = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
        alpha = np.clip(heatmap * self.heatmap_gain, 0, 255).astype(int)
        for ix, iy in zip(*np.nonzero(alpha)):
            rect = pygame.Rect(int(ix * res), int(iy * res), size, size)
            overlay.fill((*self.heatmap_color, int(alpha[ix, iy])), rect)
        surface.blit(overlay, (0, 0))

    def draw_status(self, surface: pygame.Surface):
        sim = self.simulation
        fps = self.clock.get_fps() if self.clock is not None else 0.0
        text = f"{sim.state.value}  frame {sim.frame_count}  {sim.particle_count} particles  {fps:.0f} fps"
        surface.blit(self.font.render(text, True, (200, 200, 200)), (8, 8))
