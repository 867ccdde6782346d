#!/usr/bin/env python3
"""
Main entry point for the 2D SPH fluid.

Usage:
    python -m sph.main                     # Interactive window, random layout
    python -m sph.main --grid              # Start from a centred lattice
    python -m sph.main --particles 500     # Fewer particles
    python -m sph.main --headless 120      # Run 120 ticks without a window
"""

import argparse

import numpy as np

from .config import ConfigurationError, SimulationConfig, configure_logging
from .simulation import Simulation


def build_parser() -> argparse.ArgumentParser:
    defaults = SimulationConfig()
    parser = argparse.ArgumentParser(description="2D SPH fluid simulation")
    parser.add_argument("--particles", type=int, default=defaults.particle_count,
                        help=f"Number of particles (default: {defaults.particle_count})")
    parser.add_argument("--width", type=float, default=defaults.width,
                        help=f"Area width in pixels (default: {defaults.width:g})")
    parser.add_argument("--height", type=float, default=defaults.height,
                        help=f"Area height in pixels (default: {defaults.height:g})")
    parser.add_argument("--grid", action="store_true",
                        help="Place particles on a centred grid instead of at random")
    parser.add_argument("--smoothing-radius", type=float, default=defaults.smoothing_radius,
                        help=f"SPH smoothing radius (default: {defaults.smoothing_radius:g})")
    parser.add_argument("--heatmap-resolution", type=float, default=defaults.heatmap_resolution,
                        help=f"Heatmap cell size (default: {defaults.heatmap_resolution:g})")
    parser.add_argument("--fps", type=int, default=defaults.fps,
                        help=f"Target FPS (default: {defaults.fps})")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--headless", type=int, metavar="TICKS", default=None,
                        help="Run TICKS ticks without a window and print a summary")
    return parser


def config_from_args(args: argparse.Namespace) -> SimulationConfig:
    return SimulationConfig(
        area_size=(args.width, args.height),
        particle_count=args.particles,
        use_random_placement=not args.grid,
        smoothing_radius=args.smoothing_radius,
        heatmap_resolution=args.heatmap_resolution,
        fps=args.fps,
    )


def run_headless(simulation: Simulation, ticks: int):
    """Step a playing simulation ``ticks`` times at the configured frame rate."""
    simulation.toggle_pause()
    dt = 1.0 / simulation.config.fps
    for _ in range(ticks):
        simulation.tick(None, dt)

    speeds = np.hypot(simulation.velocities[:, 0], simulation.velocities[:, 1])
    densities = simulation.densities
    print(f"\nSimulation info:")
    print(f"  Frames: {simulation.frame_count}")
    print(f"  Particles: {simulation.particle_count}")
    print(f"  Mean speed: {speeds.mean():.3f}")
    print(f"  Density min/mean/max: {densities.min():.5f} / {densities.mean():.5f} / {densities.max():.5f}")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        simulation = Simulation(config_from_args(args), seed=args.seed, log_level=args.log_level)
    except ConfigurationError as e:
        print(f"Error: {e}")
        return 2

    if args.headless is not None:
        run_headless(simulation, args.headless)
        return 0

    # Deferred so headless runs do not need a display
    from .visualizer import SPHVisualizer

    print("Space: pause/resume, R: reset, LShift: heatmap, mouse: attract/repel, Esc: quit")
    SPHVisualizer(simulation).run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
