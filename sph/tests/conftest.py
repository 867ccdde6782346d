"""Pytest configuration for SPH tests."""
import os
import sys
from pathlib import Path

import numpy as np
import pytest


def pytest_configure(config):
    """Configure pytest environment for SPH tests."""
    # Add workspace root to Python path for sph package imports
    workspace_root = Path(__file__).parent.parent.parent
    if str(workspace_root) not in sys.path:
        sys.path.insert(0, str(workspace_root))

    # Set SDL to use dummy video driver for headless operation
    os.environ['SDL_VIDEODRIVER'] = 'dummy'
    os.environ['SDL_AUDIODRIVER'] = 'dummy'


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def still_config():
    """Small area with gravity and drag switched off."""
    from sph.config import SimulationConfig

    return SimulationConfig(
        area_size=(200.0, 200.0),
        particle_count=2,
        particle_radius=3.0,
        particle_spacing=6.0,
        gravity=0.0,
        drag_coefficient=0.0,
        collision_damping=1.0,
        smoothing_radius=20.0,
        density_floor=20.0,
        pressure_constant=800.0,
        viscosity_constant=1000.0,
        heatmap_resolution=20.0,
    )
