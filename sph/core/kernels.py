"""
SPH smoothing kernels.

Three radially symmetric kernels with compact support:
- density kernel          W(r) = (h - r)² / (πh⁴/6)
- pressure derivative     W'(r) = (r - h) · 12 / (πh⁴)
- viscosity kernel        W(r) = (h² - r²)³ / (πh⁸/4)

All of them are exactly zero for r >= h and accept either a scalar distance
or a numpy array of distances.
"""

import numpy as np


def _finish(values: np.ndarray):
    """Return a Python float for scalar input, the array otherwise."""
    return float(values) if values.ndim == 0 else values


def density_kernel(dst, radius: float):
    """Density weighting; decreases monotonically to 0 at ``radius``."""
    dst = np.asarray(dst, dtype=np.float64)
    volume = np.pi * radius**4 / 6.0
    inside = dst < radius
    values = np.where(inside, (radius - dst)**2 / volume, 0.0)
    return _finish(values)


def pressure_kernel_derivative(dst, radius: float):
    """Slope of the density kernel; negative inside the support."""
    dst = np.asarray(dst, dtype=np.float64)
    scale = 12.0 / (np.pi * radius**4)
    values = np.where(dst < radius, (dst - radius) * scale, 0.0)
    return _finish(values)


def viscosity_kernel(dst, radius: float):
    """Smooth kernel used to blend neighbouring velocities."""
    dst = np.asarray(dst, dtype=np.float64)
    volume = np.pi * radius**8 / 4.0
    value = np.maximum(radius * radius - dst * dst, 0.0)
    values = np.where(dst < radius, value**3 / volume, 0.0)
    return _finish(values)


class SmoothingKernels:
    """Kernel set bound to one smoothing radius.

    Density, pressure and viscosity terms must all use the same radius; the
    simulation builds one instance from its configuration and passes it
    around instead of the raw radius.
    """

    def __init__(self, radius: float):
        if not radius > 0:
            raise ValueError(f"Smoothing radius must be positive, got {radius}")
        self.radius = float(radius)

    def density(self, dst):
        return density_kernel(dst, self.radius)

    def pressure_derivative(self, dst):
        return pressure_kernel_derivative(dst, self.radius)

    def viscosity(self, dst):
        return viscosity_kernel(dst, self.radius)

    def __repr__(self) -> str:
        return f"SmoothingKernels(radius={self.radius})"
