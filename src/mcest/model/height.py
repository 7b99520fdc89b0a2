"""Cone-shaped height function over a circle in the unit square.

Integrating it gives the cone's volume. Two samplers: uniform over the unit
square, and uniform inside the circle through a polar transform. Results
from the second must be scaled by the circle's area.
"""

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np
from scipy import special

from mcest.core.sources import UniformSource


# Keeps the inverse normal CDF finite at the ends of [0, 1]
_UNIFORM_EPS = 1e-12


@dataclass(frozen=True)
class ConeHeight:
    """``K(x) = h - h/rho * |x - c|`` inside the circle, 0 outside."""
    center: Tuple[float, float] = (0.5, 0.5)
    radius: float = 0.4
    height: float = 8.0

    @property
    def disk_area(self) -> float:
        return math.pi * self.radius ** 2

    def exact_integral(self) -> float:
        """Volume of the cone, ``pi * rho**2 * h / 3``."""
        return self.disk_area * self.height / 3.0

    def __call__(self, point) -> float:
        dx = point[0] - self.center[0]
        dy = point[1] - self.center[1]
        dist_sq = dx * dx + dy * dy
        if dist_sq <= self.radius * self.radius:
            return self.height - self.height / self.radius * math.sqrt(dist_sq)
        return 0.0


def unit_square_point(source: UniformSource) -> np.ndarray:
    """Uniform point in [0, 1)^2. Region measure 1."""
    return np.asarray(source.random(2), dtype=np.float64)


@dataclass(frozen=True)
class DiskPointSampler:
    """Uniform point inside a circle.

    The distance from the centre is ``rho * sqrt(U)`` (inverse transform of
    the density ``2r`` on [0, 1]); the direction is a normalised pair of
    standard normals, each drawn by inverse transform.
    """
    center: Tuple[float, float] = (0.5, 0.5)
    radius: float = 0.4

    @property
    def region_measure(self) -> float:
        return math.pi * self.radius ** 2

    def __call__(self, source: UniformSource) -> np.ndarray:
        r = math.sqrt(source.random())
        u = np.clip(np.asarray(source.random(2)), _UNIFORM_EPS, 1.0 - _UNIFORM_EPS)
        z = special.ndtri(u)
        norm = math.hypot(z[0], z[1])
        if norm == 0.0:
            return np.array(self.center, dtype=np.float64)
        return np.array(self.center) + self.radius * r * z / norm
