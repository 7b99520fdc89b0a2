"""Volume of a 6-D hypersphere cut by linear constraints.

Points are drawn uniformly from the unit cube, whose volume is 1, so the
hit-rate is the volume estimate.
"""

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from mcest.core.sources import UniformSource


HS_CENTER = (0.45, 0.5, 0.6, 0.6, 0.5, 0.45)
HS_RADIUS = 0.35


@dataclass(frozen=True)
class Hypersphere:
    """Hypersphere indicator, optionally with the extra linear restrictions.

    The restrictions are ``3*x0 + 7*x3 <= 5``, ``x2 + x3 <= 1`` and
    ``x0 - x1 - x4 + x5 >= 0``.
    """
    center: Tuple[float, ...] = HS_CENTER
    radius: float = HS_RADIUS
    extra_restrictions: bool = True

    @property
    def dimension(self) -> int:
        return len(self.center)

    @property
    def enclosing_volume(self) -> float:
        """Volume of the unit cube the points are drawn from."""
        return 1.0

    def sample(self, source: UniformSource) -> np.ndarray:
        """Uniform point in the unit cube."""
        return np.asarray(source.random(self.dimension), dtype=np.float64)

    def contains(self, point: np.ndarray) -> bool:
        """Whether the point lies in the (restricted) hypersphere."""
        diff = point - np.asarray(self.center)
        if float(diff @ diff) > self.radius * self.radius:
            return False
        if not self.extra_restrictions:
            return True
        x = point
        return bool(
            3 * x[0] + 7 * x[3] <= 5
            and x[2] + x[3] <= 1
            and x[0] - x[1] - x[4] + x[5] >= 0
        )

    def exact_volume(self) -> float:
        """Closed-form volume of the unrestricted ball."""
        d = self.dimension
        return math.pi ** (d / 2) / math.gamma(d / 2 + 1) * self.radius ** d
