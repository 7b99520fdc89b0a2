"""Estimation run configuration dataclass."""

import os
from dataclasses import dataclass, replace
from typing import Optional

from scipy import stats


DEFAULT_SEED = 54321
DEFAULT_DELTA = 0.05


@dataclass
class EstimationConfig:
    """Configuration for a single estimation run.

    Contains the sample count, the confidence level, the worker pool size
    and the master seed for reproducibility.

    Attributes:
        n_samples: Number of samples N to draw.
        delta: Miss probability; intervals are built at level 1 - delta.
        num_workers: Parallel workers. None means one per available CPU.
        random_seed: Master seed. Worker streams are derived from it.
        use_processes: Run workers in processes instead of threads. The
            sampler and evaluator must then be picklable.
    """

    n_samples: int = 1000
    delta: float = DEFAULT_DELTA
    num_workers: Optional[int] = None
    random_seed: int = DEFAULT_SEED
    use_processes: bool = False

    def __post_init__(self) -> None:
        """Validate parameters and resolve the worker count."""
        if not 0.0 < self.delta < 1.0:
            raise ValueError(f"delta must be in (0, 1), got {self.delta}")
        if self.n_samples < 0:
            raise ValueError(f"n_samples must be non-negative, got {self.n_samples}")
        if self.num_workers is None:
            self.num_workers = os.cpu_count() or 1
        if self.num_workers < 1:
            raise ValueError(f"num_workers must be >= 1, got {self.num_workers}")

    @property
    def confidence(self) -> float:
        """Confidence level 1 - delta."""
        return 1.0 - self.delta

    @property
    def z(self) -> float:
        """Standard normal quantile at 1 - delta/2."""
        return normal_quantile(self.delta)

    def clone_with_seed(self, new_seed: int) -> "EstimationConfig":
        """Create a copy of this configuration with a different seed.

        Args:
            new_seed: The new master seed to use.

        Returns:
            A new EstimationConfig with the same settings and the new seed.
        """
        return replace(self, random_seed=new_seed)

    def with_samples(self, n_samples: int) -> "EstimationConfig":
        """Create a copy of this configuration with a different sample count."""
        return replace(self, n_samples=n_samples)


def normal_quantile(delta: float) -> float:
    """Two-sided standard normal critical value z_(1 - delta/2).

    Args:
        delta: Miss probability in (0, 1).

    Returns:
        The quantile of N(0, 1) at cumulative probability 1 - delta/2.
    """
    if not 0.0 < delta < 1.0:
        raise ValueError(f"delta must be in (0, 1), got {delta}")
    return float(stats.norm.ppf(1.0 - delta / 2.0))
