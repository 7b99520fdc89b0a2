"""
mcest - Monte Carlo estimation with confidence bounds.

Counting, volume and integral estimation by sampling, with normal and
Agresti-Coull confidence intervals and a two-phase adaptive sampler.
"""

__version__ = "0.1.0"

from mcest.core.config import EstimationConfig
from mcest.experiment.runner import run_estimation, run_adaptive

__all__ = ["EstimationConfig", "run_estimation", "run_adaptive", "__version__"]
