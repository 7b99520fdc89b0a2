"""Experimentation layer: estimators, interval analysis, runners."""

from mcest.experiment.analysis import (
    EstimationResult,
    estimate,
    estimate_count,
    estimate_mean,
    estimate_from_sums,
    required_sample_count,
)
from mcest.experiment.runner import (
    AdaptiveResult,
    SweepResult,
    run_estimation,
    run_adaptive,
    sample_size_sweep,
)

__all__ = [
    "EstimationResult",
    "estimate",
    "estimate_count",
    "estimate_mean",
    "estimate_from_sums",
    "required_sample_count",
    "AdaptiveResult",
    "SweepResult",
    "run_estimation",
    "run_adaptive",
    "sample_size_sweep",
]
