"""Core foundation layer: configuration, enums, errors, uniform sources."""

from mcest.core.config import EstimationConfig
from mcest.core.entities import EstimationMode, IntervalMethod
from mcest.core.errors import (
    MonteCarloError,
    DomainError,
    SampleSourceError,
    SampleSourceExhausted,
    AccumulatorMergeError,
)
from mcest.core.sources import UniformTable, seeded_streams, worker_seed

__all__ = [
    "EstimationConfig",
    "EstimationMode",
    "IntervalMethod",
    "MonteCarloError",
    "DomainError",
    "SampleSourceError",
    "SampleSourceExhausted",
    "AccumulatorMergeError",
    "UniformTable",
    "seeded_streams",
    "worker_seed",
]
