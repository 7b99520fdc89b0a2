"""Pytest fixtures for mcest tests."""

import itertools

import pytest

from mcest.core.config import EstimationConfig


class CyclingSampler:
    """Sampler that ignores its source and replays a fixed pattern."""

    def __init__(self, pattern):
        self._cycle = itertools.cycle(pattern)

    def __call__(self, source):
        return next(self._cycle)


@pytest.fixture
def default_seed() -> int:
    """Default random seed for reproducible tests."""
    return 42


@pytest.fixture
def cycling_sampler():
    """Factory for deterministic samplers replaying a pattern."""
    return CyclingSampler


@pytest.fixture
def single_worker_config(default_seed) -> EstimationConfig:
    """Small sequential configuration."""
    return EstimationConfig(n_samples=1000, num_workers=1, random_seed=default_seed)
