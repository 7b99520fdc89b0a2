"""Core entity definitions for the estimation engine.

This module contains enums that are used across the codebase,
placed here to avoid circular imports.
"""

from enum import Enum


class EstimationMode(Enum):
    """How per-sample outcomes are folded and turned into an estimate.

    - COUNTING: boolean outcomes, counted as successes out of trials
    - INTEGRATION: real outcomes, online (Welford-style) variance fold
    - RUNNING_SUM: real outcomes, plain sum and sum of squares
    """
    COUNTING = "counting"
    INTEGRATION = "integration"
    RUNNING_SUM = "running_sum"

    @property
    def parallel_mergeable(self) -> bool:
        """Whether per-worker accumulators can be merged by summation."""
        return self is not EstimationMode.INTEGRATION


class IntervalMethod(str, Enum):
    """Confidence interval constructions reported as half-widths."""
    WALD = "wald"                    # Normal approximation to the proportion
    AGRESTI_COULL = "agresti_coull"  # Adds 2 successes and 2 failures
    NORMAL = "normal"                # Normal interval on a sample mean
