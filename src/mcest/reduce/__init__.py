"""Sample reduction layer: accumulators and the parallel reducer."""

from mcest.reduce.accumulators import (
    CountingAccumulator,
    RunningSumAccumulator,
    OnlineVarianceAccumulator,
    new_accumulator,
    fold,
    merge_all,
)
from mcest.reduce.reducer import reduce_samples

__all__ = [
    "CountingAccumulator",
    "RunningSumAccumulator",
    "OnlineVarianceAccumulator",
    "new_accumulator",
    "fold",
    "merge_all",
    "reduce_samples",
]
