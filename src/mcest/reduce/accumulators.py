"""Fixed-size fold state for per-sample outcomes.

One accumulator is created per worker for a run, folded over that worker's
samples, and merged after all workers have finished.
"""

from dataclasses import dataclass
from typing import Iterable, Union

from mcest.core.entities import EstimationMode
from mcest.core.errors import AccumulatorMergeError


@dataclass
class CountingAccumulator:
    """Successes out of trials for boolean outcomes.

    Attributes:
        successes: Samples for which the evaluator returned True.
        trials: Samples consumed.
    """
    successes: int = 0
    trials: int = 0

    def add(self, outcome: bool) -> None:
        if outcome:
            self.successes += 1
        self.trials += 1

    def merge(self, other: "CountingAccumulator") -> "CountingAccumulator":
        """Field-wise sum of two accumulators."""
        return CountingAccumulator(
            successes=self.successes + other.successes,
            trials=self.trials + other.trials,
        )


@dataclass
class RunningSumAccumulator:
    """Plain sum and sum of squares for real outcomes.

    Mergeable by summation, at the price of the cancellation that the
    sum-of-squares variance formula suffers when the mean is large relative
    to the spread.
    """
    total: float = 0.0
    total_sq: float = 0.0
    trials: int = 0

    def add(self, outcome: float) -> None:
        self.total += outcome
        self.total_sq += outcome * outcome
        self.trials += 1

    def merge(self, other: "RunningSumAccumulator") -> "RunningSumAccumulator":
        """Field-wise sum of two accumulators."""
        return RunningSumAccumulator(
            total=self.total + other.total,
            total_sq=self.total_sq + other.total_sq,
            trials=self.trials + other.trials,
        )


@dataclass
class OnlineVarianceAccumulator:
    """One-pass sum ``S`` and centred sum of squares ``T``.

    The first observation is assigned to ``S`` directly. Each later
    observation ``k`` at step ``j`` (1-indexed count of prior observations)
    updates ``T += (1 - 1/(j+1)) * (k - S/j)**2`` using the sum before ``k``
    is added, then ``S += k``. ``T / (N - 1)`` is the sample variance.

    Each update depends on the prior partial sum, so the fold is sequential
    and two partial accumulators cannot be merged by summation.
    """
    total: float = 0.0
    centred_sq: float = 0.0
    trials: int = 0

    def add(self, outcome: float) -> None:
        j = self.trials
        if j == 0:
            self.total = outcome
        else:
            self.centred_sq += (1.0 - 1.0 / (j + 1)) * (outcome - self.total / j) ** 2
            self.total += outcome
        self.trials = j + 1

    def merge(self, other: "OnlineVarianceAccumulator") -> "OnlineVarianceAccumulator":
        raise AccumulatorMergeError(
            "online-variance accumulators are order dependent and cannot be "
            "merged by summation; fold the outcomes sequentially instead"
        )


Accumulator = Union[CountingAccumulator, RunningSumAccumulator, OnlineVarianceAccumulator]

_ACCUMULATORS = {
    EstimationMode.COUNTING: CountingAccumulator,
    EstimationMode.RUNNING_SUM: RunningSumAccumulator,
    EstimationMode.INTEGRATION: OnlineVarianceAccumulator,
}


def new_accumulator(mode: EstimationMode) -> Accumulator:
    """Create an empty accumulator for the given estimation mode."""
    return _ACCUMULATORS[mode]()


def fold(accumulator: Accumulator, outcomes: Iterable) -> Accumulator:
    """Add every outcome to the accumulator in iteration order."""
    for outcome in outcomes:
        accumulator.add(outcome)
    return accumulator


def merge_all(accumulators: Iterable[Accumulator]) -> Accumulator:
    """Merge a non-empty sequence of same-kind accumulators by summation."""
    accumulators = list(accumulators)
    if not accumulators:
        raise ValueError("merge_all needs at least one accumulator")
    merged = accumulators[0]
    for acc in accumulators[1:]:
        merged = merged.merge(acc)
    return merged
