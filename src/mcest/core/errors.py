"""Exception hierarchy for estimation runs."""


class MonteCarloError(Exception):
    """Base class for all estimation failures."""


class DomainError(MonteCarloError, ValueError):
    """A parameter is outside the domain where the estimate is defined.

    Raised instead of returning NaN or infinite values, e.g. when a variance
    would need a division by ``N - 1`` with ``N < 2``.
    """


class SampleSourceError(MonteCarloError):
    """An external sample source could not be opened or parsed."""


class SampleSourceExhausted(SampleSourceError):
    """A finite sample source ran out before the run was complete."""


class AccumulatorMergeError(MonteCarloError):
    """Accumulators of this kind cannot be combined by summation."""
