"""Point estimates, variances and confidence intervals from accumulators.

Three estimators, one per accumulator kind:
- estimate_count(): scaled hit-rate with Wald and Agresti-Coull intervals
- estimate_mean(): mean of real outcomes from the online-variance fold
- estimate_from_sums(): mean of real outcomes from sum / sum of squares

plus required_sample_count() for sizing a second run from a pilot.
"""

import math
from dataclasses import asdict, dataclass, field, replace
from typing import Dict, Optional, Tuple

import numpy as np

from mcest.core.config import DEFAULT_DELTA, normal_quantile
from mcest.core.entities import EstimationMode, IntervalMethod
from mcest.core.errors import DomainError
from mcest.reduce.accumulators import (
    Accumulator,
    CountingAccumulator,
    OnlineVarianceAccumulator,
    RunningSumAccumulator,
)


# Agresti-Coull pseudo-observations: 2 successes and 2 failures
AC_PSEUDO_SUCCESSES = 2
AC_PSEUDO_TRIALS = 4


@dataclass(frozen=True)
class EstimationResult:
    """Outcome of one estimation run.

    Attributes:
        mode: Estimator that produced the result.
        point_estimate: Estimate of the unknown quantity.
        variance_estimate: Estimated variance of ``point_estimate``.
        std_dev: Square root of ``variance_estimate``.
        sample_variance: Estimated variance of a single (scaled)
            observation. This is what sizes a follow-up run.
        confidence_half_widths: Interval half-width per method name.
        sample_count: Number of samples N.
        delta: Miss probability of the intervals.
        elapsed_ms: Wall-clock time of the run in milliseconds.
        successes: Hit count (counting mode only).
    """
    mode: EstimationMode
    point_estimate: float
    variance_estimate: float
    std_dev: float
    sample_variance: float
    confidence_half_widths: Dict[str, float] = field(default_factory=dict)
    sample_count: int = 0
    delta: float = DEFAULT_DELTA
    elapsed_ms: float = 0.0
    successes: Optional[int] = None

    @property
    def confidence(self) -> float:
        return 1.0 - self.delta

    def half_width(self, method: Optional[IntervalMethod] = None) -> float:
        """Half-width for a method, or the first one reported."""
        if method is None:
            return next(iter(self.confidence_half_widths.values()))
        return self.confidence_half_widths[IntervalMethod(method).value]

    def interval(self, method: Optional[IntervalMethod] = None) -> Tuple[float, float]:
        """(lower, upper) confidence bounds around the point estimate."""
        hw = self.half_width(method)
        return (self.point_estimate - hw, self.point_estimate + hw)

    def with_elapsed(self, elapsed_ms: float) -> "EstimationResult":
        return replace(self, elapsed_ms=elapsed_ms)

    def to_dict(self) -> Dict:
        """Flat dictionary, one key per half-width method."""
        data = asdict(self)
        data["mode"] = self.mode.value
        half_widths = data.pop("confidence_half_widths")
        for name, value in half_widths.items():
            data[f"half_width_{name}"] = value
        return data


def _require_samples(n: int, what: str) -> None:
    if n < 2:
        raise DomainError(
            f"{what} needs at least 2 samples to divide by N - 1, got N={n}"
        )


def wald_half_width(variance: float, z: float) -> float:
    """Normal-approximation half-width ``z * sqrt(variance)``."""
    return z * math.sqrt(variance)


def agresti_coull_half_width(successes: int, trials: int, z: float, scale: float = 1.0) -> float:
    """Agresti-Coull half-width, scaled to the counted space.

    Adds two successes and two failures before applying the normal
    approximation, so the width stays positive when successes is 0 or N.

    Args:
        successes: Observed hits.
        trials: Samples drawn.
        z: Normal critical value.
        scale: Size of the sampled space (r); 1 for a proportion.
    """
    n_hat = trials + AC_PSEUDO_TRIALS
    p_hat = (successes + AC_PSEUDO_SUCCESSES) / n_hat
    return scale * z * math.sqrt(p_hat * (1.0 - p_hat) / n_hat)


def estimate_count(
    acc: CountingAccumulator,
    space_size: float = 1.0,
    delta: float = DEFAULT_DELTA,
) -> EstimationResult:
    """Estimate the number of solutions satisfying every predicate.

    The hit-rate ``S/N`` is scaled by the known cardinality ``r`` of the
    space the samples were drawn uniformly from. With ``r = 1`` (or ``r``
    equal to an enclosing volume) this is rejection-sampling volume
    estimation.

    ``C_n = r*S/N`` and ``V_n = C_n*(r - C_n)/(N - 1)``. The Wald half-width
    ``z*sqrt(V_n)`` collapses to zero when S is 0 or N; the Agresti-Coull one
    does not.

    Raises:
        DomainError: If fewer than 2 trials were recorded.
    """
    n = acc.trials
    _require_samples(n, "counting estimate")
    if space_size <= 0:
        raise DomainError(f"space size must be positive, got {space_size}")

    r = float(space_size)
    c_n = r * acc.successes / n
    # C_n <= r up to rounding
    spread = max(c_n * (r - c_n), 0.0)
    v_n = spread / (n - 1)
    z = normal_quantile(delta)

    return EstimationResult(
        mode=EstimationMode.COUNTING,
        point_estimate=c_n,
        variance_estimate=v_n,
        std_dev=math.sqrt(v_n),
        sample_variance=v_n * n,
        confidence_half_widths={
            IntervalMethod.WALD.value: wald_half_width(v_n, z),
            IntervalMethod.AGRESTI_COULL.value: agresti_coull_half_width(
                acc.successes, n, z, scale=r
            ),
        },
        sample_count=n,
        delta=delta,
        successes=acc.successes,
    )


def estimate_mean(
    acc: OnlineVarianceAccumulator,
    delta: float = DEFAULT_DELTA,
    region_measure: float = 1.0,
) -> EstimationResult:
    """Estimate an integral as a scaled mean of function values.

    The sum ``S`` is scaled by the measure ``A`` of the region the points
    were drawn from, and the centred sum of squares ``T`` by ``A**2``, so
    the result is the integral over that region whatever its size.

    Raises:
        DomainError: If fewer than 2 samples were folded.
    """
    n = acc.trials
    _require_samples(n, "mean estimate")
    if region_measure <= 0:
        raise DomainError(f"region measure must be positive, got {region_measure}")

    s = acc.total * region_measure
    t = acc.centred_sq * region_measure ** 2

    mean_hat = s / n
    sigma_sq = t / (n - 1)
    var_of_mean = sigma_sq / n
    z = normal_quantile(delta)

    return EstimationResult(
        mode=EstimationMode.INTEGRATION,
        point_estimate=mean_hat,
        variance_estimate=var_of_mean,
        std_dev=math.sqrt(var_of_mean),
        sample_variance=sigma_sq,
        confidence_half_widths={
            IntervalMethod.NORMAL.value: wald_half_width(var_of_mean, z),
        },
        sample_count=n,
        delta=delta,
    )


def estimate_from_sums(
    acc: RunningSumAccumulator,
    delta: float = DEFAULT_DELTA,
) -> EstimationResult:
    """Estimate a mean from a plain sum and sum of squares.

    ``x_hat = sum/N`` and ``v_hat = sum_sq/(N(N-1)) - x_hat**2/(N-1)``, the
    variance of the mean. Subject to cancellation when the mean dominates
    the spread; prefer estimate_mean() when that matters.

    Raises:
        DomainError: If fewer than 2 samples were folded.
    """
    n = acc.trials
    _require_samples(n, "sum-of-squares estimate")

    x_hat = acc.total / n
    v_hat = acc.total_sq / (n * (n - 1)) - x_hat * x_hat / (n - 1)
    # rounding can leave a tiny negative value for near-constant outcomes
    v_hat = max(v_hat, 0.0)
    z = normal_quantile(delta)

    return EstimationResult(
        mode=EstimationMode.RUNNING_SUM,
        point_estimate=x_hat,
        variance_estimate=v_hat,
        std_dev=math.sqrt(v_hat),
        sample_variance=v_hat * n,
        confidence_half_widths={
            IntervalMethod.NORMAL.value: wald_half_width(v_hat, z),
        },
        sample_count=n,
        delta=delta,
    )


def estimate(
    acc: Accumulator,
    delta: float = DEFAULT_DELTA,
    measure: float = 1.0,
) -> EstimationResult:
    """Dispatch to the estimator matching the accumulator kind.

    Args:
        acc: Folded accumulator.
        delta: Miss probability of the intervals.
        measure: Cardinality r in counting mode, region measure in
            integration mode. Ignored for sum-of-squares accumulators.
    """
    if isinstance(acc, CountingAccumulator):
        return estimate_count(acc, space_size=measure, delta=delta)
    if isinstance(acc, OnlineVarianceAccumulator):
        return estimate_mean(acc, delta=delta, region_measure=measure)
    if isinstance(acc, RunningSumAccumulator):
        return estimate_from_sums(acc, delta=delta)
    raise TypeError(f"Unsupported accumulator: {type(acc).__name__}")


def required_sample_count(
    variance: float,
    target_half_width: float,
    delta: float = DEFAULT_DELTA,
) -> int:
    """Samples needed for a normal interval of the given half-width.

    ``ceil(z**2 * variance / epsilon**2)`` with ``z = z_(1 - delta/2)``.

    Args:
        variance: Per-observation variance from a pilot run.
        target_half_width: Desired half-width epsilon.
        delta: Miss probability.

    Returns:
        Estimated number of samples needed.

    Raises:
        DomainError: If epsilon is not positive, the variance is negative
            or not finite, or the required count overflows a float.
    """
    if target_half_width <= 0:
        raise DomainError(f"target half-width must be positive, got {target_half_width}")
    if not np.isfinite(variance) or variance < 0:
        raise DomainError(f"pilot variance must be finite and non-negative, got {variance}")

    z = normal_quantile(delta)
    eps_sq = target_half_width ** 2
    if variance == 0:
        return 0
    n_required = z ** 2 * variance / eps_sq if eps_sq > 0 else math.inf
    if not math.isfinite(n_required):
        raise DomainError(
            f"required sample count is not representable for pilot variance "
            f"{variance:g} and epsilon {target_half_width:g}"
        )
    return int(math.ceil(n_required))
