"""Single, two-phase and sweep estimation runners."""

import logging
import time
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from mcest.core.config import EstimationConfig
from mcest.core.entities import EstimationMode
from mcest.core.errors import DomainError
from mcest.core.sources import SourceFactory
from mcest.experiment.analysis import EstimationResult, estimate, required_sample_count
from mcest.reduce.reducer import Evaluator, Sampler, reduce_samples

logger = logging.getLogger(__name__)


MIN_SAMPLES = 2
# Phase two must not replay phase one's streams
SIZED_RUN_SEED_OFFSET = 1


def run_estimation(
    config: EstimationConfig,
    sampler: Sampler,
    evaluator: Evaluator,
    mode: EstimationMode = EstimationMode.COUNTING,
    measure: float = 1.0,
    source_factory: Optional[SourceFactory] = None,
    phase: str = "run",
) -> EstimationResult:
    """Draw ``config.n_samples`` samples and estimate.

    Args:
        config: Sample count, confidence, workers and seed.
        sampler: Callable taking a uniform source and returning one sample.
        evaluator: Sample -> bool (COUNTING) or float (other modes).
        mode: Accumulator and estimator to use.
        measure: Cardinality r (COUNTING) or region measure (INTEGRATION).
        source_factory: Per-worker uniform sources. Defaults to Generators
            seeded from ``config.random_seed``.
        phase: Label used in log and error messages.

    Returns:
        EstimationResult with the elapsed wall-clock time filled in.

    Raises:
        DomainError: If ``config.n_samples`` is below 2. Raised before any
            sample is drawn.
    """
    if config.n_samples < MIN_SAMPLES:
        raise DomainError(
            f"{phase}: n_samples must be at least {MIN_SAMPLES} to estimate a variance, "
            f"got {config.n_samples}"
        )

    logger.debug(
        f"{phase}: {mode.value} estimate with N={config.n_samples}, "
        f"workers={config.num_workers}, seed={config.random_seed}"
    )

    begin = time.perf_counter()
    acc = reduce_samples(
        config.n_samples,
        sampler,
        evaluator,
        mode=mode,
        num_workers=config.num_workers,
        source_factory=source_factory,
        seed=config.random_seed,
        use_processes=config.use_processes,
    )
    result = estimate(acc, delta=config.delta, measure=measure)
    elapsed_ms = (time.perf_counter() - begin) * 1000.0

    logger.info(
        f"{phase}: N={result.sample_count} estimate={result.point_estimate:.6g} "
        f"std={result.std_dev:.6g} in {elapsed_ms:.1f}ms"
    )
    return result.with_elapsed(elapsed_ms)


@dataclass(frozen=True)
class AdaptiveResult:
    """Result of a pilot run followed by a run sized from its variance.

    Attributes:
        pilot: Result of the pilot run.
        sized: Result of the second run.
        n_required: Sample count computed from the pilot variance.
        target_half_width: Precision goal epsilon.
    """
    pilot: EstimationResult
    sized: EstimationResult
    n_required: int
    target_half_width: float

    @property
    def met_target(self) -> bool:
        """Whether the sized run's first half-width is within epsilon."""
        return self.sized.half_width() <= self.target_half_width

    def to_dataframe(self) -> pd.DataFrame:
        """One row per phase."""
        rows = []
        for phase, result in (("pilot", self.pilot), ("sized", self.sized)):
            row = {"phase": phase}
            row.update(result.to_dict())
            rows.append(row)
        return pd.DataFrame(rows)


def run_adaptive(
    config: EstimationConfig,
    sampler: Sampler,
    evaluator: Evaluator,
    target_half_width: float,
    mode: EstimationMode = EstimationMode.INTEGRATION,
    measure: float = 1.0,
) -> AdaptiveResult:
    """Two-phase estimation: pilot at ``config.n_samples``, then a sized run.

    The pilot's per-observation variance gives
    ``N_required = ceil(z**2 * variance / epsilon**2)``. The second run draws
    ``N_required`` fresh samples from streams seeded differently from the
    pilot's. There is no further iteration.

    Args:
        config: Pilot configuration.
        sampler: Callable taking a uniform source and returning one sample.
        evaluator: Sample -> bool or float.
        target_half_width: Desired half-width epsilon.
        mode: Accumulator and estimator to use.
        measure: Cardinality r (COUNTING) or region measure (INTEGRATION).

    Returns:
        AdaptiveResult holding both runs.
    """
    pilot = run_estimation(config, sampler, evaluator, mode=mode, measure=measure, phase="pilot")

    n_required = required_sample_count(pilot.sample_variance, target_half_width, config.delta)
    logger.info(
        f"pilot variance {pilot.sample_variance:.6g} -> N_required={n_required} "
        f"for half-width {target_half_width:g} at {config.confidence:.0%}"
    )

    n_sized = n_required
    if n_sized < MIN_SAMPLES:
        logger.warning(
            f"N_required={n_required} is below {MIN_SAMPLES}; sized run uses {MIN_SAMPLES} samples"
        )
        n_sized = MIN_SAMPLES

    sized_config = config.with_samples(n_sized).clone_with_seed(
        config.random_seed + SIZED_RUN_SEED_OFFSET
    )
    sized = run_estimation(sized_config, sampler, evaluator, mode=mode, measure=measure, phase="sized")

    return AdaptiveResult(
        pilot=pilot,
        sized=sized,
        n_required=n_required,
        target_half_width=target_half_width,
    )


@dataclass
class SweepResult:
    """Result of running the same estimate at growing sample counts.

    Attributes:
        mode: Estimator used.
        results: DataFrame with columns n_samples, estimate, variance,
            std_dev, elapsed_ms and one half_width_<method> per interval.
        stopped_on_time: True if the time budget ended the sweep.
    """
    mode: EstimationMode
    results: pd.DataFrame
    stopped_on_time: bool = False

    def to_dataframe(self) -> pd.DataFrame:
        """Return results as DataFrame."""
        return self.results


def sample_size_sweep(
    config: EstimationConfig,
    sampler: Sampler,
    evaluator: Evaluator,
    mode: EstimationMode = EstimationMode.RUNNING_SUM,
    measure: float = 1.0,
    max_samples: int = 10 ** 6,
    max_seconds: Optional[float] = None,
) -> SweepResult:
    """Estimate at N = 10, 100, 1000, ... to show how the error shrinks.

    Stops after the run at ``max_samples`` (or the last power of ten below
    it), or as soon as one run takes longer than ``max_seconds``.

    Example:
        >>> sweep = sample_size_sweep(config, sample_durations, total_work_time,
        ...                           max_samples=10**5)
        >>> print(sweep.to_dataframe()[["n_samples", "estimate", "std_dev"]])
    """
    if max_samples < 10:
        raise DomainError(f"max_samples must be at least 10, got {max_samples}")

    rows = []
    stopped_on_time = False
    n = 10
    while n <= max_samples:
        result = run_estimation(
            config.with_samples(n), sampler, evaluator, mode=mode, measure=measure,
            phase=f"sweep N={n}",
        )
        row = {
            "n_samples": n,
            "estimate": result.point_estimate,
            "variance": result.variance_estimate,
            "std_dev": result.std_dev,
            "elapsed_ms": result.elapsed_ms,
        }
        for name, value in result.confidence_half_widths.items():
            row[f"half_width_{name}"] = value
        rows.append(row)

        if max_seconds is not None and result.elapsed_ms > max_seconds * 1000.0:
            stopped_on_time = True
            break
        n *= 10

    return SweepResult(mode=mode, results=pd.DataFrame(rows), stopped_on_time=stopped_on_time)
