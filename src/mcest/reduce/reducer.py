"""Sample reducer: draw, evaluate and fold N samples across workers.

The index range [0, N) is split into ``num_workers`` contiguous blocks. Each
worker owns its own uniform source (from a source factory keyed by worker
index) and its own accumulator; nothing is shared while sampling. Partial
accumulators are merged by summation once every worker has finished.

The online-variance fold is order dependent, so in INTEGRATION mode workers
only generate and evaluate; the calling thread folds each block in block
order as soon as it is ready.
"""

from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from typing import Any, Callable, List, Optional, Union

import numpy as np

from mcest.core.config import DEFAULT_SEED
from mcest.core.entities import EstimationMode
from mcest.core.sources import SourceFactory, UniformSource, block_bounds, seeded_streams
from mcest.reduce.accumulators import Accumulator, fold, merge_all, new_accumulator


Sampler = Callable[[UniformSource], Any]
Evaluator = Callable[[Any], Union[bool, float]]


def _run_block(
    block: range,
    worker_index: int,
    sampler: Sampler,
    evaluator: Evaluator,
    mode: EstimationMode,
    source_factory: SourceFactory,
) -> Accumulator:
    """Fold one worker's block into a fresh accumulator."""
    source = source_factory(worker_index)
    acc = new_accumulator(mode)
    for _ in block:
        acc.add(evaluator(sampler(source)))
    return acc


def _evaluate_block(
    block: range,
    worker_index: int,
    sampler: Sampler,
    evaluator: Evaluator,
    source_factory: SourceFactory,
) -> np.ndarray:
    """Generate and evaluate one worker's block without folding it."""
    source = source_factory(worker_index)
    outcomes = np.empty(len(block), dtype=np.float64)
    for i in range(len(block)):
        outcomes[i] = evaluator(sampler(source))
    return outcomes


def reduce_samples(
    n: int,
    sampler: Sampler,
    evaluator: Evaluator,
    mode: EstimationMode = EstimationMode.COUNTING,
    num_workers: int = 1,
    source_factory: Optional[SourceFactory] = None,
    seed: int = DEFAULT_SEED,
    use_processes: bool = False,
) -> Accumulator:
    """Apply ``evaluator`` to ``n`` independent samples and fold the results.

    Args:
        n: Number of samples to draw (>= 0).
        sampler: Callable taking a uniform source and returning one sample.
        evaluator: Pure function from a sample to a bool or a float.
        mode: Which accumulator to fold into.
        num_workers: Number of parallel workers (>= 1).
        source_factory: Maps worker index to that worker's uniform source.
            Defaults to numpy Generators seeded from ``seed``.
        seed: Master seed for the default source factory.
        use_processes: Use a process pool instead of a thread pool. The
            sampler, evaluator and source factory must be picklable.

    Returns:
        The merged accumulator. Its ``trials`` equals ``n``.

    Raises:
        ValueError: If ``n`` is negative or ``num_workers`` is below 1.
        Exception: Whatever a worker raised; the run is aborted.
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    if num_workers < 1:
        raise ValueError(f"num_workers must be >= 1, got {num_workers}")
    if source_factory is None:
        source_factory = seeded_streams(seed)

    blocks = block_bounds(n, num_workers)

    if num_workers == 1:
        return _run_block(blocks[0], 0, sampler, evaluator, mode, source_factory)

    executor_cls = ProcessPoolExecutor if use_processes else ThreadPoolExecutor
    with executor_cls(max_workers=num_workers) as executor:
        if mode.parallel_mergeable:
            futures = [
                executor.submit(_run_block, block, i, sampler, evaluator, mode, source_factory)
                for i, block in enumerate(blocks)
            ]
            partials: List[Accumulator] = [f.result() for f in futures]
            return merge_all(partials)

        futures = [
            executor.submit(_evaluate_block, block, i, sampler, evaluator, source_factory)
            for i, block in enumerate(blocks)
        ]
        # Fold in block order; each block is released once folded
        acc = new_accumulator(mode)
        while futures:
            fold(acc, map(float, futures.pop(0).result()))
        return acc
