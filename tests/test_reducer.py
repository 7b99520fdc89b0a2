"""Tests for the sample reducer."""

import pytest

from mcest.core.entities import EstimationMode
from mcest.core.sources import UniformTable, block_bounds, seeded_streams
from mcest.model.hypersphere import Hypersphere
from mcest.reduce.accumulators import CountingAccumulator, OnlineVarianceAccumulator, fold
from mcest.reduce.reducer import reduce_samples


def uniform_value(source):
    return source.random()


def identity(sample):
    return sample


def below_half(x):
    return x < 0.5


class TestTrialCounts:
    """Merged trials equal N for any worker count."""

    @pytest.mark.parametrize("n", [0, 1, 7, 100, 101])
    @pytest.mark.parametrize("workers", [1, 3, 4])
    def test_trials_equal_n(self, n, workers):
        acc = reduce_samples(n, uniform_value, below_half, num_workers=workers, seed=1)

        assert acc.trials == n
        assert 0 <= acc.successes <= acc.trials

    def test_negative_n_rejected(self):
        with pytest.raises(ValueError):
            reduce_samples(-1, uniform_value, below_half)

    def test_zero_workers_rejected(self):
        with pytest.raises(ValueError):
            reduce_samples(10, uniform_value, below_half, num_workers=0)


class TestCountingReduction:
    """Counting mode reductions."""

    def test_known_pattern(self, cycling_sampler):
        """One hit in four gives successes = N/4."""
        sampler = cycling_sampler([True, False, False, False])

        acc = reduce_samples(400, sampler, identity, num_workers=1)

        assert acc == CountingAccumulator(successes=100, trials=400)

    def test_parallel_equals_sum_of_worker_blocks(self, default_seed):
        n, workers = 1003, 4
        acc = reduce_samples(n, uniform_value, below_half, num_workers=workers, seed=default_seed)

        streams = seeded_streams(default_seed)
        expected = 0
        for i, block in enumerate(block_bounds(n, workers)):
            source = streams(i)
            expected += sum(below_half(source.random()) for _ in block)

        assert acc.successes == expected
        assert acc.trials == n

    def test_reproducible_with_seed(self, default_seed):
        a = reduce_samples(500, uniform_value, below_half, num_workers=2, seed=default_seed)
        b = reduce_samples(500, uniform_value, below_half, num_workers=2, seed=default_seed)

        assert a == b

    def test_table_source_per_worker_slices(self):
        values = [0.1, 0.9, 0.2, 0.8, 0.3, 0.7]
        table = UniformTable(values)

        acc = reduce_samples(6, uniform_value, below_half, num_workers=2,
                             source_factory=table.streams(2))

        assert acc.successes == 3
        assert acc.trials == 6

    def test_worker_failure_propagates(self):
        def broken(source):
            raise RuntimeError("generator fault")

        with pytest.raises(RuntimeError, match="generator fault"):
            reduce_samples(100, broken, below_half, num_workers=3)

    def test_process_pool(self, default_seed):
        sphere = Hypersphere(extra_restrictions=False)

        threaded = reduce_samples(2000, sphere.sample, sphere.contains,
                                  num_workers=2, seed=default_seed)
        processes = reduce_samples(2000, sphere.sample, sphere.contains,
                                   num_workers=2, seed=default_seed, use_processes=True)

        assert processes == threaded


class TestOnlineVarianceReduction:
    """Integration mode folds outcomes sequentially in block order."""

    def test_parallel_matches_sequential_fold(self, default_seed):
        n, workers = 1001, 4
        acc = reduce_samples(n, uniform_value, identity, mode=EstimationMode.INTEGRATION,
                             num_workers=workers, seed=default_seed)

        streams = seeded_streams(default_seed)
        outcomes = []
        for i, block in enumerate(block_bounds(n, workers)):
            source = streams(i)
            outcomes.extend(source.random() for _ in block)
        expected = fold(OnlineVarianceAccumulator(), outcomes)

        assert isinstance(acc, OnlineVarianceAccumulator)
        assert acc.trials == n
        assert acc.total == pytest.approx(expected.total, rel=1e-12)
        assert acc.centred_sq == pytest.approx(expected.centred_sq, rel=1e-12)

    def test_parallel_fold_is_exact_and_plain_float(self, default_seed):
        """Folding block by block gives the sequential fold bit for bit."""
        n, workers = 257, 3
        acc = reduce_samples(n, uniform_value, identity, mode=EstimationMode.INTEGRATION,
                             num_workers=workers, seed=default_seed)

        streams = seeded_streams(default_seed)
        expected = OnlineVarianceAccumulator()
        for i, block in enumerate(block_bounds(n, workers)):
            source = streams(i)
            fold(expected, (float(source.random()) for _ in block))

        assert acc == expected
        assert type(acc.total) is float

    def test_running_sum_mode(self, default_seed):
        acc = reduce_samples(300, uniform_value, identity, mode=EstimationMode.RUNNING_SUM,
                             num_workers=3, seed=default_seed)

        assert acc.trials == 300
        assert 0.0 < acc.total < 300.0
        assert acc.total_sq < acc.total
