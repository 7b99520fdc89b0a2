"""Tests for estimators and interval construction."""

import math

import pytest

from mcest.core.config import normal_quantile
from mcest.core.entities import EstimationMode, IntervalMethod
from mcest.core.errors import DomainError
from mcest.experiment.analysis import (
    agresti_coull_half_width,
    estimate,
    estimate_count,
    estimate_from_sums,
    estimate_mean,
    required_sample_count,
)
from mcest.reduce.accumulators import (
    CountingAccumulator,
    OnlineVarianceAccumulator,
    RunningSumAccumulator,
    fold,
)
from mcest.reduce.reducer import reduce_samples

Z95 = 1.959963984540054


class TestNormalQuantile:
    """Test the two-sided critical value."""

    def test_95_percent(self):
        assert normal_quantile(0.05) == pytest.approx(Z95)

    def test_invalid_delta(self):
        with pytest.raises(ValueError):
            normal_quantile(0.0)


class TestEstimateCount:
    """Test counting/proportion mode."""

    def test_known_values(self):
        result = estimate_count(CountingAccumulator(successes=25, trials=100), space_size=4)

        assert result.mode == EstimationMode.COUNTING
        assert result.point_estimate == pytest.approx(1.0)
        assert result.variance_estimate == pytest.approx(1.0 * 3.0 / 99)
        assert result.std_dev == pytest.approx(math.sqrt(3.0 / 99))
        assert result.sample_count == 100
        assert result.successes == 25

    def test_half_widths(self):
        result = estimate_count(CountingAccumulator(successes=25, trials=100), space_size=4)

        p_hat = 27 / 104
        expected_ac = 4 * Z95 * math.sqrt(p_hat * (1 - p_hat) / 104)
        assert result.half_width(IntervalMethod.WALD) == pytest.approx(Z95 * math.sqrt(3.0 / 99))
        assert result.half_width(IntervalMethod.AGRESTI_COULL) == pytest.approx(expected_ac)

    def test_no_successes(self):
        """Wald collapses to zero width, Agresti-Coull does not."""
        result = estimate_count(CountingAccumulator(successes=0, trials=50), space_size=1000)

        assert result.point_estimate == 0.0
        assert result.half_width(IntervalMethod.WALD) == 0.0
        assert result.half_width(IntervalMethod.AGRESTI_COULL) > 0.0

    def test_all_successes(self):
        result = estimate_count(CountingAccumulator(successes=50, trials=50), space_size=1000)

        assert result.point_estimate == pytest.approx(1000.0)
        assert result.half_width(IntervalMethod.WALD) == 0.0
        assert result.half_width(IntervalMethod.AGRESTI_COULL) > 0.0

    @pytest.mark.parametrize("n", [2, 3, 10, 1000])
    def test_agresti_coull_always_positive(self, n):
        for successes in (0, n // 2, n):
            assert agresti_coull_half_width(successes, n, Z95) > 0.0

    def test_single_trial_is_domain_error(self):
        with pytest.raises(DomainError):
            estimate_count(CountingAccumulator(successes=1, trials=1))

    def test_domain_error_is_value_error(self):
        with pytest.raises(ValueError):
            estimate_count(CountingAccumulator())

    def test_converges_to_true_proportion(self, cycling_sampler):
        """With a fixed hit pattern of rate p, C_n approaches r*p."""
        r = 1024
        errors = []
        for n in (10, 100, 1000):
            sampler = cycling_sampler([True, False, False, False])
            acc = reduce_samples(n, sampler, bool, num_workers=1)
            errors.append(abs(estimate_count(acc, space_size=r).point_estimate - r * 0.25))

        assert errors[-1] <= errors[0]
        assert errors[-1] == 0.0

    def test_wider_interval_for_smaller_delta(self):
        acc = CountingAccumulator(successes=30, trials=100)

        narrow = estimate_count(acc, delta=0.1)
        wide = estimate_count(acc, delta=0.01)

        assert wide.half_width(IntervalMethod.WALD) > narrow.half_width(IntervalMethod.WALD)


class TestEstimateMean:
    """Test integration mode from the online fold."""

    def test_known_values(self):
        acc = fold(OnlineVarianceAccumulator(), [1.0, 2.0, 3.0, 4.0, 5.0])

        result = estimate_mean(acc)

        assert result.point_estimate == pytest.approx(3.0)
        assert result.sample_variance == pytest.approx(2.5)
        assert result.variance_estimate == pytest.approx(0.5)
        assert result.half_width() == pytest.approx(Z95 * math.sqrt(0.5))

    def test_region_measure_scales_sum_and_spread(self):
        """S is scaled by A and T by A squared."""
        acc = fold(OnlineVarianceAccumulator(), [1.0, 2.0, 3.0, 4.0, 5.0])

        result = estimate_mean(acc, region_measure=2.0)

        assert result.point_estimate == pytest.approx(6.0)
        assert result.sample_variance == pytest.approx(10.0)
        assert result.variance_estimate == pytest.approx(2.0)

    def test_constant_outcomes_have_zero_error(self):
        acc = fold(OnlineVarianceAccumulator(), [4.0] * 100)

        result = estimate_mean(acc)

        assert result.point_estimate == 4.0
        assert result.variance_estimate == 0.0
        assert result.half_width() == 0.0

    def test_single_sample_is_domain_error(self):
        acc = fold(OnlineVarianceAccumulator(), [1.0])

        with pytest.raises(DomainError):
            estimate_mean(acc)

    def test_non_positive_measure_rejected(self):
        acc = fold(OnlineVarianceAccumulator(), [1.0, 2.0])

        with pytest.raises(DomainError):
            estimate_mean(acc, region_measure=0.0)


class TestEstimateFromSums:
    """Test the sum / sum-of-squares estimator."""

    def test_known_values(self):
        acc = fold(RunningSumAccumulator(), [1.0, 2.0, 3.0, 4.0, 5.0])

        result = estimate_from_sums(acc)

        assert result.mode == EstimationMode.RUNNING_SUM
        assert result.point_estimate == pytest.approx(3.0)
        assert result.variance_estimate == pytest.approx(0.5)
        assert result.sample_variance == pytest.approx(2.5)

    def test_agrees_with_online_fold(self):
        values = [0.3, 1.7, 2.2, 5.0, 0.1, 3.3]

        sums = estimate_from_sums(fold(RunningSumAccumulator(), values))
        online = estimate_mean(fold(OnlineVarianceAccumulator(), values))

        assert sums.point_estimate == pytest.approx(online.point_estimate)
        assert sums.variance_estimate == pytest.approx(online.variance_estimate)

    def test_variance_never_negative(self):
        acc = fold(RunningSumAccumulator(), [0.1] * 1000)

        assert estimate_from_sums(acc).variance_estimate >= 0.0


class TestEstimateDispatch:
    """Test accumulator-to-estimator dispatch."""

    def test_dispatch(self):
        counting = estimate(CountingAccumulator(3, 10), measure=2.0)
        online = estimate(fold(OnlineVarianceAccumulator(), [1.0, 3.0]))
        sums = estimate(fold(RunningSumAccumulator(), [1.0, 3.0]))

        assert counting.mode == EstimationMode.COUNTING
        assert counting.point_estimate == pytest.approx(0.6)
        assert online.mode == EstimationMode.INTEGRATION
        assert sums.mode == EstimationMode.RUNNING_SUM

    def test_unknown_accumulator(self):
        with pytest.raises(TypeError):
            estimate(object())


class TestEstimationResult:
    """Test result helpers."""

    def test_interval_is_symmetric(self):
        result = estimate_count(CountingAccumulator(successes=40, trials=100), space_size=10)

        lower, upper = result.interval(IntervalMethod.AGRESTI_COULL)

        assert lower < result.point_estimate < upper
        assert upper - result.point_estimate == pytest.approx(result.point_estimate - lower)

    def test_to_dict_flattens_half_widths(self):
        result = estimate_count(CountingAccumulator(successes=40, trials=100))

        data = result.to_dict()

        assert data["mode"] == "counting"
        assert "half_width_wald" in data
        assert "half_width_agresti_coull" in data
        assert data["sample_count"] == 100

    def test_result_is_immutable(self):
        result = estimate_count(CountingAccumulator(successes=40, trials=100))

        with pytest.raises(AttributeError):
            result.point_estimate = 1.0


class TestRequiredSampleCount:
    """Test sizing from a pilot variance."""

    def test_reference_value(self):
        """ceil(1.95996**2 * 0.04 / 0.0001) = 1537."""
        assert required_sample_count(0.04, 0.01, delta=0.05) == 1537

    def test_zero_variance(self):
        assert required_sample_count(0.0, 0.01) == 0

    def test_zero_variance_with_tiny_epsilon(self):
        assert required_sample_count(0.0, 1e-200) == 0

    @pytest.mark.parametrize("epsilon", [1e-160, 1e-200])
    def test_epsilon_too_small_to_represent(self, epsilon):
        """eps**2 underflows or the quotient overflows to infinity."""
        with pytest.raises(DomainError, match="epsilon"):
            required_sample_count(2.5, epsilon)

    def test_tighter_target_needs_more_samples(self):
        assert required_sample_count(1.0, 0.01) > required_sample_count(1.0, 0.1)

    @pytest.mark.parametrize("epsilon", [0.0, -0.1])
    def test_non_positive_epsilon(self, epsilon):
        with pytest.raises(DomainError):
            required_sample_count(0.04, epsilon)

    @pytest.mark.parametrize("variance", [-1.0, float("nan"), float("inf")])
    def test_bad_variance(self, variance):
        with pytest.raises(DomainError):
            required_sample_count(variance, 0.01)
