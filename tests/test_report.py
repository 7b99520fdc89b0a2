"""Tests for plain-text reports."""

import pytest

from mcest.core.entities import EstimationMode
from mcest.experiment.analysis import EstimationResult
from mcest.experiment.runner import AdaptiveResult
from mcest.results.report import format_adaptive, format_result, order_of_magnitude


def make_result(half_width: float, n: int = 1000) -> EstimationResult:
    return EstimationResult(
        mode=EstimationMode.INTEGRATION,
        point_estimate=1.34,
        variance_estimate=half_width ** 2 / 4,
        std_dev=half_width / 2,
        sample_variance=half_width ** 2 * n / 4,
        confidence_half_widths={"normal": half_width},
        sample_count=n,
        elapsed_ms=2.5,
    )


class TestOrderOfMagnitude:
    """Test the decimal exponent shown next to N."""

    @pytest.mark.parametrize("n, expected", [(0, 0), (1, 0), (9, 0), (10, 1), (12345, 4)])
    def test_exponent(self, n, expected):
        assert order_of_magnitude(n) == expected


class TestFormatResult:
    """Test the single-run report."""

    def test_rows(self):
        text = format_result(make_result(0.02), title="Cone")

        lines = text.splitlines()
        assert lines[0] == "Cone"
        assert "1000 (10^3)" in text
        assert "Error (95%)" in text
        assert "2.500 ms" in text

    def test_counting_shows_hits(self):
        result = EstimationResult(
            mode=EstimationMode.COUNTING,
            point_estimate=0.5,
            variance_estimate=0.001,
            std_dev=0.03,
            sample_variance=0.25,
            confidence_half_widths={"wald": 0.06, "agresti_coull": 0.061},
            sample_count=100,
            successes=50,
        )

        text = format_result(result)

        assert "hits" in text
        assert "Error N (95%)" in text
        assert "Error AC (95%)" in text


class TestFormatAdaptive:
    """Test the two-phase report and its target check."""

    def test_target_met(self):
        result = AdaptiveResult(pilot=make_result(0.05, n=100), sized=make_result(0.009),
                                n_required=1000, target_half_width=0.01)

        text = format_adaptive(result)

        assert result.met_target
        assert "N_required = 1000" in text
        assert text.splitlines()[-1] == "target met : yes"

    def test_target_missed(self):
        result = AdaptiveResult(pilot=make_result(0.05, n=100), sized=make_result(0.012),
                                n_required=1000, target_half_width=0.01)

        assert not result.met_target
        assert format_adaptive(result).splitlines()[-1] == "target met : no"
