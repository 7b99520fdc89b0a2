"""Plain-text reports for estimation results."""

import math
from typing import List, Optional

from mcest.experiment.analysis import EstimationResult
from mcest.experiment.runner import AdaptiveResult, SweepResult


HALF_WIDTH_LABELS = {
    "wald": "Error N",
    "agresti_coull": "Error AC",
    "normal": "Error",
}


def order_of_magnitude(n: int) -> int:
    """Decimal exponent of n, e.g. 3 for 1000..9999. 0 for n < 1."""
    if n < 1:
        return 0
    return int(math.floor(math.log10(n)))


def format_value(value: float, scientific: bool = False) -> str:
    """Format an estimate or variance for display.

    Args:
        value: The number to format.
        scientific: Use 5-digit scientific notation instead of grouping.
    """
    if scientific:
        return f"{value:.5e}"
    return f"{value:,.2f}"


def format_result(
    result: EstimationResult,
    title: Optional[str] = None,
    scientific: bool = False,
) -> str:
    """Multi-line report: samples, estimate, variance, intervals, time."""
    rows = [
        ("samples", f"{result.sample_count} (10^{order_of_magnitude(result.sample_count)})"),
        ("estimate", format_value(result.point_estimate, scientific)),
        ("variance", format_value(result.variance_estimate, scientific)),
        ("std dev", format_value(result.std_dev, scientific)),
    ]
    if result.successes is not None:
        rows.insert(1, ("hits", str(result.successes)))
    for name, value in result.confidence_half_widths.items():
        label = HALF_WIDTH_LABELS.get(name, name)
        rows.append((f"{label} ({result.confidence:.0%})", format_value(value, scientific)))
    rows.append(("time", f"{result.elapsed_ms:.3f} ms"))

    width = max(len(label) for label, _ in rows)
    lines: List[str] = []
    if title:
        lines.append(title)
    lines.extend(f"{label:<{width}} : {value}" for label, value in rows)
    return "\n".join(lines)


def format_adaptive(result: AdaptiveResult, scientific: bool = True) -> str:
    """Report both phases of an adaptive run."""
    return "\n".join([
        format_result(result.pilot, title="Pilot run", scientific=scientific),
        "-" * 17,
        f"N_required = {result.n_required} "
        f"(half-width {result.target_half_width:g} at {result.pilot.confidence:.0%})",
        format_result(result.sized, title="Sized run", scientific=scientific),
        f"target met : {'yes' if result.met_target else 'no'}",
    ])


def format_sweep(sweep: SweepResult) -> str:
    """Table of a sample-size sweep."""
    text = sweep.to_dataframe().to_string(index=False, float_format=lambda v: f"{v:.6g}")
    if sweep.stopped_on_time:
        text += "\n(stopped: time budget exceeded)"
    return text
