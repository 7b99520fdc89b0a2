"""Results layer: console reports for estimation runs."""

from mcest.results.report import (
    format_result,
    format_adaptive,
    format_sweep,
    format_value,
    order_of_magnitude,
)

__all__ = [
    "format_result",
    "format_adaptive",
    "format_sweep",
    "format_value",
    "order_of_magnitude",
]
