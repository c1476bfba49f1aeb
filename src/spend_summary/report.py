"""Report builder: turns aggregator state into a sorted, read-only snapshot."""

from __future__ import annotations

from collections.abc import Mapping

from spend_summary.aggregator import Aggregator
from spend_summary.models import SpendingReport, TotalLine


def sorted_lines(totals: Mapping[str, float]) -> list[TotalLine]:
    """Convert a ``name -> total`` mapping to lines sorted by name.

    Names compare by code point (case-sensitive, locale-agnostic).
    """
    return [TotalLine(name=name, total=totals[name]) for name in sorted(totals)]


def build_report(aggregator: Aggregator) -> SpendingReport:
    """Build a :class:`SpendingReport` from a finished aggregation.

    The overall total is summed left to right over the sorted category
    lines, so repeated runs over the same input give bit-identical floats.
    The detail tree is handed over as-is.
    """
    exact_lines = sorted_lines(aggregator.exact_totals)
    category_lines = sorted_lines(aggregator.category_totals)

    # Plain addition; built-in sum() compensates rounding on newer Pythons.
    overall = 0.0
    for line in category_lines:
        overall += line.total

    return SpendingReport(
        exact_totals=exact_lines,
        category_totals=category_lines,
        details=aggregator.details,
        overall_total=overall,
        stats=aggregator.stats,
    )
