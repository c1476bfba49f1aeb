"""Presentation layer: summary view state and text rendering.

:class:`SummaryView` owns everything the core does not: the currently
published report, which categories are expanded, whether a load is in
progress, and the last load error.  It holds no domain logic -- loading
delegates to :func:`~spend_summary.pipeline.summarize_file` and rendering
only reads the report.
"""

from __future__ import annotations

import logging
from pathlib import Path

from spend_summary.config import DEFAULT_RULE_TABLE
from spend_summary.models import (
    CategoryDetail,
    FlatDetail,
    NestedDetail,
    RuleTable,
    SpendingReport,
)
from spend_summary.pipeline import summarize_file
from spend_summary.reader import SourceReadError

logger = logging.getLogger(__name__)

_NAME_WIDTH = 44
_AMOUNT_WIDTH = 14


def format_currency(amount: float) -> str:
    """Format *amount* as British pounds, e.g. ``£1,234.56`` or ``-£5.00``."""
    sign = "-" if amount < 0 else ""
    return f"{sign}£{abs(amount):,.2f}"


class SummaryView:
    """Holds presentation state around the most recent spending report.

    Attributes:
        rules: Rule table passed to the pipeline on each load.
        report: The last successfully built report, or ``None``.
        expanded: Category names whose details are shown.
        is_processing: True while a load is running.
        error: Message from the last failed load, cleared on success.
    """

    def __init__(self, rules: RuleTable = DEFAULT_RULE_TABLE) -> None:
        self.rules = rules
        self.report: SpendingReport | None = None
        self.expanded: set[str] = set()
        self.is_processing = False
        self.error: str | None = None

    def load(self, file_path: Path) -> bool:
        """Summarize *file_path* and publish the result.

        On failure the previous report stays published and :attr:`error`
        is set.

        Returns:
            True if a new report was published.
        """
        self.is_processing = True
        try:
            report = summarize_file(file_path, self.rules)
        except SourceReadError as exc:
            logger.error("Error reading statement: %s", exc)
            self.error = str(exc)
            return False
        finally:
            self.is_processing = False
        self.report = report
        self.error = None
        return True

    def toggle(self, category: str) -> bool:
        """Flip the expanded state of *category* and return the new state."""
        if category in self.expanded:
            self.expanded.discard(category)
            return False
        self.expanded.add(category)
        return True

    def is_expanded(self, category: str) -> bool:
        return category in self.expanded

    def expand_all(self) -> None:
        if self.report is not None:
            self.expanded.update(line.name for line in self.report.category_totals)

    # -----------------------------------------------------------------------
    # Rendering
    # -----------------------------------------------------------------------

    def render(self) -> str:
        """Render the view as plain text."""
        lines: list[str] = []
        if self.is_processing:
            lines.append("Processing...")
        if self.error:
            lines.append(f"Error: {self.error}")

        report = self.report
        if report is None or not report.category_totals:
            if not lines:
                lines.append("No spending to show.")
            return "\n".join(lines) + "\n"

        if lines:
            lines.append("")
        lines.append(f"Total Spending: {format_currency(report.overall_total)}")
        lines.append("  (excluding payments received)")
        lines.append("")

        lines.append("Category Breakdown")
        for item in report.category_totals:
            marker = "v" if self.is_expanded(item.name) else ">"
            lines.append(_row(f"  {marker} {item.name}", item.total))
            if self.is_expanded(item.name):
                detail = report.detail_for(item.name)
                if detail is not None:
                    lines.extend(_render_detail(detail))
        lines.append("")

        lines.append("All Transactions")
        for item in report.exact_totals:
            lines.append(_row(f"  {item.name}", item.total))

        return "\n".join(lines) + "\n"


def _row(label: str, amount: float) -> str:
    return f"{label:<{_NAME_WIDTH}} {format_currency(amount):>{_AMOUNT_WIDTH}}"


def _render_detail(detail: CategoryDetail) -> list[str]:
    """Render one category's detail tree, in insertion order."""
    lines: list[str] = []
    if isinstance(detail, NestedDetail):
        for sub_name, sub in detail.subcategories.items():
            lines.append(_row(f"      * {sub_name}", sub.total))
            for merchant, amount in sub.merchants.items():
                lines.append(_row(f"          -> {merchant}", amount))
    elif isinstance(detail, FlatDetail):
        for merchant, amount in detail.merchants.items():
            lines.append(_row(f"      * {merchant}", amount))
    return lines
