"""End-to-end summary pipeline: read -> classify/aggregate -> report.

The whole pipeline runs synchronously to completion; the returned
:class:`SpendingReport` is the only output, so callers never observe a
partially built summary.  Each call starts from empty state.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path

from spend_summary.aggregator import aggregate
from spend_summary.config import DEFAULT_RULE_TABLE
from spend_summary.models import RuleTable, SpendingReport
from spend_summary.reader import read_statement
from spend_summary.report import build_report


def summarize(
    rows: Iterable[Mapping[str, str | None]],
    rules: RuleTable = DEFAULT_RULE_TABLE,
) -> SpendingReport:
    """Summarize already-parsed statement rows.

    Args:
        rows: Field-keyed rows in file order.
        rules: Rule table for classification.

    Returns:
        The finished :class:`SpendingReport`.
    """
    return build_report(aggregate(rows, rules))


def summarize_file(file_path: Path, rules: RuleTable = DEFAULT_RULE_TABLE) -> SpendingReport:
    """Read a statement CSV and summarize it.

    Raises:
        SourceReadError: If the file cannot be read.  Nothing is
            aggregated in that case.
    """
    rows = read_statement(Path(file_path))
    return summarize(rows, rules)
