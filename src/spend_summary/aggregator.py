"""Stateful fold of statement rows into spending totals.

The :class:`Aggregator` maintains three running structures:

- **exact totals** -- raw merchant string to sum, fed by every parsed row,
  excluded or not;
- **category totals** -- category name to sum, fed only by non-excluded rows;
- **details** -- category name to a :class:`FlatDetail` or
  :class:`NestedDetail`, fed by the same rows as category totals.

Rows missing a field or carrying an unparseable amount are dropped and only
counted.  An aggregator is meant to be built fresh for each statement.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from spend_summary.amounts import AmountParseError, parse_amount
from spend_summary.categorizer import classify, resolve
from spend_summary.config import DEFAULT_RULE_TABLE
from spend_summary.models import (
    AggregateStats,
    CategoryDetail,
    Excluded,
    FlatDetail,
    NestedDetail,
    RuleTable,
    SubcategoryDetail,
    TransactionRecord,
)

logger = logging.getLogger(__name__)


class Aggregator:
    """Accumulates exact, category, and detail totals for one statement."""

    def __init__(self, rules: RuleTable = DEFAULT_RULE_TABLE) -> None:
        self.rules = rules
        self.exact_totals: dict[str, float] = {}
        self.category_totals: dict[str, float] = {}
        self.details: dict[str, CategoryDetail] = {}
        self.stats = AggregateStats()

    def add_row(self, row: Mapping[str, str | None]) -> None:
        """Add one field-keyed statement row."""
        self.stats.rows_seen += 1
        record = TransactionRecord.from_row(row)
        if record is None:
            self.stats.missing_field += 1
            logger.debug("Dropped row %d: missing merchant or amount", self.stats.rows_seen)
            return
        self._add(record)

    def add(self, record: TransactionRecord) -> None:
        """Add one record that already carries both fields."""
        self.stats.rows_seen += 1
        if not record.merchant or not record.raw_amount:
            self.stats.missing_field += 1
            return
        self._add(record)

    def extend(self, rows: Iterable[Mapping[str, str | None]]) -> None:
        """Add every row of *rows*, in order."""
        for row in rows:
            self.add_row(row)

    def _add(self, record: TransactionRecord) -> None:
        try:
            amount = parse_amount(record.raw_amount)
        except AmountParseError:
            self.stats.unparseable += 1
            logger.debug(
                "Dropped row %d: unparseable amount %r for %r",
                self.stats.rows_seen,
                record.raw_amount,
                record.merchant,
            )
            return

        merchant = record.merchant
        self.exact_totals[merchant] = self.exact_totals.get(merchant, 0.0) + amount

        result = classify(merchant, self.rules)
        if isinstance(result, Excluded):
            self.stats.excluded += 1
            return

        category, subcategory = resolve(result)
        self.stats.categorized += 1
        self.category_totals[category] = self.category_totals.get(category, 0.0) + amount

        # The rule table keeps each category either nested or flat.
        if subcategory is not None:
            detail = self.details.setdefault(category, NestedDetail())
            sub = detail.subcategories.setdefault(subcategory, SubcategoryDetail())
            sub.total += amount
            sub.merchants[merchant] = sub.merchants.get(merchant, 0.0) + amount
        else:
            detail = self.details.setdefault(category, FlatDetail())
            detail.merchants[merchant] = detail.merchants.get(merchant, 0.0) + amount


def aggregate(
    rows: Iterable[Mapping[str, str | None]],
    rules: RuleTable = DEFAULT_RULE_TABLE,
) -> Aggregator:
    """Fold *rows* into a fresh :class:`Aggregator` and return it."""
    aggregator = Aggregator(rules)
    aggregator.extend(rows)
    logger.info(
        "Aggregated %d rows: %d categorized, %d excluded, %d missing a field, "
        "%d unparseable",
        aggregator.stats.rows_seen,
        aggregator.stats.categorized,
        aggregator.stats.excluded,
        aggregator.stats.missing_field,
        aggregator.stats.unparseable,
    )
    return aggregator
