"""Core data models for Spend Summary.

This module defines the dataclasses shared by every stage of the summary:
input records, the classification rule table, classification results, the
category detail variants, and the final report.  It has zero internal
imports -- everything depends on it, but it depends on nothing within the
package.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

# Field names of the statement export that the summary reads.
MERCHANT_FIELD = "Appears On Your Statement As"
AMOUNT_FIELD = "Amount"

# Fallback category for merchants that match no rule.
MISCELLANEOUS = "MISCELLANEOUS"


class RuleTableError(ValueError):
    """Raised when a rule table is inconsistent or malformed."""


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TransactionRecord:
    """A single statement row, reduced to the two fields the summary needs.

    Attributes:
        merchant: Statement description, used both as the exact-total key
            and as the classifier input.
        raw_amount: Currency-formatted amount as it appears in the file,
            e.g. ``"£1,234.56"`` or ``"-£100.00"``.
    """

    merchant: str
    raw_amount: str

    @classmethod
    def from_row(cls, row: Mapping[str, str | None]) -> TransactionRecord | None:
        """Build a record from a field-keyed row.

        Returns ``None`` when either required field is absent or empty.
        """
        merchant = row.get(MERCHANT_FIELD)
        raw_amount = row.get(AMOUNT_FIELD)
        if not merchant or not raw_amount:
            return None
        return cls(merchant=merchant, raw_amount=raw_amount)


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExclusionRule:
    """Merchants containing any of *keywords* are left out of spend totals."""

    keywords: tuple[str, ...]


@dataclass(frozen=True)
class SubcategoryRule:
    """Assigns a merchant to *category* / *subcategory* on a keyword hit."""

    category: str
    subcategory: str
    keywords: tuple[str, ...]


@dataclass(frozen=True)
class CategoryRule:
    """Assigns a merchant to a flat *category* (no subcategory) on a keyword hit."""

    category: str
    keywords: tuple[str, ...]


Rule = ExclusionRule | SubcategoryRule | CategoryRule


@dataclass(frozen=True)
class RuleTable:
    """An explicit, ordered list of classification rules.

    Rules are evaluated by kind first -- every exclusion rule, then every
    subcategory rule, then every flat category rule -- and in list order
    within each kind.  Keywords are matched as substrings of the
    upper-cased merchant string, so they must themselves be upper-case.

    Construction validates the table:

    - every rule has at least one non-empty, upper-case keyword;
    - a category is either nested (subcategory rules only) or flat
      (category rules only), never both;
    - ``MISCELLANEOUS`` cannot be nested, since unmatched merchants are
      recorded there flat.

    Raises:
        RuleTableError: If any of the above does not hold.
    """

    rules: tuple[Rule, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "rules", tuple(self.rules))
        nested: set[str] = set()
        flat: set[str] = set()
        for rule in self.rules:
            if not rule.keywords:
                raise RuleTableError(f"Rule has no keywords: {rule!r}")
            for keyword in rule.keywords:
                if not keyword:
                    raise RuleTableError(f"Rule has an empty keyword: {rule!r}")
                if keyword != keyword.upper():
                    raise RuleTableError(f"Keyword {keyword!r} must be upper-case")
            if isinstance(rule, SubcategoryRule):
                nested.add(rule.category)
            elif isinstance(rule, CategoryRule):
                flat.add(rule.category)

        mixed = nested & flat
        if mixed:
            raise RuleTableError(
                "Categories cannot have both subcategory and flat rules: "
                + ", ".join(sorted(mixed))
            )
        if MISCELLANEOUS in nested:
            raise RuleTableError(f"{MISCELLANEOUS} cannot have subcategories")

    @property
    def exclusions(self) -> list[ExclusionRule]:
        return [r for r in self.rules if isinstance(r, ExclusionRule)]

    @property
    def subcategory_rules(self) -> list[SubcategoryRule]:
        return [r for r in self.rules if isinstance(r, SubcategoryRule)]

    @property
    def category_rules(self) -> list[CategoryRule]:
        return [r for r in self.rules if isinstance(r, CategoryRule)]

    def is_nested(self, category: str) -> bool:
        """True if *category* is broken down by subcategory."""
        return any(r.category == category for r in self.subcategory_rules)


# ---------------------------------------------------------------------------
# Classification results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Excluded:
    """The merchant is not spend (e.g. a payment received).

    Attributes:
        keyword: The exclusion keyword that matched.
    """

    keyword: str


@dataclass(frozen=True)
class Matched:
    """The merchant matched a category rule.

    Attributes:
        category: Top-level category.
        subcategory: Subcategory within *category*, or ``None`` for flat
            categories.
        keyword: The keyword that matched.
    """

    category: str
    subcategory: str | None
    keyword: str


@dataclass(frozen=True)
class Unmatched:
    """No rule matched; the merchant falls back to ``MISCELLANEOUS``."""


Classification = Excluded | Matched | Unmatched


# ---------------------------------------------------------------------------
# Category detail tree
# ---------------------------------------------------------------------------


@dataclass
class FlatDetail:
    """Per-merchant totals for a category without subcategories."""

    merchants: dict[str, float] = field(default_factory=dict)

    @property
    def total(self) -> float:
        total = 0.0
        for amount in self.merchants.values():
            total += amount
        return total


@dataclass
class SubcategoryDetail:
    """Running total and per-merchant totals for one subcategory."""

    total: float = 0.0
    merchants: dict[str, float] = field(default_factory=dict)


@dataclass
class NestedDetail:
    """Per-subcategory breakdown for a category defined with subcategories."""

    subcategories: dict[str, SubcategoryDetail] = field(default_factory=dict)

    @property
    def total(self) -> float:
        total = 0.0
        for sub in self.subcategories.values():
            total += sub.total
        return total


CategoryDetail = FlatDetail | NestedDetail


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------


@dataclass
class AggregateStats:
    """Counts of what happened to each row during aggregation.

    Attributes:
        rows_seen: Rows handed to the aggregator.
        missing_field: Rows dropped for lacking a merchant or amount.
        unparseable: Rows dropped because the amount did not parse.
        excluded: Parsed rows left out of category totals by an
            exclusion rule.
        categorized: Parsed rows that contributed to category totals
            (including ``MISCELLANEOUS``).
    """

    rows_seen: int = 0
    missing_field: int = 0
    unparseable: int = 0
    excluded: int = 0
    categorized: int = 0


@dataclass(frozen=True)
class TotalLine:
    """A single ``name -> total`` line of a sorted report listing."""

    name: str
    total: float


@dataclass
class SpendingReport:
    """Presentation-ready snapshot of one aggregation run.

    Attributes:
        exact_totals: One line per exact merchant string, sorted by name.
            Includes excluded merchants.
        category_totals: One line per category, sorted by name.
        details: Category name to its detail tree.
        overall_total: Sum of ``category_totals``.
        stats: Row counts from the aggregation.
    """

    exact_totals: list[TotalLine] = field(default_factory=list)
    category_totals: list[TotalLine] = field(default_factory=list)
    details: dict[str, CategoryDetail] = field(default_factory=dict)
    overall_total: float = 0.0
    stats: AggregateStats = field(default_factory=AggregateStats)

    def detail_for(self, category: str) -> CategoryDetail | None:
        """Look up the detail tree for *category*, or ``None`` if absent."""
        return self.details.get(category)
