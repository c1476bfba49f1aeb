"""Tests for the classification engine.

Covers:
- classify: exclusion, subcategory, flat category, and unmatched outcomes
  against the built-in table.
- Priority: exclusions before categories, subcategory rules before flat
  rules, table order within each kind.
- Case-insensitive substring matching and determinism.
- resolve: mapping results to (category, subcategory).
"""

from __future__ import annotations

import pytest

from spend_summary.categorizer import classify, find_category, is_excluded, resolve
from spend_summary.config import DEFAULT_RULE_TABLE
from spend_summary.models import (
    MISCELLANEOUS,
    CategoryRule,
    Excluded,
    Matched,
    RuleTable,
    SubcategoryRule,
    Unmatched,
)


# ---------------------------------------------------------------------------
# classify -- built-in table
# ---------------------------------------------------------------------------


class TestClassifyDefaults:
    """Classification against the built-in rule table."""

    def test_grocery_subcategory(self):
        assert classify("TESCO STORES 1234") == Matched("GROCERY", "Tesco", "TESCO")

    def test_flat_category(self):
        assert classify("AMAZON.CO.UK") == Matched("AMAZON", None, "AMAZON")

    def test_second_keyword_of_flat_category(self):
        assert classify("AMZN MKTP UK") == Matched("AMAZON", None, "AMZN")

    def test_utilities_subcategory(self):
        assert classify("OCTOPUS ENERGY") == Matched("UTILITIES", "Energy", "OCTOPUS")

    def test_subscriptions(self):
        assert classify("NETFLIX.COM") == Matched("SUBSCRIPTIONS", None, "NETFLIX")

    def test_excluded_payment(self):
        assert classify("PAYMENT RECEIVED - THANK YOU") == Excluded("PAYMENT RECEIVED")

    def test_unmatched(self):
        assert classify("RANDOM SHOP") == Unmatched()

    def test_empty_string_unmatched(self):
        assert classify("") == Unmatched()

    def test_substring_without_word_boundary(self):
        """MORRISON matches inside a longer token."""
        assert classify("MORRISONS LTD #123") == Matched("GROCERY", "Morrisons", "MORRISONS")
        assert classify("MORRISON DAILY") == Matched("GROCERY", "Morrisons", "MORRISON")

    def test_keyword_with_ampersand(self):
        assert classify("M&S SIMPLY FOOD") == Matched("GROCERY", "Marks & Spencer", "M&S")

    @pytest.mark.parametrize("merchant", ["tesco express", "TESCO EXPRESS", "Tesco Express"])
    def test_case_insensitive(self, merchant: str):
        assert classify(merchant) == Matched("GROCERY", "Tesco", "TESCO")

    def test_lowercase_exclusion(self):
        assert classify("thank you for your payment") == Excluded("THANK YOU")

    def test_deterministic(self):
        merchant = "SAINSBURYS S/MKTS"
        assert classify(merchant) == classify(merchant)


# ---------------------------------------------------------------------------
# Priority ordering
# ---------------------------------------------------------------------------


class TestPriority:
    """Exclusions, then subcategory rules, then flat rules."""

    def test_subcategory_beats_flat(self):
        """A merchant with both TESCO and AMAZON resolves to GROCERY/Tesco."""
        assert classify("AMAZON TESCO VOUCHER") == Matched("GROCERY", "Tesco", "TESCO")

    def test_exclusion_beats_category(self):
        assert classify("TESCO BANK PAYMENT RECEIVED") == Excluded("PAYMENT RECEIVED")

    def test_find_category_ignores_exclusions(self):
        """The two checks are independent; callers apply exclusion themselves."""
        merchant = "TESCO BANK PAYMENT RECEIVED"
        assert is_excluded(merchant) == Excluded("PAYMENT RECEIVED")
        assert find_category(merchant) == Matched("GROCERY", "Tesco", "TESCO")

    def test_earlier_subcategory_wins(self):
        """GROCERY is checked before UTILITIES: 'ASDA MOBILE BT' is Asda."""
        assert classify("ASDA MOBILE BT") == Matched("GROCERY", "Asda", "ASDA")

    def test_table_order_within_kind(self):
        table = RuleTable(
            rules=(
                CategoryRule(category="FIRST", keywords=("SHOP",)),
                CategoryRule(category="SECOND", keywords=("CORNER SHOP",)),
            )
        )
        assert classify("CORNER SHOP", table) == Matched("FIRST", None, "SHOP")

    def test_subcategory_rule_listed_after_flat_still_wins(self):
        """Kind priority does not depend on position in the list."""
        table = RuleTable(
            rules=(
                CategoryRule(category="SHOPPING", keywords=("MARKET",)),
                SubcategoryRule(category="FOOD", subcategory="Market", keywords=("FOOD MARKET",)),
            )
        )
        assert classify("FOOD MARKET LTD", table) == Matched("FOOD", "Market", "FOOD MARKET")

    def test_empty_table_leaves_everything_unmatched(self):
        assert classify("TESCO", RuleTable()) == Unmatched()


# ---------------------------------------------------------------------------
# Custom table
# ---------------------------------------------------------------------------


class TestCustomTable:
    """Classification against a caller-supplied table."""

    def test_nested(self, travel_rules: RuleTable):
        assert classify("Trainline.com", travel_rules) == Matched("TRAVEL", "Rail", "TRAINLINE")

    def test_flat(self, travel_rules: RuleTable):
        assert classify("COSTA COFFEE 42", travel_rules) == Matched("COFFEE", None, "COSTA")

    def test_exclusion(self, travel_rules: RuleTable):
        assert classify("EASYJET REFUND ISSUED", travel_rules) == Excluded("REFUND ISSUED")

    def test_default_table_not_consulted(self, travel_rules: RuleTable):
        assert classify("TESCO STORES", travel_rules) == Unmatched()


# ---------------------------------------------------------------------------
# resolve
# ---------------------------------------------------------------------------


class TestResolve:
    """Tests for mapping classification results to category pairs."""

    def test_matched_with_subcategory(self):
        assert resolve(Matched("GROCERY", "Tesco", "TESCO")) == ("GROCERY", "Tesco")

    def test_matched_flat(self):
        assert resolve(Matched("AMAZON", None, "AMAZON")) == ("AMAZON", None)

    def test_unmatched_is_miscellaneous(self):
        assert resolve(Unmatched()) == (MISCELLANEOUS, None)

    def test_default_table_is_used(self):
        assert classify("GOOGLE *YOUTUBE") == classify("GOOGLE *YOUTUBE", DEFAULT_RULE_TABLE)
