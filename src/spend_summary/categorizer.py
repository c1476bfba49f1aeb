"""Classification engine: maps a merchant string to a spending category.

Classification is a pure, deterministic function of the merchant string and
the rule table.  Matching is case-insensitive substring containment -- no
regular expressions, no word boundaries -- so ``"MORRISON"`` matches
``"MORRISONS LTD #123"``.

Evaluation order:

1. **Exclusions** -- any hit means the merchant is not spend.
2. **Subcategory rules** -- first hit in table order wins.
3. **Flat category rules** -- first hit in table order wins.
4. Otherwise the merchant is unmatched (``MISCELLANEOUS``).

Depends on ``models.py`` and the default table in ``config.py``.
"""

from __future__ import annotations

from spend_summary.config import DEFAULT_RULE_TABLE
from spend_summary.models import (
    MISCELLANEOUS,
    Classification,
    Excluded,
    Matched,
    RuleTable,
    Unmatched,
)


def is_excluded(merchant: str, rules: RuleTable = DEFAULT_RULE_TABLE) -> Excluded | None:
    """Check *merchant* against the exclusion keywords.

    Returns:
        An :class:`Excluded` naming the first matching keyword, or ``None``.
    """
    upper = merchant.upper()
    for rule in rules.exclusions:
        for keyword in rule.keywords:
            if keyword in upper:
                return Excluded(keyword=keyword)
    return None


def find_category(merchant: str, rules: RuleTable = DEFAULT_RULE_TABLE) -> Matched | None:
    """Find the category rule matching *merchant*, ignoring exclusions.

    Subcategory rules are scanned before flat category rules.

    Returns:
        A :class:`Matched` result, or ``None`` if no rule matches.
    """
    upper = merchant.upper()
    for rule in rules.subcategory_rules:
        for keyword in rule.keywords:
            if keyword in upper:
                return Matched(
                    category=rule.category,
                    subcategory=rule.subcategory,
                    keyword=keyword,
                )
    for rule in rules.category_rules:
        for keyword in rule.keywords:
            if keyword in upper:
                return Matched(category=rule.category, subcategory=None, keyword=keyword)
    return None


def classify(merchant: str, rules: RuleTable = DEFAULT_RULE_TABLE) -> Classification:
    """Classify a merchant string.

    Args:
        merchant: Raw statement description.
        rules: Rule table to evaluate.  Defaults to the built-in table.

    Returns:
        :class:`Excluded`, :class:`Matched`, or :class:`Unmatched`.  Never
        raises; the empty string is :class:`Unmatched`.
    """
    excluded = is_excluded(merchant, rules)
    if excluded is not None:
        return excluded
    matched = find_category(merchant, rules)
    if matched is not None:
        return matched
    return Unmatched()


def resolve(result: Matched | Unmatched) -> tuple[str, str | None]:
    """Map a non-excluded classification to ``(category, subcategory)``.

    :class:`Unmatched` resolves to ``(MISCELLANEOUS, None)``.
    """
    if isinstance(result, Matched):
        return result.category, result.subcategory
    return MISCELLANEOUS, None
