"""Rule table configuration: built-in defaults, loading, writing, and init.

Reads TOML rule files using stdlib ``tomllib`` and writes them using
``tomli_w``.  Depends only on ``models.py``.

A ``rules.toml`` file keeps the evaluation order explicit::

    exclude = ["PAYMENT RECEIVED", "THANK YOU"]

    [[subcategory]]
    category = "GROCERY"
    subcategory = "Tesco"
    keywords = ["TESCO"]

    [[category]]
    category = "AMAZON"
    keywords = ["AMAZON", "AMZN"]
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

import tomli_w

from spend_summary.models import (
    CategoryRule,
    ExclusionRule,
    RuleTable,
    RuleTableError,
    SubcategoryRule,
)

logger = logging.getLogger(__name__)

RULES_FILENAME = "rules.toml"

# ---------------------------------------------------------------------------
# Built-in rule table
# ---------------------------------------------------------------------------

_DEFAULT_EXCLUSIONS = ("PAYMENT RECEIVED", "THANK YOU")

_DEFAULT_SUBCATEGORIES: dict[str, dict[str, tuple[str, ...]]] = {
    "GROCERY": {
        "Tesco": ("TESCO",),
        "Sainsburys": ("SAINSBURY",),
        "Asda": ("ASDA",),
        "Lidl": ("LIDL",),
        "Aldi": ("ALDI",),
        "Morrisons": ("MORRISONS", "MORRISON"),
        "Waitrose": ("WAITROSE",),
        "Marks & Spencer": ("M&S", "MARKS & SPENCER", "MARKS AND SPENCER"),
        "Co-op": ("CO-OP", "COOP", "CO OP"),
        "Costco": ("COSTCO",),
        "Iceland": ("ICELAND",),
    },
    "UTILITIES": {
        "Energy": ("OCTOPUS", "BRITISH GAS", "EON", "EDF", "BULB", "OVO"),
        "Internet": ("BT", "VIRGIN MEDIA", "SKY", "TALKTALK", "PLUSNET"),
        "Water": ("THAMES WATER", "SEVERN TRENT", "UNITED UTILITIES", "YORKSHIRE WATER"),
    },
}

_DEFAULT_CATEGORIES: dict[str, tuple[str, ...]] = {
    "AMAZON": ("AMAZON", "AMZN"),
    "PAYPAL": ("PAYPAL",),
    "SUBSCRIPTIONS": ("NETFLIX", "AUDIBLE"),
    "GOOGLE": ("GOOGLE",),
}

DEFAULT_RULE_TABLE = RuleTable(
    rules=(
        ExclusionRule(keywords=_DEFAULT_EXCLUSIONS),
        *(
            SubcategoryRule(category=cat, subcategory=sub, keywords=keywords)
            for cat, subs in _DEFAULT_SUBCATEGORIES.items()
            for sub, keywords in subs.items()
        ),
        *(
            CategoryRule(category=cat, keywords=keywords)
            for cat, keywords in _DEFAULT_CATEGORIES.items()
        ),
    )
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_rules(path: Path) -> RuleTable:
    """Load a rule table from the TOML file at *path*.

    Keywords are upper-cased on load so hand-written files may use any
    case.  All exclusion keywords are collapsed into a single
    :class:`ExclusionRule`.

    Args:
        path: Path to a ``rules.toml`` file.

    Returns:
        The validated :class:`RuleTable`.

    Raises:
        FileNotFoundError: If *path* does not exist.
        RuleTableError: If the file is not valid UTF-8 TOML or does not describe
            a valid rule table.
    """
    try:
        data = _read_toml(path)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise RuleTableError(f"{path}: {exc}") from exc

    rules: list = []
    try:
        exclusions = _keywords(data.get("exclude", []))
        if exclusions:
            rules.append(ExclusionRule(keywords=exclusions))
        for entry in data.get("subcategory", []):
            rules.append(
                SubcategoryRule(
                    category=str(entry["category"]),
                    subcategory=str(entry["subcategory"]),
                    keywords=_keywords(entry["keywords"]),
                )
            )
        for entry in data.get("category", []):
            rules.append(
                CategoryRule(
                    category=str(entry["category"]),
                    keywords=_keywords(entry["keywords"]),
                )
            )
    except KeyError as exc:
        raise RuleTableError(f"{path}: rule is missing required key {exc}") from exc
    except TypeError as exc:
        raise RuleTableError(f"{path}: malformed rule entry ({exc})") from exc

    table = RuleTable(rules=tuple(rules))
    logger.info("Loaded %d rules from %s", len(table.rules), path)
    return table


def find_rules(root: Path) -> RuleTable:
    """Return the rule table from ``root/rules.toml``, or the built-in default."""
    path = Path(root) / RULES_FILENAME
    if path.is_file():
        return load_rules(path)
    logger.debug("No %s in %s, using built-in rules", RULES_FILENAME, root)
    return DEFAULT_RULE_TABLE


def save_rules(path: Path, table: RuleTable) -> None:
    """Write *table* to *path* in the ``rules.toml`` format.

    Exclusion keywords from every exclusion rule are merged into the
    top-level ``exclude`` array.
    """
    data: dict = {
        "exclude": [kw for rule in table.exclusions for kw in rule.keywords],
        "subcategory": [
            {
                "category": rule.category,
                "subcategory": rule.subcategory,
                "keywords": list(rule.keywords),
            }
            for rule in table.subcategory_rules
        ],
        "category": [
            {"category": rule.category, "keywords": list(rule.keywords)}
            for rule in table.category_rules
        ],
    }
    header = (
        "# Merchant classification rules.\n"
        "# Matching: case-insensitive substring. Exclusions are checked first,\n"
        "# then subcategory rules, then category rules, each in file order.\n\n"
    )
    Path(path).write_text(header + tomli_w.dumps(data), encoding="utf-8")


def initialize(target_dir: Path) -> Path:
    """Write the built-in rule table to ``target_dir/rules.toml``.

    Idempotent: an existing ``rules.toml`` is **not** overwritten.

    Returns:
        The path to the rules file.
    """
    target_dir = Path(target_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / RULES_FILENAME
    if not path.exists():
        save_rules(path, DEFAULT_RULE_TABLE)
    return path


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _read_toml(path: Path) -> dict:
    """Read and parse a TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def _keywords(values) -> tuple[str, ...]:
    """Normalize a TOML keyword array to upper-case strings."""
    if isinstance(values, str):
        raise TypeError("keywords must be an array of strings")
    return tuple(str(v).strip().upper() for v in values)
