"""Shared pytest fixtures for Spend Summary tests.

Provides reusable fixtures for:
- Paths to the fixture files (sample statement, custom rules).
- round_trip_rows: the four-row statement used across the summary tests.
- statement_csv: a temporary copy of the sample statement.
- A small custom RuleTable for ordering tests.
"""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from spend_summary.models import (
    AMOUNT_FIELD,
    MERCHANT_FIELD,
    CategoryRule,
    ExclusionRule,
    RuleTable,
    SubcategoryRule,
)

# ---------------------------------------------------------------------------
# Path constants
# ---------------------------------------------------------------------------

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def make_row(merchant: str | None, amount: str | None) -> dict[str, str | None]:
    """Build a statement row keyed by the export's column names."""
    return {MERCHANT_FIELD: merchant, AMOUNT_FIELD: amount}


# ---------------------------------------------------------------------------
# Fixture file path helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the tests/fixtures/ directory."""
    return FIXTURES_DIR


@pytest.fixture
def sample_statement() -> Path:
    """Path to the sample statement CSV fixture file."""
    return FIXTURES_DIR / "statement_sample.csv"


@pytest.fixture
def custom_rules_toml() -> Path:
    """Path to the custom rules TOML fixture file."""
    return FIXTURES_DIR / "rules_custom.toml"


@pytest.fixture
def statement_csv(tmp_path: Path, sample_statement: Path) -> Path:
    """A temporary copy of the sample statement."""
    target = tmp_path / "statement.csv"
    shutil.copy2(sample_statement, target)
    return target


# ---------------------------------------------------------------------------
# Rows and rules
# ---------------------------------------------------------------------------


@pytest.fixture
def round_trip_rows() -> list[dict[str, str | None]]:
    """Grocery, flat-category, excluded, and unmatched rows."""
    return [
        make_row("TESCO STORES 1234", "£45.67"),
        make_row("AMAZON.CO.UK", "$12.00"),
        make_row("PAYMENT RECEIVED - THANK YOU", "-£100.00"),
        make_row("RANDOM SHOP", "£5.00"),
    ]


@pytest.fixture
def travel_rules() -> RuleTable:
    """A small table with one nested and one flat category."""
    return RuleTable(
        rules=(
            ExclusionRule(keywords=("REFUND ISSUED",)),
            SubcategoryRule(category="TRAVEL", subcategory="Rail", keywords=("TRAINLINE", "LNER")),
            SubcategoryRule(category="TRAVEL", subcategory="Air", keywords=("EASYJET",)),
            CategoryRule(category="COFFEE", keywords=("PRET", "COSTA")),
        )
    )
