"""Click CLI entry point for the spend command.

Handles argument parsing, rule loading, and error display. All business
logic is delegated to ``pipeline``, ``categorizer``, and ``config``; view
state and rendering live in ``view``.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from spend_summary import __version__
from spend_summary.models import Excluded, Matched, RuleTable


def _configure_logging(verbose: bool, debug: bool) -> None:
    """Set up logging based on verbosity flags."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        force=True,
    )


def _load_rule_table(rules_path: str | None) -> RuleTable:
    """Load rules from *rules_path*, or from ``rules.toml`` in the cwd if present.

    Exits with status 1 on a missing or invalid rules file.
    """
    from spend_summary.config import find_rules, load_rules
    from spend_summary.models import RuleTableError

    try:
        if rules_path is not None:
            return load_rules(Path(rules_path))
        return find_rules(Path.cwd())
    except FileNotFoundError as exc:
        click.echo(f"Error: rules file not found: {exc.filename or rules_path}", err=True)
        sys.exit(1)
    except (RuleTableError, OSError) as exc:
        click.echo(f"Error loading rules: {exc}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="spend-summary")
def cli() -> None:
    """Summarize card statement spending by category."""


@cli.command()
@click.argument("statement", type=click.Path(dir_okay=False))
@click.option(
    "--expand",
    "expand",
    multiple=True,
    metavar="CATEGORY",
    help="Show the breakdown for CATEGORY. May be repeated.",
)
@click.option("--expand-all", is_flag=True, default=False, help="Show every category breakdown.")
@click.option("--rules", "rules_path", type=click.Path(), default=None, help="Rules TOML file.")
@click.option("--verbose", is_flag=True, default=False, help="Detailed progress output.")
@click.option("--debug", is_flag=True, default=False, help="Developer-level diagnostics.")
def summary(
    statement: str,
    expand: tuple[str, ...],
    expand_all: bool,
    rules_path: str | None,
    verbose: bool,
    debug: bool,
) -> None:
    """Summarize spending in a STATEMENT CSV file."""
    _configure_logging(verbose, debug)
    rules = _load_rule_table(rules_path)

    from spend_summary.view import SummaryView

    view = SummaryView(rules)
    if verbose:
        click.echo(f"Processing statement: {statement}")

    if not view.load(Path(statement)):
        click.echo(f"Error: {view.error}", err=True)
        sys.exit(1)

    for category in expand:
        if not view.is_expanded(category):
            view.toggle(category)
    if expand_all:
        view.expand_all()

    click.echo(view.render(), nl=False)


@cli.command()
@click.argument("merchants", nargs=-1, required=True)
@click.option("--rules", "rules_path", type=click.Path(), default=None, help="Rules TOML file.")
def classify(merchants: tuple[str, ...], rules_path: str | None) -> None:
    """Show how each MERCHANT string is classified."""
    from spend_summary.categorizer import classify as classify_merchant

    rules = _load_rule_table(rules_path)
    for merchant in merchants:
        result = classify_merchant(merchant, rules)
        if isinstance(result, Excluded):
            outcome = f"excluded (matched {result.keyword!r})"
        elif isinstance(result, Matched):
            label = result.category
            if result.subcategory:
                label = f"{result.category} / {result.subcategory}"
            outcome = f"{label} (matched {result.keyword!r})"
        else:
            outcome = "MISCELLANEOUS (no rule matched)"
        click.echo(f"{merchant} -> {outcome}")


@cli.command()
@click.option(
    "--dir", "target_dir", default=".", type=click.Path(), help="Directory to initialize."
)
def init(target_dir: str) -> None:
    """Write the built-in rules to rules.toml for editing."""
    from spend_summary.config import RULES_FILENAME, initialize

    target = Path(target_dir).resolve()
    if (target / RULES_FILENAME).exists():
        click.echo(f"{target / RULES_FILENAME} already exists, leaving it unchanged")
        return

    try:
        path = initialize(target)
    except OSError as exc:
        click.echo(f"Error initializing rules: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Rules written to {path}")
