"""Statement CSV reader.

Reads a card statement export with a header row into field-keyed rows.
Only the merchant and amount columns are used downstream; other columns
are passed through untouched.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from spend_summary.models import AMOUNT_FIELD, MERCHANT_FIELD

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {MERCHANT_FIELD, AMOUNT_FIELD}


class SourceReadError(OSError):
    """Raised when a statement file cannot be read or parsed as CSV."""


def read_statement(file_path: Path) -> list[dict[str, str]]:
    """Read a statement CSV into a list of rows in file order.

    Rows whose values are all empty are skipped.  A header without the
    required columns is logged as a warning but is not an error: every
    row is then dropped downstream for lacking a field.

    Args:
        file_path: Path to the CSV file.

    Returns:
        One ``{column: value}`` dict per data row.

    Raises:
        SourceReadError: If the file is missing, unreadable, not valid
            UTF-8, or not valid CSV.
    """
    source = str(file_path)
    try:
        with open(file_path, newline="", encoding="utf-8-sig") as f:
            reader = csv.DictReader(f, strict=True)
            if reader.fieldnames is None:
                logger.warning("%s: empty file or no header row", source)
                return []

            missing = REQUIRED_COLUMNS - set(reader.fieldnames)
            if missing:
                logger.warning(
                    "%s: missing expected columns: %s", source, ", ".join(sorted(missing))
                )

            rows = [row for row in reader if _has_values(row)]
    except FileNotFoundError as exc:
        raise SourceReadError(f"{source}: file not found") from exc
    except UnicodeDecodeError as exc:
        raise SourceReadError(f"{source}: not a UTF-8 text file ({exc.reason})") from exc
    except csv.Error as exc:
        raise SourceReadError(f"{source}: malformed CSV ({exc})") from exc
    except OSError as exc:
        raise SourceReadError(f"{source}: {exc}") from exc

    logger.info("%s: read %d rows", source, len(rows))
    return rows


def _has_values(row: dict) -> bool:
    """True if any cell of *row* is non-blank."""
    for key, value in row.items():
        # Extra cells beyond the header land under the ``None`` key as a list.
        if key is None:
            if any(v.strip() for v in value):
                return True
        elif value is not None and value.strip():
            return True
    return False
