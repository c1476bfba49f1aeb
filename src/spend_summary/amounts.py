"""Currency amount parsing for statement rows."""

from __future__ import annotations

import math
import re

# Characters stripped before parsing: currency symbols and thousands separators.
_STRIP_RE = re.compile(r"[£$,]")

# A signed ASCII decimal, optionally in exponent form.
_NUMBER_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


class AmountParseError(ValueError):
    """Raised when an amount string is not a finite number."""


def parse_amount(raw: str) -> float:
    """Parse a currency-formatted amount string to a float.

    All ``£``, ``$`` and ``,`` characters are removed and surrounding
    whitespace trimmed; the remainder must be a signed decimal number.
    A leading ``-`` marks a refund or credit.

    Examples::

        parse_amount("£1,234.56")  # 1234.56
        parse_amount("-£100.00")   # -100.0
        parse_amount(" $12 ")      # 12.0

    Raises:
        AmountParseError: If nothing numeric remains, the remainder has
            trailing text, or the value is not finite.
    """
    cleaned = _STRIP_RE.sub("", raw).strip()
    if not _NUMBER_RE.fullmatch(cleaned):
        raise AmountParseError(f"Invalid amount: {raw!r}")
    value = float(cleaned)
    if not math.isfinite(value):
        raise AmountParseError(f"Amount is not finite: {raw!r}")
    return value
