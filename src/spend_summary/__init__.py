"""Spend Summary: classify card statement transactions and total spending by category."""

__version__ = "0.1.0"
