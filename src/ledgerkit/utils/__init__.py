"""Utility functions for ledgerkit."""

from ledgerkit.utils.date_parser import parse_date, get_period_range
from ledgerkit.utils.amount_parser import parse_amount

__all__ = ["parse_date", "get_period_range", "parse_amount"]
