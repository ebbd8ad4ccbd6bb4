"""Utility functions for bizledger."""

from bizledger.utils.date_parser import parse_date, get_date_range
from bizledger.utils.amount_parser import parse_amount, format_money, format_currency
from bizledger.utils.ids import generate_id

__all__ = ["parse_date", "get_date_range", "parse_amount", "format_money",
           "format_currency", "generate_id"]
