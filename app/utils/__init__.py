"""Utility modules for common operations."""

from app.utils.dates import parse_flexible_date
from app.utils.query_params import parse_date_param, parse_search_param

__all__ = [
    "parse_flexible_date",
    "parse_date_param",
    "parse_search_param",
]
