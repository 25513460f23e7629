"""Brokerage file import package."""

from app.services.imports.brokerage_parser import (
    ParsedImport,
    Trade,
    clean_currency,
    parse_brokerage_csv,
)

__all__ = [
    "ParsedImport",
    "Trade",
    "clean_currency",
    "parse_brokerage_csv",
]
