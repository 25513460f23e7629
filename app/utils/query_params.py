"""Query parameter parsing utilities."""

from datetime import date

from app.utils.dates import parse_flexible_date


def parse_date_param(value: str | None) -> date | None:
    """Parse a date query param (ISO or US style), returning None for invalid."""
    return parse_flexible_date(value)


def parse_search_param(value: str | None) -> str | None:
    """Normalize a ticker search term to upper case, None when blank."""
    if not value or not value.strip():
        return None
    return value.strip().upper()
