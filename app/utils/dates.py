"""Date parsing for brokerage exports and user input."""

from datetime import date, datetime

# Order matters: four-digit years are tried before two-digit ones
DATE_FORMATS = (
    "%m/%d/%Y",
    "%Y-%m-%d",
    "%m/%d/%y",
)


def parse_flexible_date(value: str | date | None) -> date | None:
    """
    Parse a date in any of the formats brokers and forms produce.

    Accepts M/D/YYYY, MM/DD/YYYY, YYYY-MM-DD, MM/DD/YY and M/D/YY.
    Returns None for empty or unparsable values.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = value.strip()
    if not text:
        return None

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None
