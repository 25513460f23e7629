"""Parsing utilities for brokerage activity CSV exports.

Expected layout (header row first):
    Activity Date, Process Date, Settle Date, Instrument, Description,
    Trans Code, Quantity, Price, Amount

Only trade rows (Buy, Sell, BTO, STO, BTC, STC) become Trade objects.
Other activity (dividends, transfers, fees) is ignored.
"""

import csv
import io
import logging
import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation

from app.exceptions import ImportParseError
from app.models import TradeCode
from app.utils.dates import parse_flexible_date

logger = logging.getLogger(__name__)

# Column positions in the activity export
ACTIVITY_DATE = 0
INSTRUMENT = 3
DESCRIPTION = 4
TRANS_CODE = 5
QUANTITY = 6
PRICE = 7
AMOUNT = 8
MIN_FIELDS = 9

# e.g. "AAPL 1/17/2025 Call $150.00"
OPTION_DESCRIPTION = re.compile(
    r"^([A-Z]+)\s+(\d{1,2}/\d{1,2}/\d{4})\s+(Call|Put)\s+\$?([\d,.]+)"
)


@dataclass
class Trade:
    """One trade row from a brokerage export. Never persisted."""

    ticker: str
    trade_date: date
    trade_code: TradeCode
    price: Decimal
    amount: Decimal
    quantity: Decimal
    # Option rows only
    strike: Decimal | None = None
    expiration_date: date | None = None
    option_type: str | None = None  # "Call" or "Put" as the broker labels it
    premium: Decimal | None = None

    @property
    def is_option(self) -> bool:
        return self.trade_code.is_option


@dataclass
class ParsedImport:
    """Trades in file order plus the count of malformed rows dropped."""

    trades: list[Trade]
    skipped_rows: int = 0


def clean_currency(value: str | None) -> Decimal | None:
    """
    Convert a brokerage currency cell to Decimal.

    Handles "$1,234.50" and accounting negatives like "($12.00)".
    Returns None for blank or unparsable cells.
    """
    if value is None:
        return None
    text = value.strip().strip('"').replace("$", "").replace(",", "")
    if text.startswith("(") and text.endswith(")"):
        text = "-" + text[1:-1]
    if not text:
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def parse_option_description(description: str) -> dict:
    """
    Extract contract details from an option row description.

    Returns dict with keys: ticker, expiration_date, option_type, strike.
    Values are None where the description doesn't say. Descriptions that
    don't match the full pattern still yield option_type when they mention
    "call" or "put".
    """
    details = {
        "ticker": None,
        "expiration_date": None,
        "option_type": None,
        "strike": None,
    }
    if not description:
        return details

    match = OPTION_DESCRIPTION.match(description)
    if match:
        details["ticker"] = match.group(1)
        details["expiration_date"] = parse_flexible_date(match.group(2))
        details["option_type"] = match.group(3)
        details["strike"] = clean_currency(match.group(4))
        return details

    lowered = description.lower()
    if "call" in lowered:
        details["option_type"] = "Call"
    elif "put" in lowered:
        details["option_type"] = "Put"
    return details


def _cell(row: list[str], index: int) -> str:
    return row[index].strip().strip('"').strip()


def _parse_row(row: list[str], code: TradeCode) -> Trade | None:
    """Build a Trade from a row, or None if the row is malformed."""
    ticker = _cell(row, INSTRUMENT).upper()
    trade_date = parse_flexible_date(_cell(row, ACTIVITY_DATE))
    price = clean_currency(row[PRICE])
    amount = clean_currency(row[AMOUNT])
    quantity = clean_currency(row[QUANTITY])

    if code.is_option and quantity is None:
        # Older exports leave contract counts blank for single contracts
        quantity = Decimal("1")

    if trade_date is None or price is None or quantity is None or quantity <= 0:
        return None

    trade = Trade(
        ticker=ticker,
        trade_date=trade_date,
        trade_code=code,
        price=price,
        amount=amount if amount is not None else Decimal("0"),
        quantity=quantity,
    )
    if not code.is_option:
        return trade

    details = parse_option_description(_cell(row, DESCRIPTION))
    if details["ticker"]:
        trade.ticker = details["ticker"]
    trade.strike = details["strike"]
    trade.expiration_date = details["expiration_date"]
    trade.option_type = details["option_type"]
    trade.premium = price

    if trade.strike is None or trade.expiration_date is None or trade.option_type is None:
        return None
    return trade


def _read_rows(content: str) -> list[list[str]]:
    try:
        reader = csv.reader(io.StringIO(content.lstrip("\ufeff")))
        return [row for row in reader if any(cell.strip() for cell in row)]
    except csv.Error as e:
        raise ImportParseError(f"CSV could not be read: {e}") from e


def parse_brokerage_csv(content: str) -> ParsedImport:
    """
    Parse a brokerage activity export into trades, in file order.

    Raises ImportParseError if the file is empty, holds only a header, or
    is not readable as CSV. Individual malformed trade rows are skipped and
    counted rather than failing the file.
    """
    rows = _read_rows(content)
    if not rows:
        raise ImportParseError("CSV is empty")
    if len(rows) < 2:
        raise ImportParseError("CSV only contains header row")

    result = ParsedImport(trades=[])
    for line_number, row in enumerate(rows[1:], start=2):
        if len(row) < MIN_FIELDS:
            logger.debug("Skipping short row %d (%d fields)", line_number, len(row))
            result.skipped_rows += 1
            continue

        try:
            code = TradeCode(_cell(row, TRANS_CODE))
        except ValueError:
            # Dividends, transfers, interest and the like
            continue

        if not _cell(row, INSTRUMENT):
            logger.debug("Skipping row %d with blank instrument", line_number)
            result.skipped_rows += 1
            continue

        trade = _parse_row(row, code)
        if trade is None:
            logger.debug("Skipping malformed %s row %d", code.value, line_number)
            result.skipped_rows += 1
            continue
        result.trades.append(trade)

    logger.info(
        "Parsed %d trades from CSV (%d rows skipped)",
        len(result.trades),
        result.skipped_rows,
    )
    return result
