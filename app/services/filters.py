"""Filter dataclasses and query builders for service layer."""

from dataclasses import dataclass
from datetime import date

from sqlalchemy.orm import Query

from app.models import ClosedOption, ClosedStock, OptionPosition, StockPosition


@dataclass
class PositionFilter:
    """Filter criteria for open position queries."""

    search: str | None = None  # ticker substring
    option_kind: str | None = None  # Call, Put, CSP, CC; hides stocks when set
    start_date: date | None = None  # open_date / purchase_date lower bound
    end_date: date | None = None

    @property
    def includes_stocks(self) -> bool:
        return self.option_kind is None


@dataclass
class HistoryFilter:
    """Filter criteria for closed trade history queries."""

    search: str | None = None
    option_kind: str | None = None
    start_date: date | None = None  # close_date lower bound
    end_date: date | None = None

    @property
    def includes_stocks(self) -> bool:
        return self.option_kind is None


def _apply_ticker_search(query: Query, column, search: str | None) -> Query:
    if search:
        query = query.filter(column.icontains(search, autoescape=True))
    return query


def _apply_date_range(
    query: Query, column, start_date: date | None, end_date: date | None
) -> Query:
    if start_date:
        query = query.filter(column >= start_date)
    if end_date:
        query = query.filter(column <= end_date)
    return query


def apply_stock_position_filters(query: Query, filters: PositionFilter) -> Query:
    """Apply PositionFilter criteria to a StockPosition query."""
    query = _apply_ticker_search(query, StockPosition.ticker, filters.search)
    return _apply_date_range(
        query, StockPosition.open_date, filters.start_date, filters.end_date
    )


def apply_option_position_filters(query: Query, filters: PositionFilter) -> Query:
    """Apply PositionFilter criteria to an OptionPosition query."""
    query = _apply_ticker_search(query, OptionPosition.ticker, filters.search)
    if filters.option_kind:
        query = query.filter(OptionPosition.option_kind == filters.option_kind)
    return _apply_date_range(
        query, OptionPosition.purchase_date, filters.start_date, filters.end_date
    )


def apply_closed_stock_filters(query: Query, filters: HistoryFilter) -> Query:
    """Apply HistoryFilter criteria to a ClosedStock query."""
    query = _apply_ticker_search(query, ClosedStock.ticker, filters.search)
    return _apply_date_range(
        query, ClosedStock.close_date, filters.start_date, filters.end_date
    )


def apply_closed_option_filters(query: Query, filters: HistoryFilter) -> Query:
    """Apply HistoryFilter criteria to a ClosedOption query."""
    query = _apply_ticker_search(query, ClosedOption.ticker, filters.search)
    if filters.option_kind:
        query = query.filter(ClosedOption.option_kind == filters.option_kind)
    return _apply_date_range(
        query, ClosedOption.close_date, filters.start_date, filters.end_date
    )
