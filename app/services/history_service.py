"""Closed trade history: listing, editing and deleting realized rows."""

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from app.calculations import (
    closed_option_pl_percent,
    closed_option_ror,
    closed_stock_pl_percent,
    closed_stock_ror,
    option_profit_loss,
    stock_profit_loss,
)
from app.exceptions import InvalidQuantityError, ValidationError
from app.models import ClosedOption, ClosedStock
from app.services import ledger_store, option_service
from app.services.filters import HistoryFilter
from app.services.locking import (
    ensure_ticker_unchanged,
    ledger_transaction,
    option_key,
    stock_key,
)

logger = logging.getLogger(__name__)


@dataclass
class HistoryListing:
    """Closed rows matching a filter, most recent close first."""

    stocks: list[ClosedStock] = field(default_factory=list)
    options: list[ClosedOption] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.stocks) + len(self.options)


def list_history(
    db: Session, owner_id: int, filters: HistoryFilter | None = None
) -> HistoryListing:
    """Get closed rows. An option kind filter hides closed stocks."""
    filters = filters or HistoryFilter()
    if filters.option_kind:
        filters = replace(
            filters,
            option_kind=option_service.parse_option_kind(filters.option_kind).value,
        )

    stocks = (
        ledger_store.list_closed_stocks(db, owner_id, filters)
        if filters.includes_stocks
        else []
    )
    options = ledger_store.list_closed_options(db, owner_id, filters)
    return HistoryListing(stocks=stocks, options=options)


def get_closed_stock_summary(closed: ClosedStock) -> dict:
    """Get a closed stock row with return metrics."""
    return {
        "closed": closed,
        "ror": closed_stock_ror(closed),
        "pl_percent": closed_stock_pl_percent(closed),
    }


def get_closed_option_summary(closed: ClosedOption) -> dict:
    """Get a closed option row with return metrics."""
    return {
        "closed": closed,
        "ror": closed_option_ror(closed),
        "pl_percent": closed_option_pl_percent(closed),
    }


def _check_non_negative(value: Decimal | None, field_name: str) -> None:
    if value is not None and value < 0:
        raise ValidationError(f"{field_name} must not be negative: {value}", field=field_name)


def update_closed_stock(
    db: Session,
    owner_id: int,
    closed_id: int,
    ticker: str | None = None,
    open_date: date | None = None,
    close_date: date | None = None,
    quantity: Decimal | None = None,
    cost_basis: Decimal | None = None,
    sell_price: Decimal | None = None,
) -> ClosedStock:
    """
    Edit a closed stock row. None leaves a field unchanged.

    profit_loss is recomputed as (sell_price - cost_basis) * quantity.
    """
    current_ticker = ledger_store.require_closed_stock(db, owner_id, closed_id).ticker
    new_ticker = ticker.strip().upper() if ticker else current_ticker
    keys = [stock_key(owner_id, current_ticker), stock_key(owner_id, new_ticker)]

    with ledger_transaction(db, keys):
        closed = ledger_store.require_closed_stock(db, owner_id, closed_id)
        db.refresh(closed)
        ensure_ticker_unchanged(closed, current_ticker)

        if quantity is not None and quantity <= 0:
            raise InvalidQuantityError(quantity)
        _check_non_negative(cost_basis, "cost_basis")
        _check_non_negative(sell_price, "sell_price")

        closed.ticker = new_ticker
        if open_date is not None:
            closed.open_date = open_date
        if close_date is not None:
            closed.close_date = close_date
        if quantity is not None:
            closed.quantity = quantity
        if cost_basis is not None:
            closed.cost_basis = cost_basis
        if sell_price is not None:
            closed.sell_price = sell_price
        closed.profit_loss = stock_profit_loss(
            closed.sell_price, closed.cost_basis, closed.quantity
        )
        db.flush()
        logger.info("Updated closed %s row %s for owner %s", closed.ticker, closed.id, owner_id)
    return closed


def update_closed_option(
    db: Session,
    owner_id: int,
    closed_id: int,
    ticker: str | None = None,
    option_kind: str | None = None,
    strike: Decimal | None = None,
    premium: Decimal | None = None,
    collateral: Decimal | None = None,
    sell_price: Decimal | None = None,
    quantity: Decimal | None = None,
    expiration_date: date | None = None,
    purchase_date: date | None = None,
    close_date: date | None = None,
) -> ClosedOption:
    """
    Edit a closed option row. None leaves a field unchanged.

    profit_loss is recomputed with the long/short rule for the (possibly
    edited) kind, multiplied by the row's quantity.
    """
    current_ticker = ledger_store.require_closed_option(db, owner_id, closed_id).ticker
    new_ticker = ticker.strip().upper() if ticker else current_ticker
    keys = [option_key(owner_id, current_ticker), option_key(owner_id, new_ticker)]

    with ledger_transaction(db, keys):
        closed = ledger_store.require_closed_option(db, owner_id, closed_id)
        db.refresh(closed)
        ensure_ticker_unchanged(closed, current_ticker)

        if quantity is not None and quantity <= 0:
            raise InvalidQuantityError(quantity)
        for value, name in (
            (strike, "strike"),
            (premium, "premium"),
            (collateral, "collateral"),
            (sell_price, "sell_price"),
        ):
            _check_non_negative(value, name)

        closed.ticker = new_ticker
        if option_kind is not None:
            closed.option_kind = option_service.parse_option_kind(option_kind).value
        if strike is not None:
            closed.strike = strike
        if premium is not None:
            closed.premium = premium
            closed.price = premium
        if collateral is not None:
            closed.collateral = collateral
        if sell_price is not None:
            closed.sell_price = sell_price
        if quantity is not None:
            closed.quantity = quantity
        if expiration_date is not None:
            closed.expiration_date = expiration_date
        if purchase_date is not None:
            closed.purchase_date = purchase_date
        if close_date is not None:
            closed.close_date = close_date

        closed.profit_loss = option_profit_loss(
            option_service.parse_option_kind(closed.option_kind),
            closed.premium,
            closed.sell_price,
            closed.quantity,
        )
        db.flush()
        logger.info("Updated closed option %s for owner %s", closed.id, owner_id)
    return closed


def delete_closed_stock(db: Session, owner_id: int, closed_id: int) -> None:
    ticker = ledger_store.require_closed_stock(db, owner_id, closed_id).ticker
    with ledger_transaction(db, [stock_key(owner_id, ticker)]):
        closed = ledger_store.require_closed_stock(db, owner_id, closed_id)
        db.refresh(closed)
        ensure_ticker_unchanged(closed, ticker)
        ledger_store.delete_closed_stock(db, closed)
    logger.info("Deleted closed %s row %s for owner %s", ticker, closed_id, owner_id)


def delete_closed_option(db: Session, owner_id: int, closed_id: int) -> None:
    ticker = ledger_store.require_closed_option(db, owner_id, closed_id).ticker
    with ledger_transaction(db, [option_key(owner_id, ticker)]):
        closed = ledger_store.require_closed_option(db, owner_id, closed_id)
        db.refresh(closed)
        ensure_ticker_unchanged(closed, ticker)
        ledger_store.delete_closed_option(db, closed)
    logger.info("Deleted closed option %s for owner %s", closed_id, owner_id)
