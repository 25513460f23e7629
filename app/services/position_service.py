"""Position service for listing, editing and deleting open positions."""

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from app.exceptions import InvalidQuantityError, ValidationError
from app.models import OptionPosition, StockPosition
from app.services import ledger_store, option_service
from app.services.filters import PositionFilter
from app.services.locking import (
    ensure_ticker_unchanged,
    ledger_transaction,
    option_key,
    stock_key,
    ticker_keys,
)

logger = logging.getLogger(__name__)


@dataclass
class PositionListing:
    """Open positions matching a filter."""

    stocks: list[StockPosition] = field(default_factory=list)
    options: list[OptionPosition] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.stocks) + len(self.options)


def list_positions(
    db: Session, owner_id: int, filters: PositionFilter | None = None
) -> PositionListing:
    """
    Get the owner's open positions.

    An option kind filter hides stock lots entirely.
    """
    filters = filters or PositionFilter()
    if filters.option_kind:
        filters = replace(
            filters,
            option_kind=option_service.parse_option_kind(filters.option_kind).value,
        )

    stocks = (
        ledger_store.list_stock_positions(db, owner_id, filters)
        if filters.includes_stocks
        else []
    )
    options = ledger_store.list_option_positions(db, owner_id, filters)
    return PositionListing(stocks=stocks, options=options)


def _locked_ticker(db: Session, owner_id: int, position_id: int, is_option: bool) -> str:
    if is_option:
        return ledger_store.require_option_position(db, owner_id, position_id).ticker
    return ledger_store.require_stock_position(db, owner_id, position_id).ticker


def update_stock_position(
    db: Session,
    owner_id: int,
    position_id: int,
    ticker: str | None = None,
    quantity: Decimal | None = None,
    cost_basis: Decimal | None = None,
    open_date: date | None = None,
) -> StockPosition:
    """
    Edit an open stock lot. None leaves a field unchanged.

    Renaming to a ticker the owner already holds is rejected, since that
    would leave two lots for one ticker.
    """
    current_ticker = _locked_ticker(db, owner_id, position_id, is_option=False)
    new_ticker = ticker.strip().upper() if ticker else current_ticker
    keys = [stock_key(owner_id, current_ticker), stock_key(owner_id, new_ticker)]

    with ledger_transaction(db, keys):
        lot = ledger_store.require_stock_position(db, owner_id, position_id)
        db.refresh(lot)
        ensure_ticker_unchanged(lot, current_ticker)

        if new_ticker != lot.ticker:
            if ledger_store.get_open_stock_lot(db, owner_id, new_ticker) is not None:
                raise ValidationError(
                    f"A {new_ticker} lot is already open", field="ticker"
                )
            lot.ticker = new_ticker
        if quantity is not None:
            if quantity <= 0:
                raise InvalidQuantityError(quantity)
            lot.quantity = quantity
        if cost_basis is not None:
            if cost_basis < 0:
                raise ValidationError(
                    f"Cost basis must not be negative: {cost_basis}", field="cost_basis"
                )
            lot.cost_basis = cost_basis
        if open_date is not None:
            lot.open_date = open_date

        ledger_store.upsert_stock_lot(db, lot)
        logger.info("Updated %s lot %s for owner %s", lot.ticker, lot.id, owner_id)
    return lot


def update_option_position(
    db: Session,
    owner_id: int,
    position_id: int,
    ticker: str | None = None,
    option_kind: str | None = None,
    strike: Decimal | None = None,
    premium: Decimal | None = None,
    expiration_date: date | None = None,
    quantity: Decimal | None = None,
    purchase_date: date | None = None,
) -> OptionPosition:
    """
    Edit an open option position. None leaves a field unchanged.

    Collateral is re-derived from the edited fields with the same rule used
    when opening, and price follows premium.
    """
    current_ticker = _locked_ticker(db, owner_id, position_id, is_option=True)
    new_ticker = ticker.strip().upper() if ticker else current_ticker
    keys = ticker_keys(owner_id, current_ticker) + ticker_keys(owner_id, new_ticker)

    with ledger_transaction(db, keys):
        position = ledger_store.require_option_position(db, owner_id, position_id)
        db.refresh(position)
        ensure_ticker_unchanged(position, current_ticker)

        if option_kind is not None:
            position.option_kind = option_service.parse_option_kind(option_kind).value
        if strike is not None:
            if strike < 0:
                raise ValidationError(f"Strike must not be negative: {strike}", field="strike")
            position.strike = strike
        if premium is not None:
            if premium < 0:
                raise ValidationError(
                    f"Premium must not be negative: {premium}", field="premium"
                )
            position.premium = premium
            position.price = premium
        if quantity is not None:
            if quantity <= 0:
                raise InvalidQuantityError(quantity)
            position.quantity = quantity
        if expiration_date is not None:
            position.expiration_date = expiration_date
        if purchase_date is not None:
            position.purchase_date = purchase_date
        position.ticker = new_ticker

        position.collateral = option_service.collateral_for(
            option_service.parse_option_kind(position.option_kind),
            position.ticker,
            position.strike,
            position.quantity,
            lambda symbol: ledger_store.get_open_stock_lot(db, owner_id, symbol),
        )
        ledger_store.upsert_option_position(db, position)
        logger.info(
            "Updated option %s for owner %s (collateral %s)",
            position.contract_display,
            owner_id,
            position.collateral,
        )
    return position


def delete_stock_position(db: Session, owner_id: int, position_id: int) -> None:
    """Delete an open stock lot without realizing any P/L."""
    ticker = _locked_ticker(db, owner_id, position_id, is_option=False)
    with ledger_transaction(db, [stock_key(owner_id, ticker)]):
        lot = ledger_store.require_stock_position(db, owner_id, position_id)
        db.refresh(lot)
        ensure_ticker_unchanged(lot, ticker)
        ledger_store.delete_stock_lot(db, lot)
    logger.info("Deleted %s lot %s for owner %s", ticker, position_id, owner_id)


def delete_option_position(db: Session, owner_id: int, position_id: int) -> None:
    """Delete an open option position without realizing any P/L."""
    ticker = _locked_ticker(db, owner_id, position_id, is_option=True)
    with ledger_transaction(db, [option_key(owner_id, ticker)]):
        position = ledger_store.require_option_position(db, owner_id, position_id)
        db.refresh(position)
        ensure_ticker_unchanged(position, ticker)
        ledger_store.delete_option_position(db, position)
    logger.info("Deleted %s option %s for owner %s", ticker, position_id, owner_id)
