"""Opening option positions and computing their collateral."""

import logging
from collections.abc import Callable
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from app.calculations import option_collateral, shares_for_contracts
from app.exceptions import InvalidQuantityError, ValidationError
from app.models import OptionKind, OptionPosition, StockPosition
from app.services import ledger_store
from app.services.locking import ledger_transaction, ticker_keys

logger = logging.getLogger(__name__)

# Given a ticker, return the owner's open stock lot (or None)
StockLookup = Callable[[str], StockPosition | None]


def parse_option_kind(value: OptionKind | str) -> OptionKind:
    """Coerce user input to an OptionKind, raising ValidationError if unknown."""
    try:
        return OptionKind(value)
    except ValueError:
        raise ValidationError(
            f"Unknown option kind: {value}", field="option_kind"
        ) from None


def collateral_for(
    kind: OptionKind,
    ticker: str,
    strike: Decimal,
    quantity: Decimal,
    stock_lookup: StockLookup,
) -> Decimal:
    """Collateral for a new position; covered calls consult the stock lot."""
    if kind != OptionKind.CC:
        return option_collateral(kind, strike, quantity)

    lot = stock_lookup(ticker)
    if lot is None:
        logger.warning("Covered call on %s opened without shares; collateral 0", ticker)
        return Decimal("0")
    collateral = option_collateral(
        kind,
        strike,
        quantity,
        stock_quantity=lot.quantity,
        stock_cost_basis=lot.cost_basis,
    )
    if collateral == 0:
        logger.warning(
            "Covered call on %s needs %s shares, lot holds %s; collateral 0",
            ticker,
            shares_for_contracts(quantity),
            lot.quantity,
        )
    return collateral


def apply_open(
    db: Session,
    owner_id: int,
    ticker: str,
    kind: OptionKind,
    strike: Decimal,
    premium: Decimal,
    expiration_date: date,
    quantity: Decimal,
    purchase_date: date,
    stock_lookup: StockLookup | None = None,
) -> OptionPosition:
    """Insert a new option position inside the caller's transaction."""
    if quantity <= 0:
        raise InvalidQuantityError(quantity)
    if strike < 0:
        raise ValidationError(f"Strike must not be negative: {strike}", field="strike")
    if premium < 0:
        raise ValidationError(f"Premium must not be negative: {premium}", field="premium")

    ticker = ticker.upper()
    kind = parse_option_kind(kind)
    lookup = stock_lookup or (
        lambda symbol: ledger_store.get_open_stock_lot(db, owner_id, symbol)
    )

    position = OptionPosition(
        owner_id=owner_id,
        ticker=ticker,
        option_kind=kind.value,
        strike=strike,
        premium=premium,
        price=premium,
        expiration_date=expiration_date,
        collateral=collateral_for(kind, ticker, strike, quantity, lookup),
        quantity=quantity,
        purchase_date=purchase_date,
    )
    ledger_store.upsert_option_position(db, position)

    logger.info(
        "Opened %s x%s %s for owner %s (collateral %s)",
        kind.value,
        quantity,
        position.contract_display,
        owner_id,
        position.collateral,
    )
    return position


def open_option(
    db: Session,
    owner_id: int,
    ticker: str,
    kind: OptionKind,
    strike: Decimal,
    premium: Decimal,
    expiration_date: date,
    quantity: Decimal,
    purchase_date: date,
    stock_lookup: StockLookup | None = None,
) -> OptionPosition:
    """
    Open a new option position.

    Always creates a distinct position; positions on the same contract are
    never merged at open time.
    """
    with ledger_transaction(db, ticker_keys(owner_id, ticker)):
        position = apply_open(
            db,
            owner_id,
            ticker,
            kind,
            strike,
            premium,
            expiration_date,
            quantity,
            purchase_date,
            stock_lookup,
        )
    return position
