"""Closing option and stock positions.

An option close moves through three steps:
1. Requested: position and quantity are validated (0 < quantity <= open)
2. OutcomeSelected: select_outcome() pins sell price and close date for the
   chosen outcome (plain close, expired, assigned, called away)
3. Resolved: P/L is realized, collateral is split, any stock side effect
   runs, and the ClosedOption row is written

Stock closes skip the outcome step and clamp oversized requests.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy.orm import Session

from app.calculations import option_profit_loss, shares_for_contracts, split_collateral
from app.exceptions import InvalidQuantityError, ValidationError
from app.models import ClosedOption, OptionKind, OptionPosition, StockPosition
from app.services import ledger_store, lot_service
from app.services.locking import (
    ensure_ticker_unchanged,
    ledger_transaction,
    stock_key,
    ticker_keys,
)
from app.services.lot_service import StockSellResult

logger = logging.getLogger(__name__)


class CloseOutcome(str, Enum):
    CLOSED = "closed"
    EXPIRED = "expired"
    ASSIGNED = "assigned"
    CALLED_AWAY = "called_away"


@dataclass(frozen=True)
class SelectedOutcome:
    """Close parameters after the outcome rules have been applied."""

    outcome: CloseOutcome
    sell_price: Decimal
    close_date: date
    share_price: Decimal | None = None


@dataclass
class OptionCloseResult:
    """Outcome of closing (part of) an option position."""

    closed: ClosedOption
    remaining: OptionPosition | None  # None when the position was fully closed
    outcome: CloseOutcome
    closed_quantity: Decimal
    profit_loss: Decimal
    # Assignment: the stock lot that received the shares
    stock_lot: StockPosition | None = None
    # Call-away: the sale of the covering shares
    stock_sale: StockSellResult | None = None
    # Call-away with a missing or short stock lot
    stock_effect_skipped: bool = False


def select_outcome(
    position: OptionPosition,
    outcome: CloseOutcome | str,
    sell_price: Decimal | None = None,
    share_price: Decimal | None = None,
    close_date: date | None = None,
) -> SelectedOutcome:
    """
    Apply the outcome rules to a close request.

    - closed: sell_price is required
    - expired: sell_price forced to 0, close_date forced to expiration
    - assigned (CSP only): sell_price forced to 0
    - called_away (CC only): sell_price forced to 0, share_price required
    """
    try:
        outcome = CloseOutcome(outcome)
    except ValueError:
        raise ValidationError(f"Unknown close outcome: {outcome}", field="outcome") from None

    kind = OptionKind(position.option_kind)
    close_date = close_date or date.today()

    if outcome == CloseOutcome.CLOSED:
        if sell_price is None:
            raise ValidationError("sell_price is required to close", field="sell_price")
        if sell_price < 0:
            raise ValidationError(
                f"Sell price must not be negative: {sell_price}", field="sell_price"
            )
        return SelectedOutcome(outcome, sell_price, close_date)

    if outcome == CloseOutcome.EXPIRED:
        return SelectedOutcome(outcome, Decimal("0"), position.expiration_date)

    if outcome == CloseOutcome.ASSIGNED:
        if kind != OptionKind.CSP:
            raise ValidationError(
                f"Only CSP positions can be assigned, not {kind.value}", field="outcome"
            )
        return SelectedOutcome(outcome, Decimal("0"), close_date)

    # Called away
    if kind != OptionKind.CC:
        raise ValidationError(
            f"Only CC positions can be called away, not {kind.value}", field="outcome"
        )
    if share_price is None:
        raise ValidationError(
            "share_price is required when shares are called away", field="share_price"
        )
    return SelectedOutcome(outcome, Decimal("0"), close_date, share_price)


def _apply_assignment(
    db: Session, position: OptionPosition, contracts: Decimal, close_date: date
) -> StockPosition:
    """Put 100 shares per assigned contract into the lot at the strike."""
    return lot_service.apply_buy(
        db,
        position.owner_id,
        position.ticker,
        price=position.strike,
        quantity=shares_for_contracts(contracts),
        trade_date=close_date,
    )


def _apply_call_away(
    db: Session,
    position: OptionPosition,
    contracts: Decimal,
    share_price: Decimal,
    close_date: date,
) -> StockSellResult | None:
    """Sell 100 shares per called contract. Returns None if the lot can't cover it."""
    shares = shares_for_contracts(contracts)
    lot = ledger_store.get_open_stock_lot(db, position.owner_id, position.ticker)
    if lot is None or lot.quantity < shares:
        logger.warning(
            "Call-away of %s %s shares skipped for owner %s: lot holds %s",
            shares,
            position.ticker,
            position.owner_id,
            lot.quantity if lot else 0,
        )
        return None
    return lot_service.apply_sell_from_lot(db, lot, share_price, shares, close_date)


def apply_close_option(
    db: Session,
    position: OptionPosition,
    quantity: Decimal,
    selected: SelectedOutcome,
) -> OptionCloseResult:
    """Resolve a close inside the caller's transaction."""
    open_quantity = position.quantity
    if quantity <= 0 or quantity > open_quantity:
        raise InvalidQuantityError(quantity, open_quantity)

    kind = OptionKind(position.option_kind)
    result_kwargs: dict = {}

    if selected.outcome == CloseOutcome.ASSIGNED:
        result_kwargs["stock_lot"] = _apply_assignment(
            db, position, quantity, selected.close_date
        )
    elif selected.outcome == CloseOutcome.CALLED_AWAY:
        sale = _apply_call_away(
            db, position, quantity, selected.share_price, selected.close_date
        )
        result_kwargs["stock_sale"] = sale
        result_kwargs["stock_effect_skipped"] = sale is None

    profit_loss = option_profit_loss(kind, position.premium, selected.sell_price, quantity)
    closed_collateral, remaining_collateral = split_collateral(
        position.collateral, open_quantity, quantity
    )

    closed = ledger_store.insert_closed_option(
        db,
        ClosedOption(
            owner_id=position.owner_id,
            ticker=position.ticker,
            option_kind=position.option_kind,
            price=position.price,
            premium=position.premium,
            strike=position.strike,
            expiration_date=position.expiration_date,
            collateral=closed_collateral,
            quantity=quantity,
            purchase_date=position.purchase_date,
            close_date=selected.close_date,
            sell_price=selected.sell_price,
            profit_loss=profit_loss,
        ),
    )

    remaining_quantity = open_quantity - quantity
    remaining: OptionPosition | None
    if remaining_quantity > 0:
        position.quantity = remaining_quantity
        position.collateral = remaining_collateral
        remaining = ledger_store.upsert_option_position(db, position)
    else:
        ledger_store.delete_option_position(db, position)
        remaining = None

    logger.info(
        "Closed %s of %s (%s) for owner %s, P/L %s",
        quantity,
        position.contract_display,
        selected.outcome.value,
        position.owner_id,
        profit_loss,
    )

    return OptionCloseResult(
        closed=closed,
        remaining=remaining,
        outcome=selected.outcome,
        closed_quantity=quantity,
        profit_loss=profit_loss,
        **result_kwargs,
    )


def close_option(
    db: Session,
    owner_id: int,
    position_id: int,
    quantity: Decimal | None,
    outcome: CloseOutcome | str,
    sell_price: Decimal | None = None,
    share_price: Decimal | None = None,
    close_date: date | None = None,
) -> OptionCloseResult:
    """
    Close some or all contracts of an option position.

    quantity None closes the whole position. Raises NotFoundError for an
    unknown position, InvalidQuantityError for quantity <= 0 or above the
    open quantity, ValidationError for outcome/kind mismatches.
    """
    ticker = ledger_store.require_option_position(db, owner_id, position_id).ticker

    with ledger_transaction(db, ticker_keys(owner_id, ticker)):
        # Re-read under the lock; another request may have changed it
        position = ledger_store.require_option_position(db, owner_id, position_id)
        db.refresh(position)
        ensure_ticker_unchanged(position, ticker)
        selected = select_outcome(position, outcome, sell_price, share_price, close_date)
        result = apply_close_option(
            db,
            position,
            position.quantity if quantity is None else quantity,
            selected,
        )
    return result


def close_stock(
    db: Session,
    owner_id: int,
    position_id: int,
    sell_price: Decimal,
    quantity: Decimal | None = None,
    close_date: date | None = None,
) -> StockSellResult:
    """
    Close some or all shares of a stock lot.

    quantity None closes the whole lot; larger quantities are clamped and
    reported through StockSellResult.clamped.
    """
    ticker = ledger_store.require_stock_position(db, owner_id, position_id).ticker

    with ledger_transaction(db, [stock_key(owner_id, ticker)]):
        lot = ledger_store.require_stock_position(db, owner_id, position_id)
        db.refresh(lot)
        ensure_ticker_unchanged(lot, ticker)
        result = lot_service.apply_sell_from_lot(
            db,
            lot,
            sell_price,
            lot.quantity if quantity is None else quantity,
            close_date or date.today(),
        )
    return result
