"""Stock lot merging using weighted-average cost basis.

Key behaviors:
- Exactly one open lot per (owner, ticker); buys at different prices are
  blended into it, never tracked as separate lots
- Sells realize (sell_price - cost_basis) * quantity against the blended
  cost basis, which a partial sell leaves unchanged
- Sells larger than the lot are clamped to the lot size; the result
  reports the clamp instead of raising
- Realized sells blend into the ClosedStock row for (owner, ticker,
  open_date) when one already exists

The apply_* functions mutate inside the caller's transaction. merge_buy and
merge_sell are the standalone entry points that own their transaction.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from app.calculations import stock_profit_loss, weighted_average
from app.exceptions import InvalidQuantityError, NotFoundError, ValidationError
from app.models import ClosedStock, StockPosition
from app.services import ledger_store
from app.services.locking import ledger_transaction, stock_key

logger = logging.getLogger(__name__)


@dataclass
class StockSellResult:
    """Outcome of selling shares out of an open lot."""

    closed: ClosedStock
    remaining: StockPosition | None  # None when the lot was fully closed
    requested_quantity: Decimal
    closed_quantity: Decimal
    profit_loss: Decimal  # realized by this sale alone

    @property
    def clamped(self) -> bool:
        """True when the request exceeded the lot and was cut down."""
        return self.closed_quantity < self.requested_quantity


def _validate_trade(price: Decimal, quantity: Decimal) -> None:
    if quantity <= 0:
        raise InvalidQuantityError(quantity)
    if price < 0:
        raise ValidationError(f"Price must not be negative: {price}", field="price")


# --- In-transaction helpers ---


def apply_buy(
    db: Session,
    owner_id: int,
    ticker: str,
    price: Decimal,
    quantity: Decimal,
    trade_date: date,
) -> StockPosition:
    """Grow the owner's lot for ticker (or open one) at a weighted-average cost."""
    _validate_trade(price, quantity)
    ticker = ticker.upper()

    lot = ledger_store.get_open_stock_lot(db, owner_id, ticker)
    if lot is None:
        lot = StockPosition(
            owner_id=owner_id,
            ticker=ticker,
            quantity=quantity,
            cost_basis=price,
            open_date=trade_date,
        )
        logger.info("Opened %s lot for owner %s: %s @ %s", ticker, owner_id, quantity, price)
    else:
        lot.cost_basis = weighted_average(lot.quantity, lot.cost_basis, quantity, price)
        lot.quantity = lot.quantity + quantity
        logger.info(
            "Merged %s @ %s into %s lot for owner %s (now %s @ %s)",
            quantity,
            price,
            ticker,
            owner_id,
            lot.quantity,
            lot.cost_basis,
        )

    return ledger_store.upsert_stock_lot(db, lot)


def apply_sell_from_lot(
    db: Session,
    lot: StockPosition,
    sell_price: Decimal,
    quantity: Decimal,
    close_date: date,
) -> StockSellResult:
    """Sell out of a specific lot, clamping to what it holds."""
    _validate_trade(sell_price, quantity)

    available = lot.quantity
    closed_quantity = min(quantity, available)
    if closed_quantity < quantity:
        logger.warning(
            "Clamped %s sell for owner %s from %s to %s shares",
            lot.ticker,
            lot.owner_id,
            quantity,
            closed_quantity,
        )

    profit_loss = stock_profit_loss(sell_price, lot.cost_basis, closed_quantity)

    closed = ledger_store.insert_or_blend_closed_stock(
        db,
        owner_id=lot.owner_id,
        ticker=lot.ticker,
        open_date=lot.open_date,
        quantity=closed_quantity,
        cost_basis=lot.cost_basis,
        sell_price=sell_price,
        profit_loss=profit_loss,
        close_date=close_date,
    )

    remaining_quantity = available - closed_quantity
    remaining: StockPosition | None
    if remaining_quantity > 0:
        lot.quantity = remaining_quantity
        remaining = ledger_store.upsert_stock_lot(db, lot)
    else:
        ledger_store.delete_stock_lot(db, lot)
        remaining = None

    logger.info(
        "Sold %s %s @ %s for owner %s, P/L %s",
        closed_quantity,
        lot.ticker,
        sell_price,
        lot.owner_id,
        profit_loss,
    )

    return StockSellResult(
        closed=closed,
        remaining=remaining,
        requested_quantity=quantity,
        closed_quantity=closed_quantity,
        profit_loss=profit_loss,
    )


def apply_sell(
    db: Session,
    owner_id: int,
    ticker: str,
    sell_price: Decimal,
    quantity: Decimal,
    trade_date: date,
) -> StockSellResult:
    """Sell out of the owner's lot for ticker. Raises NotFoundError if none."""
    lot = ledger_store.get_open_stock_lot(db, owner_id, ticker)
    if lot is None:
        raise NotFoundError("StockPosition", ticker.upper())
    return apply_sell_from_lot(db, lot, sell_price, quantity, trade_date)


# --- Entry points ---


def merge_buy(
    db: Session,
    owner_id: int,
    ticker: str,
    price: Decimal,
    quantity: Decimal,
    trade_date: date,
) -> StockPosition:
    """Buy shares into the owner's single blended lot for ticker."""
    with ledger_transaction(db, [stock_key(owner_id, ticker)]):
        lot = apply_buy(db, owner_id, ticker, price, quantity, trade_date)
    return lot


def merge_sell(
    db: Session,
    owner_id: int,
    ticker: str,
    sell_price: Decimal,
    quantity: Decimal,
    trade_date: date,
) -> StockSellResult:
    """Sell shares out of the owner's lot for ticker (clamped to the lot)."""
    with ledger_transaction(db, [stock_key(owner_id, ticker)]):
        result = apply_sell(db, owner_id, ticker, sell_price, quantity, trade_date)
    return result
