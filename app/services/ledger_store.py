"""Persistence surface for open positions and closed trade records.

Store functions only add/delete/flush; the caller owns the transaction
(see locking.ledger_transaction).
"""

from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from app.calculations import weighted_average
from app.exceptions import NotFoundError
from app.models import ClosedOption, ClosedStock, OptionPosition, StockPosition
from app.services.filters import (
    HistoryFilter,
    PositionFilter,
    apply_closed_option_filters,
    apply_closed_stock_filters,
    apply_option_position_filters,
    apply_stock_position_filters,
)

# --- Stock lots ---


def get_open_stock_lot(db: Session, owner_id: int, ticker: str) -> StockPosition | None:
    """Get the owner's single open lot for a ticker."""
    return (
        db.query(StockPosition)
        .filter(
            StockPosition.owner_id == owner_id,
            StockPosition.ticker == ticker.upper(),
        )
        .first()
    )


def get_stock_position(
    db: Session, owner_id: int, position_id: int
) -> StockPosition | None:
    return (
        db.query(StockPosition)
        .filter(StockPosition.id == position_id, StockPosition.owner_id == owner_id)
        .first()
    )


def require_stock_position(
    db: Session, owner_id: int, position_id: int
) -> StockPosition:
    position = get_stock_position(db, owner_id, position_id)
    if position is None:
        raise NotFoundError("StockPosition", position_id)
    return position


def upsert_stock_lot(db: Session, lot: StockPosition) -> StockPosition:
    db.add(lot)
    db.flush()
    return lot


def delete_stock_lot(db: Session, lot: StockPosition) -> None:
    db.delete(lot)
    db.flush()


def list_stock_positions(
    db: Session, owner_id: int, filters: PositionFilter | None = None
) -> list[StockPosition]:
    """Open stock lots, newest first."""
    query = db.query(StockPosition).filter(
        StockPosition.owner_id == owner_id, StockPosition.quantity > 0
    )
    if filters:
        query = apply_stock_position_filters(query, filters)
    return query.order_by(StockPosition.open_date.desc(), StockPosition.id.desc()).all()


def count_stock_positions(db: Session, owner_id: int) -> int:
    return (
        db.query(StockPosition)
        .filter(StockPosition.owner_id == owner_id, StockPosition.quantity > 0)
        .count()
    )


# --- Option positions ---


def get_open_option_positions(
    db: Session,
    owner_id: int,
    ticker: str,
    strike: Decimal,
    expiration_date: date,
    option_kind: str,
) -> list[OptionPosition]:
    """
    Find open positions on one contract, oldest first.

    Ordered by purchase_date then id, so equal purchase dates resolve to
    insertion order.
    """
    return (
        db.query(OptionPosition)
        .filter(
            OptionPosition.owner_id == owner_id,
            OptionPosition.ticker == ticker.upper(),
            OptionPosition.strike == strike,
            OptionPosition.expiration_date == expiration_date,
            OptionPosition.option_kind == option_kind,
            OptionPosition.quantity > 0,
        )
        .order_by(OptionPosition.purchase_date, OptionPosition.id)
        .all()
    )


def get_option_position(
    db: Session, owner_id: int, position_id: int
) -> OptionPosition | None:
    return (
        db.query(OptionPosition)
        .filter(OptionPosition.id == position_id, OptionPosition.owner_id == owner_id)
        .first()
    )


def require_option_position(
    db: Session, owner_id: int, position_id: int
) -> OptionPosition:
    position = get_option_position(db, owner_id, position_id)
    if position is None:
        raise NotFoundError("OptionPosition", position_id)
    return position


def upsert_option_position(db: Session, position: OptionPosition) -> OptionPosition:
    db.add(position)
    db.flush()
    return position


def delete_option_position(db: Session, position: OptionPosition) -> None:
    db.delete(position)
    db.flush()


def list_option_positions(
    db: Session, owner_id: int, filters: PositionFilter | None = None
) -> list[OptionPosition]:
    """Open option positions, newest purchase first."""
    query = db.query(OptionPosition).filter(
        OptionPosition.owner_id == owner_id, OptionPosition.quantity > 0
    )
    if filters:
        query = apply_option_position_filters(query, filters)
    return query.order_by(
        OptionPosition.purchase_date.desc(), OptionPosition.id.desc()
    ).all()


def count_option_positions(db: Session, owner_id: int) -> int:
    return (
        db.query(OptionPosition)
        .filter(OptionPosition.owner_id == owner_id, OptionPosition.quantity > 0)
        .count()
    )


# --- Closed records ---


def insert_or_blend_closed_stock(
    db: Session,
    owner_id: int,
    ticker: str,
    open_date: date,
    quantity: Decimal,
    cost_basis: Decimal,
    sell_price: Decimal,
    profit_loss: Decimal,
    close_date: date,
) -> ClosedStock:
    """
    Record a realized stock sale.

    If a row already exists for (owner, ticker, open_date) the sale is
    blended into it: quantities and P/L are summed, cost basis and sell
    price are quantity-weighted, and close_date moves to the latest close.
    """
    ticker = ticker.upper()
    existing = (
        db.query(ClosedStock)
        .filter(
            ClosedStock.owner_id == owner_id,
            ClosedStock.ticker == ticker,
            ClosedStock.open_date == open_date,
        )
        .order_by(ClosedStock.id)
        .first()
    )

    if existing is None:
        closed = ClosedStock(
            owner_id=owner_id,
            ticker=ticker,
            open_date=open_date,
            close_date=close_date,
            quantity=quantity,
            cost_basis=cost_basis,
            sell_price=sell_price,
            profit_loss=profit_loss,
        )
        db.add(closed)
        db.flush()
        return closed

    existing.cost_basis = weighted_average(
        existing.quantity, existing.cost_basis, quantity, cost_basis
    )
    existing.sell_price = weighted_average(
        existing.quantity, existing.sell_price, quantity, sell_price
    )
    existing.quantity = existing.quantity + quantity
    existing.profit_loss = existing.profit_loss + profit_loss
    existing.close_date = max(existing.close_date, close_date)
    db.flush()
    return existing


def insert_closed_option(db: Session, closed: ClosedOption) -> ClosedOption:
    db.add(closed)
    db.flush()
    return closed


def get_closed_stock(db: Session, owner_id: int, closed_id: int) -> ClosedStock | None:
    return (
        db.query(ClosedStock)
        .filter(ClosedStock.id == closed_id, ClosedStock.owner_id == owner_id)
        .first()
    )


def get_closed_option(
    db: Session, owner_id: int, closed_id: int
) -> ClosedOption | None:
    return (
        db.query(ClosedOption)
        .filter(ClosedOption.id == closed_id, ClosedOption.owner_id == owner_id)
        .first()
    )


def list_closed_stocks(
    db: Session, owner_id: int, filters: HistoryFilter | None = None
) -> list[ClosedStock]:
    """Closed stock rows, most recent close first."""
    query = db.query(ClosedStock).filter(ClosedStock.owner_id == owner_id)
    if filters:
        query = apply_closed_stock_filters(query, filters)
    return query.order_by(ClosedStock.close_date.desc(), ClosedStock.id.desc()).all()


def list_closed_options(
    db: Session, owner_id: int, filters: HistoryFilter | None = None
) -> list[ClosedOption]:
    """Closed option rows, most recent close first."""
    query = db.query(ClosedOption).filter(ClosedOption.owner_id == owner_id)
    if filters:
        query = apply_closed_option_filters(query, filters)
    return query.order_by(
        ClosedOption.close_date.desc(), ClosedOption.id.desc()
    ).all()


def require_closed_stock(db: Session, owner_id: int, closed_id: int) -> ClosedStock:
    closed = get_closed_stock(db, owner_id, closed_id)
    if closed is None:
        raise NotFoundError("ClosedStock", closed_id)
    return closed


def require_closed_option(db: Session, owner_id: int, closed_id: int) -> ClosedOption:
    closed = get_closed_option(db, owner_id, closed_id)
    if closed is None:
        raise NotFoundError("ClosedOption", closed_id)
    return closed


def delete_closed_stock(db: Session, closed: ClosedStock) -> None:
    db.delete(closed)
    db.flush()


def delete_closed_option(db: Session, closed: ClosedOption) -> None:
    db.delete(closed)
    db.flush()
