from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin


class ClosedStock(Base, TimestampMixin):
    """Realized stock trade.

    Partial closes of the same (owner, ticker, open_date) lot are blended
    into a single row.
    """

    __tablename__ = "closed_stocks"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[int] = mapped_column(Integer, index=True)

    ticker: Mapped[str] = mapped_column(String(20), index=True)
    open_date: Mapped[date] = mapped_column(Date)
    close_date: Mapped[date] = mapped_column(Date, index=True)
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 8))
    cost_basis: Mapped[Decimal] = mapped_column(Numeric(28, 10))
    sell_price: Mapped[Decimal] = mapped_column(Numeric(28, 10))
    profit_loss: Mapped[Decimal] = mapped_column(Numeric(18, 4))
