from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin


class ClosedOption(Base, TimestampMixin):
    """Realized slice of an option position (never blended)."""

    __tablename__ = "closed_options"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[int] = mapped_column(Integer, index=True)

    ticker: Mapped[str] = mapped_column(String(20), index=True)
    option_kind: Mapped[str] = mapped_column(String(10), index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(28, 10))
    premium: Mapped[Decimal] = mapped_column(Numeric(28, 10))
    strike: Mapped[Decimal] = mapped_column(Numeric(28, 10))
    expiration_date: Mapped[date] = mapped_column(Date)

    # Quantity and collateral of the closed slice only
    collateral: Mapped[Decimal] = mapped_column(Numeric(28, 10))
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 8))

    purchase_date: Mapped[date] = mapped_column(Date)
    close_date: Mapped[date] = mapped_column(Date, index=True)
    sell_price: Mapped[Decimal] = mapped_column(Numeric(28, 10))
    profit_loss: Mapped[Decimal] = mapped_column(Numeric(18, 4))
