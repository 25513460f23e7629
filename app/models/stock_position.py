from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin


class StockPosition(Base, TimestampMixin):
    """Open stock lot. One blended lot per (owner, ticker)."""

    __tablename__ = "stock_positions"
    __table_args__ = (
        UniqueConstraint("owner_id", "ticker", name="uq_stock_positions_owner_ticker"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[int] = mapped_column(Integer, index=True)

    ticker: Mapped[str] = mapped_column(String(20), index=True)
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 8))
    # Weighted-average price per share
    cost_basis: Mapped[Decimal] = mapped_column(Numeric(28, 10))
    open_date: Mapped[date] = mapped_column(Date, index=True)

    @property
    def total_cost(self) -> Decimal:
        return self.quantity * self.cost_basis
