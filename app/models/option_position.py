from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin
from app.models.enums import OptionKind


class OptionPosition(Base, TimestampMixin):
    """Open option contract group."""

    __tablename__ = "option_positions"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[int] = mapped_column(Integer, index=True)

    ticker: Mapped[str] = mapped_column(String(20), index=True)
    option_kind: Mapped[str] = mapped_column(String(10), index=True)  # Call, Put, CSP, CC
    strike: Mapped[Decimal] = mapped_column(Numeric(28, 10))
    # Premium per share equivalent; price mirrors it at open time
    premium: Mapped[Decimal] = mapped_column(Numeric(28, 10))
    price: Mapped[Decimal] = mapped_column(Numeric(28, 10))
    expiration_date: Mapped[date] = mapped_column(Date, index=True)

    # Total reserved capital across all contracts in the group
    collateral: Mapped[Decimal] = mapped_column(Numeric(28, 10), default=Decimal("0"))
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 8), default=Decimal("1"))
    purchase_date: Mapped[date] = mapped_column(Date, index=True)

    @property
    def is_short(self) -> bool:
        return OptionKind(self.option_kind).is_short

    @property
    def contract_display(self) -> str:
        """Format contract for display."""
        exp_str = self.expiration_date.strftime("%m/%d/%y")
        return f"{self.ticker} ${self.strike:.2f} {exp_str} {self.option_kind}"
