"""Portfolio statistics derived from closed trade history."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from app.calculations import pl_summary
from app.services import ledger_store
from app.services.filters import HistoryFilter


@dataclass
class PortfolioStats:
    """Summary statistics for the owner's portfolio."""

    stock_count: int  # open stock lots
    option_count: int  # open option positions
    total_positions: int
    closed_count: int
    total_pl: Decimal
    stock_pl: Decimal
    option_pl: Decimal
    total_gains: Decimal
    total_losses: Decimal
    winning_trades: int
    losing_trades: int
    win_rate: Decimal  # 0 to 100
    profit_factor: Decimal


def get_portfolio_stats(
    db: Session,
    owner_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
) -> PortfolioStats:
    """
    Compute portfolio statistics for an owner.

    Args:
        db: Database session
        owner_id: Owner whose ledger is summarized
        start_date: Include closed rows closed on/after this date
        end_date: Include closed rows closed on/before this date

    Returns:
        PortfolioStats. Open position counts ignore the date range.
    """
    history_filter = HistoryFilter(start_date=start_date, end_date=end_date)
    stock_pls = [
        row.profit_loss
        for row in ledger_store.list_closed_stocks(db, owner_id, history_filter)
    ]
    option_pls = [
        row.profit_loss
        for row in ledger_store.list_closed_options(db, owner_id, history_filter)
    ]
    summary = pl_summary(stock_pls + option_pls)

    stock_count = ledger_store.count_stock_positions(db, owner_id)
    option_count = ledger_store.count_option_positions(db, owner_id)

    return PortfolioStats(
        stock_count=stock_count,
        option_count=option_count,
        total_positions=stock_count + option_count,
        closed_count=summary["closed_count"],
        total_pl=summary["total_pl"],
        stock_pl=sum(stock_pls, Decimal("0")),
        option_pl=sum(option_pls, Decimal("0")),
        total_gains=summary["total_gains"],
        total_losses=summary["total_losses"],
        winning_trades=summary["winners"],
        losing_trades=summary["losers"],
        win_rate=summary["win_rate"],
        profit_factor=summary["profit_factor"],
    )
