"""Calculation modules for position state and P/L analysis."""

from app.calculations.pl_calcs import (
    closed_option_pl_percent,
    closed_option_ror,
    closed_stock_pl_percent,
    closed_stock_ror,
    option_profit_loss,
    pl_summary,
    stock_profit_loss,
)
from app.calculations.position_calcs import (
    SHARES_PER_CONTRACT,
    option_collateral,
    shares_for_contracts,
    split_collateral,
    weighted_average,
)

__all__ = [
    # Position calculations
    "SHARES_PER_CONTRACT",
    "weighted_average",
    "option_collateral",
    "split_collateral",
    "shares_for_contracts",
    # P/L calculations
    "stock_profit_loss",
    "option_profit_loss",
    "closed_stock_ror",
    "closed_stock_pl_percent",
    "closed_option_ror",
    "closed_option_pl_percent",
    "pl_summary",
]
