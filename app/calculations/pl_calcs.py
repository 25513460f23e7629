"""Pure calculation functions for realized P/L, ROR and portfolio stats."""

from decimal import Decimal
from typing import TYPE_CHECKING

from app.models.enums import OptionKind

if TYPE_CHECKING:
    from app.models import ClosedOption, ClosedStock


def stock_profit_loss(
    sell_price: Decimal, cost_basis: Decimal, quantity: Decimal
) -> Decimal:
    """Realized P/L for selling shares out of a lot."""
    return (sell_price - cost_basis) * quantity


def option_profit_loss(
    kind: OptionKind, premium: Decimal, sell_price: Decimal, quantity: Decimal
) -> Decimal:
    """
    Realized P/L for closing option contracts.

    Long (Call/Put): (sell_price - premium) * quantity
    Short (CSP/CC): (premium - sell_price) * quantity
    """
    if kind.is_short:
        return (premium - sell_price) * quantity
    return (sell_price - premium) * quantity


def closed_stock_ror(closed: "ClosedStock") -> Decimal | None:
    """Return on risk for a closed stock row (P/L over per-share cost basis)."""
    if not closed.cost_basis:
        return None
    return closed.profit_loss / closed.cost_basis


def closed_stock_pl_percent(closed: "ClosedStock") -> Decimal | None:
    """P/L as a percentage of the total cost of the closed shares."""
    total_cost = closed.cost_basis * closed.quantity
    if not total_cost:
        return None
    return closed.profit_loss / total_cost * 100


def closed_option_ror(closed: "ClosedOption") -> Decimal | None:
    """
    Return on risk for a closed option slice.

    Long options are measured against premium paid, short options against
    the collateral they tied up.
    """
    kind = OptionKind(closed.option_kind)
    denominator = closed.collateral if kind.is_short else closed.premium
    if not denominator:
        return None
    return closed.profit_loss / denominator


def closed_option_pl_percent(closed: "ClosedOption") -> Decimal | None:
    """P/L as a percentage of premium plus collateral."""
    denominator = closed.premium + closed.collateral
    if not denominator:
        return None
    return closed.profit_loss / denominator * 100


def pl_summary(profit_losses: list[Decimal]) -> dict:
    """
    Calculate P/L summary statistics from realized P/L values.

    Returns dict with: total_pl, total_gains, total_losses, winners, losers,
    win_rate, profit_factor, closed_count.

    Break-even rows count toward closed_count but are neither wins nor
    losses. win_rate is a 0-100 percentage over decided rows, and
    profit_factor is 0 when there are no losses.
    """
    total_gains = Decimal("0")
    total_losses = Decimal("0")
    winners = 0
    losers = 0

    for pl in profit_losses:
        if pl > 0:
            winners += 1
            total_gains += pl
        elif pl < 0:
            losers += 1
            total_losses += pl

    decided = winners + losers
    win_rate = (Decimal(winners) / Decimal(decided) * 100) if decided else Decimal("0")
    profit_factor = total_gains / abs(total_losses) if total_losses else Decimal("0")

    return {
        "total_pl": total_gains + total_losses,
        "total_gains": total_gains,
        "total_losses": total_losses,
        "winners": winners,
        "losers": losers,
        "win_rate": win_rate,
        "profit_factor": profit_factor,
        "closed_count": len(profit_losses),
    }
