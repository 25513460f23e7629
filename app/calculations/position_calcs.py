"""Pure calculation functions for open position state."""

from decimal import Decimal

from app.models.enums import OptionKind

SHARES_PER_CONTRACT = Decimal("100")


def weighted_average(
    existing_quantity: Decimal,
    existing_price: Decimal,
    added_quantity: Decimal,
    added_price: Decimal,
) -> Decimal:
    """
    Blend two quantity/price pairs into one average price.

    Returns the added price when the combined quantity is zero.
    """
    total_quantity = existing_quantity + added_quantity
    if total_quantity == 0:
        return added_price
    total_cost = existing_quantity * existing_price + added_quantity * added_price
    return total_cost / total_quantity


def option_collateral(
    kind: OptionKind,
    strike: Decimal,
    quantity: Decimal,
    stock_quantity: Decimal | None = None,
    stock_cost_basis: Decimal | None = None,
) -> Decimal:
    """
    Capital reserved by an option position.

    - Call/Put: nothing reserved
    - CSP: strike * 100 * contracts
    - CC: covering lot cost basis * 100 * contracts, but only when the lot
      holds enough shares to cover every contract; otherwise 0
    """
    if kind == OptionKind.CSP:
        return strike * SHARES_PER_CONTRACT * quantity

    if kind == OptionKind.CC:
        required = SHARES_PER_CONTRACT * quantity
        if (
            stock_quantity is not None
            and stock_cost_basis is not None
            and stock_quantity >= required
        ):
            return stock_cost_basis * SHARES_PER_CONTRACT * quantity

    return Decimal("0")


def split_collateral(
    collateral: Decimal, open_quantity: Decimal, close_quantity: Decimal
) -> tuple[Decimal, Decimal]:
    """
    Split collateral proportionally between a closed slice and the remainder.

    Returns (closed_collateral, remaining_collateral). The two always sum to
    the original collateral.
    """
    if open_quantity == 0:
        return Decimal("0"), collateral
    closed = collateral / open_quantity * close_quantity
    return closed, collateral - closed


def shares_for_contracts(contracts: Decimal) -> Decimal:
    """Number of underlying shares represented by option contracts."""
    return contracts * SHARES_PER_CONTRACT
