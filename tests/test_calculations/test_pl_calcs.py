"""Tests for P/L calculation functions."""

from decimal import Decimal
from unittest.mock import MagicMock

from app.calculations import pl_calcs
from app.models import OptionKind


def make_closed_stock(cost_basis: str, quantity: str, profit_loss: str) -> MagicMock:
    closed = MagicMock()
    closed.cost_basis = Decimal(cost_basis)
    closed.quantity = Decimal(quantity)
    closed.profit_loss = Decimal(profit_loss)
    return closed


def make_closed_option(
    kind: str, premium: str, collateral: str, profit_loss: str
) -> MagicMock:
    closed = MagicMock()
    closed.option_kind = kind
    closed.premium = Decimal(premium)
    closed.collateral = Decimal(collateral)
    closed.profit_loss = Decimal(profit_loss)
    return closed


class TestStockProfitLoss:
    def test_gain(self):
        """Sell 150 @ 180 against a 160 basis realizes 3000."""
        result = pl_calcs.stock_profit_loss(Decimal("180"), Decimal("160"), Decimal("150"))
        assert result == Decimal("3000")

    def test_loss(self):
        result = pl_calcs.stock_profit_loss(Decimal("90"), Decimal("100"), Decimal("10"))
        assert result == Decimal("-100")


class TestOptionProfitLoss:
    def test_long_call_gain(self):
        result = pl_calcs.option_profit_loss(
            OptionKind.CALL, Decimal("2.50"), Decimal("4.00"), Decimal("2")
        )
        assert result == Decimal("3.00")

    def test_long_put_loss(self):
        result = pl_calcs.option_profit_loss(
            OptionKind.PUT, Decimal("3"), Decimal("1"), Decimal("1")
        )
        assert result == Decimal("-2")

    def test_short_keeps_premium_when_expired(self):
        """Short positions closed at 0 realize the full premium."""
        result = pl_calcs.option_profit_loss(
            OptionKind.CSP, Decimal("3"), Decimal("0"), Decimal("2")
        )
        assert result == Decimal("6")

    def test_short_buyback_loss(self):
        result = pl_calcs.option_profit_loss(
            OptionKind.CC, Decimal("1.50"), Decimal("2.25"), Decimal("4")
        )
        assert result == Decimal("-3.00")


class TestReturnMetrics:
    def test_closed_stock_ror(self):
        closed = make_closed_stock("160", "150", "3000")
        assert pl_calcs.closed_stock_ror(closed) == Decimal("18.75")

    def test_closed_stock_pl_percent(self):
        closed = make_closed_stock("100", "10", "100")
        assert pl_calcs.closed_stock_pl_percent(closed) == Decimal("10")

    def test_closed_stock_zero_basis_is_none(self):
        closed = make_closed_stock("0", "10", "100")
        assert pl_calcs.closed_stock_ror(closed) is None
        assert pl_calcs.closed_stock_pl_percent(closed) is None

    def test_long_option_ror_uses_premium(self):
        closed = make_closed_option("Call", "2", "0", "3")
        assert pl_calcs.closed_option_ror(closed) == Decimal("1.5")

    def test_short_option_ror_uses_collateral(self):
        closed = make_closed_option("CSP", "3", "5000", "3")
        assert pl_calcs.closed_option_ror(closed) == Decimal("0.0006")

    def test_short_option_without_collateral_is_none(self):
        """A covered call opened without shares has no collateral to measure."""
        closed = make_closed_option("CC", "1", "0", "1")
        assert pl_calcs.closed_option_ror(closed) is None

    def test_option_pl_percent(self):
        closed = make_closed_option("CSP", "3", "97", "5")
        assert pl_calcs.closed_option_pl_percent(closed) == Decimal("5")


class TestPlSummary:
    def test_win_rate_and_profit_factor(self):
        """[+100, -50, +200, -200] -> 50% win rate, profit factor 1.2."""
        result = pl_calcs.pl_summary(
            [Decimal("100"), Decimal("-50"), Decimal("200"), Decimal("-200")]
        )
        assert result["win_rate"] == Decimal("50")
        assert result["profit_factor"] == Decimal("1.2")
        assert result["total_pl"] == Decimal("50")
        assert result["total_gains"] == Decimal("300")
        assert result["total_losses"] == Decimal("-250")
        assert result["winners"] == 2
        assert result["losers"] == 2
        assert result["closed_count"] == 4

    def test_no_losses_profit_factor_zero(self):
        result = pl_calcs.pl_summary([Decimal("10"), Decimal("20")])
        assert result["profit_factor"] == Decimal("0")
        assert result["win_rate"] == Decimal("100")

    def test_empty(self):
        result = pl_calcs.pl_summary([])
        assert result["win_rate"] == Decimal("0")
        assert result["profit_factor"] == Decimal("0")
        assert result["total_pl"] == Decimal("0")
        assert result["closed_count"] == 0

    def test_break_even_not_counted_as_win_or_loss(self):
        result = pl_calcs.pl_summary([Decimal("0"), Decimal("10"), Decimal("-10")])
        assert result["winners"] == 1
        assert result["losers"] == 1
        assert result["win_rate"] == Decimal("50")
        assert result["closed_count"] == 3
