"""Tests for position state calculations."""

from decimal import Decimal

from app.calculations import position_calcs
from app.models import OptionKind


class TestWeightedAverage:
    def test_blends_two_buys(self):
        """100 @ 150 plus 100 @ 170 averages to 160."""
        result = position_calcs.weighted_average(
            Decimal("100"), Decimal("150"), Decimal("100"), Decimal("170")
        )
        assert result == Decimal("160")

    def test_weights_by_quantity(self):
        """Larger lots pull the average toward their price."""
        result = position_calcs.weighted_average(
            Decimal("300"), Decimal("10"), Decimal("100"), Decimal("20")
        )
        assert result == Decimal("12.5")

    def test_sequence_matches_true_average(self):
        """Folding buys one at a time equals the overall weighted average."""
        buys = [("10", "100"), ("5", "130"), ("25", "90"), ("60", "110")]
        quantity = Decimal("0")
        average = Decimal("0")
        for qty, price in buys:
            average = position_calcs.weighted_average(
                quantity, average, Decimal(qty), Decimal(price)
            )
            quantity += Decimal(qty)

        total_cost = sum(Decimal(q) * Decimal(p) for q, p in buys)
        assert quantity == Decimal("100")
        assert abs(average - total_cost / quantity) < Decimal("0.0000001")

    def test_zero_total_returns_added_price(self):
        result = position_calcs.weighted_average(
            Decimal("0"), Decimal("0"), Decimal("0"), Decimal("42")
        )
        assert result == Decimal("42")


class TestOptionCollateral:
    def test_long_options_reserve_nothing(self):
        for kind in (OptionKind.CALL, OptionKind.PUT):
            assert position_calcs.option_collateral(kind, Decimal("50"), Decimal("2")) == 0

    def test_csp_reserves_strike_times_shares(self):
        """CSP strike 50, 2 contracts -> 50 * 100 * 2."""
        result = position_calcs.option_collateral(OptionKind.CSP, Decimal("50"), Decimal("2"))
        assert result == Decimal("10000")

    def test_cc_uses_stock_cost_basis(self):
        result = position_calcs.option_collateral(
            OptionKind.CC,
            Decimal("60"),
            Decimal("2"),
            stock_quantity=Decimal("200"),
            stock_cost_basis=Decimal("45"),
        )
        assert result == Decimal("9000")

    def test_cc_without_enough_shares_is_zero(self):
        result = position_calcs.option_collateral(
            OptionKind.CC,
            Decimal("60"),
            Decimal("2"),
            stock_quantity=Decimal("150"),
            stock_cost_basis=Decimal("45"),
        )
        assert result == Decimal("0")

    def test_cc_without_lot_is_zero(self):
        result = position_calcs.option_collateral(OptionKind.CC, Decimal("60"), Decimal("1"))
        assert result == Decimal("0")


class TestSplitCollateral:
    def test_half_close(self):
        closed, remaining = position_calcs.split_collateral(
            Decimal("10000"), Decimal("2"), Decimal("1")
        )
        assert closed == Decimal("5000")
        assert remaining == Decimal("5000")

    def test_conserves_total_for_uneven_split(self):
        """closed + remaining always equals the original collateral."""
        collateral = Decimal("1000")
        for close_qty in ("1", "2", "3", "5", "7"):
            closed, remaining = position_calcs.split_collateral(
                collateral, Decimal("7"), Decimal(close_qty)
            )
            assert closed + remaining == collateral

    def test_full_close_leaves_nothing(self):
        closed, remaining = position_calcs.split_collateral(
            Decimal("4500"), Decimal("3"), Decimal("3")
        )
        assert closed == Decimal("4500")
        assert remaining == Decimal("0")


def test_shares_for_contracts():
    assert position_calcs.shares_for_contracts(Decimal("3")) == Decimal("300")
