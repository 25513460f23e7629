"""Tests for portfolio statistics."""

from datetime import date
from decimal import Decimal

from app.models import ClosedOption, ClosedStock
from app.services import lot_service, metrics_service, option_service

D = Decimal


def add_closed_stock(db_session, owner_id, profit_loss, close_date=date(2024, 3, 1)):
    db_session.add(
        ClosedStock(
            owner_id=owner_id,
            ticker="AAPL",
            open_date=date(2024, 1, 1),
            close_date=close_date,
            quantity=D("1"),
            cost_basis=D("100"),
            sell_price=D("100") + D(profit_loss),
            profit_loss=D(profit_loss),
        )
    )
    db_session.commit()


def add_closed_option(db_session, owner_id, profit_loss, close_date=date(2024, 3, 1)):
    db_session.add(
        ClosedOption(
            owner_id=owner_id,
            ticker="XYZ",
            option_kind="CSP",
            price=D("3"),
            premium=D("3"),
            strike=D("50"),
            expiration_date=date(2024, 6, 21),
            collateral=D("5000"),
            quantity=D("1"),
            purchase_date=date(2024, 1, 1),
            close_date=close_date,
            sell_price=D("0"),
            profit_loss=D(profit_loss),
        )
    )
    db_session.commit()


class TestPortfolioStats:
    def test_win_rate_and_profit_factor(self, db_session, owner_id):
        """[+100, -50, +200, -200] -> 50% win rate, profit factor 1.2."""
        add_closed_stock(db_session, owner_id, "100")
        add_closed_stock(db_session, owner_id, "-50")
        add_closed_option(db_session, owner_id, "200")
        add_closed_option(db_session, owner_id, "-200")

        stats = metrics_service.get_portfolio_stats(db_session, owner_id)

        assert stats.win_rate == D("50")
        assert stats.profit_factor == D("1.2")
        assert stats.total_pl == D("50")
        assert stats.stock_pl == D("50")
        assert stats.option_pl == D("0")
        assert stats.winning_trades == 2
        assert stats.losing_trades == 2
        assert stats.closed_count == 4

    def test_counts_open_positions(self, db_session, owner_id):
        lot_service.merge_buy(db_session, owner_id, "AAPL", D("100"), D("5"), date(2024, 1, 2))
        lot_service.merge_buy(db_session, owner_id, "MSFT", D("300"), D("1"), date(2024, 1, 2))
        option_service.open_option(
            db_session,
            owner_id,
            "XYZ",
            "CSP",
            strike=D("50"),
            premium=D("3"),
            expiration_date=date(2024, 6, 21),
            quantity=D("1"),
            purchase_date=date(2024, 5, 1),
        )

        stats = metrics_service.get_portfolio_stats(db_session, owner_id)

        assert stats.stock_count == 2
        assert stats.option_count == 1
        assert stats.total_positions == 3
        assert stats.closed_count == 0

    def test_empty_ledger(self, db_session, owner_id):
        stats = metrics_service.get_portfolio_stats(db_session, owner_id)

        assert stats.total_positions == 0
        assert stats.win_rate == D("0")
        assert stats.profit_factor == D("0")
        assert stats.total_pl == D("0")

    def test_no_losses_profit_factor_zero(self, db_session, owner_id):
        add_closed_stock(db_session, owner_id, "100")

        stats = metrics_service.get_portfolio_stats(db_session, owner_id)

        assert stats.profit_factor == D("0")
        assert stats.win_rate == D("100")

    def test_close_date_range(self, db_session, owner_id):
        add_closed_stock(db_session, owner_id, "100", close_date=date(2024, 1, 15))
        add_closed_stock(db_session, owner_id, "-40", close_date=date(2024, 2, 15))
        add_closed_option(db_session, owner_id, "25", close_date=date(2024, 3, 15))

        stats = metrics_service.get_portfolio_stats(
            db_session, owner_id, start_date=date(2024, 2, 1), end_date=date(2024, 3, 31)
        )

        assert stats.closed_count == 2
        assert stats.total_pl == D("-15")

    def test_other_owners_excluded(self, db_session, owner_id):
        add_closed_stock(db_session, owner_id + 1, "500")

        stats = metrics_service.get_portfolio_stats(db_session, owner_id)

        assert stats.closed_count == 0
