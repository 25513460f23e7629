"""Tests for closed trade history."""

from datetime import date
from decimal import Decimal

import pytest

from app.exceptions import NotFoundError, ValidationError
from app.models import ClosedOption, ClosedStock
from app.services import close_service, history_service, lot_service, option_service
from app.services.filters import HistoryFilter

D = Decimal


@pytest.fixture
def history(db_session, owner_id):
    """One closed stock row and one closed CSP slice."""
    lot_service.merge_buy(db_session, owner_id, "AAPL", D("100"), D("10"), date(2024, 1, 2))
    sale = lot_service.merge_sell(db_session, owner_id, "AAPL", D("120"), D("10"), date(2024, 2, 1))
    position = option_service.open_option(
        db_session, owner_id, "XYZ", "CSP",
        strike=D("50"), premium=D("3"), expiration_date=date(2024, 6, 21),
        quantity=D("2"), purchase_date=date(2024, 3, 1),
    )
    option_close = close_service.close_option(
        db_session, owner_id, position.id, D("2"), "closed",
        sell_price=D("1"), close_date=date(2024, 4, 1),
    )
    return {"stock": sale.closed, "option": option_close.closed}


class TestListHistory:
    def test_lists_both_kinds(self, db_session, owner_id, history):
        listing = history_service.list_history(db_session, owner_id)

        assert len(listing.stocks) == 1
        assert len(listing.options) == 1
        assert listing.total_count == 2

    def test_kind_filter_hides_stocks(self, db_session, owner_id, history):
        listing = history_service.list_history(
            db_session, owner_id, HistoryFilter(option_kind="CSP")
        )
        assert listing.stocks == []
        assert len(listing.options) == 1

    def test_close_date_range(self, db_session, owner_id, history):
        listing = history_service.list_history(
            db_session, owner_id, HistoryFilter(start_date=date(2024, 3, 1))
        )
        assert listing.stocks == []
        assert len(listing.options) == 1

    def test_search(self, db_session, owner_id, history):
        listing = history_service.list_history(
            db_session, owner_id, HistoryFilter(search="aap")
        )
        assert len(listing.stocks) == 1
        assert listing.options == []


class TestSummaries:
    def test_closed_stock_metrics(self, history):
        summary = history_service.get_closed_stock_summary(history["stock"])

        assert summary["ror"] == D("2")
        assert summary["pl_percent"] == D("20")

    def test_closed_option_metrics(self, history):
        summary = history_service.get_closed_option_summary(history["option"])

        # P/L 4 against 10000 collateral
        assert summary["ror"] == D("0.0004")


class TestUpdateClosedStock:
    def test_recomputes_profit_loss(self, db_session, owner_id, history):
        closed = history_service.update_closed_stock(
            db_session, owner_id, history["stock"].id, sell_price=D("90"), quantity=D("5")
        )

        assert closed.profit_loss == D("-50")
        assert closed.quantity == D("5")

    def test_negative_price_rejected(self, db_session, owner_id, history):
        with pytest.raises(ValidationError):
            history_service.update_closed_stock(
                db_session, owner_id, history["stock"].id, sell_price=D("-1")
            )


class TestUpdateClosedOption:
    def test_recomputes_with_quantity(self, db_session, owner_id, history):
        closed = history_service.update_closed_option(
            db_session, owner_id, history["option"].id, sell_price=D("0.5"), quantity=D("3")
        )

        assert closed.profit_loss == D("7.5")

    def test_kind_change_flips_rule(self, db_session, owner_id, history):
        closed = history_service.update_closed_option(
            db_session, owner_id, history["option"].id, option_kind="Put"
        )

        # Long rule: (1 - 3) * 2
        assert closed.profit_loss == D("-4")


class TestDeleteHistory:
    def test_delete_closed_stock(self, db_session, owner_id, history):
        history_service.delete_closed_stock(db_session, owner_id, history["stock"].id)
        assert db_session.query(ClosedStock).count() == 0

    def test_delete_closed_option(self, db_session, owner_id, history):
        history_service.delete_closed_option(db_session, owner_id, history["option"].id)
        assert db_session.query(ClosedOption).count() == 0

    def test_delete_unknown(self, db_session, owner_id):
        with pytest.raises(NotFoundError):
            history_service.delete_closed_option(db_session, owner_id, 12345)
