"""Tests for listing, editing and deleting open positions."""

from datetime import date
from decimal import Decimal

import pytest

from app.exceptions import InvalidQuantityError, NotFoundError, ValidationError
from app.models import ClosedStock, OptionPosition, StockPosition
from app.services import lot_service, option_service, position_service
from app.services.filters import PositionFilter

D = Decimal


@pytest.fixture
def portfolio(db_session, owner_id):
    """Two stock lots and two option positions."""
    aapl = lot_service.merge_buy(db_session, owner_id, "AAPL", D("150"), D("100"), date(2024, 1, 2))
    msft = lot_service.merge_buy(db_session, owner_id, "MSFT", D("300"), D("10"), date(2024, 3, 1))
    csp = option_service.open_option(
        db_session, owner_id, "XYZ", "CSP",
        strike=D("50"), premium=D("3"), expiration_date=date(2024, 6, 21),
        quantity=D("2"), purchase_date=date(2024, 2, 1),
    )
    call = option_service.open_option(
        db_session, owner_id, "AAPL", "Call",
        strike=D("200"), premium=D("1.5"), expiration_date=date(2024, 9, 20),
        quantity=D("1"), purchase_date=date(2024, 4, 1),
    )
    return {"aapl": aapl, "msft": msft, "csp": csp, "call": call}


class TestListPositions:
    def test_lists_everything(self, db_session, owner_id, portfolio):
        listing = position_service.list_positions(db_session, owner_id)

        assert {s.ticker for s in listing.stocks} == {"AAPL", "MSFT"}
        assert len(listing.options) == 2
        assert listing.total_count == 4

    def test_search_is_case_insensitive_substring(self, db_session, owner_id, portfolio):
        listing = position_service.list_positions(
            db_session, owner_id, PositionFilter(search="aa")
        )

        assert [s.ticker for s in listing.stocks] == ["AAPL"]
        assert [o.ticker for o in listing.options] == ["AAPL"]

    def test_kind_filter_hides_stocks(self, db_session, owner_id, portfolio):
        listing = position_service.list_positions(
            db_session, owner_id, PositionFilter(option_kind="CSP")
        )

        assert listing.stocks == []
        assert [o.option_kind for o in listing.options] == ["CSP"]

    def test_date_range(self, db_session, owner_id, portfolio):
        listing = position_service.list_positions(
            db_session,
            owner_id,
            PositionFilter(start_date=date(2024, 2, 1), end_date=date(2024, 3, 31)),
        )

        assert [s.ticker for s in listing.stocks] == ["MSFT"]
        assert [o.option_kind for o in listing.options] == ["CSP"]

    def test_unknown_kind_filter_rejected(self, db_session, owner_id):
        with pytest.raises(ValidationError):
            position_service.list_positions(
                db_session, owner_id, PositionFilter(option_kind="Strangle")
            )

    def test_other_owner_sees_nothing(self, db_session, owner_id, portfolio):
        listing = position_service.list_positions(db_session, owner_id + 1)
        assert listing.total_count == 0


class TestUpdateStockPosition:
    def test_edit_fields(self, db_session, owner_id, portfolio):
        lot = position_service.update_stock_position(
            db_session,
            owner_id,
            portfolio["aapl"].id,
            quantity=D("50"),
            cost_basis=D("140"),
            open_date=date(2024, 1, 5),
        )

        assert lot.quantity == D("50")
        assert lot.cost_basis == D("140")
        assert lot.open_date == date(2024, 1, 5)
        assert db_session.query(ClosedStock).count() == 0

    def test_rename_to_held_ticker_rejected(self, db_session, owner_id, portfolio):
        with pytest.raises(ValidationError):
            position_service.update_stock_position(
                db_session, owner_id, portfolio["aapl"].id, ticker="msft"
            )

    def test_rename(self, db_session, owner_id, portfolio):
        lot = position_service.update_stock_position(
            db_session, owner_id, portfolio["aapl"].id, ticker="goog"
        )
        assert lot.ticker == "GOOG"

    def test_zero_quantity_rejected(self, db_session, owner_id, portfolio):
        with pytest.raises(InvalidQuantityError):
            position_service.update_stock_position(
                db_session, owner_id, portfolio["aapl"].id, quantity=D("0")
            )


class TestUpdateOptionPosition:
    def test_quantity_edit_rederives_collateral(self, db_session, owner_id, portfolio):
        position = position_service.update_option_position(
            db_session, owner_id, portfolio["csp"].id, quantity=D("3")
        )

        assert position.collateral == D("15000")

    def test_kind_change_rederives_collateral(self, db_session, owner_id, portfolio):
        position = position_service.update_option_position(
            db_session, owner_id, portfolio["csp"].id, option_kind="Put"
        )

        assert position.option_kind == "Put"
        assert position.collateral == D("0")

    def test_premium_edit_updates_price(self, db_session, owner_id, portfolio):
        position = position_service.update_option_position(
            db_session, owner_id, portfolio["call"].id, premium=D("2")
        )

        assert position.premium == D("2")
        assert position.price == D("2")

    def test_cc_edit_uses_owned_shares(self, db_session, owner_id, portfolio):
        position = position_service.update_option_position(
            db_session, owner_id, portfolio["call"].id, option_kind="CC"
        )

        assert position.collateral == D("15000")


class TestDeletePositions:
    def test_delete_stock(self, db_session, owner_id, portfolio):
        position_service.delete_stock_position(db_session, owner_id, portfolio["msft"].id)

        assert db_session.query(StockPosition).count() == 1
        assert db_session.query(ClosedStock).count() == 0

    def test_delete_option(self, db_session, owner_id, portfolio):
        position_service.delete_option_position(db_session, owner_id, portfolio["csp"].id)

        assert db_session.query(OptionPosition).count() == 1

    def test_delete_other_owners_position(self, db_session, owner_id, portfolio):
        with pytest.raises(NotFoundError):
            position_service.delete_stock_position(
                db_session, owner_id + 1, portfolio["msft"].id
            )
