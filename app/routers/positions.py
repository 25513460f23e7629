"""Router for open stock lots and option positions."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_owner_id
from app.schemas import (
    OptionClose,
    OptionCloseResponse,
    OptionOpen,
    OptionPositionResponse,
    OptionPositionUpdate,
    PositionListResponse,
    StockBuy,
    StockClose,
    StockCloseResponse,
    StockPositionResponse,
    StockPositionUpdate,
)
from app.services import close_service, lot_service, option_service, position_service
from app.services.filters import PositionFilter
from app.utils.query_params import parse_date_param, parse_search_param

router = APIRouter()


@router.get("/", response_model=PositionListResponse)
def list_positions(
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
    search: str | None = Query(None),
    option_kind: str | None = Query(None),
    start_date: str | None = Query(None),
    end_date: str | None = Query(None),
) -> PositionListResponse:
    """List open positions with filters."""
    filters = PositionFilter(
        search=parse_search_param(search),
        option_kind=option_kind or None,
        start_date=parse_date_param(start_date),
        end_date=parse_date_param(end_date),
    )
    listing = position_service.list_positions(db, owner_id, filters)
    return PositionListResponse(
        stocks=[StockPositionResponse.model_validate(s) for s in listing.stocks],
        options=[OptionPositionResponse.model_validate(o) for o in listing.options],
        count=listing.total_count,
    )


@router.post("/stocks", response_model=StockPositionResponse, status_code=201)
def buy_stock(
    payload: StockBuy,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
) -> StockPositionResponse:
    """Buy shares, merging into any open lot for the ticker."""
    lot = lot_service.merge_buy(
        db,
        owner_id,
        payload.ticker,
        payload.price,
        payload.quantity,
        payload.trade_date or date.today(),
    )
    return StockPositionResponse.model_validate(lot)


@router.post("/options", response_model=OptionPositionResponse, status_code=201)
def open_option(
    payload: OptionOpen,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
) -> OptionPositionResponse:
    """Open a new option position."""
    position = option_service.open_option(
        db,
        owner_id,
        payload.ticker,
        payload.option_kind,
        strike=payload.strike,
        premium=payload.premium,
        expiration_date=payload.expiration_date,
        quantity=payload.quantity,
        purchase_date=payload.purchase_date or date.today(),
    )
    return OptionPositionResponse.model_validate(position)


@router.post("/stocks/{position_id}/close", response_model=StockCloseResponse)
def close_stock(
    position_id: int,
    payload: StockClose,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
) -> StockCloseResponse:
    """Sell some or all shares of a lot."""
    result = close_service.close_stock(
        db,
        owner_id,
        position_id,
        payload.sell_price,
        quantity=payload.quantity,
        close_date=payload.close_date,
    )
    return StockCloseResponse.model_validate(result)


@router.post("/options/{position_id}/close", response_model=OptionCloseResponse)
def close_option(
    position_id: int,
    payload: OptionClose,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
) -> OptionCloseResponse:
    """Close contracts as closed, expired, assigned or called away."""
    result = close_service.close_option(
        db,
        owner_id,
        position_id,
        payload.quantity,
        payload.outcome,
        sell_price=payload.sell_price,
        share_price=payload.share_price,
        close_date=payload.close_date,
    )
    return OptionCloseResponse.model_validate(result)


@router.patch("/stocks/{position_id}", response_model=StockPositionResponse)
def update_stock(
    position_id: int,
    payload: StockPositionUpdate,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
) -> StockPositionResponse:
    lot = position_service.update_stock_position(
        db, owner_id, position_id, **payload.model_dump(exclude_unset=True)
    )
    return StockPositionResponse.model_validate(lot)


@router.patch("/options/{position_id}", response_model=OptionPositionResponse)
def update_option(
    position_id: int,
    payload: OptionPositionUpdate,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
) -> OptionPositionResponse:
    position = position_service.update_option_position(
        db, owner_id, position_id, **payload.model_dump(exclude_unset=True)
    )
    return OptionPositionResponse.model_validate(position)


@router.delete("/stocks/{position_id}", status_code=204)
def delete_stock(
    position_id: int,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
) -> None:
    position_service.delete_stock_position(db, owner_id, position_id)


@router.delete("/options/{position_id}", status_code=204)
def delete_option(
    position_id: int,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
) -> None:
    position_service.delete_option_position(db, owner_id, position_id)
