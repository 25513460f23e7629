"""Router for closed trade history."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_owner_id
from app.models import ClosedOption, ClosedStock
from app.schemas import (
    ClosedOptionResponse,
    ClosedOptionUpdate,
    ClosedStockResponse,
    ClosedStockUpdate,
    HistoryListResponse,
)
from app.services import history_service
from app.services.filters import HistoryFilter
from app.utils.query_params import parse_date_param, parse_search_param

router = APIRouter()


def closed_stock_out(closed: ClosedStock) -> ClosedStockResponse:
    summary = history_service.get_closed_stock_summary(closed)
    return ClosedStockResponse.model_validate(closed).model_copy(
        update={"ror": summary["ror"], "pl_percent": summary["pl_percent"]}
    )


def closed_option_out(closed: ClosedOption) -> ClosedOptionResponse:
    summary = history_service.get_closed_option_summary(closed)
    return ClosedOptionResponse.model_validate(closed).model_copy(
        update={"ror": summary["ror"], "pl_percent": summary["pl_percent"]}
    )


@router.get("/", response_model=HistoryListResponse)
def list_history(
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
    search: str | None = Query(None),
    option_kind: str | None = Query(None),
    start_date: str | None = Query(None),
    end_date: str | None = Query(None),
) -> HistoryListResponse:
    """List closed rows, most recent close first."""
    filters = HistoryFilter(
        search=parse_search_param(search),
        option_kind=option_kind or None,
        start_date=parse_date_param(start_date),
        end_date=parse_date_param(end_date),
    )
    listing = history_service.list_history(db, owner_id, filters)
    return HistoryListResponse(
        stocks=[closed_stock_out(s) for s in listing.stocks],
        options=[closed_option_out(o) for o in listing.options],
        count=listing.total_count,
    )


@router.patch("/stocks/{closed_id}", response_model=ClosedStockResponse)
def update_closed_stock(
    closed_id: int,
    payload: ClosedStockUpdate,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
) -> ClosedStockResponse:
    closed = history_service.update_closed_stock(
        db, owner_id, closed_id, **payload.model_dump(exclude_unset=True)
    )
    return closed_stock_out(closed)


@router.patch("/options/{closed_id}", response_model=ClosedOptionResponse)
def update_closed_option(
    closed_id: int,
    payload: ClosedOptionUpdate,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
) -> ClosedOptionResponse:
    closed = history_service.update_closed_option(
        db, owner_id, closed_id, **payload.model_dump(exclude_unset=True)
    )
    return closed_option_out(closed)


@router.delete("/stocks/{closed_id}", status_code=204)
def delete_closed_stock(
    closed_id: int,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
) -> None:
    history_service.delete_closed_stock(db, owner_id, closed_id)


@router.delete("/options/{closed_id}", status_code=204)
def delete_closed_option(
    closed_id: int,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
) -> None:
    history_service.delete_closed_option(db, owner_id, closed_id)
