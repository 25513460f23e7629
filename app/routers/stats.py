from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_owner_id
from app.schemas import PortfolioStatsResponse
from app.services import metrics_service
from app.utils.query_params import parse_date_param

router = APIRouter()


@router.get("/", response_model=PortfolioStatsResponse)
def get_stats(
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
    start_date: str | None = Query(None),
    end_date: str | None = Query(None),
) -> PortfolioStatsResponse:
    """Portfolio statistics, optionally limited to a close-date range."""
    stats = metrics_service.get_portfolio_stats(
        db,
        owner_id,
        start_date=parse_date_param(start_date),
        end_date=parse_date_param(end_date),
    )
    return PortfolioStatsResponse.model_validate(stats)
