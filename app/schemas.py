"""Pydantic request/response schemas for the JSON API."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from app.models import OptionKind
from app.services.close_service import CloseOutcome

# --- Users and sessions ---


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str
    confirm_password: str


class UserResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    username: str


class SessionCreate(BaseModel):
    """Login credentials."""

    username: str = Field(..., min_length=1, max_length=50)
    password: str


class SessionResponse(BaseModel):
    model_config = {"from_attributes": True}

    owner_id: int
    expires_at: datetime


# --- Open positions ---


class StockBuy(BaseModel):
    """Request schema for buying shares into a lot."""

    ticker: str = Field(..., min_length=1, max_length=20)
    price: Decimal = Field(..., ge=0)
    quantity: Decimal = Field(..., gt=0)
    trade_date: date | None = None


class OptionOpen(BaseModel):
    """Request schema for opening an option position."""

    ticker: str = Field(..., min_length=1, max_length=20)
    option_kind: OptionKind
    strike: Decimal = Field(..., ge=0)
    premium: Decimal = Field(..., ge=0)
    expiration_date: date
    quantity: Decimal = Field(default=Decimal("1"), gt=0)
    purchase_date: date | None = None


class StockClose(BaseModel):
    sell_price: Decimal = Field(..., ge=0)
    quantity: Decimal | None = Field(default=None, description="Omit to close the whole lot")
    close_date: date | None = None


class OptionClose(BaseModel):
    outcome: CloseOutcome = CloseOutcome.CLOSED
    quantity: Decimal | None = Field(default=None, description="Omit to close every contract")
    sell_price: Decimal | None = Field(default=None, ge=0)
    share_price: Decimal | None = Field(default=None, ge=0)
    close_date: date | None = None


class StockPositionUpdate(BaseModel):
    ticker: str | None = None
    quantity: Decimal | None = None
    cost_basis: Decimal | None = None
    open_date: date | None = None


class OptionPositionUpdate(BaseModel):
    ticker: str | None = None
    option_kind: OptionKind | None = None
    strike: Decimal | None = None
    premium: Decimal | None = None
    expiration_date: date | None = None
    quantity: Decimal | None = None
    purchase_date: date | None = None


class StockPositionResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    ticker: str
    quantity: Decimal
    cost_basis: Decimal
    open_date: date
    total_cost: Decimal


class OptionPositionResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    ticker: str
    option_kind: OptionKind
    strike: Decimal
    premium: Decimal
    price: Decimal
    expiration_date: date
    collateral: Decimal
    quantity: Decimal
    purchase_date: date


class PositionListResponse(BaseModel):
    stocks: list[StockPositionResponse]
    options: list[OptionPositionResponse]
    count: int


# --- Closed history ---


class ClosedStockResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    ticker: str
    open_date: date
    close_date: date
    quantity: Decimal
    cost_basis: Decimal
    sell_price: Decimal
    profit_loss: Decimal
    ror: Decimal | None = None
    pl_percent: Decimal | None = None


class ClosedOptionResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    ticker: str
    option_kind: OptionKind
    price: Decimal
    premium: Decimal
    strike: Decimal
    expiration_date: date
    collateral: Decimal
    quantity: Decimal
    purchase_date: date
    close_date: date
    sell_price: Decimal
    profit_loss: Decimal
    ror: Decimal | None = None
    pl_percent: Decimal | None = None


class HistoryListResponse(BaseModel):
    stocks: list[ClosedStockResponse]
    options: list[ClosedOptionResponse]
    count: int


class ClosedStockUpdate(BaseModel):
    ticker: str | None = None
    open_date: date | None = None
    close_date: date | None = None
    quantity: Decimal | None = None
    cost_basis: Decimal | None = None
    sell_price: Decimal | None = None


class ClosedOptionUpdate(BaseModel):
    ticker: str | None = None
    option_kind: OptionKind | None = None
    strike: Decimal | None = None
    premium: Decimal | None = None
    collateral: Decimal | None = None
    sell_price: Decimal | None = None
    quantity: Decimal | None = None
    expiration_date: date | None = None
    purchase_date: date | None = None
    close_date: date | None = None


# --- Close results ---


class StockCloseResponse(BaseModel):
    model_config = {"from_attributes": True}

    closed: ClosedStockResponse
    remaining: StockPositionResponse | None
    requested_quantity: Decimal
    closed_quantity: Decimal
    profit_loss: Decimal
    clamped: bool


class OptionCloseResponse(BaseModel):
    model_config = {"from_attributes": True}

    closed: ClosedOptionResponse
    remaining: OptionPositionResponse | None
    outcome: CloseOutcome
    closed_quantity: Decimal
    profit_loss: Decimal
    stock_lot: StockPositionResponse | None = None
    stock_sale: StockCloseResponse | None = None
    stock_effect_skipped: bool = False


# --- Imports and stats ---


class ImportResponse(BaseModel):
    model_config = {"from_attributes": True}

    stock_count: int
    option_count: int
    skipped_rows: int
    unmatched_closes: int
    clamped_closes: int


class PortfolioStatsResponse(BaseModel):
    model_config = {"from_attributes": True}

    stock_count: int
    option_count: int
    total_positions: int
    closed_count: int
    total_pl: Decimal
    stock_pl: Decimal
    option_pl: Decimal
    total_gains: Decimal
    total_losses: Decimal
    winning_trades: int
    losing_trades: int
    win_rate: Decimal
    profit_factor: Decimal
