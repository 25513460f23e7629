from app.models.base import Base
from app.models.closed_option import ClosedOption
from app.models.closed_stock import ClosedStock
from app.models.enums import OptionKind, TradeCode
from app.models.option_position import OptionPosition
from app.models.stock_position import StockPosition
from app.models.user import User

__all__ = [
    "Base",
    "User",
    "StockPosition",
    "OptionPosition",
    "ClosedStock",
    "ClosedOption",
    "OptionKind",
    "TradeCode",
]
