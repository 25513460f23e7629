from enum import Enum


class OptionKind(str, Enum):
    """Option position kinds. CSP and CC are short (premium received)."""

    CALL = "Call"
    PUT = "Put"
    CSP = "CSP"
    CC = "CC"

    @property
    def is_short(self) -> bool:
        return self in (OptionKind.CSP, OptionKind.CC)


class TradeCode(str, Enum):
    """Brokerage transaction codes the importer understands."""

    BUY = "Buy"
    SELL = "Sell"
    BTO = "BTO"
    STO = "STO"
    BTC = "BTC"
    STC = "STC"

    @property
    def is_option(self) -> bool:
        return self not in (TradeCode.BUY, TradeCode.SELL)

    @property
    def is_opening(self) -> bool:
        return self in (TradeCode.BUY, TradeCode.BTO, TradeCode.STO)
