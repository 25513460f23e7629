"""Replaying brokerage trades against the ledger.

Trades are applied in file order (not sorted by date):
- Buy: merged into the ticker's lot
- Sell: sold out of the lot, clamped to what it holds; no lot means the
  row is skipped
- BTO/STO: opens a new option position
- STC/BTC: plain-closes the oldest matching open position (purchase_date,
  then id), clamped to that position's quantity

Short opens are classified by the broker's contract type: STO Put is a
cash-secured put and STO Call a covered call, so BTC rows match CSP/CC
positions and STC rows match long Call/Put positions.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.exceptions import LedgerError, StorageError
from app.models import OptionKind, TradeCode
from app.services import close_service, ledger_store, lot_service, option_service
from app.services.close_service import CloseOutcome
from app.services.imports import Trade, parse_brokerage_csv
from app.services.locking import LockKey, ledger_transaction, ticker_keys

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Counts reported back after an import."""

    stock_count: int = 0  # stock trades applied
    option_count: int = 0  # option opens plus matched closes
    skipped_rows: int = 0  # malformed rows and trades the ledger rejected
    unmatched_closes: int = 0  # STC/BTC rows with no open position
    clamped_closes: int = 0  # sells/closes cut down to what was open

    @property
    def applied_count(self) -> int:
        return self.stock_count + self.option_count


def classify_option_kind(code: TradeCode, option_type: str) -> OptionKind:
    """Map a trade code and broker contract type to a position kind."""
    is_call = option_type.lower() == "call"
    if code in (TradeCode.STO, TradeCode.BTC):
        return OptionKind.CC if is_call else OptionKind.CSP
    return OptionKind.CALL if is_call else OptionKind.PUT


def _apply_stock_trade(db: Session, owner_id: int, trade: Trade, result: ImportResult) -> None:
    if trade.trade_code == TradeCode.BUY:
        lot_service.apply_buy(
            db, owner_id, trade.ticker, trade.price, trade.quantity, trade.trade_date
        )
    else:
        sale = lot_service.apply_sell(
            db, owner_id, trade.ticker, trade.price, trade.quantity, trade.trade_date
        )
        if sale.clamped:
            result.clamped_closes += 1
    result.stock_count += 1


def _apply_option_open(
    db: Session, owner_id: int, trade: Trade, result: ImportResult
) -> None:
    option_service.apply_open(
        db,
        owner_id,
        trade.ticker,
        classify_option_kind(trade.trade_code, trade.option_type),
        strike=trade.strike,
        premium=trade.premium,
        expiration_date=trade.expiration_date,
        quantity=trade.quantity,
        purchase_date=trade.trade_date,
    )
    result.option_count += 1


def _apply_option_close(
    db: Session, owner_id: int, trade: Trade, result: ImportResult
) -> None:
    kind = classify_option_kind(trade.trade_code, trade.option_type)
    matches = ledger_store.get_open_option_positions(
        db, owner_id, trade.ticker, trade.strike, trade.expiration_date, kind.value
    )
    if not matches:
        logger.warning(
            "No open %s %s %s exp %s to match %s for owner %s",
            trade.ticker,
            kind.value,
            trade.strike,
            trade.expiration_date,
            trade.trade_code.value,
            owner_id,
        )
        result.unmatched_closes += 1
        return

    position = matches[0]
    quantity = min(trade.quantity, position.quantity)
    if quantity < trade.quantity:
        logger.warning(
            "Clamped %s close of %s from %s to %s contracts",
            trade.trade_code.value,
            position.contract_display,
            trade.quantity,
            quantity,
        )
        result.clamped_closes += 1

    selected = close_service.select_outcome(
        position,
        CloseOutcome.CLOSED,
        sell_price=trade.price,
        close_date=trade.trade_date,
    )
    close_service.apply_close_option(db, position, quantity, selected)
    result.option_count += 1


def _apply_trade(db: Session, owner_id: int, trade: Trade, result: ImportResult) -> None:
    if not trade.is_option:
        _apply_stock_trade(db, owner_id, trade, result)
    elif trade.trade_code.is_opening:
        _apply_option_open(db, owner_id, trade, result)
    else:
        _apply_option_close(db, owner_id, trade, result)


def _lock_keys(owner_id: int, trades: list[Trade]) -> list[LockKey]:
    keys: list[LockKey] = []
    for ticker in sorted({trade.ticker.upper() for trade in trades}):
        keys.extend(ticker_keys(owner_id, ticker))
    return keys


def reconcile(db: Session, owner_id: int, trades: list[Trade]) -> ImportResult:
    """
    Apply trades to the owner's ledger in the order given.

    Runs as one transaction holding the locks of every ticker touched.
    Trades the ledger rejects (sell with no lot, bad quantity) are skipped
    and counted; a storage failure rolls back the whole batch.
    """
    result = ImportResult()

    with ledger_transaction(db, _lock_keys(owner_id, trades)):
        for trade in trades:
            try:
                _apply_trade(db, owner_id, trade, result)
            except StorageError:
                raise
            except LedgerError as e:
                # Rejected before any write for this trade
                logger.warning(
                    "Skipped %s %s for owner %s: %s",
                    trade.trade_code.value,
                    trade.ticker,
                    owner_id,
                    e.message,
                )
                result.skipped_rows += 1

    logger.info(
        "Import for owner %s: %d stock, %d option, %d skipped, %d unmatched, %d clamped",
        owner_id,
        result.stock_count,
        result.option_count,
        result.skipped_rows,
        result.unmatched_closes,
        result.clamped_closes,
    )
    return result


def import_csv(db: Session, owner_id: int, content: str) -> ImportResult:
    """
    Parse a brokerage activity CSV and reconcile it.

    A file that can't be parsed raises ImportParseError before anything is
    written. Malformed rows are counted in skipped_rows.
    """
    parsed = parse_brokerage_csv(content)
    result = reconcile(db, owner_id, parsed.trades)
    result.skipped_rows += parsed.skipped_rows
    return result
