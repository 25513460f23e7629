"""Keyed locks and the transaction boundary for ledger mutations.

Every mutating ledger operation is a read-modify-write (read the lot,
compute the blended state, write it back). Two requests touching the same
owner/ticker must not interleave, so each operation holds the locks for the
keys it touches for the whole transaction and commits once at the end.
"""

import logging
import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.exceptions import ConflictError, StorageError

logger = logging.getLogger(__name__)

LockKey = tuple[str, int, str]


def stock_key(owner_id: int, ticker: str) -> LockKey:
    """Lock key guarding an owner's stock lot for a ticker."""
    return ("stock", owner_id, ticker.upper())


def option_key(owner_id: int, ticker: str) -> LockKey:
    """Lock key guarding all of an owner's option positions on a ticker."""
    return ("option", owner_id, ticker.upper())


def ticker_keys(owner_id: int, ticker: str) -> list[LockKey]:
    """Both stock and option keys for a ticker (option closes touch both)."""
    return [stock_key(owner_id, ticker), option_key(owner_id, ticker)]


class KeyedLockRegistry:
    """Hands out one re-entrant lock per key."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.RLock] = {}

    def _lock_for(self, key: Hashable) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, keys: list[LockKey], timeout: float) -> Iterator[None]:
        """
        Acquire every key (sorted, to avoid lock-order deadlocks).

        Raises StorageError if any key cannot be acquired within timeout.
        """
        acquired: list[threading.RLock] = []
        try:
            for key in sorted(set(keys)):
                lock = self._lock_for(key)
                if not lock.acquire(timeout=timeout):
                    raise StorageError(f"Timed out waiting for ledger lock {key}")
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()


ledger_locks = KeyedLockRegistry()


@contextmanager
def ledger_transaction(db: Session, keys: list[LockKey]) -> Iterator[Session]:
    """
    Run one ledger mutation atomically.

    Holds the locks for keys, commits on success and rolls back on any
    error. Database failures are re-raised as StorageError.
    """
    timeout = get_settings().lock_timeout_seconds
    with ledger_locks.hold(keys, timeout):
        try:
            yield db
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Ledger transaction failed for %s", keys)
            raise StorageError("Ledger storage failure", original_error=e) from e
        except Exception:
            db.rollback()
            raise


def ensure_ticker_unchanged(record, locked_ticker: str) -> None:
    """
    Check a record re-read under its locks still has the ticker the locks
    were chosen for. A rename in between means the wrong keys are held.
    """
    if record.ticker != locked_ticker.upper():
        raise ConflictError(
            f"{type(record).__name__} {record.id} moved from {locked_ticker} to "
            f"{record.ticker} while waiting for its lock; retry the request"
        )
