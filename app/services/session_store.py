"""Session token storage.

Sessions map an opaque token to an owner id until they expire. The store
is injected (app.state.session_store) rather than held in a module global.
"""

import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    token: str
    owner_id: int
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now()) >= self.expires_at


class SessionStore(Protocol):
    """Operations the HTTP layer needs from a session backend."""

    def create(self, owner_id: int) -> Session: ...

    def get(self, token: str) -> Session | None: ...

    def delete(self, token: str) -> None: ...

    def expire(self, now: datetime | None = None) -> int: ...


class InMemorySessionStore:
    """Thread-safe session store held in process memory."""

    def __init__(self, ttl: timedelta):
        self.ttl = ttl
        self._lock = threading.Lock()
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create(self, owner_id: int) -> Session:
        session = Session(
            token=secrets.token_urlsafe(32),
            owner_id=owner_id,
            expires_at=datetime.now() + self.ttl,
        )
        with self._lock:
            self._sessions[session.token] = session
        logger.info("Created session for owner %s", owner_id)
        return session

    def get(self, token: str) -> Session | None:
        """Look up a live session. Expired sessions are dropped on read."""
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if session.is_expired():
                del self._sessions[token]
                return None
            return session

    def delete(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)

    def expire(self, now: datetime | None = None) -> int:
        """Remove every session expired as of now. Returns how many were removed."""
        now = now or datetime.now()
        with self._lock:
            expired = [
                token for token, session in self._sessions.items() if session.is_expired(now)
            ]
            for token in expired:
                del self._sessions[token]
        if expired:
            logger.info("Expired %d sessions", len(expired))
        return len(expired)
