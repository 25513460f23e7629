"""FastAPI dependencies shared by routers."""

from fastapi import Cookie, Depends, HTTPException, Request

from app.services.session_store import SessionStore

SESSION_COOKIE = "session_token"


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_owner_id(
    session_token: str | None = Cookie(None),
    store: SessionStore = Depends(get_session_store),
) -> int:
    """Resolve the current owner from the session cookie."""
    if not session_token:
        raise HTTPException(status_code=401, detail="Not signed in")
    session = store.get(session_token)
    if session is None:
        raise HTTPException(status_code=401, detail="Session expired")
    return session.owner_id
