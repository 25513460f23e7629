"""Router for logging in and out."""

from fastapi import APIRouter, Cookie, Depends, Response
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.dependencies import SESSION_COOKIE, get_session_store
from app.schemas import SessionCreate, SessionResponse
from app.services import user_service
from app.services.session_store import Session as LoginSession
from app.services.session_store import SessionStore

router = APIRouter()


def start_session(response: Response, store: SessionStore, owner_id: int) -> LoginSession:
    """Create a session for owner_id and set the session cookie."""
    session = store.create(owner_id)
    response.set_cookie(
        SESSION_COOKIE,
        session.token,
        max_age=get_settings().session_ttl_hours * 3600,
        httponly=True,
        samesite="lax",
    )
    return session


@router.post("", response_model=SessionResponse, status_code=201)
def create_session(
    payload: SessionCreate,
    response: Response,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
) -> SessionResponse:
    """Log in with username and password."""
    user = user_service.authenticate(db, payload.username, payload.password)
    session = start_session(response, store, user.id)
    return SessionResponse.model_validate(session)


@router.delete("", status_code=204)
def delete_session(
    response: Response,
    session_token: str | None = Cookie(None),
    store: SessionStore = Depends(get_session_store),
) -> None:
    """End the current session."""
    if session_token:
        store.delete(session_token)
    response.delete_cookie(SESSION_COOKIE)
