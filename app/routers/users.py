"""Router for account signup."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_session_store
from app.routers.sessions import start_session
from app.schemas import UserCreate, UserResponse
from app.services import user_service
from app.services.session_store import SessionStore

router = APIRouter()


@router.post("", response_model=UserResponse, status_code=201)
def signup(
    payload: UserCreate,
    response: Response,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
) -> UserResponse:
    """Create an account and sign it in."""
    user = user_service.create_user(
        db, payload.username, payload.password, payload.confirm_password
    )
    start_session(response, store, user.id)
    return UserResponse.model_validate(user)
