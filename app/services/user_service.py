"""User accounts: signup and password login.

Passwords are stored as bcrypt hashes. Login failures never say whether
the username or the password was wrong.
"""

import logging

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.exceptions import AuthenticationError, ValidationError
from app.models import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=get_settings().password_hash_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username.strip()).first()


def create_user(
    db: Session, username: str, password: str, confirm_password: str
) -> User:
    """
    Register a new user.

    Raises ValidationError for a blank username, a password shorter than
    8 characters or longer than 72 bytes, mismatched confirmation, or a
    username that is already taken.
    """
    username = username.strip()
    if not username or not password:
        raise ValidationError("Username and password are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
            field="password",
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes", field="password"
        )
    if password != confirm_password:
        raise ValidationError("Passwords do not match", field="confirm_password")
    if get_user_by_username(db, username) is not None:
        raise ValidationError("Username already taken", field="username")

    user = User(username=username, password_hash=hash_password(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race with another signup for the same name
        db.rollback()
        raise ValidationError("Username already taken", field="username") from e
    db.refresh(user)

    logger.info("Created user %s (%s)", user.id, user.username)
    return user


def authenticate(db: Session, username: str, password: str) -> User:
    """Return the user for a username/password pair or raise AuthenticationError."""
    user = get_user_by_username(db, username)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login for username %r", username)
        raise AuthenticationError()
    return user
