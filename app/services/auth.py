"""Registration and login: uniqueness checks, bcrypt hashing and token issuance."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.security import create_access_token, hash_password, verify_password
from app.models import ROLE_GUEST_ID, User
from app.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from app.services.accounts import find_user_for_login, normalize_email, username_or_email_taken

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


class UserAlreadyExistsError(Exception):
    """Raised when the username or email is already registered (Conflict)."""

    def __init__(self, message: str = "User already exists.") -> None:
        self.message = message
        super().__init__(message)


class InvalidCredentialsError(Exception):
    """Raised when login fails; does not reveal whether the user exists (Unauthorized)."""

    def __init__(self, message: str = "Invalid credentials.") -> None:
        self.message = message
        super().__init__(message)


def register_user(db: Session, body: RegisterRequest) -> User:
    """Create a Guest user with a hashed password. Raises UserAlreadyExistsError on conflict."""
    email = normalize_email(str(body.email))
    if username_or_email_taken(db, body.username, email):
        logger.info("Registration rejected: username or email already in use")
        raise UserAlreadyExistsError()

    user = User(
        username=body.username,
        full_name=body.full_name,
        email=email,
        password_hash=hash_password(body.password),
        role_id=ROLE_GUEST_ID,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # A concurrent registration won the unique constraint.
        db.rollback()
        raise UserAlreadyExistsError() from e
    db.refresh(user)
    logger.info("Registered user id=%s username=%s", user.id, user.username)
    return user


def login_user(db: Session, body: LoginRequest, settings: "Settings") -> AuthResponse:
    """
    Verify credentials and issue a 1-hour token with a fresh jti.

    Raises InvalidCredentialsError for an unknown user or wrong password,
    SigningKeyNotConfiguredError if JWT_KEY is unset.
    """
    user = find_user_for_login(db, body.username_or_email)
    if user is None or not verify_password(body.password, user.password_hash):
        logger.info("Login failed for identifier=%r", body.username_or_email)
        raise InvalidCredentialsError()

    token = create_access_token(user.id, user.username, settings)
    logger.info("Issued token for user id=%s", user.id)
    return AuthResponse(token=token, username=user.username, email=user.email)
