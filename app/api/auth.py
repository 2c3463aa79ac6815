"""Registration and login endpoints (excluded from the request gate)."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.security import SigningKeyNotConfiguredError
from app.schemas.auth import AuthResponse, LoginRequest, MessageResponse, RegisterRequest
from app.services.auth import (
    InvalidCredentialsError,
    UserAlreadyExistsError,
    login_user,
    register_user,
)

router = APIRouter()


@router.post("/register", response_model=MessageResponse)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Create an account with the Guest role. 400 if the username or email is taken."""
    try:
        register_user(db, body)
    except UserAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    return MessageResponse(message="User registered successfully.")


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    """
    Authenticate with username or email and password; returns a JWT valid for one hour.
    Include the token in the Authorization header as: Bearer <token>
    """
    try:
        return login_user(db, body, get_settings())
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    except SigningKeyNotConfiguredError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message,
        ) from e
