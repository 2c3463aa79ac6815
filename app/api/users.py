"""Endpoints for the authenticated user."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.deps import get_current_user
from app.models import User
from app.schemas.user import UserResponse

router = APIRouter()


@router.get("/me", response_model=UserResponse)
def read_me(current_user: Annotated[User, Depends(get_current_user)]) -> UserResponse:
    """Profile of the user identified by the bearer token."""
    return UserResponse.model_validate(current_user)
