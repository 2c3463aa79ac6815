"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from app.core.security import (
    FULLNAME_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
)

# JSON bodies use camelCase (fullName, usernameOrEmail); attributes stay snake_case.
CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(BaseModel):
    """New account details."""

    model_config = CAMEL_CONFIG

    username: str = Field(..., min_length=1, max_length=USERNAME_MAX_LEN, description="Username")
    full_name: str = Field(..., min_length=1, max_length=FULLNAME_MAX_LEN, description="Full name")
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LEN,
        max_length=PASSWORD_MAX_LEN,
        description="Password",
    )


class LoginRequest(BaseModel):
    """Credentials for login; the identifier is treated as an email when it contains '@'."""

    model_config = CAMEL_CONFIG

    username_or_email: str = Field(..., min_length=1, max_length=255, description="Username or email")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class AuthResponse(BaseModel):
    """JWT returned after successful login, with basic user info."""

    model_config = CAMEL_CONFIG

    token: str = Field(..., description="JWT access token; send as 'Authorization: Bearer <token>'")
    username: str
    email: str


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str
