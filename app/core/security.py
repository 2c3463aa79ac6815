"""Password hashing and JWT issuance for authentication."""

import uuid
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

if TYPE_CHECKING:
    from app.core.config import Settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Field limits shared by schemas and the create_user CLI.
USERNAME_MAX_LEN = 50
FULLNAME_MAX_LEN = 100
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128

# Claim names written into issued tokens and read back by the request gate.
CLAIM_NAME = "unique_name"
CLAIM_NAME_IDENTIFIER = "nameid"
CLAIM_SUBJECT = "sub"
CLAIM_TOKEN_ID = "jti"


class SigningKeyNotConfiguredError(Exception):
    """Raised when a token must be issued but JWT_KEY is not configured."""

    def __init__(self, message: str = "JWT configuration is missing") -> None:
        self.message = message
        super().__init__(message)


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(
    user_id: int,
    username: str,
    settings: "Settings",
    now: datetime | None = None,
) -> str:
    """
    Create a signed JWT for one user: name, nameid, sub, a fresh jti, iss, aud, iat, exp.

    Raises SigningKeyNotConfiguredError when JWT_KEY is unset.
    """
    if settings.JWT_KEY is None:
        raise SigningKeyNotConfiguredError()

    issued_at = now or datetime.now(UTC)
    payload: dict[str, Any] = {
        CLAIM_NAME: username,
        CLAIM_NAME_IDENTIFIER: str(user_id),
        CLAIM_SUBJECT: username,
        CLAIM_TOKEN_ID: str(uuid.uuid4()),
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
    }
    if settings.JWT_ISSUER is not None:
        payload["iss"] = settings.JWT_ISSUER
    if settings.JWT_AUDIENCE is not None:
        payload["aud"] = settings.JWT_AUDIENCE
    return jwt.encode(
        payload,
        settings.JWT_KEY.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )
