"""
Request gate: decide whether a request needs a bearer token and validate it.

Everything here is pure and request-scoped: callers pass the request path, the raw
Authorization header and an immutable GateConfig, and get back either a
RequestIdentity (accepted) or a TokenRejection (kind, message, HTTP status).
The Starlette middleware in app.middleware.jwt_gate only maps that result onto
the request/response.

Validation order for non-excluded paths:
  header present -> signing key configured -> scheme extraction -> non-empty ->
  3 segments -> parseable -> signature -> issuer -> audience -> exp (zero skew) -> nbf
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Literal

import jwt
from pydantic import BaseModel, ConfigDict

from app.core.security import CLAIM_NAME_IDENTIFIER, CLAIM_SUBJECT

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

GateErrorKind = Literal[
    "MissingAuthHeader",
    "EmptyToken",
    "MalformedToken",
    "InvalidSignature",
    "InvalidIssuer",
    "InvalidAudience",
    "TokenExpired",
    "InvalidToken",
    "ValidationFailed",
    "ServerMisconfigured",
]

BEARER_PREFIX = "bearer "

MSG_MISSING_HEADER = "Authorization header is required"
MSG_EMPTY_TOKEN = "JWT token is empty"
MSG_MALFORMED = "JWT token is malformed. Token must be in format: header.payload.signature"
MSG_UNREADABLE = "Invalid JWT token format"
MSG_INVALID_SIGNATURE = "Invalid JWT token signature"
MSG_INVALID_ISSUER = "Invalid JWT token issuer"
MSG_INVALID_AUDIENCE = "Invalid JWT token audience"
MSG_EXPIRED = "JWT token has expired"
MSG_SERVER_MISCONFIGURED = "JWT configuration is missing"


class ExcludedPaths(BaseModel):
    """Ordered, immutable set of path prefixes that bypass token validation."""

    model_config = ConfigDict(frozen=True)

    prefixes: tuple[str, ...] = ()

    @classmethod
    def of(cls, prefixes: Iterable[str]) -> "ExcludedPaths":
        seen: list[str] = []
        for prefix in prefixes:
            lowered = prefix.strip().lower()
            if lowered and lowered not in seen:
                seen.append(lowered)
        return cls(prefixes=tuple(seen))

    def matches(self, path: str | None) -> bool:
        """True if path case-insensitively starts with any excluded prefix."""
        if not path:
            return False
        lowered = path.lower()
        return any(lowered.startswith(prefix) for prefix in self.prefixes)


class GateConfig(BaseModel):
    """Process-wide, read-only settings the gate needs for every request."""

    model_config = ConfigDict(frozen=True)

    signing_key: str | None = None
    issuer: str | None = None
    audience: str | None = None
    algorithm: str = "HS256"
    excluded_paths: ExcludedPaths = ExcludedPaths()

    @classmethod
    def from_settings(cls, settings: "Settings") -> "GateConfig":
        return cls(
            signing_key=settings.JWT_KEY.get_secret_value() if settings.JWT_KEY else None,
            issuer=settings.JWT_ISSUER,
            audience=settings.JWT_AUDIENCE,
            algorithm=settings.JWT_ALGORITHM,
            excluded_paths=ExcludedPaths.of(settings.AUTH_EXCLUDED_PATHS),
        )

    @property
    def signing_key_configured(self) -> bool:
        return bool(self.signing_key and self.signing_key.strip())


class RequestIdentity(BaseModel):
    """Identity of an accepted request: user id (nameid), username (sub) and all decoded claims."""

    model_config = ConfigDict(frozen=True)

    user_id: str | None = None
    username: str | None = None
    claims: Mapping[str, Any] = {}


class TokenRejection(BaseModel):
    """Why a request was refused; status_code is 500 only for server misconfiguration."""

    model_config = ConfigDict(frozen=True)

    kind: GateErrorKind
    message: str

    @property
    def status_code(self) -> int:
        return 500 if self.kind == "ServerMisconfigured" else 401

    def to_body(self) -> dict[str, str]:
        return {"error": self.message, "kind": self.kind}


GateResult = RequestIdentity | TokenRejection


def _reject(kind: GateErrorKind, message: str) -> TokenRejection:
    return TokenRejection(kind=kind, message=message)


def extract_bearer_token(header_value: str) -> str:
    """
    Strip a case-insensitive "Bearer " scheme from the header value.

    The header is trimmed first, so a bare "Bearer" has no scheme and is used
    verbatim, like any other header without the scheme.
    """
    value = header_value.strip()
    if value.lower().startswith(BEARER_PREFIX):
        return value[len(BEARER_PREFIX):].strip()
    return value


def _audiences(claim: Any) -> list[str]:
    if isinstance(claim, str):
        return [claim]
    if isinstance(claim, (list, tuple)):
        return [a for a in claim if isinstance(a, str)]
    return []


def _is_numeric_date(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _validate_claims(token: str, config: GateConfig, now: datetime) -> GateResult:
    try:
        claims = jwt.decode(
            token,
            config.signing_key,
            algorithms=[config.algorithm],
            options={
                "verify_signature": True,
                "verify_exp": False,
                "verify_nbf": False,
                "verify_iat": False,
                "verify_aud": False,
                "verify_iss": False,
            },
        )
    except jwt.InvalidSignatureError:
        return _reject("InvalidSignature", MSG_INVALID_SIGNATURE)
    except jwt.InvalidTokenError as e:
        return _reject("InvalidToken", f"Invalid JWT token: {e}")

    if config.issuer is None or claims.get("iss") != config.issuer:
        return _reject("InvalidIssuer", MSG_INVALID_ISSUER)
    if config.audience is None or config.audience not in _audiences(claims.get("aud")):
        return _reject("InvalidAudience", MSG_INVALID_AUDIENCE)

    exp = claims.get("exp")
    if exp is None:
        return _reject("InvalidToken", "Invalid JWT token: token has no expiration")
    if not _is_numeric_date(exp):
        return _reject("InvalidToken", "Invalid JWT token: expiration time must be a number")
    now_ts = now.timestamp()
    # Zero clock skew: a token valid until T is already expired at T.
    if exp <= now_ts:
        return _reject("TokenExpired", MSG_EXPIRED)
    nbf = claims.get("nbf")
    if nbf is not None:
        if not _is_numeric_date(nbf):
            return _reject("InvalidToken", "Invalid JWT token: not-before time must be a number")
        if nbf > now_ts:
            return _reject("InvalidToken", "Invalid JWT token: token is not yet valid")

    user_id = claims.get(CLAIM_NAME_IDENTIFIER)
    username = claims.get(CLAIM_SUBJECT)
    return RequestIdentity(
        user_id=str(user_id) if user_id is not None else None,
        username=str(username) if username is not None else None,
        claims=claims,
    )


def validate_token(token: str, config: GateConfig, now: datetime | None = None) -> GateResult:
    """Structural then semantic validation of an extracted token."""
    if token.count(".") != 2:
        return _reject("MalformedToken", MSG_MALFORMED)
    try:
        jwt.decode(token, options={"verify_signature": False})
    except jwt.DecodeError:
        return _reject("MalformedToken", MSG_UNREADABLE)

    try:
        return _validate_claims(token, config, now or datetime.now(UTC))
    except Exception as e:
        logger.warning("Unexpected token validation failure: %s", e)
        return _reject("ValidationFailed", f"Token validation failed: {e}")


def authenticate(
    authorization: str | None,
    config: GateConfig,
    now: datetime | None = None,
) -> GateResult:
    """Validate the Authorization header of a non-excluded request."""
    if authorization is None:
        return _reject("MissingAuthHeader", MSG_MISSING_HEADER)
    if not config.signing_key_configured:
        return _reject("ServerMisconfigured", MSG_SERVER_MISCONFIGURED)
    token = extract_bearer_token(authorization)
    if not token:
        return _reject("EmptyToken", MSG_EMPTY_TOKEN)
    return validate_token(token, config, now=now)


def evaluate_request(
    path: str,
    authorization: str | None,
    config: GateConfig,
    now: datetime | None = None,
) -> GateResult | None:
    """
    Run the full gate for one request.

    Returns None when the path is excluded (the header is never inspected),
    otherwise the result of authenticate().
    """
    if config.excluded_paths.matches(path):
        return None
    return authenticate(authorization, config, now=now)
