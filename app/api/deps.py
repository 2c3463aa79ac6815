"""Request identity dependencies built on what JwtGateMiddleware attached to the request."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.gate import RequestIdentity
from app.models import User
from app.services.accounts import get_user_by_id

# Declares the bearer scheme in OpenAPI so Swagger UI can send the token;
# validation itself happens in JwtGateMiddleware.
security = HTTPBearer(auto_error=False, bearerFormat="JWT")


def get_request_identity(
    request: Request,
    _credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> RequestIdentity:
    """Dependency: identity validated by the gate. Raises 401 if the route was not gated."""
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


def get_current_user(
    identity: Annotated[RequestIdentity, Depends(get_request_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Dependency: load the User named by the token's nameid claim."""
    try:
        user_id = int(identity.user_id) if identity.user_id is not None else None
    except ValueError:
        user_id = None
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = get_user_by_id(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
