"""Starlette middleware that applies the request gate to every inbound request."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.authentication import AuthCredentials, BaseUser
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from app.core.gate import GateConfig, RequestIdentity, TokenRejection, evaluate_request

logger = logging.getLogger(__name__)


class TokenUser(BaseUser):
    """Authenticated principal exposed as request.user for downstream authorization."""

    def __init__(self, request_identity: RequestIdentity) -> None:
        self.request_identity = request_identity

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def display_name(self) -> str:
        return self.request_identity.username or ""

    @property
    def identity(self) -> str:
        return self.request_identity.user_id or ""


def rejection_response(rejection: TokenRejection) -> JSONResponse:
    """JSON error body; 401 responses carry a Bearer challenge."""
    headers = {"WWW-Authenticate": "Bearer"} if rejection.status_code == 401 else None
    return JSONResponse(
        status_code=rejection.status_code,
        content=rejection.to_body(),
        headers=headers,
    )


class JwtGateMiddleware(BaseHTTPMiddleware):
    """
    Validate bearer tokens on every request except excluded path prefixes.

    On success the identity is stored on request.state.identity, the decoded
    claims on request.state.token_claims, and request.user / request.auth are set.
    """

    def __init__(self, app: ASGIApp, config: GateConfig) -> None:
        super().__init__(app)
        self.config = config

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        result = evaluate_request(path, request.headers.get("authorization"), self.config)

        if result is None:
            logger.debug("Excluded from token validation: %s %s", request.method, path)
            return await call_next(request)

        if isinstance(result, TokenRejection):
            if result.kind == "ServerMisconfigured":
                logger.error("Rejecting %s %s: JWT_KEY is not configured", request.method, path)
            else:
                logger.info(
                    "Rejected %s %s: kind=%s", request.method, path, result.kind
                )
            return rejection_response(result)

        request.state.identity = result
        request.state.token_claims = result.claims
        request.scope["user"] = TokenUser(result)
        request.scope["auth"] = AuthCredentials(["authenticated"])
        logger.debug(
            "Token accepted for %s %s: user_id=%s username=%s",
            request.method,
            path,
            result.user_id,
            result.username,
        )
        return await call_next(request)
