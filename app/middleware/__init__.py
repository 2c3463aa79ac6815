"""HTTP middleware."""

from app.middleware.jwt_gate import JwtGateMiddleware, TokenUser

__all__ = ["JwtGateMiddleware", "TokenUser"]
