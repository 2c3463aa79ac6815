"""Core configuration, database access, security helpers and the request gate."""

from app.core.config import get_settings, settings
from app.core.database import get_db
from app.core.gate import GateConfig, RequestIdentity, TokenRejection, evaluate_request

__all__ = [
    "GateConfig",
    "RequestIdentity",
    "TokenRejection",
    "evaluate_request",
    "get_db",
    "get_settings",
    "settings",
]
