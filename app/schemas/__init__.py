"""Pydantic request/response schemas."""

from app.schemas.auth import AuthResponse, LoginRequest, MessageResponse, RegisterRequest
from app.schemas.health import HealthResponse
from app.schemas.role import PermissionResponse, RoleResponse, RolesListResponse
from app.schemas.user import UserResponse

__all__ = [
    "AuthResponse",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "PermissionResponse",
    "RegisterRequest",
    "RoleResponse",
    "RolesListResponse",
    "UserResponse",
]
