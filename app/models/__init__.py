"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.permission import Permission
from app.models.role import ROLE_ADMIN_ID, ROLE_GUEST_ID, ROLE_USER_ID, Role
from app.models.user import User

__all__ = [
    "Base",
    "Permission",
    "ROLE_ADMIN_ID",
    "ROLE_GUEST_ID",
    "ROLE_USER_ID",
    "Role",
    "User",
]
