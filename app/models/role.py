"""ORM model for roles (fixed reference data: User, Guest, Admin)."""

from sqlalchemy import Column, DateTime, Integer, String, Text, func

from app.models.base import Base

ROLE_USER_ID = 1
ROLE_GUEST_ID = 2
ROLE_ADMIN_ID = 99


class Role(Base):
    """
    Role assigned to users and owning permissions.

    Users reference roles with ON DELETE RESTRICT; permissions with ON DELETE CASCADE.
    Relationships are resolved through explicit queries in app.services.accounts.
    """

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(50), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
