"""ORM model for application users."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func, true

from app.models.base import Base
from app.models.role import ROLE_GUEST_ID


class User(Base):
    """
    User account for JWT authentication.

    password_hash holds a bcrypt hash, never the plain password.
    role_id defaults to Guest (2); User is 1 and Admin is 99.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    role_id = Column(
        Integer,
        ForeignKey("roles.id", ondelete="RESTRICT"),
        nullable=False,
        default=ROLE_GUEST_ID,
        server_default=str(ROLE_GUEST_ID),
        index=True,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())
