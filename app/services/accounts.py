"""Lookups over users, roles and permissions; relations are joined explicitly here."""

import logging

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import Permission, Role, User

logger = logging.getLogger(__name__)


class RoleInUseError(Exception):
    """Raised when deleting a role that is still assigned to users."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


def normalize_email(email: str) -> str:
    """
    Normalize an address the way EmailStr does on registration (lowercased domain).

    Values that are not valid addresses are returned stripped but otherwise unchanged.
    """
    try:
        return validate_email(email.strip(), check_deliverability=False).normalized
    except EmailNotValidError:
        return email.strip()


def find_user_for_login(db: Session, username_or_email: str) -> User | None:
    """Look up by normalized email when the identifier contains '@', otherwise by username."""
    if "@" in username_or_email:
        return get_user_by_email(db, normalize_email(username_or_email))
    return get_user_by_username(db, username_or_email)


def username_or_email_taken(db: Session, username: str, email: str) -> bool:
    return (
        db.query(User.id)
        .filter((User.username == username) | (User.email == email))
        .first()
        is not None
    )


def get_role(db: Session, role_id: int) -> Role | None:
    return db.query(Role).filter(Role.id == role_id).first()


def list_permissions(db: Session, role_id: int) -> list[Permission]:
    return (
        db.query(Permission)
        .filter(Permission.role_id == role_id)
        .order_by(Permission.id)
        .all()
    )


def list_roles_with_permissions(db: Session) -> list[tuple[Role, list[Permission]]]:
    """All roles ordered by id, each paired with its permissions (one outer join)."""
    rows = (
        db.query(Role, Permission)
        .outerjoin(Permission, Permission.role_id == Role.id)
        .order_by(Role.id, Permission.id)
        .all()
    )
    grouped: dict[int, tuple[Role, list[Permission]]] = {}
    for role, permission in rows:
        entry = grouped.setdefault(role.id, (role, []))
        if permission is not None:
            entry[1].append(permission)
    return list(grouped.values())


def delete_role(db: Session, role_id: int) -> bool:
    """
    Delete a role and (via cascade) its permissions.

    Returns False if the role does not exist. Raises RoleInUseError if users
    still reference it; the store's restrict constraint is the source of truth.
    """
    role = get_role(db, role_id)
    if role is None:
        return False
    db.delete(role)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info("Refused to delete role %s: still assigned to users", role_id)
        raise RoleInUseError(f"Role {role_id} is assigned to users and cannot be deleted.") from e
    return True
