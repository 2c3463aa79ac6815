"""Fixed reference data: roles and admin permissions at reproducible timestamps."""

import logging
from datetime import UTC, datetime

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.models import ROLE_ADMIN_ID, ROLE_GUEST_ID, ROLE_USER_ID, Permission, Role

logger = logging.getLogger(__name__)

ROLE_SEED = (
    (ROLE_USER_ID, "User", "Regular user", datetime(2025, 1, 2, tzinfo=UTC)),
    (ROLE_GUEST_ID, "Guest", "Guest user", datetime(2025, 1, 3, tzinfo=UTC)),
    (ROLE_ADMIN_ID, "Admin", "Administrator", datetime(2025, 1, 4, tzinfo=UTC)),
)

PERMISSION_SEED = (
    (1, ROLE_ADMIN_ID, "Manage Users", "Can create, update, delete users", datetime(2025, 1, 5, tzinfo=UTC)),
    (2, ROLE_ADMIN_ID, "Manage Roles", "Can create, update, delete roles", datetime(2025, 1, 6, tzinfo=UTC)),
)


def sync_permission_sequence(db: Session) -> bool:
    """
    Move the PostgreSQL serial for permissions.id past the explicitly inserted seed ids.

    Returns False (no-op) on other dialects, which derive the next id from MAX(id).
    """
    if db.get_bind().dialect.name != "postgresql":
        return False
    db.execute(
        text(
            "SELECT setval(pg_get_serial_sequence('permissions', 'id'), "
            "(SELECT MAX(id) FROM permissions))"
        )
    )
    return True


def seed_reference_data(db: Session) -> tuple[int, int]:
    """
    Insert missing seed roles and permissions. Idempotent: existing ids are left untouched.

    Returns (roles_inserted, permissions_inserted).
    """
    existing_roles = {r for (r,) in db.query(Role.id).all()}
    roles_inserted = 0
    for role_id, name, description, created_at in ROLE_SEED:
        if role_id in existing_roles:
            continue
        db.add(Role(id=role_id, name=name, description=description, created_at=created_at))
        roles_inserted += 1
    db.flush()

    existing_permissions = {p for (p,) in db.query(Permission.id).all()}
    permissions_inserted = 0
    for perm_id, role_id, name, description, created_at in PERMISSION_SEED:
        if perm_id in existing_permissions:
            continue
        db.add(
            Permission(
                id=perm_id,
                role_id=role_id,
                name=name,
                description=description,
                created_at=created_at,
            )
        )
        permissions_inserted += 1
    if permissions_inserted:
        db.flush()
        sync_permission_sequence(db)
    db.commit()

    if roles_inserted or permissions_inserted:
        logger.info(
            "Seeded reference data: roles=%s permissions=%s",
            roles_inserted,
            permissions_inserted,
        )
    return roles_inserted, permissions_inserted
