"""Role and permission listing."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_request_identity
from app.core.database import get_db
from app.core.gate import RequestIdentity
from app.schemas.role import PermissionResponse, RoleResponse, RolesListResponse
from app.services.accounts import list_roles_with_permissions

router = APIRouter()


@router.get("", response_model=RolesListResponse)
def list_roles(
    _identity: Annotated[RequestIdentity, Depends(get_request_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> RolesListResponse:
    """List roles with their permissions."""
    roles = [
        RoleResponse(
            id=role.id,
            name=role.name,
            description=role.description,
            created_at=role.created_at,
            permissions=[PermissionResponse.model_validate(p) for p in permissions],
        )
        for role, permissions in list_roles_with_permissions(db)
    ]
    return RolesListResponse(roles=roles)
