"""Response schemas for roles and their permissions."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class PermissionResponse(BaseModel):
    model_config = _CONFIG

    id: int
    name: str
    description: str | None = None
    created_at: datetime


class RoleResponse(BaseModel):
    """Role with the permissions it owns."""

    model_config = _CONFIG

    id: int
    name: str
    description: str | None = None
    created_at: datetime
    permissions: list[PermissionResponse] = []


class RolesListResponse(BaseModel):
    roles: list[RoleResponse]
