"""Response schema for user profile endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class UserResponse(BaseModel):
    """Public view of a user (no password hash)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int
    full_name: str
    username: str
    email: str
    role_id: int
    is_active: bool
    created_at: datetime
