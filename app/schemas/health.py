"""Pydantic schemas for the health endpoint."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class HealthResponse(BaseModel):
    """Service status, database reachability and whether token signing is configured."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: Literal["ok"] = "ok"
    environment: str = Field(description="Current app environment (dev or prod)")
    database: Literal["connected", "disconnected"]
    jwt_configured: bool = Field(description="False when JWT_KEY is missing; protected routes then return 500")
