"""User request/response schemas."""
from datetime import datetime, timezone
from typing import Optional
from pydantic import ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel
from app.core.constants import UserRole
from app.schemas.common import CamelModel


class UserResponse(CamelModel):
    """Public projection of a user. The password digest is never part of it."""

    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image: Optional[str] = None
    role: UserRole
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    @field_serializer("created_at", "updated_at")
    def serialize_timestamp(self, value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class UpdateProfileRequest(CamelModel):
    """Profile fields; only the ones actually sent are applied."""

    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
