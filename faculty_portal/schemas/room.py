"""Pydantic schemas for chat rooms."""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RoomCreate(BaseModel):
    """Schema for creating a room (admin only)."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Room display name",
        examples=["Exam Committee"],
    )
    type: Literal["general", "department", "custom"] = Field(
        "custom",
        description="Room type; only custom rooms can be deleted later",
    )
    department_name: Optional[str] = Field(
        None,
        max_length=100,
        description="Owning department for department rooms",
    )


class RoomResponse(BaseModel):
    """Schema for room responses and the new_room broadcast."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )

    id: UUID
    name: str
    type: str
    department_name: Optional[str] = None
    created_by: str
    created_at: datetime


def serialize_room(room) -> dict:
    """Convert a Room row into a JSON-ready wire dict."""
    return RoomResponse.model_validate(room).model_dump(mode="json", by_alias=True)
