"""Pydantic schemas for chat messages.

Outbound records are serialized with camelCase keys, the shape the chat
clients consume (roomId, imageUrl, replyTo, timestamp).
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MessageFormatting(BaseModel):
    """Inline styling applied to a whole message."""

    bold: bool = False
    italic: bool = False
    color: Optional[str] = Field(
        None,
        max_length=32,
        description="CSS color value",
        examples=["#ff0000"],
    )


class MessageResponse(BaseModel):
    """Full persisted message record as broadcast to room members."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )

    id: UUID = Field(
        ...,
        description="Server-assigned message identifier",
    )
    room_id: UUID
    sender: str
    content: str
    formatting: Optional[MessageFormatting] = None
    image_url: Optional[str] = Field(
        None,
        description="Object key of the attached image, cleared when it expires",
    )
    image_expiry: Optional[datetime] = None
    reply_to: Optional[str] = None
    edited: bool = False
    reactions: dict[str, int] = Field(default_factory=dict)
    created_at: datetime = Field(
        ...,
        serialization_alias="timestamp",
        description="Server timestamp of the message",
    )


def serialize_message(message) -> dict:
    """Convert a Message row into a JSON-ready wire dict."""
    return MessageResponse.model_validate(message).model_dump(mode="json", by_alias=True)


class AIChatRequest(BaseModel):
    """Prompt relayed to the AI assistant."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(
        ...,
        min_length=1,
        max_length=10000,
        description="User prompt, may include the assistant marker",
        examples=["@ai summarize today's announcements"],
    )
    room_id: Optional[UUID] = Field(
        None,
        alias="roomId",
        description="Room to post the reply into",
    )
    context: Optional[str] = Field(
        None,
        max_length=20000,
        description="Recent conversation passed to the assistant",
    )
