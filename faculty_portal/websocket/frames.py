"""Inbound WebSocket frame models.

Client frames form a closed set discriminated by their "type" field.
Anything that does not validate against one of them is dropped by the
router without closing the connection.
"""

import logging
from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from ..schemas.message import MessageFormatting

logger = logging.getLogger(__name__)


class _Frame(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class JoinFrame(_Frame):
    type: Literal["join"]
    room_id: UUID = Field(alias="roomId")
    user_id: Optional[str] = Field(None, alias="userId", max_length=100)


class SendFrame(_Frame):
    type: Literal["message"]
    room_id: UUID = Field(alias="roomId")
    sender: Optional[str] = Field(None, max_length=100)
    content: str = Field(..., min_length=1, max_length=10000)
    formatting: Optional[MessageFormatting] = None
    reply_to: Optional[str] = Field(None, alias="replyTo", max_length=1000)


class EditFrame(_Frame):
    type: Literal["edit"]
    message_id: UUID = Field(alias="messageId")
    content: str = Field(..., min_length=1, max_length=10000)


class DeleteFrame(_Frame):
    type: Literal["delete"]
    message_id: UUID = Field(alias="messageId")


class ReactFrame(_Frame):
    type: Literal["react"]
    message_id: UUID = Field(alias="messageId")
    emoji: Optional[str] = Field(None, max_length=32)
    delta: Literal[1, -1] = 1


InboundFrame = Annotated[
    Union[JoinFrame, SendFrame, EditFrame, DeleteFrame, ReactFrame],
    Field(discriminator="type"),
]

_frame_adapter: TypeAdapter[InboundFrame] = TypeAdapter(InboundFrame)


def parse_frame(data: object) -> Optional[InboundFrame]:
    """
    Validate a decoded JSON frame.

    Returns:
        The typed frame, or None if the frame is unknown or malformed
    """
    if not isinstance(data, dict):
        return None
    try:
        return _frame_adapter.validate_python(data)
    except ValidationError as e:
        logger.warning(
            f"Ignoring invalid frame type={data.get('type')!r}: "
            f"{e.error_count()} validation error(s)"
        )
        return None
