"""Pydantic schemas for Notification model validation."""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class NotificationCreate(BaseModel):
    """
    Schema for posting a notification.

    A target department of "all" (or none) makes the notification general.
    """

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    classification: Literal["urgent", "regular", "informational"] = Field(
        "regular",
        description="Urgency class of the notification",
    )
    title: str = Field(
        "Notification",
        min_length=1,
        max_length=255,
        description="Notification title",
        examples=["Exam timetable released"],
    )
    content: str = Field(
        ...,
        min_length=1,
        description="Notification body",
    )
    target_department_name: Optional[str] = Field(
        None,
        max_length=100,
        description="Department to target, or 'all' for everyone",
        examples=["Physics", "all"],
    )


class NotificationComment(BaseModel):
    id: str
    author: str
    content: str
    timestamp: str


class NotificationCommentCreate(BaseModel):
    """Schema for adding a comment to a notification."""

    content: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="Comment text",
    )


class NotificationReact(BaseModel):
    """Schema for reacting to a notification."""

    reaction_type: str = Field(
        "heart",
        alias="reactionType",
        min_length=1,
        max_length=32,
        description="Reaction name",
    )

    model_config = ConfigDict(populate_by_name=True)


class NotificationResponse(BaseModel):
    """Schema for notification response."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )

    id: UUID = Field(
        ...,
        description="Unique notification identifier",
    )
    scope: str
    classification: str
    title: str
    content: str
    posted_by: str
    target_department_name: Optional[str] = None
    reactions: dict[str, int] = Field(default_factory=dict)
    comments: List[NotificationComment] = Field(default_factory=list)
    created_at: datetime = Field(
        ...,
        description="When the notification was posted",
    )
