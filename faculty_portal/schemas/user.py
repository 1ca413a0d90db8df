"""Pydantic schemas for User model validation."""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UserCreate(BaseModel):
    """Schema for creating a new user (registration)."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    username: str = Field(
        ...,
        min_length=3,
        max_length=100,
        description="Login name, shown as the chat sender",
        examples=["jdoe"],
    )
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="User's password (will be hashed)",
        examples=["SecureP@ssw0rd!"],
    )
    phone: Optional[str] = Field(
        None,
        max_length=30,
        description="Contact phone number",
    )
    reg_number: Optional[str] = Field(
        None,
        max_length=50,
        description="Student or staff registration number",
    )
    department_name: Optional[str] = Field(
        None,
        max_length=100,
        description="Department the user belongs to",
        examples=["Physics"],
    )
    # Self-registration can only produce these roles; admins are bootstrapped
    role: Literal["student", "department-governor", "faculty-governor"] = "student"


class UserResponse(BaseModel):
    """Schema for user response (public data only)."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )

    id: UUID = Field(
        ...,
        description="Unique user identifier",
    )
    username: str
    phone: Optional[str] = None
    reg_number: Optional[str] = None
    role: str
    department_name: Optional[str] = None
    created_at: Optional[datetime] = None
