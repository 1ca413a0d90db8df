"""Pydantic schemas for shared documents."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import AliasGenerator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DocumentResponse(BaseModel):
    """Schema for document listings and upload responses."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )

    id: UUID
    name: str
    owner: str
    department_name: Optional[str] = None
    file_type: str
    content_type: str
    size: int
    created_at: datetime
