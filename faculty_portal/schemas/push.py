"""Pydantic schemas for Web Push subscription management."""

from typing import Optional

from pydantic import BaseModel, Field


class PushKeys(BaseModel):
    p256dh: str = Field(..., min_length=1, max_length=255)
    auth: str = Field(..., min_length=1, max_length=255)


class PushSubscriptionCreate(BaseModel):
    """Browser PushSubscription JSON as produced by subscription.toJSON()."""

    endpoint: str = Field(
        ...,
        min_length=1,
        description="Push service endpoint URL",
    )
    keys: PushKeys


class PushUnsubscribe(BaseModel):
    endpoint: str = Field(..., min_length=1)


class VapidPublicKey(BaseModel):
    public_key: Optional[str] = Field(
        None,
        alias="publicKey",
        description="Application server key, or null when push is disabled",
    )
