"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UserScopedRequest(BaseModel):
    """Body of the mutating endpoints: the user acting on their notifications."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1, description="Owner of the notifications")


class NotificationLogRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: str
    event_type: str
    recipient_user_id: str | None = None
    recipient_email: str
    subject: str
    template: str
    payload: dict[str, Any] = Field(default_factory=dict)
    channel: str
    status: str
    read: bool
    dismissed: bool
    priority: str
    category: str | None = None
    action_url: str | None = None
    action_label: str | None = None
    provider_message_id: str | None = None
    error_message: str | None = None
    created_at: datetime | None = None
    sent_at: datetime | None = None
    read_at: datetime | None = None


class NotificationListResponse(BaseModel):
    data: list[NotificationLogRead]


class NotificationResponse(BaseModel):
    data: NotificationLogRead


class UnreadCount(BaseModel):
    count: int


class UnreadCountResponse(BaseModel):
    data: UnreadCount


class MarkAllReadResult(BaseModel):
    success: bool
    updated: int


class MarkAllReadResponse(BaseModel):
    data: MarkAllReadResult


__all__ = [
    "MarkAllReadResponse",
    "MarkAllReadResult",
    "NotificationListResponse",
    "NotificationLogRead",
    "NotificationResponse",
    "UnreadCount",
    "UnreadCountResponse",
    "UserScopedRequest",
]
