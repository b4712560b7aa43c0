"""Domain entity representing one recorded delivery attempt."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from notification_service.domain.exceptions import InvalidStatusTransition

CHANNEL_EMAIL = "email"
CHANNEL_IN_APP = "in_app"
CHANNEL_BOTH = "both"
CHANNELS = (CHANNEL_EMAIL, CHANNEL_IN_APP, CHANNEL_BOTH)
IN_APP_CHANNELS = (CHANNEL_IN_APP, CHANNEL_BOTH)

STATUS_PENDING = "pending"
STATUS_SENT = "sent"
STATUS_FAILED = "failed"
STATUSES = (STATUS_PENDING, STATUS_SENT, STATUS_FAILED)

PRIORITY_LOW = "low"
PRIORITY_NORMAL = "normal"
PRIORITY_HIGH = "high"
PRIORITY_URGENT = "urgent"
PRIORITIES = (PRIORITY_LOW, PRIORITY_NORMAL, PRIORITY_HIGH, PRIORITY_URGENT)


@dataclass
class NotificationLog:
    """Durable record of a single email or in-app notification."""

    id: str | None
    event_type: str
    recipient_email: str
    subject: str
    template: str
    channel: str
    status: str = STATUS_PENDING
    recipient_user_id: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    read: bool = False
    dismissed: bool = False
    priority: str = PRIORITY_NORMAL
    category: str | None = None
    action_url: str | None = None
    action_label: str | None = None
    provider_message_id: str | None = None
    error_message: str | None = None
    event_key: str | None = None
    created_at: datetime | None = None
    sent_at: datetime | None = None
    read_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.channel not in CHANNELS:
            raise ValueError(f"Unknown notification channel: {self.channel}")
        if self.status not in STATUSES:
            raise ValueError(f"Unknown notification status: {self.status}")
        if self.priority not in PRIORITIES:
            raise ValueError(f"Unknown notification priority: {self.priority}")

    @property
    def is_terminal(self) -> bool:
        return self.status != STATUS_PENDING

    def mark_sent(self, *, at: datetime, provider_message_id: str | None = None) -> None:
        """Move a pending notification to ``sent``."""

        self._ensure_pending(STATUS_SENT)
        self.status = STATUS_SENT
        self.sent_at = at
        self.provider_message_id = provider_message_id

    def mark_failed(self, error_message: str) -> None:
        """Move a pending notification to ``failed`` recording ``error_message``."""

        self._ensure_pending(STATUS_FAILED)
        self.status = STATUS_FAILED
        self.error_message = error_message

    def _ensure_pending(self, target: str) -> None:
        if self.is_terminal:
            raise InvalidStatusTransition(
                f"Notification {self.id} cannot move from {self.status} to {target}"
            )


__all__ = [
    "NotificationLog",
    "CHANNEL_EMAIL",
    "CHANNEL_IN_APP",
    "CHANNEL_BOTH",
    "CHANNELS",
    "IN_APP_CHANNELS",
    "STATUS_PENDING",
    "STATUS_SENT",
    "STATUS_FAILED",
    "STATUSES",
    "PRIORITY_LOW",
    "PRIORITY_NORMAL",
    "PRIORITY_HIGH",
    "PRIORITY_URGENT",
    "PRIORITIES",
]
