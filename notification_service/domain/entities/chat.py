"""Domain entity describing a user's membership in a chat conversation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

REQUEST_STATE_NONE = "none"
REQUEST_STATE_PENDING = "pending"
REQUEST_STATE_ACCEPTED = "accepted"
REQUEST_STATE_DECLINED = "declined"
SUPPRESSED_REQUEST_STATES = (REQUEST_STATE_PENDING, REQUEST_STATE_DECLINED)


@dataclass
class ConversationParticipant:
    conversation_id: str
    user_id: str
    request_state: str = REQUEST_STATE_NONE
    muted_at: datetime | None = None
    archived_at: datetime | None = None

    def suppresses_notifications(self) -> bool:
        """Return ``True`` when nothing should be delivered for this conversation."""

        return (
            self.muted_at is not None
            or self.archived_at is not None
            or self.request_state in SUPPRESSED_REQUEST_STATES
        )


__all__ = [
    "ConversationParticipant",
    "REQUEST_STATE_NONE",
    "REQUEST_STATE_PENDING",
    "REQUEST_STATE_ACCEPTED",
    "REQUEST_STATE_DECLINED",
]
