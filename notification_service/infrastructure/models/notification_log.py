"""SQLAlchemy model for the notification log."""

from uuid import uuid4

from sqlalchemy import JSON, Boolean, Column, DateTime, Index, String, Text

from notification_service.infrastructure.database import Base
from notification_service.utils import utc_now


def _new_id() -> str:
    return str(uuid4())


class NotificationLogModel(Base):
    """Database representation of one delivery attempt."""

    __tablename__ = "notification_log"

    id = Column(String(36), primary_key=True, default=_new_id)
    event_type = Column(String(100), nullable=False, index=True)
    event_key = Column(String(128), nullable=True, index=True)
    recipient_user_id = Column(String(64), nullable=True, index=True)
    recipient_email = Column(String(255), nullable=False)
    subject = Column(String(255), nullable=False)
    template = Column(String(100), nullable=False)
    payload = Column(JSON, nullable=False, default=dict)
    channel = Column(String(10), nullable=False, default="email")
    status = Column(String(10), nullable=False, default="pending")
    read = Column(Boolean, nullable=False, default=False)
    dismissed = Column(Boolean, nullable=False, default=False)
    priority = Column(String(10), nullable=False, default="normal")
    category = Column(String(50), nullable=True)
    action_url = Column(Text, nullable=True)
    action_label = Column(String(100), nullable=True)
    provider_message_id = Column(String(255), nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    read_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_notification_log_feed", "recipient_user_id", "channel", "dismissed", "read"),
        Index("ix_notification_log_throttle", "recipient_email", "event_type", "channel", "created_at"),
    )


__all__ = ["NotificationLogModel"]
