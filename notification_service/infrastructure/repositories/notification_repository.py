"""Persistence helpers for the notification log."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from notification_service.domain.entities import (
    CHANNEL_EMAIL,
    IN_APP_CHANNELS,
    STATUS_FAILED,
    STATUS_PENDING,
    STATUS_SENT,
    NotificationLog,
)
from notification_service.domain.exceptions import InvalidStatusTransition
from notification_service.infrastructure.models import NotificationLogModel
from notification_service.utils import ensure_utc, utc_now


class NotificationLogRepository:
    """Provide the write and query operations over :class:`NotificationLog` rows."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, notification_id: str) -> NotificationLog | None:
        model = self.session.get(NotificationLogModel, notification_id, populate_existing=True)
        return self._to_entity(model) if model else None

    def create(self, notification: NotificationLog) -> NotificationLog:
        model = NotificationLogModel()
        self._apply_entity_to_model(model, notification)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def mark_sent(
        self, notification_id: str, *, provider_message_id: str | None = None
    ) -> NotificationLog:
        notification = self._pending(notification_id)
        notification.mark_sent(at=utc_now(), provider_message_id=provider_message_id)
        return self._finalize(
            notification,
            {
                NotificationLogModel.status: notification.status,
                NotificationLogModel.sent_at: notification.sent_at,
                NotificationLogModel.provider_message_id: notification.provider_message_id,
            },
        )

    def mark_failed(self, notification_id: str, *, error_message: str) -> NotificationLog:
        notification = self._pending(notification_id)
        notification.mark_failed(error_message)
        return self._finalize(
            notification,
            {
                NotificationLogModel.status: notification.status,
                NotificationLogModel.error_message: notification.error_message,
            },
        )

    def _pending(self, notification_id: str) -> NotificationLog:
        notification = self.get(notification_id)
        if notification is None:
            raise InvalidStatusTransition(f"Notification {notification_id} not found")
        return notification

    def _finalize(self, notification: NotificationLog, values: dict) -> NotificationLog:
        # The entity approved the move; the WHERE clause keeps a concurrent
        # writer from having finalized the row in between.
        updated = (
            self.session.query(NotificationLogModel)
            .filter(
                NotificationLogModel.id == notification.id,
                NotificationLogModel.status == STATUS_PENDING,
            )
            .update(values, synchronize_session="fetch")
        )
        self.session.commit()
        current = self.get(notification.id)
        if not updated or current is None:
            state = current.status if current else "missing"
            raise InvalidStatusTransition(
                f"Notification {notification.id} cannot move from {state} to {notification.status}"
            )
        return current

    def find_delivered(
        self,
        *,
        event_key: str,
        channel: str,
        template: str,
        recipient_email: str | None = None,
        recipient_user_id: str | None = None,
    ) -> NotificationLog | None:
        """Return a row already delivered for the same event, recipient and template."""

        query = self.session.query(NotificationLogModel).filter(
            NotificationLogModel.event_key == event_key,
            NotificationLogModel.channel == channel,
            NotificationLogModel.template == template,
            NotificationLogModel.status == STATUS_SENT,
        )
        if recipient_email is not None:
            query = query.filter(NotificationLogModel.recipient_email == recipient_email)
        if recipient_user_id is not None:
            query = query.filter(NotificationLogModel.recipient_user_id == recipient_user_id)
        model = query.order_by(NotificationLogModel.created_at.desc()).first()
        return self._to_entity(model) if model else None

    def latest_email_for_recipient(
        self, *, recipient_email: str, event_type: str
    ) -> NotificationLog | None:
        """Return the most recent email row for ``recipient_email`` that did not fail."""

        model = (
            self.session.query(NotificationLogModel)
            .filter(
                NotificationLogModel.recipient_email == recipient_email,
                NotificationLogModel.event_type == event_type,
                NotificationLogModel.channel == CHANNEL_EMAIL,
                NotificationLogModel.status != STATUS_FAILED,
            )
            .order_by(NotificationLogModel.created_at.desc())
            .first()
        )
        return self._to_entity(model) if model else None

    def list_for_user(
        self,
        user_id: str,
        *,
        unread_only: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[NotificationLog]:
        query = self._feed_query(user_id)
        if unread_only:
            query = query.filter(NotificationLogModel.read.is_(False))
        query = query.order_by(
            NotificationLogModel.read.asc(),
            NotificationLogModel.created_at.desc(),
            NotificationLogModel.id.desc(),
        )
        query = query.offset(offset).limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def count_unread(self, user_id: str) -> int:
        return self._feed_query(user_id).filter(NotificationLogModel.read.is_(False)).count()

    def mark_as_read(self, notification_id: str, *, user_id: str) -> NotificationLog | None:
        """Mark one notification read; returns ``None`` when ``user_id`` does not own it."""

        model = self._owned_model(notification_id, user_id)
        if model is None:
            return None
        if not model.read:
            model.read = True
            model.read_at = utc_now()
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def mark_all_as_read(self, *, user_id: str) -> int:
        """Mark every unread, non-dismissed in-app notification of ``user_id`` read."""

        updated = (
            self._feed_query(user_id)
            .filter(NotificationLogModel.read.is_(False))
            .update(
                {NotificationLogModel.read: True, NotificationLogModel.read_at: utc_now()},
                synchronize_session="fetch",
            )
        )
        self.session.commit()
        return updated

    def dismiss(self, notification_id: str, *, user_id: str) -> NotificationLog | None:
        """Dismiss one notification; returns ``None`` when ``user_id`` does not own it."""

        model = self._owned_model(notification_id, user_id)
        if model is None:
            return None
        if not model.dismissed:
            model.dismissed = True
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def _feed_query(self, user_id: str):
        return self.session.query(NotificationLogModel).filter(
            NotificationLogModel.recipient_user_id == user_id,
            NotificationLogModel.channel.in_(IN_APP_CHANNELS),
            NotificationLogModel.dismissed.is_(False),
        )

    def _owned_model(self, notification_id: str, user_id: str) -> NotificationLogModel | None:
        return (
            self.session.query(NotificationLogModel)
            .filter(
                NotificationLogModel.id == notification_id,
                NotificationLogModel.recipient_user_id == user_id,
            )
            .first()
        )

    @staticmethod
    def _apply_entity_to_model(model: NotificationLogModel, notification: NotificationLog) -> None:
        if notification.id is not None:
            model.id = notification.id
        model.event_type = notification.event_type
        model.event_key = notification.event_key
        model.recipient_user_id = notification.recipient_user_id
        model.recipient_email = notification.recipient_email
        model.subject = notification.subject
        model.template = notification.template
        model.payload = notification.payload or {}
        model.channel = notification.channel
        model.status = notification.status
        model.read = notification.read
        model.dismissed = notification.dismissed
        model.priority = notification.priority
        model.category = notification.category
        model.action_url = notification.action_url
        model.action_label = notification.action_label
        model.provider_message_id = notification.provider_message_id
        model.error_message = notification.error_message
        model.created_at = notification.created_at or utc_now()
        model.sent_at = notification.sent_at
        model.read_at = notification.read_at

    @staticmethod
    def _to_entity(model: NotificationLogModel) -> NotificationLog:
        return NotificationLog(
            id=model.id,
            event_type=model.event_type,
            event_key=model.event_key,
            recipient_user_id=model.recipient_user_id,
            recipient_email=model.recipient_email,
            subject=model.subject,
            template=model.template,
            payload=model.payload or {},
            channel=model.channel,
            status=model.status,
            read=bool(model.read),
            dismissed=bool(model.dismissed),
            priority=model.priority,
            category=model.category,
            action_url=model.action_url,
            action_label=model.action_label,
            provider_message_id=model.provider_message_id,
            error_message=model.error_message,
            created_at=ensure_utc(model.created_at),
            sent_at=ensure_utc(model.sent_at),
            read_at=ensure_utc(model.read_at),
        )


__all__ = ["NotificationLogRepository"]
