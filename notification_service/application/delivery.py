"""Email and in-app delivery channels backed by the notification log."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from notification_service.domain.entities import (
    CHANNEL_EMAIL,
    CHANNEL_IN_APP,
    PRIORITY_NORMAL,
    STATUS_SENT,
    NotificationLog,
)
from notification_service.domain.exceptions import EmailDeliveryError, InvalidRecipientError
from notification_service.infrastructure.email import EmailProvider
from notification_service.infrastructure.repositories import NotificationLogRepository
from notification_service.utils import utc_now

logger = logging.getLogger(__name__)

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def is_plausible_email(value: str | None) -> bool:
    return bool(value) and _EMAIL_PATTERN.match(value.strip()) is not None


class EmailChannel:
    """Send transactional email and keep the notification log in step.

    The ``pending`` row is committed before the provider is contacted, so a
    crash mid-send still leaves a trace of the attempt.
    """

    def __init__(
        self,
        repository: NotificationLogRepository,
        provider: EmailProvider,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.repository = repository
        self.provider = provider
        self._clock = clock

    def send(
        self,
        to: str,
        subject: str,
        html: str,
        *,
        event_type: str,
        template: str,
        user_id: str | None = None,
        payload: dict[str, Any] | None = None,
        event_key: str | None = None,
    ) -> NotificationLog:
        if not is_plausible_email(to):
            raise InvalidRecipientError(f"Invalid recipient email address: {to!r}")
        to = to.strip()

        if event_key:
            delivered = self.repository.find_delivered(
                event_key=event_key,
                channel=CHANNEL_EMAIL,
                template=template,
                recipient_email=to,
            )
            if delivered is not None:
                logger.info(
                    "Skipping %s email to %s; already delivered as %s",
                    template,
                    to,
                    delivered.id,
                )
                return delivered

        notification = self.repository.create(
            NotificationLog(
                id=None,
                event_type=event_type,
                event_key=event_key,
                recipient_user_id=user_id,
                recipient_email=to,
                subject=subject,
                template=template,
                payload=payload or {},
                channel=CHANNEL_EMAIL,
                created_at=self._clock(),
            )
        )

        try:
            message_id = self.provider.send(to, subject, html)
        except EmailDeliveryError as exc:
            self.repository.mark_failed(notification.id, error_message=str(exc))
            raise
        except Exception as exc:
            self.repository.mark_failed(notification.id, error_message=str(exc) or repr(exc))
            raise EmailDeliveryError(str(exc)) from exc

        sent = self.repository.mark_sent(notification.id, provider_message_id=message_id)
        logger.info("Email %s (%s) sent to %s", sent.id, template, to)
        return sent


class InAppChannel:
    """Write notifications shown in the user's in-app feed."""

    def __init__(
        self,
        repository: NotificationLogRepository,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.repository = repository
        self._clock = clock

    def create(
        self,
        *,
        user_id: str,
        email: str,
        event_type: str,
        subject: str,
        template: str,
        payload: dict[str, Any] | None = None,
        priority: str = PRIORITY_NORMAL,
        category: str | None = None,
        action_url: str | None = None,
        action_label: str | None = None,
        event_key: str | None = None,
    ) -> NotificationLog | None:
        """Record an in-app notification; returns ``None`` when the write fails."""

        try:
            if event_key:
                delivered = self.repository.find_delivered(
                    event_key=event_key,
                    channel=CHANNEL_IN_APP,
                    template=template,
                    recipient_user_id=user_id,
                )
                if delivered is not None:
                    logger.info(
                        "Skipping %s in-app notification for %s; already recorded as %s",
                        template,
                        user_id,
                        delivered.id,
                    )
                    return delivered

            now = self._clock()
            return self.repository.create(
                NotificationLog(
                    id=None,
                    event_type=event_type,
                    event_key=event_key,
                    recipient_user_id=user_id,
                    recipient_email=email or "",
                    subject=subject,
                    template=template,
                    payload=payload or {},
                    channel=CHANNEL_IN_APP,
                    status=STATUS_SENT,
                    priority=priority,
                    category=category,
                    action_url=action_url,
                    action_label=action_label,
                    created_at=now,
                    sent_at=now,
                )
            )
        except (SQLAlchemyError, ValueError):
            logger.exception(
                "Failed to create in-app notification %s for user %s", template, user_id
            )
            self.repository.session.rollback()
            return None


__all__ = ["EmailChannel", "InAppChannel", "is_plausible_email"]
