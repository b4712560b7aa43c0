"""Per-recipient email throttling."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from notification_service.infrastructure.repositories import NotificationLogRepository
from notification_service.utils import ensure_utc, utc_now

logger = logging.getLogger(__name__)


class EmailRateLimiter:
    """Allow at most one email per recipient and event type within ``window``.

    The most recent email-channel row in the notification log is the only
    state consulted, so the limiter survives restarts and is shared by every
    consumer process writing to the same database.
    """

    def __init__(
        self,
        repository: NotificationLogRepository,
        window: timedelta,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.repository = repository
        self.window = window
        self._clock = clock

    def allows(self, recipient_email: str, event_type: str) -> bool:
        latest = self.repository.latest_email_for_recipient(
            recipient_email=recipient_email, event_type=event_type
        )
        if latest is None or latest.created_at is None:
            return True

        elapsed = ensure_utc(self._clock()) - ensure_utc(latest.created_at)
        if elapsed < self.window:
            logger.debug(
                "Throttling %s email to %s; last one sent %ss ago",
                event_type,
                recipient_email,
                int(elapsed.total_seconds()),
            )
            return False
        return True


__all__ = ["EmailRateLimiter"]
