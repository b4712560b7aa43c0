"""Tests for the status lifecycle of a notification log entry."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from notification_service.domain.entities import (
    CHANNEL_EMAIL,
    STATUS_FAILED,
    STATUS_PENDING,
    STATUS_SENT,
    NotificationLog,
)
from notification_service.domain.exceptions import InvalidStatusTransition

SENT_AT = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


def _email(**overrides) -> NotificationLog:
    values = dict(
        id="n-1",
        event_type="placement.created",
        recipient_email="riley@example.com",
        subject="New placement",
        template="placement_created",
        channel=CHANNEL_EMAIL,
    )
    values.update(overrides)
    return NotificationLog(**values)


def test_pending_email_can_be_sent():
    notification = _email()
    assert notification.status == STATUS_PENDING
    assert notification.is_terminal is False

    notification.mark_sent(at=SENT_AT, provider_message_id="sg-1")

    assert notification.status == STATUS_SENT
    assert notification.sent_at == SENT_AT
    assert notification.provider_message_id == "sg-1"
    assert notification.is_terminal is True


def test_pending_email_can_fail():
    notification = _email()

    notification.mark_failed("bounced")

    assert notification.status == STATUS_FAILED
    assert notification.error_message == "bounced"


@pytest.mark.parametrize("status", [STATUS_SENT, STATUS_FAILED])
def test_terminal_rows_never_move_again(status):
    notification = _email(status=status)

    with pytest.raises(InvalidStatusTransition, match=f"from {status}"):
        notification.mark_sent(at=SENT_AT)
    with pytest.raises(InvalidStatusTransition):
        notification.mark_failed("late failure")
    assert notification.status == status


def test_unknown_status_is_rejected():
    with pytest.raises(ValueError, match="status"):
        _email(status="queued")
