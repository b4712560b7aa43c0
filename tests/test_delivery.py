"""Tests for the email and in-app delivery channels and the email throttle."""

from __future__ import annotations

from datetime import timedelta

import pytest

from notification_service.application.delivery import (
    EmailChannel,
    InAppChannel,
    is_plausible_email,
)
from notification_service.application.rate_limit import EmailRateLimiter
from notification_service.domain.exceptions import EmailDeliveryError, InvalidRecipientError
from notification_service.infrastructure.repositories import NotificationLogRepository


@pytest.fixture()
def repository(session):
    return NotificationLogRepository(session)


@pytest.fixture()
def channel(repository, email_provider, clock):
    return EmailChannel(repository, email_provider, clock=clock)


def _send(channel, to="casey@example.com", **kwargs):
    kwargs.setdefault("event_type", "application.created")
    kwargs.setdefault("template", "application_created")
    return channel.send(to, "Subject", "<p>Body</p>", **kwargs)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("casey@example.com", True),
        (" casey@example.com ", True),
        ("casey@example", False),
        ("casey example.com", False),
        ("", False),
        (None, False),
    ],
)
def test_is_plausible_email(value, expected):
    assert is_plausible_email(value) is expected


def test_successful_email_is_recorded_as_sent(channel, email_provider, fetch_rows, clock):
    notification = _send(channel, user_id="u-cand", payload={"applicationId": "app-1"})

    assert notification.status == "sent"
    assert notification.provider_message_id == "msg-1"
    assert email_provider.recipients() == ["casey@example.com"]
    [row] = fetch_rows(channel="email")
    assert row.status == "sent"
    assert row.recipient_user_id == "u-cand"
    assert row.payload == {"applicationId": "app-1"}
    assert row.sent_at is not None


def test_provider_failure_is_recorded_and_raised(channel, email_provider, fetch_rows):
    email_provider.fail_for.add("casey@example.com")

    with pytest.raises(EmailDeliveryError):
        _send(channel)

    [row] = fetch_rows(channel="email")
    assert row.status == "failed"
    assert "status 400" in row.error_message
    assert row.sent_at is None


def test_unexpected_provider_errors_are_wrapped(repository, clock, fetch_rows):
    class ExplodingProvider:
        def send(self, to, subject, html):
            raise RuntimeError("socket closed")

    channel = EmailChannel(repository, ExplodingProvider(), clock=clock)

    with pytest.raises(EmailDeliveryError, match="socket closed"):
        _send(channel)
    assert fetch_rows(channel="email")[0].error_message == "socket closed"


def test_invalid_recipient_writes_nothing(channel, email_provider, fetch_rows):
    with pytest.raises(InvalidRecipientError):
        _send(channel, to="not-an-address")

    assert fetch_rows() == []
    assert email_provider.sent == []


def test_redelivered_event_does_not_send_twice(channel, email_provider, fetch_rows):
    first = _send(channel, event_key="evt-1")
    second = _send(channel, event_key="evt-1")

    assert second.id == first.id
    assert len(email_provider.sent) == 1
    assert len(fetch_rows(channel="email")) == 1


def test_failed_attempt_is_retried_on_redelivery(channel, email_provider, fetch_rows):
    email_provider.fail_for.add("casey@example.com")
    with pytest.raises(EmailDeliveryError):
        _send(channel, event_key="evt-1")

    email_provider.fail_for.clear()
    _send(channel, event_key="evt-1")

    assert [row.status for row in fetch_rows(channel="email")] == ["failed", "sent"]


def test_in_app_notification_is_created_sent(repository, clock):
    in_app = InAppChannel(repository, clock=clock)

    created = in_app.create(
        user_id="u-rec",
        email="riley@example.com",
        event_type="placement.created",
        subject="Placement created",
        template="placement_created",
        priority="high",
        category="placement",
        action_url="https://portal.test/placements/pl-1",
        action_label="View placement",
        event_key="evt-7",
    )
    again = in_app.create(
        user_id="u-rec",
        email="riley@example.com",
        event_type="placement.created",
        subject="Placement created",
        template="placement_created",
        event_key="evt-7",
    )

    assert created.channel == "in_app"
    assert created.status == "sent"
    assert created.read is False
    assert created.sent_at == clock.now
    assert again.id == created.id


def test_in_app_failures_are_logged_not_raised(repository, clock, caplog):
    in_app = InAppChannel(repository, clock=clock)

    with caplog.at_level("ERROR"):
        result = in_app.create(
            user_id="u-rec",
            email="riley@example.com",
            event_type="placement.created",
            subject="Placement created",
            template="placement_created",
            priority="extreme",
        )

    assert result is None
    assert "Failed to create in-app notification" in caplog.text


def test_rate_limiter_allows_one_email_per_window(channel, repository, clock):
    limiter = EmailRateLimiter(repository, timedelta(minutes=10), clock=clock)
    assert limiter.allows("casey@example.com", "application.created") is True

    _send(channel)
    assert limiter.allows("casey@example.com", "application.created") is False
    assert limiter.allows("casey@example.com", "chat.message.created") is True
    assert limiter.allows("other@example.com", "application.created") is True

    clock.advance(minutes=10)
    assert limiter.allows("casey@example.com", "application.created") is True
