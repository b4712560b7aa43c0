"""Unit tests for the SendGrid email provider."""

from __future__ import annotations

import json
import types

import pytest

from notification_service.config import Settings
from notification_service.domain.exceptions import EmailDeliveryError
from notification_service.infrastructure import email as email_module


class RecordingClient:
    """Stand-in for ``SendGridAPIClient`` returning a canned response."""

    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response or types.SimpleNamespace(
            status_code=202, body=None, headers={"X-Message-Id": "sg-123"}
        )
        self.error = error
        self.messages = []

    def send(self, message):
        self.messages.append(message)
        if self.error is not None:
            raise self.error
        return self.response


def test_send_returns_the_provider_message_id():
    client = RecordingClient()
    provider = email_module.SendGridEmailProvider("SG.fake", "noreply@example.com", client=client)

    message_id = provider.send("user@example.com", "Subject", "<p>Body</p>")

    assert message_id == "sg-123"
    assert len(client.messages) == 1


def test_send_without_message_id_falls_back_to_status():
    client = RecordingClient(types.SimpleNamespace(status_code=202, body=None, headers={}))
    provider = email_module.SendGridEmailProvider("SG.fake", "noreply@example.com", client=client)

    assert provider.send("user@example.com", "Subject", "<p>Body</p>") == "sendgrid-202"


def test_forbidden_error_surfaces_details(caplog):
    """Forbidden responses from SendGrid should surface meaningful details."""

    class FakeForbiddenError(Exception):
        status_code = 403
        body = json.dumps(
            {"errors": [{"message": "The provided authorization grant is invalid."}]}
        ).encode()

    provider = email_module.SendGridEmailProvider(
        "SG.fake", "noreply@example.com", client=RecordingClient(error=FakeForbiddenError())
    )

    with caplog.at_level("ERROR"), pytest.raises(EmailDeliveryError) as excinfo:
        provider.send("user@example.com", "Subject", "<p>Body</p>")

    assert "status 403" in str(excinfo.value)
    assert "authorization grant is invalid" in str(excinfo.value)
    assert "status 403" in caplog.text


def test_non_success_status_is_a_failure():
    client = RecordingClient(
        types.SimpleNamespace(
            status_code=400,
            body=json.dumps({"errors": [{"field": "to", "message": "invalid"}]}),
            headers={},
        )
    )
    provider = email_module.SendGridEmailProvider("SG.fake", "noreply@example.com", client=client)

    with pytest.raises(EmailDeliveryError, match="to: invalid"):
        provider.send("user@example.com", "Subject", "<p>Body</p>")


@pytest.mark.parametrize(
    ("status_code", "body", "expected"),
    [
        (500, b"", "SendGrid responded with status 500"),
        (None, "plain failure", "SendGrid request failed: plain failure"),
        (None, None, "SendGrid request failed"),
        (401, ["bad key"], "SendGrid responded with status 401: bad key"),
    ],
)
def test_describe_sendgrid_failure(status_code, body, expected):
    assert email_module.describe_sendgrid_failure(status_code, body) == expected


def test_missing_configuration_yields_a_failing_provider(caplog):
    settings = Settings(sendgrid_api_key=None, sendgrid_sender=None)

    with caplog.at_level("WARNING"):
        provider = email_module.build_email_provider(settings)

    assert isinstance(provider, email_module.UnconfiguredEmailProvider)
    assert "SendGrid configuration incomplete" in caplog.text
    with pytest.raises(EmailDeliveryError):
        provider.send("user@example.com", "Subject", "<p>Body</p>")


def test_settings_require_both_sendgrid_values():
    with pytest.raises(ValueError):
        Settings(sendgrid_api_key="SG.fake", sendgrid_sender=None)
