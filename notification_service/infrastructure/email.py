"""Transactional email delivery through SendGrid."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from notification_service.config import Settings, get_settings
from notification_service.domain.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


class EmailProvider(Protocol):
    """Anything able to hand a rendered message to an email provider."""

    def send(self, to: str, subject: str, html: str) -> str:
        """Send the message and return the provider's message id.

        Raises :class:`EmailDeliveryError` when the provider does not accept it.
        """
        ...


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                field = item.get("field")
                if message and field:
                    messages.append(f"{field}: {message}")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def describe_sendgrid_failure(status_code: Any, body: Any, fallback: str = "") -> str:
    """Build the error text stored on a failed notification row."""

    details = _extract_sendgrid_error_details(body)
    if status_code and details:
        return f"SendGrid responded with status {status_code}: {details}"
    if status_code:
        return f"SendGrid responded with status {status_code}"
    if details:
        return f"SendGrid request failed: {details}"
    return f"SendGrid request failed: {fallback}" if fallback else "SendGrid request failed"


class SendGridEmailProvider:
    """Send HTML email through the SendGrid v3 REST API."""

    def __init__(self, api_key: str, sender: str, *, client: SendGridAPIClient | None = None) -> None:
        self.sender = sender
        self._client = client or SendGridAPIClient(api_key)

    def send(self, to: str, subject: str, html: str) -> str:
        message = Mail(
            from_email=self.sender,
            to_emails=to,
            subject=subject,
            html_content=html,
        )

        try:
            response = self._client.send(message)
        except Exception as exc:
            error = describe_sendgrid_failure(
                getattr(exc, "status_code", None), getattr(exc, "body", None), str(exc)
            )
            logger.error("Email to %s failed: %s", to, error)
            raise EmailDeliveryError(error) from exc

        status_code = getattr(response, "status_code", None)
        if not isinstance(status_code, int) or not 200 <= status_code < 300:
            error = describe_sendgrid_failure(status_code, getattr(response, "body", None))
            logger.error("Email to %s rejected: %s", to, error)
            raise EmailDeliveryError(error)

        headers = getattr(response, "headers", None) or {}
        message_id = headers.get("X-Message-Id") or headers.get("x-message-id")
        return str(message_id) if message_id else f"sendgrid-{status_code}"


class UnconfiguredEmailProvider:
    """Stand-in used when SendGrid credentials are missing; every send fails."""

    def send(self, to: str, subject: str, html: str) -> str:
        raise EmailDeliveryError("SendGrid configuration incomplete; email delivery disabled")


def build_email_provider(settings: Settings | None = None) -> EmailProvider:
    """Return the provider matching the configured credentials."""

    settings = settings or get_settings()
    if not (settings.sendgrid_api_key and settings.sendgrid_sender):
        logger.warning("SendGrid configuration incomplete; emails will be recorded as failed")
        return UnconfiguredEmailProvider()
    return SendGridEmailProvider(settings.sendgrid_api_key, settings.sendgrid_sender)


__all__ = [
    "EmailProvider",
    "SendGridEmailProvider",
    "UnconfiguredEmailProvider",
    "build_email_provider",
    "describe_sendgrid_failure",
]
