"""Error taxonomy for the notification service."""

from __future__ import annotations

from typing import Any


class NotificationServiceError(Exception):
    """Base class for every error raised by the service."""


class ConnectionFault(NotificationServiceError):
    """The broker is unreachable or the connection was lost."""


class EntityNotFoundError(NotificationServiceError):
    """An entity essential to composing a notification could not be resolved."""

    def __init__(self, entity: str, identifier: Any) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} {identifier} not found")


class InvalidRecipientError(NotificationServiceError):
    """The recipient address is not a plausible email address."""


class EmailDeliveryError(NotificationServiceError):
    """The email provider rejected or failed to accept a message."""


class DeliveryFailedError(NotificationServiceError):
    """At least one recipient of a fan-out could not be notified."""

    def __init__(self, event_type: str, failures: list[tuple[str, str]]) -> None:
        self.event_type = event_type
        self.failures = failures
        details = ", ".join(f"{recipient}: {error}" for recipient, error in failures)
        super().__init__(f"{len(failures)} delivery failure(s) for {event_type}: {details}")


class InvalidStatusTransition(NotificationServiceError):
    """A notification status change would leave a terminal state."""


__all__ = [
    "NotificationServiceError",
    "ConnectionFault",
    "EntityNotFoundError",
    "InvalidRecipientError",
    "EmailDeliveryError",
    "DeliveryFailedError",
    "InvalidStatusTransition",
]
