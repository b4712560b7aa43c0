"""Repository implementations for infrastructure layer."""

from .contact_repository import ContactResolver
from .lookup_repository import ContextLookup
from .notification_repository import NotificationLogRepository

__all__ = [
    "ContactResolver",
    "ContextLookup",
    "NotificationLogRepository",
]
