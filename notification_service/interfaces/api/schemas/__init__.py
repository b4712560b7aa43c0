from .health import BrokerHealth, HealthRead
from .notification import (
    MarkAllReadResponse,
    MarkAllReadResult,
    NotificationListResponse,
    NotificationLogRead,
    NotificationResponse,
    UnreadCount,
    UnreadCountResponse,
    UserScopedRequest,
)

__all__ = [
    "BrokerHealth",
    "HealthRead",
    "MarkAllReadResponse",
    "MarkAllReadResult",
    "NotificationListResponse",
    "NotificationLogRead",
    "NotificationResponse",
    "UnreadCount",
    "UnreadCountResponse",
    "UserScopedRequest",
]
