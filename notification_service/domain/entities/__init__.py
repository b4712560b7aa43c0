"""Domain entities exposed by the application."""

from .chat import ConversationParticipant
from .contact import (
    CONTACT_TYPE_CANDIDATE,
    CONTACT_TYPE_COMPANY_ADMIN,
    CONTACT_TYPE_RECRUITER,
    CONTACT_TYPE_USER,
    Contact,
)
from .domain_event import DomainEvent, EventKind, MalformedEventError, routing_keys
from .notification_log import (
    CHANNEL_BOTH,
    CHANNEL_EMAIL,
    CHANNEL_IN_APP,
    IN_APP_CHANNELS,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_NORMAL,
    PRIORITY_URGENT,
    STATUS_FAILED,
    STATUS_PENDING,
    STATUS_SENT,
    NotificationLog,
)
from .organization import (
    ROLE_COMPANY_ADMIN,
    ROLE_HIRING_MANAGER,
    ROLE_RECRUITER,
    Invitation,
    Membership,
    Organization,
)
from .recruitment import (
    Application,
    ApplicationContext,
    Candidate,
    Company,
    Job,
    Placement,
    PlacementCollaborator,
    Recruiter,
)
from .user import User

__all__ = [
    "Application",
    "ApplicationContext",
    "Candidate",
    "Company",
    "Contact",
    "CONTACT_TYPE_CANDIDATE",
    "CONTACT_TYPE_COMPANY_ADMIN",
    "CONTACT_TYPE_RECRUITER",
    "CONTACT_TYPE_USER",
    "ConversationParticipant",
    "DomainEvent",
    "EventKind",
    "Invitation",
    "Job",
    "MalformedEventError",
    "Membership",
    "NotificationLog",
    "CHANNEL_BOTH",
    "CHANNEL_EMAIL",
    "CHANNEL_IN_APP",
    "IN_APP_CHANNELS",
    "PRIORITY_HIGH",
    "PRIORITY_LOW",
    "PRIORITY_NORMAL",
    "PRIORITY_URGENT",
    "STATUS_FAILED",
    "STATUS_PENDING",
    "STATUS_SENT",
    "Organization",
    "Placement",
    "PlacementCollaborator",
    "Recruiter",
    "ROLE_COMPANY_ADMIN",
    "ROLE_HIRING_MANAGER",
    "ROLE_RECRUITER",
    "User",
    "routing_keys",
]
