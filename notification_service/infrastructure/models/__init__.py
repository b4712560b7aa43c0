"""ORM models used by the application infrastructure."""

from .chat import ConversationParticipantModel
from .notification_log import NotificationLogModel
from .organization import InvitationModel, MembershipModel, OrganizationModel
from .recruitment import (
    ApplicationModel,
    CandidateModel,
    CompanyModel,
    JobModel,
    PlacementCollaboratorModel,
    PlacementModel,
    RecruiterModel,
)
from .user import UserModel

__all__ = [
    "ApplicationModel",
    "CandidateModel",
    "CompanyModel",
    "ConversationParticipantModel",
    "InvitationModel",
    "JobModel",
    "MembershipModel",
    "NotificationLogModel",
    "OrganizationModel",
    "PlacementCollaboratorModel",
    "PlacementModel",
    "RecruiterModel",
    "UserModel",
]
