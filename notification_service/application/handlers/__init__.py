"""Domain handlers turning events into deliveries."""

from .applications import ApplicationsHandler
from .base import DomainHandler, FanOutResult, HandlerContext, RecipientOutcome
from .billing import BillingHandler
from .candidates import CandidatesHandler
from .chat import ChatHandler
from .collaboration import CollaborationHandler
from .gates import GateWorkflowHandler
from .invitations import InvitationsHandler
from .placements import PlacementsHandler
from .proposals import ProposalsHandler
from .support import SupportHandler

HANDLER_CLASSES: tuple[type[DomainHandler], ...] = (
    ApplicationsHandler,
    PlacementsHandler,
    ProposalsHandler,
    CandidatesHandler,
    CollaborationHandler,
    InvitationsHandler,
    BillingHandler,
    ChatHandler,
    GateWorkflowHandler,
    SupportHandler,
)

__all__ = [
    "ApplicationsHandler",
    "BillingHandler",
    "CandidatesHandler",
    "ChatHandler",
    "CollaborationHandler",
    "DomainHandler",
    "FanOutResult",
    "GateWorkflowHandler",
    "HANDLER_CLASSES",
    "HandlerContext",
    "InvitationsHandler",
    "PlacementsHandler",
    "ProposalsHandler",
    "RecipientOutcome",
    "SupportHandler",
]
