"""Domain entities for companies' organizations and invitations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

ROLE_COMPANY_ADMIN = "company_admin"
ROLE_HIRING_MANAGER = "hiring_manager"
ROLE_RECRUITER = "recruiter"


@dataclass
class Organization:
    """Tenant grouping the members of a company or recruiting firm."""

    id: str
    name: str
    type: str | None = None


@dataclass
class Membership:
    """A user's role inside an organization."""

    id: str
    organization_id: str
    user_id: str
    role: str


@dataclass
class Invitation:
    """Invitation of an email address to join an organization."""

    id: str
    organization_id: str
    email: str
    role: str
    token: str | None
    invited_by: str | None
    status: str | None
    expires_at: datetime | None = None


__all__ = [
    "Organization",
    "Membership",
    "Invitation",
    "ROLE_COMPANY_ADMIN",
    "ROLE_HIRING_MANAGER",
    "ROLE_RECRUITER",
]
