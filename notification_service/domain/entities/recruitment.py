"""Domain entities for the recruiting marketplace read by notification lookups."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass
class Company:
    id: str
    name: str
    identity_organization_id: str | None = None


@dataclass
class Job:
    id: str
    title: str
    company_id: str | None
    company: Company | None = None
    status: str | None = None

    @property
    def company_name(self) -> str:
        return self.company.name if self.company else "Unknown Company"


@dataclass
class Candidate:
    id: str
    full_name: str | None
    email: str | None
    user_id: str | None = None
    phone: str | None = None


@dataclass
class Recruiter:
    id: str
    user_id: str | None
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    status: str | None = None


@dataclass
class Application:
    id: str
    job_id: str
    candidate_id: str
    recruiter_id: str | None
    stage: str | None = None


@dataclass
class ApplicationContext:
    """Application joined with the job, candidate and recruiter it references."""

    application: Application
    job: Job | None
    candidate: Candidate | None
    recruiter: Recruiter | None


@dataclass
class PlacementCollaborator:
    recruiter_id: str
    role: str
    split_percentage: Decimal | None = None


@dataclass
class Placement:
    id: str
    job_id: str
    candidate_id: str
    company_id: str | None
    recruiter_id: str | None
    salary: Decimal | None = None
    recruiter_share: Decimal | None = None
    state: str | None = None
    start_date: datetime | None = None
    guarantee_expires_at: datetime | None = None
    failure_reason: str | None = None
    collaborators: list[PlacementCollaborator] = field(default_factory=list)


__all__ = [
    "Company",
    "Job",
    "Candidate",
    "Recruiter",
    "Application",
    "ApplicationContext",
    "Placement",
    "PlacementCollaborator",
]
