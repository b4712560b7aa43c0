"""Shared fixtures: an in-memory database, seeded marketplace data and fakes."""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

# Ensure the project root (which contains ``main`` and the package) is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from notification_service.application.router import EventRouter
from notification_service.config import Settings
from notification_service.domain.exceptions import EmailDeliveryError
from notification_service.infrastructure.database import (
    build_engine,
    build_session_factory,
    initialize_database,
)
from notification_service.infrastructure.models import (
    ApplicationModel,
    CandidateModel,
    CompanyModel,
    ConversationParticipantModel,
    InvitationModel,
    JobModel,
    MembershipModel,
    NotificationLogModel,
    OrganizationModel,
    PlacementCollaboratorModel,
    PlacementModel,
    RecruiterModel,
    UserModel,
)

START = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


class FakeEmailProvider:
    """Records every message; addresses in ``fail_for`` are rejected."""

    def __init__(self) -> None:
        self.sent: list[SimpleNamespace] = []
        self.fail_for: set[str] = set()

    def send(self, to: str, subject: str, html: str) -> str:
        if to in self.fail_for:
            raise EmailDeliveryError(f"SendGrid responded with status 400: rejected {to}")
        self.sent.append(SimpleNamespace(to=to, subject=subject, html=html))
        return f"msg-{len(self.sent)}"

    def recipients(self) -> list[str]:
        return [message.to for message in self.sent]


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def seed_marketplace(session) -> None:
    """Insert a company with two reviewers, a job, candidates and recruiters."""

    session.add_all(
        [
            UserModel(id="u-cand", email="casey@example.com", name="Casey Candidate"),
            UserModel(id="u-rec", email="riley@example.com", name="Riley Recruiter"),
            UserModel(id="u-rec2", email="sam@example.com", first_name="Sam", last_name="Split"),
            UserModel(
                id="u-admin", external_id="ext-admin", email="avery@acme.test", name="Avery Admin"
            ),
            UserModel(id="u-hm", email="harper@acme.test", name="Harper Manager"),
            UserModel(id="u-nomail", email=None, name="No Mail"),
            OrganizationModel(id="org-1", name="Acme", type="company"),
            MembershipModel(id="m-1", organization_id="org-1", user_id="u-admin", role="company_admin"),
            MembershipModel(id="m-2", organization_id="org-1", user_id="u-hm", role="hiring_manager"),
            MembershipModel(id="m-3", organization_id="org-1", user_id="u-rec", role="recruiter"),
            CompanyModel(id="co-1", name="Acme", identity_organization_id="org-1"),
            InvitationModel(
                id="inv-1",
                organization_id="org-1",
                email="new.hire@acme.test",
                role="hiring_manager",
                token="tok-1",
                invited_by="u-admin",
                status="pending",
                expires_at=START + timedelta(days=7),
            ),
            JobModel(id="job-1", title="Backend Engineer", company_id="co-1", status="active"),
            CandidateModel(
                id="cand-1",
                full_name="Casey C.",
                email="old-casey@example.com",
                user_id="u-cand",
            ),
            CandidateModel(id="cand-2", full_name="Jamie Guest", email="jamie@example.com"),
            CandidateModel(id="cand-3", full_name="Nobody", email=None),
            RecruiterModel(id="rec-1", user_id="u-rec", name="Riley", email="riley@example.com"),
            RecruiterModel(id="rec-2", user_id="u-rec2", name="Sam", email="sam@example.com"),
            RecruiterModel(id="rec-orphan", user_id=None, name="Orphan", email="orphan@example.com"),
            ApplicationModel(
                id="app-1",
                job_id="job-1",
                candidate_id="cand-1",
                recruiter_id="rec-1",
                stage="screen",
            ),
            ApplicationModel(
                id="app-missing-candidate",
                job_id="job-1",
                candidate_id="cand-404",
                recruiter_id="rec-1",
                stage="screen",
            ),
            PlacementModel(
                id="pl-1",
                job_id="job-1",
                candidate_id="cand-1",
                company_id="co-1",
                recruiter_id="rec-1",
                salary=120000,
                state="hired",
            ),
            PlacementCollaboratorModel(
                id="pc-1", placement_id="pl-1", recruiter_id="rec-2", role="sourcer"
            ),
            ConversationParticipantModel(conversation_id="conv-1", user_id="u-cand"),
            ConversationParticipantModel(
                conversation_id="conv-muted", user_id="u-cand", muted_at=START
            ),
        ]
    )
    session.commit()


@pytest.fixture()
def engine():
    """Return a fresh in-memory database with every table created."""

    engine = build_engine("sqlite://")
    initialize_database(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture()
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def seeded(session_factory):
    """Seed the marketplace entities and return the session factory."""

    db = session_factory()
    try:
        seed_marketplace(db)
    finally:
        db.close()
    return session_factory


@pytest.fixture()
def fetch_rows(session_factory):
    """Return a helper loading notification rows through a short-lived session."""

    def fetch(**filters) -> list[NotificationLogModel]:
        db = session_factory()
        try:
            query = db.query(NotificationLogModel).filter_by(**filters)
            return query.order_by(NotificationLogModel.created_at, NotificationLogModel.id).all()
        finally:
            db.close()

    return fetch


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        consumer_enabled=False,
        sendgrid_api_key=None,
        sendgrid_sender=None,
        portal_url="https://portal.test",
        candidate_website_url="https://candidates.test",
        support_email="support@splits.test",
        handler_max_retries=2,
        handler_retry_delay_seconds=0,
        email_debounce_minutes=10,
    )


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def email_provider() -> FakeEmailProvider:
    return FakeEmailProvider()


@pytest.fixture()
def event_router(seeded, email_provider, settings, clock) -> EventRouter:
    """Router wired to the seeded database and the recording email provider."""

    return EventRouter(seeded, email_provider=email_provider, settings=settings, clock=clock)


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"
