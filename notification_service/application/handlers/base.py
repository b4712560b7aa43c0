"""Shared plumbing for the domain event handlers."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, ClassVar, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from notification_service.application.delivery import EmailChannel, InAppChannel
from notification_service.application.rate_limit import EmailRateLimiter
from notification_service.application.templates import render_email
from notification_service.config import Settings
from notification_service.domain.entities import (
    CONTACT_TYPE_USER,
    PRIORITY_NORMAL,
    Candidate,
    Contact,
    DomainEvent,
    EventKind,
    Job,
)
from notification_service.domain.exceptions import (
    DeliveryFailedError,
    EntityNotFoundError,
    InvalidRecipientError,
    NotificationServiceError,
)
from notification_service.infrastructure.email import EmailProvider
from notification_service.infrastructure.repositories import (
    ContactResolver,
    ContextLookup,
    NotificationLogRepository,
)
from notification_service.utils import utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")

OUTCOME_SENT = "sent"
OUTCOME_SKIPPED = "skipped"
OUTCOME_FAILED = "failed"


@dataclass
class HandlerContext:
    """Collaborators available to a handler while it processes one event."""

    session: Session
    lookup: ContextLookup
    contacts: ContactResolver
    notifications: NotificationLogRepository
    email: EmailChannel
    in_app: InAppChannel
    rate_limiter: EmailRateLimiter
    settings: Settings

    @classmethod
    def build(
        cls,
        session: Session,
        *,
        email_provider: EmailProvider,
        settings: Settings,
        clock: Callable[[], datetime] = utc_now,
    ) -> "HandlerContext":
        lookup = ContextLookup(session)
        notifications = NotificationLogRepository(session)
        return cls(
            session=session,
            lookup=lookup,
            contacts=ContactResolver(session, lookup),
            notifications=notifications,
            email=EmailChannel(notifications, email_provider, clock=clock),
            in_app=InAppChannel(notifications, clock=clock),
            rate_limiter=EmailRateLimiter(
                notifications,
                timedelta(minutes=settings.email_debounce_minutes),
                clock=clock,
            ),
            settings=settings,
        )


@dataclass(frozen=True)
class RecipientOutcome:
    recipient: str
    contact_type: str
    status: str
    error: str | None = None


@dataclass
class FanOutResult:
    """Per-recipient outcome of delivering one event to several contacts."""

    outcomes: list[RecipientOutcome] = field(default_factory=list)

    @property
    def sent(self) -> list[RecipientOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == OUTCOME_SENT]

    @property
    def skipped(self) -> list[RecipientOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == OUTCOME_SKIPPED]

    @property
    def failures(self) -> list[RecipientOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == OUTCOME_FAILED]

    def raise_for_failures(self, event_type: str) -> None:
        failures = self.failures
        if failures:
            raise DeliveryFailedError(
                event_type, [(outcome.recipient, outcome.error or "") for outcome in failures]
            )


@dataclass(frozen=True)
class ApplicationFacts:
    """The application, job and candidate an application event refers to."""

    application_id: str | None
    job: Job
    candidate: Candidate
    recruiter_id: str | None

    @property
    def job_title(self) -> str:
        return self.job.title

    @property
    def company_name(self) -> str:
        return self.job.company_name

    @property
    def candidate_name(self) -> str:
        return self.candidate.full_name or self.candidate.email or "A candidate"

    def template_context(self, **extra: Any) -> dict[str, Any]:
        context = {
            "candidate_name": self.candidate_name,
            "job_title": self.job_title,
            "company_name": self.company_name,
        }
        context.update(extra)
        return context


class DomainHandler:
    """Base class for the handlers of one business domain.

    Subclasses list the event kinds they own in ``routes``; each entry maps an
    :class:`EventKind` to the name of the method handling it.
    """

    routes: ClassVar[dict[EventKind, str]] = {}

    def __init__(self, context: HandlerContext) -> None:
        self.context = context
        self.lookup = context.lookup
        self.contacts = context.contacts
        self.settings = context.settings

    @staticmethod
    def require(value: T | None, entity: str, identifier: Any) -> T:
        """Return ``value`` or raise :class:`EntityNotFoundError`."""

        if value is None:
            raise EntityNotFoundError(entity, identifier)
        return value

    def portal_link(self, path: str) -> str:
        return f"{self.settings.portal_url.rstrip('/')}/{path.lstrip('/')}"

    def candidate_link(self, path: str) -> str:
        return f"{self.settings.candidate_website_url.rstrip('/')}/{path.lstrip('/')}"

    @staticmethod
    def email_contact(email: str, name: str | None = None) -> Contact:
        """Address someone known only by an email address."""

        return Contact(
            id=email,
            user_id=None,
            name=name or email,
            email=email,
            phone=None,
            type=CONTACT_TYPE_USER,
            entity_id=email,
        )

    def application_facts(self, event: DomainEvent) -> ApplicationFacts:
        """Resolve the job and candidate of an application event.

        Ids present in the payload win; the stored application fills the gaps.
        """

        application_id = event.get("application_id", "applicationId")
        application_context = self.lookup.get_application_context(application_id)
        application = application_context.application if application_context else None

        job_id = event.get(
            "job_id", "jobId", default=application.job_id if application else None
        )
        candidate_id = event.get(
            "candidate_id", "candidateId", default=application.candidate_id if application else None
        )
        recruiter_id = event.get(
            "recruiter_id", "recruiterId", default=application.recruiter_id if application else None
        )

        job = self.require(self.lookup.get_job(job_id), "job", job_id)
        candidate = self.require(self.lookup.get_candidate(candidate_id), "candidate", candidate_id)
        return ApplicationFacts(
            application_id=application_id,
            job=job,
            candidate=candidate,
            recruiter_id=recruiter_id,
        )

    def candidate_contact(self, candidate_id: str | None) -> Contact:
        return self.require(
            self.contacts.resolve_candidate(candidate_id), "candidate contact", candidate_id
        )

    def recruiter_contact(self, recruiter_id: str | None) -> Contact | None:
        """Resolve the recruiter named by an event; ``None`` when none is named."""

        if not recruiter_id:
            return None
        return self.require(
            self.contacts.resolve_recruiter(recruiter_id), "recruiter contact", recruiter_id
        )

    def notify(
        self,
        event: DomainEvent,
        contact: Contact,
        template: str,
        context: dict[str, Any],
        *,
        action_url: str | None = None,
        email: bool = True,
        in_app: bool = True,
        priority: str = PRIORITY_NORMAL,
        category: str | None = None,
    ) -> None:
        """Deliver ``template`` to ``contact`` by email and/or in-app."""

        rendered = render_email(
            template, {"recipient_name": contact.first_name, **context}, action_url=action_url
        )
        email_error: NotificationServiceError | None = None
        if email:
            try:
                self.context.email.send(
                    contact.email,
                    rendered.subject,
                    rendered.html,
                    event_type=event.event_type,
                    template=template,
                    user_id=contact.user_id,
                    payload=event.payload,
                    event_key=event.event_key,
                )
            except NotificationServiceError as exc:
                email_error = exc
        if in_app and contact.user_id:
            self.context.in_app.create(
                user_id=contact.user_id,
                email=contact.email,
                event_type=event.event_type,
                subject=rendered.subject,
                template=template,
                payload=event.payload,
                priority=priority,
                category=category,
                action_url=action_url,
                action_label=rendered.action_label,
                event_key=event.event_key,
            )
        if email_error is not None:
            raise email_error

    def fan_out(
        self,
        event: DomainEvent,
        recipients: Iterable[Contact | None],
        deliver: Callable[[Contact], Any],
    ) -> FanOutResult:
        """Attempt ``deliver`` for every recipient; one failure never stops the rest."""

        result = FanOutResult()
        seen: set[str] = set()
        for contact in recipients:
            if contact is None:
                continue
            key = contact.email.strip().lower()
            if key in seen:
                continue
            seen.add(key)

            try:
                deliver(contact)
            except InvalidRecipientError as exc:
                logger.warning("Skipping %s for %s: %s", event.event_type, contact.email, exc)
                result.outcomes.append(
                    RecipientOutcome(contact.email, contact.type, OUTCOME_SKIPPED, str(exc))
                )
            except (NotificationServiceError, SQLAlchemyError) as exc:
                if isinstance(exc, SQLAlchemyError):
                    self.context.session.rollback()
                logger.warning(
                    "Delivering %s to %s failed: %s", event.event_type, contact.email, exc
                )
                result.outcomes.append(
                    RecipientOutcome(contact.email, contact.type, OUTCOME_FAILED, str(exc))
                )
            else:
                result.outcomes.append(RecipientOutcome(contact.email, contact.type, OUTCOME_SENT))

        logger.info(
            "%s delivered: %d sent, %d skipped, %d failed",
            event.event_type,
            len(result.sent),
            len(result.skipped),
            len(result.failures),
        )
        return result

    def deliver_all(
        self,
        event: DomainEvent,
        recipients: Iterable[Contact | None],
        deliver: Callable[[Contact], Any],
    ) -> FanOutResult:
        """Fan out and raise :class:`DeliveryFailedError` if any recipient failed."""

        result = self.fan_out(event, recipients, deliver)
        result.raise_for_failures(event.event_type)
        return result


__all__ = [
    "ApplicationFacts",
    "DomainHandler",
    "FanOutResult",
    "HandlerContext",
    "RecipientOutcome",
]
