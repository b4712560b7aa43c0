"""Notifications for candidate sourcing, invitations and ownership."""

from __future__ import annotations

import logging

from notification_service.domain.entities import (
    PRIORITY_HIGH,
    PRIORITY_LOW,
    Candidate,
    Contact,
    DomainEvent,
    EventKind,
)

from .base import DomainHandler

logger = logging.getLogger(__name__)

CATEGORY = "candidate"


class CandidatesHandler(DomainHandler):
    routes = {
        EventKind.CANDIDATE_SOURCED: "handle_sourced",
        EventKind.CANDIDATE_OUTREACH_RECORDED: "handle_outreach_recorded",
        EventKind.CANDIDATE_INVITED: "handle_invited",
        EventKind.CANDIDATE_CONSENT_GIVEN: "handle_consent_given",
        EventKind.CANDIDATE_CONSENT_DECLINED: "handle_consent_declined",
        EventKind.OWNERSHIP_CONFLICT_DETECTED: "handle_ownership_conflict",
    }

    def _candidate(self, event: DomainEvent) -> Candidate:
        candidate_id = event.get("candidate_id", "candidateId")
        return self.require(self.lookup.get_candidate(candidate_id), "candidate", candidate_id)

    def _candidate_url(self, candidate: Candidate) -> str:
        return self.portal_link(f"candidates/{candidate.id}")

    def _notify_recruiter(
        self,
        event: DomainEvent,
        recruiter_id: str | None,
        template: str,
        context: dict[str, str],
        *,
        action_url: str,
        email: bool = True,
        priority: str = PRIORITY_LOW,
    ) -> None:
        recruiter = self.require(
            self.contacts.resolve_recruiter(recruiter_id), "recruiter", recruiter_id
        )
        self.deliver_all(
            event,
            [recruiter],
            lambda contact: self.notify(
                event,
                contact,
                template,
                context,
                action_url=action_url,
                email=email,
                priority=priority,
                category=CATEGORY,
            ),
        )

    def handle_sourced(self, event: DomainEvent) -> None:
        candidate = self._candidate(event)
        self._notify_recruiter(
            event,
            event.get("sourcer_recruiter_id", "sourcerRecruiterId", "recruiter_id", "recruiterId"),
            "candidate_sourced",
            {
                "candidate_name": candidate.full_name or "A candidate",
                "protection_days": str(event.get("protection_days", "protectionDays", default=365)),
            },
            action_url=self._candidate_url(candidate),
        )

    def handle_outreach_recorded(self, event: DomainEvent) -> None:
        candidate = self._candidate(event)
        self._notify_recruiter(
            event,
            event.get("recruiter_id", "recruiterId"),
            "candidate_outreach_recorded",
            {
                "candidate_name": candidate.full_name or "A candidate",
                "outreach_channel": event.get("channel", "outreach_channel", default="email"),
            },
            action_url=self._candidate_url(candidate),
            email=False,
        )

    def handle_invited(self, event: DomainEvent) -> None:
        candidate = self._candidate(event)
        recipient = self.contacts.resolve_candidate(candidate.id)
        if recipient is None:
            invited_email = event.get("email", "candidate_email", "candidateEmail")
            recipient = self.require(
                self.email_contact(invited_email, candidate.full_name) if invited_email else None,
                "candidate contact",
                candidate.id,
            )

        recruiter_id = event.get("recruiter_id", "recruiterId")
        recruiter = self.lookup.get_recruiter(recruiter_id)
        token = event.get("invitation_token", "invitationToken", "token")
        action_url = self.candidate_link(f"invitation/{token}" if token else "sign-up")
        context = {
            "candidate_name": candidate.full_name or recipient.name,
            "recruiter_name": (recruiter.name if recruiter else None) or "A recruiter",
            "personal_message": event.get("personal_message", "personalMessage", default=""),
        }

        self.deliver_all(
            event,
            [recipient],
            lambda contact: self.notify(
                event,
                contact,
                "candidate_invited",
                context,
                action_url=action_url,
                priority=PRIORITY_HIGH,
                category=CATEGORY,
            ),
        )

    def _consent(self, event: DomainEvent, template: str) -> None:
        candidate = self._candidate(event)
        self._notify_recruiter(
            event,
            event.get("recruiter_id", "recruiterId"),
            template,
            {
                "candidate_name": candidate.full_name or "A candidate",
                "reason": event.get("reason", "declined_reason", "declinedReason", default=""),
            },
            action_url=self._candidate_url(candidate),
            priority=PRIORITY_HIGH,
        )

    def handle_consent_given(self, event: DomainEvent) -> None:
        self._consent(event, "candidate_consent_given")

    def handle_consent_declined(self, event: DomainEvent) -> None:
        self._consent(event, "candidate_consent_declined")

    def handle_ownership_conflict(self, event: DomainEvent) -> None:
        candidate = self._candidate(event)
        owner_id = event.get("original_sourcer_id", "originalSourcerId", "owner_recruiter_id")
        attempting_id = event.get(
            "attempting_recruiter_id", "attemptingRecruiterId", "conflicting_recruiter_id"
        )
        owner = self.require(
            self.contacts.resolve_recruiter(owner_id), "recruiter", owner_id
        )
        attempting = self.contacts.resolve_recruiter(attempting_id) if attempting_id else None
        if attempting is None:
            logger.warning(
                "Attempting recruiter %s for candidate %s could not be resolved",
                attempting_id,
                candidate.id,
            )

        context = {
            "candidate_name": candidate.full_name or "A candidate",
            "owner_name": owner.name,
            "attempting_name": attempting.name if attempting else "Another recruiter",
        }
        action_url = self._candidate_url(candidate)

        def deliver(contact: Contact) -> None:
            template = "ownership_conflict" if contact is owner else "ownership_conflict_rejection"
            self.notify(
                event,
                contact,
                template,
                context,
                action_url=action_url,
                priority=PRIORITY_HIGH,
                category=CATEGORY,
            )

        self.deliver_all(event, [owner, attempting], deliver)


__all__ = ["CandidatesHandler"]
