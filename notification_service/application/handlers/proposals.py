"""Notifications for split proposals and recruiter-proposed opportunities."""

from __future__ import annotations

import logging

from notification_service.domain.entities import (
    CONTACT_TYPE_CANDIDATE,
    PRIORITY_HIGH,
    PRIORITY_NORMAL,
    Contact,
    DomainEvent,
    EventKind,
)

from .base import DomainHandler

logger = logging.getLogger(__name__)

CATEGORY = "proposal"


class ProposalsHandler(DomainHandler):
    """Split proposals between recruiters and opportunities offered to candidates."""

    routes = {
        EventKind.PROPOSAL_CREATED: "handle_proposal_created",
        EventKind.PROPOSAL_ACCEPTED: "handle_proposal_accepted",
        EventKind.PROPOSAL_DECLINED: "handle_proposal_declined",
        EventKind.PROPOSAL_TIMEOUT: "handle_proposal_timeout",
        EventKind.APPLICATION_RECRUITER_PROPOSED: "handle_recruiter_proposed",
        EventKind.APPLICATION_RECRUITER_APPROVED: "handle_recruiter_approved",
        EventKind.APPLICATION_RECRUITER_DECLINED: "handle_recruiter_declined",
        EventKind.APPLICATION_RECRUITER_OPPORTUNITY_EXPIRED: "handle_opportunity_expired",
    }

    def _proposal_context(self, event: DomainEvent) -> dict[str, str]:
        job_id = event.get("job_id", "jobId")
        job = self.require(self.lookup.get_job(job_id), "job", job_id)
        candidate_id = event.get("candidate_id", "candidateId")
        candidate = self.lookup.get_candidate(candidate_id)
        proposer_id = event.get("proposing_recruiter_id", "proposingRecruiterId")
        proposer = self.lookup.get_recruiter(proposer_id)
        return {
            "job_title": job.title,
            "company_name": job.company_name,
            "candidate_name": (candidate.full_name if candidate else None) or "a candidate",
            "proposer_name": (proposer.name if proposer else None) or "A recruiter",
            "split_percentage": str(event.get("split_percentage", "splitPercentage", default="")),
            "reason": event.get("reason", "response_notes", default=""),
        }

    def _notify_recruiter(
        self,
        event: DomainEvent,
        recruiter_id: str | None,
        template: str,
        *,
        priority: str = PRIORITY_NORMAL,
    ) -> None:
        recipient = self.require(
            self.contacts.resolve_recruiter(recruiter_id), "recruiter", recruiter_id
        )
        context = self._proposal_context(event)
        proposal_id = event.get("proposal_id", "proposalId")
        action_url = self.portal_link(f"proposals/{proposal_id}" if proposal_id else "proposals")

        self.deliver_all(
            event,
            [recipient],
            lambda contact: self.notify(
                event,
                contact,
                template,
                context,
                action_url=action_url,
                priority=priority,
                category=CATEGORY,
            ),
        )

    def handle_proposal_created(self, event: DomainEvent) -> None:
        self._notify_recruiter(
            event,
            event.get("recipient_recruiter_id", "recipientRecruiterId"),
            "proposal_created",
            priority=PRIORITY_HIGH,
        )

    def handle_proposal_accepted(self, event: DomainEvent) -> None:
        self._notify_recruiter(
            event,
            event.get("proposing_recruiter_id", "proposingRecruiterId"),
            "proposal_accepted",
        )

    def handle_proposal_declined(self, event: DomainEvent) -> None:
        self._notify_recruiter(
            event,
            event.get("proposing_recruiter_id", "proposingRecruiterId"),
            "proposal_declined",
        )

    def handle_proposal_timeout(self, event: DomainEvent) -> None:
        self._notify_recruiter(
            event,
            event.get("proposing_recruiter_id", "proposingRecruiterId"),
            "proposal_timeout",
        )

    def handle_recruiter_proposed(self, event: DomainEvent) -> None:
        facts = self.application_facts(event)
        candidate = self.candidate_contact(facts.candidate.id)
        recruiter = self.recruiter_contact(facts.recruiter_id)
        context = facts.template_context(
            recruiter_name=recruiter.name if recruiter else "A recruiter",
            pitch=event.get("pitch", "message", default=""),
        )
        action_url = self.candidate_link(
            f"opportunities/{facts.application_id}" if facts.application_id else "opportunities"
        )

        self.deliver_all(
            event,
            [candidate],
            lambda contact: self.notify(
                event,
                contact,
                "recruiter_proposed_job",
                context,
                action_url=action_url,
                priority=PRIORITY_HIGH,
                category=CATEGORY,
            ),
        )

    def _notify_proposing_recruiter(self, event: DomainEvent, template: str) -> None:
        facts = self.application_facts(event)
        recruiter = self.require(
            self.recruiter_contact(facts.recruiter_id), "recruiter", facts.recruiter_id
        )
        context = facts.template_context(reason=event.get("reason", default=""))
        action_url = self.portal_link(
            f"applications/{facts.application_id}" if facts.application_id else "applications"
        )

        self.deliver_all(
            event,
            [recruiter],
            lambda contact: self.notify(
                event, contact, template, context, action_url=action_url, category=CATEGORY
            ),
        )

    def handle_recruiter_approved(self, event: DomainEvent) -> None:
        self._notify_proposing_recruiter(event, "opportunity_approved")

    def handle_recruiter_declined(self, event: DomainEvent) -> None:
        self._notify_proposing_recruiter(event, "opportunity_declined")

    def handle_opportunity_expired(self, event: DomainEvent) -> None:
        facts = self.application_facts(event)
        candidate = self.contacts.resolve_candidate(facts.candidate.id)
        recruiter = self.recruiter_contact(facts.recruiter_id)
        if candidate is None and recruiter is None:
            logger.warning(
                "Nobody to notify about expired opportunity %s", facts.application_id
            )
            return
        context = facts.template_context()
        portal_url = self.portal_link("applications")
        candidate_url = self.candidate_link("opportunities")

        def deliver(contact: Contact) -> None:
            self.notify(
                event,
                contact,
                "opportunity_expired",
                context,
                action_url=candidate_url if contact.type == CONTACT_TYPE_CANDIDATE else portal_url,
                category=CATEGORY,
            )

        self.deliver_all(event, [candidate, recruiter], deliver)


__all__ = ["ProposalsHandler"]
