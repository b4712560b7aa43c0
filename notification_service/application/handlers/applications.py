"""Notifications for the application lifecycle and AI reviews."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from notification_service.domain.entities import (
    CONTACT_TYPE_CANDIDATE,
    CONTACT_TYPE_RECRUITER,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    ROLE_COMPANY_ADMIN,
    ROLE_HIRING_MANAGER,
    Contact,
    DomainEvent,
    EventKind,
)

from .base import DomainHandler

logger = logging.getLogger(__name__)

COMPANY_REVIEWER_ROLES = (ROLE_COMPANY_ADMIN, ROLE_HIRING_MANAGER)
CATEGORY = "application"


@dataclass(frozen=True)
class StageRule:
    """Who hears about an application moving into a stage."""

    candidate: bool
    company: bool
    headline: str


STAGE_RULES: dict[str, StageRule] = {
    "submitted": StageRule(candidate=False, company=True, headline="was submitted"),
    "company_review": StageRule(candidate=True, company=False, headline="is under company review"),
    "interview": StageRule(candidate=True, company=False, headline="moved to interviews"),
    "offer": StageRule(candidate=True, company=False, headline="reached the offer stage"),
    "hired": StageRule(candidate=True, company=True, headline="ended in a hire"),
    "rejected": StageRule(candidate=True, company=False, headline="was not selected"),
}
DEFAULT_STAGE_RULE = StageRule(candidate=False, company=False, headline="changed stage")


def stage_rule(stage: str | None) -> StageRule:
    return STAGE_RULES.get(stage or "", DEFAULT_STAGE_RULE)


def _humanize(stage: str | None) -> str:
    return (stage or "unknown").replace("_", " ")


class ApplicationsHandler(DomainHandler):
    routes = {
        EventKind.APPLICATION_CREATED: "handle_created",
        EventKind.APPLICATION_SUBMITTED_TO_COMPANY: "handle_submitted_to_company",
        EventKind.APPLICATION_WITHDRAWN: "handle_withdrawn",
        EventKind.APPLICATION_ACCEPTED: "handle_accepted",
        EventKind.APPLICATION_STAGE_CHANGED: "handle_stage_changed",
        EventKind.APPLICATION_PRESCREEN_REQUESTED: "handle_prescreen_requested",
        EventKind.APPLICATION_DRAFT_COMPLETED: "handle_draft_completed",
        EventKind.APPLICATION_NOTE_CREATED: "handle_note_created",
        EventKind.APPLICATION_PROPOSAL_ACCEPTED: "handle_proposal_accepted",
        EventKind.APPLICATION_PROPOSAL_DECLINED: "handle_proposal_declined",
        EventKind.AI_REVIEW_STARTED: "handle_ai_review_started",
        EventKind.AI_REVIEW_COMPLETED: "handle_ai_review_completed",
        EventKind.AI_REVIEW_FAILED: "handle_ai_review_failed",
    }

    def _application_links(self, application_id: str | None) -> tuple[str, str]:
        """Return the (portal, candidate website) links to an application."""

        suffix = f"applications/{application_id}" if application_id else "applications"
        return self.portal_link(suffix), self.candidate_link(suffix)

    def handle_created(self, event: DomainEvent) -> None:
        facts = self.application_facts(event)
        candidate = self.candidate_contact(facts.candidate.id)
        recruiter = self.recruiter_contact(facts.recruiter_id)
        portal_url, candidate_url = self._application_links(facts.application_id)
        context = facts.template_context(
            recruiter_name=recruiter.name if recruiter else "",
        )

        def deliver(contact: Contact) -> None:
            if contact.type == CONTACT_TYPE_CANDIDATE:
                self.notify(
                    event,
                    contact,
                    "candidate_application_submitted",
                    context,
                    action_url=candidate_url,
                    category=CATEGORY,
                )
            else:
                self.notify(
                    event,
                    contact,
                    "application_created",
                    context,
                    action_url=portal_url,
                    category=CATEGORY,
                )

        self.deliver_all(event, [candidate, recruiter], deliver)

    def handle_submitted_to_company(self, event: DomainEvent) -> None:
        facts = self.application_facts(event)
        candidate = self.candidate_contact(facts.candidate.id)
        admins = self.contacts.resolve_company_admins_for_company(
            facts.job.company_id, COMPANY_REVIEWER_ROLES
        )
        if not admins:
            logger.warning(
                "No company reviewers for job %s; only the candidate will be notified",
                facts.job.id,
            )
        portal_url, candidate_url = self._application_links(facts.application_id)
        context = facts.template_context()

        def deliver(contact: Contact) -> None:
            if contact.type == CONTACT_TYPE_CANDIDATE:
                self.notify(
                    event,
                    contact,
                    "application_submitted_to_company",
                    context,
                    action_url=candidate_url,
                    category=CATEGORY,
                )
            else:
                self.notify(
                    event,
                    contact,
                    "company_application_received",
                    context,
                    action_url=portal_url,
                    category=CATEGORY,
                )

        self.deliver_all(event, [candidate, *admins], deliver)

    def handle_withdrawn(self, event: DomainEvent) -> None:
        facts = self.application_facts(event)
        recruiter = self.recruiter_contact(facts.recruiter_id)
        admins = []
        if event.get("was_submitted_to_company", "wasSubmittedToCompany", default=False):
            admins = self.contacts.resolve_company_admins_for_company(
                facts.job.company_id, COMPANY_REVIEWER_ROLES
            )
        portal_url, _ = self._application_links(facts.application_id)
        context = facts.template_context(reason=event.get("reason", default=""))

        self.deliver_all(
            event,
            [recruiter, *admins],
            lambda contact: self.notify(
                event,
                contact,
                "application_withdrawn",
                context,
                action_url=portal_url,
                category=CATEGORY,
            ),
        )

    def handle_accepted(self, event: DomainEvent) -> None:
        facts = self.application_facts(event)
        candidate = self.candidate_contact(facts.candidate.id)
        recruiter = self.recruiter_contact(facts.recruiter_id)
        portal_url, candidate_url = self._application_links(facts.application_id)
        context = facts.template_context()

        def deliver(contact: Contact) -> None:
            self.notify(
                event,
                contact,
                "application_accepted",
                context,
                action_url=candidate_url if contact.type == CONTACT_TYPE_CANDIDATE else portal_url,
                priority=PRIORITY_HIGH,
                category=CATEGORY,
            )

        self.deliver_all(event, [candidate, recruiter], deliver)

    def handle_stage_changed(self, event: DomainEvent) -> None:
        facts = self.application_facts(event)
        new_stage = event.get("new_stage", "newStage")
        old_stage = event.get("old_stage", "oldStage")
        rule = stage_rule(new_stage)

        # Everyone is resolved before anything is sent so an essential
        # lookup failure leaves no partial deliveries behind.
        recipients: list[Contact | None] = []
        if rule.candidate:
            recipients.append(self.candidate_contact(facts.candidate.id))
        recruiter = self.recruiter_contact(facts.recruiter_id)
        if recruiter is None:
            logger.warning(
                "Application %s has no recruiter; skipping recruiter stage notification",
                facts.application_id,
            )
        recipients.append(recruiter)
        if rule.company:
            recipients.extend(
                self.contacts.resolve_company_admins_for_company(
                    facts.job.company_id, COMPANY_REVIEWER_ROLES
                )
            )

        portal_url, candidate_url = self._application_links(facts.application_id)
        context = facts.template_context(
            new_stage=_humanize(new_stage),
            old_stage=_humanize(old_stage),
            headline=rule.headline,
        )
        templates = {
            CONTACT_TYPE_CANDIDATE: "application_stage_changed_candidate",
            CONTACT_TYPE_RECRUITER: "application_stage_changed_recruiter",
        }

        def deliver(contact: Contact) -> None:
            self.notify(
                event,
                contact,
                templates.get(contact.type, "application_stage_changed_company"),
                context,
                action_url=candidate_url if contact.type == CONTACT_TYPE_CANDIDATE else portal_url,
                in_app=False,
            )

        self.deliver_all(event, recipients, deliver)

    def handle_prescreen_requested(self, event: DomainEvent) -> None:
        facts = self.application_facts(event)
        recruiter = self.require(
            self.recruiter_contact(facts.recruiter_id), "recruiter", facts.recruiter_id
        )
        requester_id = event.get("requested_by_user_id", "requestedByUserId")
        requester = self.contacts.resolve_user(requester_id) if requester_id else None
        portal_url, _ = self._application_links(facts.application_id)
        context = facts.template_context(
            recruiter_name=recruiter.name,
            requester_name=requester.name if requester else "The hiring team",
            message=event.get("message", "notes", default=""),
        )

        def deliver(contact: Contact) -> None:
            template = "prescreen_requested" if contact is recruiter else "prescreen_request_confirmation"
            self.notify(
                event,
                contact,
                template,
                context,
                action_url=portal_url,
                priority=PRIORITY_HIGH if contact is recruiter else PRIORITY_LOW,
                category=CATEGORY,
            )

        self.deliver_all(event, [recruiter, requester], deliver)

    def handle_draft_completed(self, event: DomainEvent) -> None:
        facts = self.application_facts(event)
        candidate = self.candidate_contact(facts.candidate.id)
        _, candidate_url = self._application_links(facts.application_id)

        self.deliver_all(
            event,
            [candidate],
            lambda contact: self.notify(
                event,
                contact,
                "application_draft_completed",
                facts.template_context(),
                action_url=candidate_url,
                category=CATEGORY,
            ),
        )

    def handle_note_created(self, event: DomainEvent) -> None:
        facts = self.application_facts(event)
        author_id = event.get("created_by_user_id", "createdByUserId")
        visibility = event.get("visibility", default="shared")
        author = self.contacts.resolve_user(author_id) if author_id else None

        recipients: list[Contact | None] = [self.recruiter_contact(facts.recruiter_id)]
        if visibility != "internal":
            recipients.append(self.contacts.resolve_candidate(facts.candidate.id))
        recipients = [
            contact
            for contact in recipients
            if contact is not None and (not author_id or contact.user_id != author_id)
        ]
        if not recipients:
            logger.info("No one to notify about note on application %s", facts.application_id)
            return

        portal_url, candidate_url = self._application_links(facts.application_id)
        context = facts.template_context(
            author_name=author.name if author else "Someone",
            note_preview=event.get("note_preview", "notePreview", "body", default=""),
        )

        self.deliver_all(
            event,
            recipients,
            lambda contact: self.notify(
                event,
                contact,
                "application_note_created",
                context,
                action_url=candidate_url if contact.type == CONTACT_TYPE_CANDIDATE else portal_url,
                category=CATEGORY,
            ),
        )

    def _notify_recruiter_of_proposal(self, event: DomainEvent, template: str) -> None:
        facts = self.application_facts(event)
        recruiter = self.require(
            self.recruiter_contact(facts.recruiter_id), "recruiter", facts.recruiter_id
        )
        portal_url, _ = self._application_links(facts.application_id)
        context = facts.template_context(reason=event.get("reason", default=""))

        self.deliver_all(
            event,
            [recruiter],
            lambda contact: self.notify(
                event, contact, template, context, action_url=portal_url, category=CATEGORY
            ),
        )

    def handle_proposal_accepted(self, event: DomainEvent) -> None:
        self._notify_recruiter_of_proposal(event, "application_proposal_accepted")

    def handle_proposal_declined(self, event: DomainEvent) -> None:
        self._notify_recruiter_of_proposal(event, "application_proposal_declined")

    def handle_ai_review_started(self, event: DomainEvent) -> None:
        facts = self.application_facts(event)
        candidate = self.candidate_contact(facts.candidate.id)
        _, candidate_url = self._application_links(facts.application_id)

        self.deliver_all(
            event,
            [candidate],
            lambda contact: self.notify(
                event,
                contact,
                "ai_review_started",
                facts.template_context(),
                action_url=candidate_url,
                email=False,
                priority=PRIORITY_LOW,
                category="ai_review",
            ),
        )

    def handle_ai_review_completed(self, event: DomainEvent) -> None:
        facts = self.application_facts(event)
        candidate = self.candidate_contact(facts.candidate.id)
        recruiter = self.contacts.resolve_recruiter(facts.recruiter_id) if facts.recruiter_id else None
        portal_url, candidate_url = self._application_links(facts.application_id)
        context = facts.template_context(
            fit_score=event.get("fit_score", "fitScore", default="n/a"),
            recommendation=_humanize(event.get("recommendation", default="pending")),
        )

        def deliver(contact: Contact) -> None:
            if contact.type == CONTACT_TYPE_CANDIDATE:
                self.notify(
                    event,
                    contact,
                    "ai_review_completed_candidate",
                    context,
                    action_url=candidate_url,
                    category="ai_review",
                )
            else:
                self.notify(
                    event,
                    contact,
                    "ai_review_completed_recruiter",
                    context,
                    action_url=portal_url,
                    category="ai_review",
                )

        self.deliver_all(event, [candidate, recruiter], deliver)

    def handle_ai_review_failed(self, event: DomainEvent) -> None:
        facts = self.application_facts(event)
        candidate = self.candidate_contact(facts.candidate.id)
        _, candidate_url = self._application_links(facts.application_id)

        self.deliver_all(
            event,
            [candidate],
            lambda contact: self.notify(
                event,
                contact,
                "ai_review_failed",
                facts.template_context(),
                action_url=candidate_url,
                email=False,
                priority=PRIORITY_HIGH,
                category="ai_review",
            ),
        )


__all__ = ["ApplicationsHandler", "STAGE_RULES", "StageRule", "stage_rule"]
