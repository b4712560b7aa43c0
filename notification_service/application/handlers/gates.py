"""Notifications for the application review gate workflow."""

from __future__ import annotations

import logging

from notification_service.domain.entities import (
    CONTACT_TYPE_CANDIDATE,
    PRIORITY_HIGH,
    ROLE_COMPANY_ADMIN,
    ROLE_HIRING_MANAGER,
    Contact,
    DomainEvent,
    EventKind,
)

from .base import ApplicationFacts, DomainHandler

logger = logging.getLogger(__name__)

GATE_CANDIDATE_RECRUITER = "candidate_recruiter"
GATE_COMPANY_RECRUITER = "company_recruiter"
GATE_COMPANY = "company"

GATE_LABELS = {
    GATE_CANDIDATE_RECRUITER: "recruiter review",
    GATE_COMPANY_RECRUITER: "company recruiter review",
    GATE_COMPANY: "company review",
}
CATEGORY = "gate_review"


def gate_label(gate: str | None) -> str:
    return GATE_LABELS.get(gate or "", (gate or "review").replace("_", " "))


class GateWorkflowHandler(DomainHandler):
    """Route gate events to the reviewers of a gate or to the candidate side."""

    routes = {
        EventKind.APPLICATION_GATE_ENTERED: "handle_gate_entered",
        EventKind.APPLICATION_GATE_APPROVED: "handle_gate_approved",
        EventKind.APPLICATION_GATE_DENIED: "handle_gate_denied",
        EventKind.APPLICATION_ALL_GATES_PASSED: "handle_all_gates_passed",
        EventKind.APPLICATION_INFO_REQUESTED: "handle_info_requested",
        EventKind.APPLICATION_INFO_PROVIDED: "handle_info_provided",
    }

    def _reviewers(
        self, event: DomainEvent, facts: ApplicationFacts, gate: str | None
    ) -> list[Contact]:
        """Return who has to act on ``gate``."""

        if gate == GATE_CANDIDATE_RECRUITER:
            recruiter = self.recruiter_contact(facts.recruiter_id)
            return [recruiter] if recruiter else []

        if gate == GATE_COMPANY_RECRUITER:
            company_recruiter_id = event.get("company_recruiter_id", "companyRecruiterId")
            if company_recruiter_id:
                return [
                    self.require(
                        self.contacts.resolve_recruiter(company_recruiter_id),
                        "recruiter",
                        company_recruiter_id,
                    )
                ]

        return self.contacts.resolve_company_admins_for_company(
            facts.job.company_id, (ROLE_COMPANY_ADMIN, ROLE_HIRING_MANAGER)
        )

    def _candidate_side(self, facts: ApplicationFacts) -> list[Contact | None]:
        return [
            self.candidate_contact(facts.candidate.id),
            self.recruiter_contact(facts.recruiter_id),
        ]

    def _links(self, facts: ApplicationFacts) -> tuple[str, str]:
        suffix = f"applications/{facts.application_id}" if facts.application_id else "applications"
        return self.portal_link(suffix), self.candidate_link(suffix)

    def handle_gate_entered(self, event: DomainEvent) -> None:
        facts = self.application_facts(event)
        gate = event.get("gate")
        reviewers = self._reviewers(event, facts, gate)
        if not reviewers:
            logger.warning(
                "No reviewers found for gate %s of application %s", gate, facts.application_id
            )
            return
        portal_url, _ = self._links(facts)
        context = facts.template_context(gate=gate_label(gate))

        self.deliver_all(
            event,
            reviewers,
            lambda contact: self.notify(
                event,
                contact,
                "gate_review_requested",
                context,
                action_url=portal_url,
                priority=PRIORITY_HIGH,
                category=CATEGORY,
            ),
        )

    def handle_gate_approved(self, event: DomainEvent) -> None:
        facts = self.application_facts(event)
        next_gate = event.get("next_gate", "nextGate")
        portal_url, candidate_url = self._links(facts)
        context = facts.template_context(
            gate=gate_label(event.get("gate")),
            next_gate=gate_label(next_gate) if next_gate else "final approval",
            notes=event.get("notes", default=""),
        )

        def deliver(contact: Contact) -> None:
            self.notify(
                event,
                contact,
                "gate_approved",
                context,
                action_url=candidate_url if contact.type == CONTACT_TYPE_CANDIDATE else portal_url,
                email=False,
                category=CATEGORY,
            )

        self.deliver_all(event, self._candidate_side(facts), deliver)

    def handle_gate_denied(self, event: DomainEvent) -> None:
        facts = self.application_facts(event)
        portal_url, candidate_url = self._links(facts)
        context = facts.template_context(
            gate=gate_label(event.get("gate")),
            reason=event.get("reason", "notes", default=""),
        )

        def deliver(contact: Contact) -> None:
            self.notify(
                event,
                contact,
                "gate_denied",
                context,
                action_url=candidate_url if contact.type == CONTACT_TYPE_CANDIDATE else portal_url,
                category=CATEGORY,
            )

        self.deliver_all(event, self._candidate_side(facts), deliver)

    def handle_all_gates_passed(self, event: DomainEvent) -> None:
        facts = self.application_facts(event)
        portal_url, candidate_url = self._links(facts)
        context = facts.template_context()

        def deliver(contact: Contact) -> None:
            self.notify(
                event,
                contact,
                "all_gates_passed",
                context,
                action_url=candidate_url if contact.type == CONTACT_TYPE_CANDIDATE else portal_url,
                priority=PRIORITY_HIGH,
                category=CATEGORY,
            )

        self.deliver_all(event, self._candidate_side(facts), deliver)

    def handle_info_requested(self, event: DomainEvent) -> None:
        facts = self.application_facts(event)
        candidate = self.candidate_contact(facts.candidate.id)
        recruiter = self.recruiter_contact(facts.recruiter_id)
        questions = event.get("questions", default="")
        if isinstance(questions, (list, tuple)):
            questions = "; ".join(str(question) for question in questions)
        portal_url, candidate_url = self._links(facts)
        context = facts.template_context(gate=gate_label(event.get("gate")), questions=questions)

        def deliver(contact: Contact) -> None:
            self.notify(
                event,
                contact,
                "gate_info_requested",
                context,
                action_url=candidate_url if contact.type == CONTACT_TYPE_CANDIDATE else portal_url,
                priority=PRIORITY_HIGH,
                category=CATEGORY,
            )

        self.deliver_all(event, [candidate, recruiter], deliver)

    def handle_info_provided(self, event: DomainEvent) -> None:
        facts = self.application_facts(event)
        gate = event.get("gate")
        reviewers = self._reviewers(event, facts, gate)
        if not reviewers:
            logger.warning(
                "No reviewers found for gate %s of application %s", gate, facts.application_id
            )
            return
        responder = self.contacts.resolve_identity_user(
            event.get("responder_user_id", "responderUserId")
        )
        portal_url, _ = self._links(facts)
        context = facts.template_context(
            gate=gate_label(gate),
            responder_name=responder.name if responder else facts.candidate_name,
        )

        self.deliver_all(
            event,
            reviewers,
            lambda contact: self.notify(
                event,
                contact,
                "gate_info_provided",
                context,
                action_url=portal_url,
                category=CATEGORY,
            ),
        )


__all__ = ["GateWorkflowHandler", "gate_label"]
