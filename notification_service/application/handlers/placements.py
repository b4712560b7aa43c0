"""Notifications for placements and their guarantee period."""

from __future__ import annotations

from typing import Any

from notification_service.domain.entities import (
    CONTACT_TYPE_COMPANY_ADMIN,
    PRIORITY_HIGH,
    PRIORITY_NORMAL,
    PRIORITY_URGENT,
    ROLE_COMPANY_ADMIN,
    ROLE_HIRING_MANAGER,
    Contact,
    DomainEvent,
    EventKind,
    Placement,
)

from .base import DomainHandler

CATEGORY = "placement"


class PlacementsHandler(DomainHandler):
    routes = {
        EventKind.PLACEMENT_CREATED: "handle_created",
        EventKind.PLACEMENT_ACTIVATED: "handle_activated",
        EventKind.PLACEMENT_COMPLETED: "handle_completed",
        EventKind.PLACEMENT_FAILED: "handle_failed",
        EventKind.GUARANTEE_EXPIRING: "handle_guarantee_expiring",
        EventKind.REPLACEMENT_REQUESTED: "handle_replacement_requested",
    }

    def _placement(self, event: DomainEvent) -> Placement:
        placement_id = event.get("placement_id", "placementId")
        return self.require(self.lookup.get_placement(placement_id), "placement", placement_id)

    def _context(self, placement: Placement, **extra: Any) -> dict[str, Any]:
        job = self.require(self.lookup.get_job(placement.job_id), "job", placement.job_id)
        candidate = self.lookup.get_candidate(placement.candidate_id)
        context = {
            "job_title": job.title,
            "company_name": job.company_name,
            "candidate_name": (candidate.full_name if candidate else None) or "the candidate",
            "salary": f"{placement.salary:,.0f}" if placement.salary is not None else "",
            "recruiter_share": (
                f"{placement.recruiter_share:,.2f}" if placement.recruiter_share is not None else ""
            ),
        }
        context.update(extra)
        return context

    def _recruiters(self, placement: Placement) -> list[Contact]:
        """Return the placement's recruiter followed by every collaborator."""

        contacts: list[Contact] = []
        if placement.recruiter_id:
            contacts.append(
                self.require(
                    self.contacts.resolve_recruiter(placement.recruiter_id),
                    "recruiter",
                    placement.recruiter_id,
                )
            )
        for collaborator in placement.collaborators:
            if collaborator.recruiter_id == placement.recruiter_id:
                continue
            contact = self.contacts.resolve_recruiter(collaborator.recruiter_id)
            if contact is not None:
                contacts.append(contact)
        return contacts

    def _admins(self, placement: Placement) -> list[Contact]:
        return self.contacts.resolve_company_admins_for_company(
            placement.company_id, (ROLE_COMPANY_ADMIN, ROLE_HIRING_MANAGER)
        )

    def _send(
        self,
        event: DomainEvent,
        recipients: list[Contact],
        recruiter_template: str,
        company_template: str | None,
        context: dict[str, Any],
        placement: Placement,
        *,
        priority: str = PRIORITY_NORMAL,
    ) -> None:
        action_url = self.portal_link(f"placements/{placement.id}")

        def deliver(contact: Contact) -> None:
            template = recruiter_template
            if contact.type == CONTACT_TYPE_COMPANY_ADMIN and company_template:
                template = company_template
            self.notify(
                event,
                contact,
                template,
                context,
                action_url=action_url,
                priority=priority,
                category=CATEGORY,
            )

        self.deliver_all(event, recipients, deliver)

    def handle_created(self, event: DomainEvent) -> None:
        placement = self._placement(event)
        recipients = self._recruiters(placement)
        context = self._context(placement)
        self._send(event, recipients, "placement_created", None, context, placement)

    def handle_activated(self, event: DomainEvent) -> None:
        placement = self._placement(event)
        recipients = [*self._recruiters(placement), *self._admins(placement)]
        start_date = placement.start_date.date().isoformat() if placement.start_date else "TBD"
        context = self._context(placement, start_date=start_date)
        self._send(
            event,
            recipients,
            "placement_activated",
            "placement_activated_company",
            context,
            placement,
        )

    def handle_completed(self, event: DomainEvent) -> None:
        placement = self._placement(event)
        recipients = self._recruiters(placement)
        context = self._context(placement)
        self._send(event, recipients, "placement_completed", None, context, placement)

    def handle_failed(self, event: DomainEvent) -> None:
        placement = self._placement(event)
        recipients = [*self._recruiters(placement), *self._admins(placement)]
        reason = event.get("reason", "failure_reason", "failureReason") or placement.failure_reason
        context = self._context(placement, reason=reason or "No reason was given")
        self._send(
            event,
            recipients,
            "placement_failed",
            None,
            context,
            placement,
            priority=PRIORITY_HIGH,
        )

    def handle_guarantee_expiring(self, event: DomainEvent) -> None:
        placement = self._placement(event)
        recipients = [*self._recruiters(placement), *self._admins(placement)]
        expires_at = placement.guarantee_expires_at
        context = self._context(
            placement,
            days_remaining=event.get("days_remaining", "daysRemaining", default=""),
            guarantee_expires_at=expires_at.date().isoformat() if expires_at else "",
        )
        self._send(event, recipients, "guarantee_expiring", None, context, placement)

    def handle_replacement_requested(self, event: DomainEvent) -> None:
        placement = self._placement(event)
        recipients = self._recruiters(placement)
        context = self._context(placement, reason=event.get("reason", default=""))
        self._send(
            event,
            recipients,
            "replacement_requested",
            None,
            context,
            placement,
            priority=PRIORITY_URGENT,
        )


__all__ = ["PlacementsHandler"]
