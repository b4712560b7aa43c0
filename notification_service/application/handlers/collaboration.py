"""Notifications for recruiter collaboration and reputation."""

from __future__ import annotations

from notification_service.domain.entities import PRIORITY_LOW, DomainEvent, EventKind

from .base import DomainHandler


class CollaborationHandler(DomainHandler):
    routes = {
        EventKind.COLLABORATOR_ADDED: "handle_collaborator_added",
        EventKind.REPUTATION_UPDATED: "handle_reputation_updated",
        EventKind.REPUTATION_TIER_CHANGED: "handle_tier_changed",
    }

    def handle_collaborator_added(self, event: DomainEvent) -> None:
        recruiter_id = event.get("recruiter_id", "recruiterId", "collaborator_recruiter_id")
        recruiter = self.require(
            self.contacts.resolve_recruiter(recruiter_id), "recruiter", recruiter_id
        )
        placement_id = event.get("placement_id", "placementId")
        placement = self.require(
            self.lookup.get_placement(placement_id), "placement", placement_id
        )
        job = self.lookup.get_job(placement.job_id)
        split = event.get("split_percentage", "splitPercentage")
        context = {
            "job_title": job.title if job else "a placement",
            "company_name": job.company_name if job else "",
            "role": str(event.get("role", default="collaborator")).replace("_", " "),
            "split_percentage": f"{split}%" if split is not None else "",
        }

        self.deliver_all(
            event,
            [recruiter],
            lambda contact: self.notify(
                event,
                contact,
                "collaborator_added",
                context,
                action_url=self.portal_link(f"placements/{placement.id}"),
                category="collaboration",
            ),
        )

    def handle_reputation_updated(self, event: DomainEvent) -> None:
        recruiter_id = event.get("recruiter_id", "recruiterId")
        recruiter = self.require(
            self.contacts.resolve_recruiter(recruiter_id), "recruiter", recruiter_id
        )
        context = {
            "reputation_score": str(event.get("reputation_score", "reputationScore", default="")),
        }

        self.deliver_all(
            event,
            [recruiter],
            lambda contact: self.notify(
                event,
                contact,
                "reputation_updated",
                context,
                action_url=self.portal_link("profile/reputation"),
                email=False,
                priority=PRIORITY_LOW,
                category="reputation",
            ),
        )

    def handle_tier_changed(self, event: DomainEvent) -> None:
        recruiter_id = event.get("recruiter_id", "recruiterId")
        recruiter = self.require(
            self.contacts.resolve_recruiter(recruiter_id), "recruiter", recruiter_id
        )
        old_tier = event.get("old_tier", "oldTier", "previous_tier", default="")
        new_tier = event.get("new_tier", "newTier", default="")
        context = {
            "old_tier": str(old_tier).title(),
            "new_tier": str(new_tier).title(),
            "direction": "up" if event.get("promoted", default=True) else "down",
        }

        self.deliver_all(
            event,
            [recruiter],
            lambda contact: self.notify(
                event,
                contact,
                "reputation_tier_changed",
                context,
                action_url=self.portal_link("profile/reputation"),
                category="reputation",
            ),
        )


__all__ = ["CollaborationHandler"]
