"""Notifications for payouts onboarding and company billing."""

from __future__ import annotations

from notification_service.domain.entities import (
    PRIORITY_HIGH,
    PRIORITY_URGENT,
    ROLE_COMPANY_ADMIN,
    DomainEvent,
    EventKind,
)

from .base import DomainHandler

CATEGORY = "billing"


class BillingHandler(DomainHandler):
    routes = {
        EventKind.RECRUITER_STRIPE_CONNECT_ONBOARDED: "handle_connect_onboarded",
        EventKind.RECRUITER_STRIPE_CONNECT_DISABLED: "handle_connect_disabled",
        EventKind.COMPANY_BILLING_PROFILE_COMPLETED: "handle_billing_profile_completed",
    }

    def _notify_recruiter(self, event: DomainEvent, template: str, priority: str) -> None:
        recruiter_id = event.get("recruiter_id", "recruiterId")
        recruiter = self.require(
            self.contacts.resolve_recruiter(recruiter_id), "recruiter", recruiter_id
        )
        context = {"reason": event.get("reason", "disabled_reason", "disabledReason", default="")}

        self.deliver_all(
            event,
            [recruiter],
            lambda contact: self.notify(
                event,
                contact,
                template,
                context,
                action_url=self.portal_link("settings/payouts"),
                priority=priority,
                category=CATEGORY,
            ),
        )

    def handle_connect_onboarded(self, event: DomainEvent) -> None:
        self._notify_recruiter(event, "stripe_connect_onboarded", PRIORITY_HIGH)

    def handle_connect_disabled(self, event: DomainEvent) -> None:
        self._notify_recruiter(event, "stripe_connect_disabled", PRIORITY_URGENT)

    def handle_billing_profile_completed(self, event: DomainEvent) -> None:
        company_id = event.get("company_id", "companyId")
        company = self.require(self.lookup.get_company(company_id), "company", company_id)
        admins = self.contacts.resolve_company_admins(
            company.identity_organization_id, (ROLE_COMPANY_ADMIN,)
        )
        context = {
            "company_name": company.name,
            "billing_terms": event.get("billing_terms", "billingTerms", default=""),
        }

        self.deliver_all(
            event,
            admins,
            lambda contact: self.notify(
                event,
                contact,
                "billing_profile_completed",
                context,
                action_url=self.portal_link("settings/billing"),
                category=CATEGORY,
            ),
        )


__all__ = ["BillingHandler"]
