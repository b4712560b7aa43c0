"""Notifications for organization and company platform invitations."""

from __future__ import annotations

import logging

from notification_service.domain.entities import (
    PRIORITY_HIGH,
    DomainEvent,
    EventKind,
    Invitation,
)

from .base import DomainHandler

logger = logging.getLogger(__name__)

CATEGORY = "invitation"


class InvitationsHandler(DomainHandler):
    routes = {
        EventKind.INVITATION_CREATED: "handle_invitation_created",
        EventKind.INVITATION_REVOKED: "handle_invitation_revoked",
        EventKind.COMPANY_INVITATION_CREATED: "handle_company_invitation_created",
        EventKind.COMPANY_INVITATION_ACCEPTED: "handle_company_invitation_accepted",
    }

    def _invitation(self, event: DomainEvent) -> Invitation:
        invitation_id = event.get("invitation_id", "invitationId")
        return self.require(
            self.lookup.get_invitation(invitation_id), "invitation", invitation_id
        )

    def _invitation_context(self, invitation: Invitation) -> dict[str, str]:
        organization = self.lookup.get_organization(invitation.organization_id)
        inviter = self.lookup.get_user(invitation.invited_by)
        expires_at = invitation.expires_at
        return {
            "organization_name": organization.name if organization else "your team",
            "inviter_name": (inviter.display_name if inviter else "") or "A teammate",
            "role": invitation.role.replace("_", " "),
            "expires_at": expires_at.strftime("%B %d, %Y") if expires_at else "",
        }

    def handle_invitation_created(self, event: DomainEvent) -> None:
        invitation = self._invitation(event)
        context = self._invitation_context(invitation)
        action_url = self.portal_link(
            f"accept-invitation/{invitation.token}" if invitation.token else "sign-in"
        )

        self.deliver_all(
            event,
            [self.email_contact(invitation.email)],
            lambda contact: self.notify(
                event,
                contact,
                "organization_invitation",
                context,
                action_url=action_url,
                in_app=False,
            ),
        )

    def handle_invitation_revoked(self, event: DomainEvent) -> None:
        invitation = self._invitation(event)
        context = self._invitation_context(invitation)

        self.deliver_all(
            event,
            [self.email_contact(invitation.email)],
            lambda contact: self.notify(
                event, contact, "organization_invitation_revoked", context, in_app=False
            ),
        )

    def handle_company_invitation_created(self, event: DomainEvent) -> None:
        email = event.get("email", "invited_email", "invitedEmail")
        recipient = self.require(
            self.email_contact(email, event.get("contact_name", "contactName")) if email else None,
            "invitation email",
            event.get("invitation_id", "invitationId"),
        )
        recruiter_id = event.get("recruiter_id", "recruiterId")
        recruiter = self.lookup.get_recruiter(recruiter_id)
        invite_code = event.get("invite_code", "inviteCode")
        context = {
            "company_name": event.get("company_name", "companyName", default="your company"),
            "recruiter_name": (recruiter.name if recruiter else None) or "A recruiter",
            "invite_code": invite_code or "",
            "personal_message": event.get("personal_message", "personalMessage", default=""),
        }
        action_url = self.portal_link(f"join/{invite_code}" if invite_code else "sign-up")

        self.deliver_all(
            event,
            [recipient],
            lambda contact: self.notify(
                event,
                contact,
                "company_platform_invitation",
                context,
                action_url=action_url,
                in_app=False,
            ),
        )

    def handle_company_invitation_accepted(self, event: DomainEvent) -> None:
        recruiter_id = event.get("recruiter_id", "recruiterId")
        recruiter = self.require(
            self.contacts.resolve_recruiter(recruiter_id), "recruiter", recruiter_id
        )
        company_id = event.get("company_id", "companyId")
        company = self.lookup.get_company(company_id)
        if company is None:
            logger.warning("Company %s not found for accepted invitation", company_id)
        context = {
            "company_name": (company.name if company else None)
            or event.get("company_name", "companyName", default="A company"),
        }

        self.deliver_all(
            event,
            [recruiter],
            lambda contact: self.notify(
                event,
                contact,
                "company_invitation_accepted",
                context,
                action_url=self.portal_link(f"companies/{company_id}" if company_id else "companies"),
                priority=PRIORITY_HIGH,
                category=CATEGORY,
            ),
        )


__all__ = ["InvitationsHandler"]
