"""Status page contact form submissions."""

from __future__ import annotations

import logging

from notification_service.application.delivery import is_plausible_email
from notification_service.domain.entities import PRIORITY_HIGH, Contact, DomainEvent, EventKind

from .base import DomainHandler

logger = logging.getLogger(__name__)


class SupportHandler(DomainHandler):
    routes = {EventKind.STATUS_CONTACT_SUBMITTED: "handle_contact_submitted"}

    def handle_contact_submitted(self, event: DomainEvent) -> None:
        sender_email = event.get("email", "sender_email", "senderEmail", default="")
        sender_name = event.get("name", "sender_name", "senderName", default="") or sender_email
        context = {
            "sender_name": sender_name or "Anonymous visitor",
            "sender_email": sender_email or "not provided",
            "topic": event.get("topic", "subject", default="General"),
            "message": event.get("message", default=""),
            "source": event.get("source", "page", default="status page"),
        }

        recipients: list[Contact] = [self.email_contact(self.settings.support_email, "Support")]
        if is_plausible_email(sender_email):
            recipients.append(self.email_contact(sender_email, sender_name))
        else:
            logger.info("Status contact submission without a reply address; no confirmation sent")

        def deliver(contact: Contact) -> None:
            if contact.email == self.settings.support_email:
                self.notify(
                    event,
                    contact,
                    "status_contact_submitted",
                    context,
                    in_app=False,
                    priority=PRIORITY_HIGH,
                )
            else:
                self.notify(event, contact, "status_contact_confirmation", context, in_app=False)

        self.deliver_all(event, recipients, deliver)


__all__ = ["SupportHandler"]
