"""Chat message notifications with per-recipient email throttling."""

from __future__ import annotations

import logging

from notification_service.domain.entities import DomainEvent, EventKind

from .base import DomainHandler

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 140


def _preview(body: str | None) -> str:
    text = " ".join((body or "").split())
    if len(text) <= PREVIEW_LENGTH:
        return text
    return text[: PREVIEW_LENGTH - 3].rstrip() + "..."


class ChatHandler(DomainHandler):
    """Notify the recipient of a new chat message.

    Muted, archived and not-yet-accepted conversations produce nothing. Every
    other message gets an in-app notification; the email is throttled so a
    burst of messages yields one email per debounce window.
    """

    routes = {EventKind.CHAT_MESSAGE_CREATED: "handle_message_created"}

    def handle_message_created(self, event: DomainEvent) -> None:
        conversation_id = event.get("conversation_id", "conversationId")
        recipient_user_id = event.get("recipient_user_id", "recipientUserId")
        sender_user_id = event.get("sender_user_id", "senderUserId")

        if not recipient_user_id or recipient_user_id == sender_user_id:
            logger.debug("Chat message %s has no other recipient", event.get("message_id"))
            return

        participant = self.lookup.get_conversation_participant(conversation_id, recipient_user_id)
        if participant is not None and participant.suppresses_notifications():
            logger.info(
                "Notifications suppressed for user %s in conversation %s",
                recipient_user_id,
                conversation_id,
            )
            return

        recipient = self.contacts.resolve_user(recipient_user_id)
        if recipient is None:
            logger.warning("Chat recipient %s could not be resolved", recipient_user_id)
            return

        sender = self.contacts.resolve_user(sender_user_id)
        context = {
            "sender_name": sender.name if sender else "Someone",
            "message_preview": _preview(event.get("body_preview", "bodyPreview", "body")),
        }
        if self.lookup.get_recruiter_by_user_id(recipient_user_id) is not None:
            action_url = self.portal_link(f"messages/{conversation_id}")
        else:
            action_url = self.candidate_link(f"messages/{conversation_id}")

        send_email = self.context.rate_limiter.allows(recipient.email, event.event_type)
        self.deliver_all(
            event,
            [recipient],
            lambda contact: self.notify(
                event,
                contact,
                "chat_message_received",
                context,
                action_url=action_url,
                email=send_email,
                category="chat",
            ),
        )


__all__ = ["ChatHandler"]
