"""Wire contract of the domain events consumed from the broker."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from notification_service.utils import first_value


class EventKind(str, Enum):
    """Every event type this service understands, plus ``UNKNOWN``.

    The value of each member is the event type string, which is also the
    routing key the queue is bound with.
    """

    # applications
    APPLICATION_CREATED = "application.created"
    APPLICATION_SUBMITTED_TO_COMPANY = "application.submitted_to_company"
    APPLICATION_WITHDRAWN = "application.withdrawn"
    APPLICATION_ACCEPTED = "application.accepted"
    APPLICATION_STAGE_CHANGED = "application.stage_changed"
    APPLICATION_PRESCREEN_REQUESTED = "application.prescreen_requested"
    APPLICATION_DRAFT_COMPLETED = "application.draft_completed"
    APPLICATION_NOTE_CREATED = "application.note.created"
    APPLICATION_PROPOSAL_ACCEPTED = "application.proposal_accepted"
    APPLICATION_PROPOSAL_DECLINED = "application.proposal_declined"
    AI_REVIEW_STARTED = "ai_review.started"
    AI_REVIEW_COMPLETED = "ai_review.completed"
    AI_REVIEW_FAILED = "ai_review.failed"

    # placements
    PLACEMENT_CREATED = "placement.created"
    PLACEMENT_ACTIVATED = "placement.activated"
    PLACEMENT_COMPLETED = "placement.completed"
    PLACEMENT_FAILED = "placement.failed"
    GUARANTEE_EXPIRING = "guarantee.expiring"
    REPLACEMENT_REQUESTED = "replacement.requested"

    # proposals and recruiter submissions
    PROPOSAL_CREATED = "proposal.created"
    PROPOSAL_ACCEPTED = "proposal.accepted"
    PROPOSAL_DECLINED = "proposal.declined"
    PROPOSAL_TIMEOUT = "proposal.timeout"
    APPLICATION_RECRUITER_PROPOSED = "application.recruiter_proposed"
    APPLICATION_RECRUITER_APPROVED = "application.recruiter_approved"
    APPLICATION_RECRUITER_DECLINED = "application.recruiter_declined"
    APPLICATION_RECRUITER_OPPORTUNITY_EXPIRED = "application.recruiter_opportunity_expired"

    # candidates
    CANDIDATE_SOURCED = "candidate.sourced"
    CANDIDATE_OUTREACH_RECORDED = "candidate.outreach_recorded"
    CANDIDATE_INVITED = "candidate.invited"
    CANDIDATE_CONSENT_GIVEN = "candidate.consent_given"
    CANDIDATE_CONSENT_DECLINED = "candidate.consent_declined"
    OWNERSHIP_CONFLICT_DETECTED = "ownership.conflict_detected"

    # collaboration
    COLLABORATOR_ADDED = "collaborator.added"
    REPUTATION_UPDATED = "reputation.updated"
    REPUTATION_TIER_CHANGED = "reputation.tier_changed"

    # invitations
    INVITATION_CREATED = "invitation.created"
    INVITATION_REVOKED = "invitation.revoked"
    COMPANY_INVITATION_CREATED = "company_invitation.created"
    COMPANY_INVITATION_ACCEPTED = "company_invitation.accepted"

    # billing
    RECRUITER_STRIPE_CONNECT_ONBOARDED = "recruiter.stripe_connect_onboarded"
    RECRUITER_STRIPE_CONNECT_DISABLED = "recruiter.stripe_connect_disabled"
    COMPANY_BILLING_PROFILE_COMPLETED = "company.billing_profile_completed"

    # chat
    CHAT_MESSAGE_CREATED = "chat.message.created"

    # gate workflow
    APPLICATION_GATE_ENTERED = "application.gate_entered"
    APPLICATION_GATE_APPROVED = "application.gate_approved"
    APPLICATION_GATE_DENIED = "application.gate_denied"
    APPLICATION_ALL_GATES_PASSED = "application.all_gates_passed"
    APPLICATION_INFO_REQUESTED = "application.info_requested"
    APPLICATION_INFO_PROVIDED = "application.info_provided"

    # support
    STATUS_CONTACT_SUBMITTED = "status.contact_submitted"

    UNKNOWN = "unknown"

    @classmethod
    def from_event_type(cls, event_type: str | None) -> "EventKind":
        """Return the member for ``event_type`` or :attr:`UNKNOWN`."""

        if not event_type:
            return cls.UNKNOWN
        try:
            kind = cls(event_type)
        except ValueError:
            return cls.UNKNOWN
        return kind

    @classmethod
    def known(cls) -> list["EventKind"]:
        """Return every member except :attr:`UNKNOWN`."""

        return [kind for kind in cls if kind is not cls.UNKNOWN]


def routing_keys() -> list[str]:
    """Return the routing keys the consumer queue must be bound to."""

    return [kind.value for kind in EventKind.known()]


class MalformedEventError(ValueError):
    """The broker message body is not a valid event envelope."""


@dataclass(frozen=True)
class DomainEvent:
    """Immutable fact published by an upstream service."""

    event_type: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: str | None = None
    event_id: str | None = None

    @property
    def kind(self) -> EventKind:
        return EventKind.from_event_type(self.event_type)

    @property
    def event_key(self) -> str:
        """Return a stable key identifying this event across redeliveries."""

        if self.event_id:
            return str(self.event_id)
        canonical = json.dumps(
            {"event_type": self.event_type, "payload": self.payload, "timestamp": self.timestamp},
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    def get(self, *keys: str, default: Any = None) -> Any:
        """Return the first payload value present under any of ``keys``."""

        return first_value(self.payload, *keys, default=default)

    @classmethod
    def from_dict(cls, data: Any) -> "DomainEvent":
        if not isinstance(data, dict):
            raise MalformedEventError("Event envelope must be a JSON object")
        event_type = data.get("event_type")
        if not isinstance(event_type, str) or not event_type:
            raise MalformedEventError("Event envelope is missing 'event_type'")
        payload = data.get("payload") or {}
        if not isinstance(payload, dict):
            raise MalformedEventError("Event payload must be a JSON object")
        event_id = data.get("event_id") or data.get("id")
        timestamp = data.get("timestamp")
        return cls(
            event_type=event_type,
            payload=payload,
            timestamp=str(timestamp) if timestamp is not None else None,
            event_id=str(event_id) if event_id is not None else None,
        )

    @classmethod
    def from_json(cls, body: bytes | str) -> "DomainEvent":
        try:
            data = json.loads(body)
        except (TypeError, ValueError, UnicodeDecodeError) as exc:
            raise MalformedEventError(f"Event body is not valid JSON: {exc}") from exc
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "event_type": self.event_type,
            "payload": self.payload,
            "timestamp": self.timestamp,
        }
        if self.event_id:
            data["event_id"] = self.event_id
        return data


__all__ = ["DomainEvent", "EventKind", "MalformedEventError", "routing_keys"]
