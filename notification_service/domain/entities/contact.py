"""Unified contact projection used to address notifications."""

from __future__ import annotations

from dataclasses import dataclass

CONTACT_TYPE_USER = "user"
CONTACT_TYPE_RECRUITER = "recruiter"
CONTACT_TYPE_CANDIDATE = "candidate"
CONTACT_TYPE_COMPANY_ADMIN = "company_admin"


@dataclass(frozen=True)
class Contact:
    """A resolved recipient: who to address and where to reach them.

    ``id`` identifies the contact for logging purposes (the user id when an
    account exists, otherwise the source entity id). ``entity_id`` is always the
    id of the entity the contact was resolved from.
    """

    id: str
    user_id: str | None
    name: str
    email: str
    phone: str | None
    type: str
    entity_id: str

    @property
    def first_name(self) -> str:
        return self.name.split(" ", 1)[0] if self.name else ""


__all__ = [
    "Contact",
    "CONTACT_TYPE_USER",
    "CONTACT_TYPE_RECRUITER",
    "CONTACT_TYPE_CANDIDATE",
    "CONTACT_TYPE_COMPANY_ADMIN",
]
