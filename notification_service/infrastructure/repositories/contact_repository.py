"""Unified contact resolution for every entity that can receive a notification."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.orm import Session

from notification_service.domain.entities import (
    CONTACT_TYPE_CANDIDATE,
    CONTACT_TYPE_COMPANY_ADMIN,
    CONTACT_TYPE_RECRUITER,
    CONTACT_TYPE_USER,
    ROLE_COMPANY_ADMIN,
    Contact,
    User,
)

from .lookup_repository import ContextLookup

logger = logging.getLogger(__name__)


class ContactResolver:
    """Translate user, recruiter, candidate and membership ids into contacts.

    A linked user account always wins over the name and email copied onto the
    source entity. Missing entities and missing emails yield ``None`` (or an
    empty list for batch lookups) and a warning; they never raise.
    """

    def __init__(self, session: Session, lookup: ContextLookup | None = None) -> None:
        self.session = session
        self.lookup = lookup or ContextLookup(session)

    def resolve_user(self, user_id: str | None) -> Contact | None:
        user = self.lookup.get_user(user_id)
        if user is None:
            logger.warning("User %s not found while resolving contact", user_id)
            return None
        return self._user_contact(user, CONTACT_TYPE_USER, entity_id=user.id)

    def resolve_identity_user(self, external_id: str | None) -> Contact | None:
        """Resolve a contact from the identity provider's user id."""

        user = self.lookup.get_user_by_external_id(external_id)
        if user is None:
            logger.warning("No user linked to identity id %s", external_id)
            return None
        return self._user_contact(user, CONTACT_TYPE_USER, entity_id=user.id)

    def resolve_recruiter(self, recruiter_id: str | None) -> Contact | None:
        recruiter = self.lookup.get_recruiter(recruiter_id)
        if recruiter is None:
            logger.warning("Recruiter %s not found while resolving contact", recruiter_id)
            return None

        user = self.lookup.get_user(recruiter.user_id)
        if user is None:
            logger.warning(
                "Recruiter %s has no linked user account (user_id=%s)",
                recruiter.id,
                recruiter.user_id,
            )
            return None
        return self._user_contact(
            user, CONTACT_TYPE_RECRUITER, entity_id=recruiter.id, phone=recruiter.phone
        )

    def resolve_candidate(self, candidate_id: str | None) -> Contact | None:
        candidate = self.lookup.get_candidate(candidate_id)
        if candidate is None:
            logger.warning("Candidate %s not found while resolving contact", candidate_id)
            return None

        user = self.lookup.get_user(candidate.user_id) if candidate.user_id else None
        if user is not None and user.email:
            return self._user_contact(
                user, CONTACT_TYPE_CANDIDATE, entity_id=candidate.id, phone=candidate.phone
            )

        if not candidate.email:
            logger.warning("Candidate %s has no email address", candidate.id)
            return None
        return Contact(
            id=candidate.id,
            user_id=None,
            name=candidate.full_name or candidate.email,
            email=candidate.email,
            phone=candidate.phone,
            type=CONTACT_TYPE_CANDIDATE,
            entity_id=candidate.id,
        )

    def resolve_company_admins(
        self,
        organization_id: str | None,
        roles: Iterable[str] = (ROLE_COMPANY_ADMIN,),
    ) -> list[Contact]:
        """Return one contact per member of ``organization_id`` holding one of ``roles``."""

        if not organization_id:
            logger.warning("Cannot resolve company admins without an organization id")
            return []

        memberships = self.lookup.list_memberships(organization_id, tuple(roles))
        if not memberships:
            logger.warning(
                "No memberships with roles %s in organization %s", list(roles), organization_id
            )
            return []

        contacts: list[Contact] = []
        for membership in memberships:
            user = self.lookup.get_user(membership.user_id)
            if user is None or not user.email:
                continue
            contacts.append(
                self._user_contact(user, CONTACT_TYPE_COMPANY_ADMIN, entity_id=membership.id)
            )
        return contacts

    def resolve_company_admins_for_company(
        self,
        company_id: str | None,
        roles: Iterable[str] = (ROLE_COMPANY_ADMIN,),
    ) -> list[Contact]:
        """Resolve admins of the identity organization linked to ``company_id``."""

        company = self.lookup.get_company(company_id)
        if company is None:
            logger.warning("Company %s not found while resolving admins", company_id)
            return []
        return self.resolve_company_admins(company.identity_organization_id, roles)

    @staticmethod
    def _user_contact(
        user: User, contact_type: str, *, entity_id: str, phone: str | None = None
    ) -> Contact | None:
        if not user.email:
            logger.warning("User %s has no email address", user.id)
            return None
        return Contact(
            id=user.id,
            user_id=user.id,
            name=user.display_name or user.email,
            email=user.email,
            phone=phone,
            type=contact_type,
            entity_id=entity_id,
        )


__all__ = ["ContactResolver"]
