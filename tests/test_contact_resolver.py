"""Tests for turning entity ids into notification contacts."""

from __future__ import annotations

import pytest

from notification_service.infrastructure.repositories import ContactResolver


@pytest.fixture()
def resolver(seeded):
    db = seeded()
    try:
        yield ContactResolver(db)
    finally:
        db.close()


def test_linked_user_wins_over_candidate_fields(resolver):
    contact = resolver.resolve_candidate("cand-1")

    assert contact.email == "casey@example.com"
    assert contact.name == "Casey Candidate"
    assert contact.user_id == "u-cand"
    assert contact.entity_id == "cand-1"
    assert contact.type == "candidate"


def test_candidate_without_account_uses_its_own_email(resolver):
    contact = resolver.resolve_candidate("cand-2")

    assert contact.email == "jamie@example.com"
    assert contact.user_id is None
    assert contact.first_name == "Jamie"


def test_unreachable_entities_resolve_to_none(resolver, caplog):
    with caplog.at_level("WARNING"):
        assert resolver.resolve_candidate("cand-3") is None
        assert resolver.resolve_candidate("cand-404") is None
        assert resolver.resolve_recruiter("rec-orphan") is None
        assert resolver.resolve_user("u-nomail") is None

    assert "Recruiter rec-orphan has no linked user account" in caplog.text


def test_recruiter_contact_comes_from_the_user(resolver):
    contact = resolver.resolve_recruiter("rec-2")

    assert contact.email == "sam@example.com"
    assert contact.name == "Sam Split"
    assert contact.entity_id == "rec-2"
    assert contact.type == "recruiter"


def test_company_admins_are_filtered_by_role(resolver):
    admins = resolver.resolve_company_admins("org-1")
    reviewers = resolver.resolve_company_admins_for_company(
        "co-1", ("company_admin", "hiring_manager")
    )

    assert [contact.email for contact in admins] == ["avery@acme.test"]
    assert [contact.email for contact in reviewers] == ["avery@acme.test", "harper@acme.test"]
    assert resolver.resolve_company_admins(None) == []
    assert resolver.resolve_company_admins_for_company("co-404") == []


def test_identity_user_lookup(resolver):
    contact = resolver.resolve_identity_user("ext-admin")

    assert contact.user_id == "u-admin"
    assert resolver.resolve_identity_user("ext-unknown") is None
