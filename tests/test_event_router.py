"""Tests for dispatching events to handlers and classifying failures."""

from __future__ import annotations

import json

import pytest

from notification_service.application.handlers import HANDLER_CLASSES, DomainHandler
from notification_service.application.outcomes import Ack, DeadLetter, Retry
from notification_service.application.router import EventRouter, build_routes
from notification_service.domain.entities import DomainEvent, EventKind


def _body(event_type: str, payload: dict, event_id: str = "evt-1") -> bytes:
    return json.dumps({"event_id": event_id, "event_type": event_type, "payload": payload}).encode()


@pytest.mark.parametrize("kind", EventKind.known(), ids=lambda kind: kind.value)
def test_every_known_event_has_exactly_one_handler(kind):
    routes = build_routes(HANDLER_CLASSES)

    handler_class, method_name = routes[kind]
    assert callable(getattr(handler_class, method_name))


def test_router_refuses_to_start_with_unrouted_kinds(seeded, email_provider, settings):
    with pytest.raises(ValueError, match="No handler registered for"):
        EventRouter(
            seeded,
            email_provider=email_provider,
            settings=settings,
            handler_classes=HANDLER_CLASSES[:-1],
        )


def test_duplicate_routes_are_rejected():
    class Duplicate(DomainHandler):
        routes = {EventKind.CHAT_MESSAGE_CREATED: "handle"}

        def handle(self, event):
            return None

    with pytest.raises(ValueError, match="routed to both"):
        build_routes([*HANDLER_CLASSES, Duplicate])


def test_routes_must_name_existing_methods():
    class Broken(DomainHandler):
        routes = {EventKind.CHAT_MESSAGE_CREATED: "missing"}

    with pytest.raises(ValueError, match="has no method"):
        build_routes([Broken])


def test_unknown_events_are_acknowledged(event_router, email_provider, fetch_rows):
    outcome = event_router.route_message(_body("user.logged_in", {"userId": "u-1"}))

    assert outcome == Ack("unhandled")
    assert email_provider.sent == []
    assert fetch_rows() == []


def test_malformed_bodies_are_dead_lettered(event_router):
    assert isinstance(event_router.route_message(b"{not json"), DeadLetter)
    assert isinstance(event_router.route_message(b'{"payload": {}}'), DeadLetter)


def test_missing_essential_entity_is_dead_lettered(event_router, fetch_rows):
    outcome = event_router.route_message(
        _body("application.stage_changed", {"applicationId": "app-1", "candidateId": "cand-404"})
    )

    assert isinstance(outcome, DeadLetter)
    assert "candidate cand-404 not found" in outcome.reason
    assert fetch_rows() == []


def test_transient_failures_retry_until_the_limit(event_router, email_provider):
    """A failing delivery is retried ``handler_max_retries`` times, then dead-lettered."""

    email_provider.fail_for.add("casey@example.com")
    body = _body("application.stage_changed", {"applicationId": "app-1", "newStage": "interview"})

    first = event_router.route_message(body, retry_count=0)
    second = event_router.route_message(body, retry_count=1)
    last = event_router.route_message(body, retry_count=2)

    assert first == Retry(delay=0, reason=first.reason)
    assert isinstance(second, Retry)
    assert isinstance(last, DeadLetter)
    assert "casey@example.com" in last.reason


def test_session_factory_failures_are_retried(email_provider, settings):
    def broken_factory():
        raise RuntimeError("database unavailable")

    router = EventRouter(broken_factory, email_provider=email_provider, settings=settings)

    outcome = router.route(DomainEvent("placement.created", {"placementId": "pl-1"}))

    assert outcome == Retry(delay=0, reason="database unavailable")


def test_successful_handling_is_acknowledged(event_router, email_provider):
    outcome = event_router.route(
        DomainEvent("placement.created", {"placementId": "pl-1"}, event_id="evt-pl")
    )

    assert outcome == Ack()
    assert "riley@example.com" in email_provider.recipients()
